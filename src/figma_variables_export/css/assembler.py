"""
Stylesheet assembly.

Groups resolved entries into one ThemeDocument per theme and renders the
documents as CSS text. Output is deterministic: sections always follow the
fixed category order and entries inside a section are sorted by name.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..configuration import OutputLayout
from ..constants import OutputDefaults
from ..conversion.naming import theme_slug, to_kebab_case
from ..models import Category, ResolvedEntry, section_order

logger = logging.getLogger(__name__)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with milliseconds: ``2026-03-01T09:30:00.000Z``."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def assign_theme_slugs(mode_names: Sequence[str]) -> Dict[str, str]:
    """
    Map each mode display name to a unique theme slug.

    A single theme is always ``theme``. Otherwise the full name is
    kebab-cased and a trailing ``-light`` removed. When that collides with
    an earlier theme the unstripped kebab form is used, then ``-2``,
    ``-3``, ... until the slug is free.
    """
    if len(mode_names) == 1:
        return {mode_names[0]: OutputDefaults.SINGLE_THEME_SLUG}

    slugs: Dict[str, str] = {}
    used = set()
    for name in mode_names:
        slug = theme_slug(name) or OutputDefaults.SINGLE_THEME_SLUG
        if slug in used:
            slug = to_kebab_case(name) or OutputDefaults.SINGLE_THEME_SLUG
        base, counter = slug, 2
        while slug in used:
            slug = f"{base}-{counter}"
            counter += 1
        if slug != theme_slug(name):
            logger.warning(f"Theme slug for mode '{name}' adjusted to '{slug}' to stay unique")
        used.add(slug)
        slugs[name] = slug
    return slugs


@dataclass
class ThemeDocument:
    """Stylesheet for one theme: ordered sections of sorted entries."""

    slug: str
    mode_name: str
    exported_at: str
    sections: Dict[Category, List[ResolvedEntry]] = field(default_factory=dict)
    color_format: str = OutputDefaults.COLOR_FORMAT

    @property
    def entry_count(self) -> int:
        return sum(len(entries) for entries in self.sections.values())

    def header(self, section: Optional[Category] = None) -> List[str]:
        lines = [
            "/*",
            f" * {OutputDefaults.HEADER_SOURCE}",
            f" * Exported at: {self.exported_at}",
            f" * Color format: {self.color_format}",
            f" * Theme: {self.slug} (mode: {self.mode_name})",
        ]
        if section is not None:
            lines.append(f" * Section: {section.label}")
        lines.append(" */")
        return lines

    def _section_lines(self, category: Category) -> List[str]:
        lines = [f"  /* {category.label} */"]
        lines.extend(f"  {entry.declaration()}" for entry in self.sections.get(category, []))
        return lines

    def render(self) -> str:
        """Every section inside one ``:root`` block."""
        body: List[str] = []
        for category in self.sections:
            body.extend(self._section_lines(category))
        return "\n".join(self.header() + [":root {"] + body + ["}", ""])

    def render_section(self, category: Category) -> str:
        """One section in its own ``:root`` block, for per-section files."""
        return "\n".join(
            self.header(category) + [":root {"] + self._section_lines(category) + ["}", ""]
        )

    def files(self, layout: OutputLayout = OutputLayout.SPLIT) -> Dict[str, str]:
        """Relative file path (under the theme directory) -> file content."""
        if layout == OutputLayout.SINGLE:
            return {f"{self.slug}/{OutputDefaults.SINGLE_FILE_NAME}": self.render()}
        return {
            f"{self.slug}/{category.file_name}": self.render_section(category)
            for category in self.sections
        }


class CssAssembler:
    """Builds ThemeDocuments from resolved entries grouped by mode name."""

    def __init__(self, include_effects: bool = False):
        self.include_effects = include_effects
        self.order: Tuple[Category, ...] = section_order(include_effects)

    def group(self, entries: Sequence[ResolvedEntry]) -> Dict[Category, List[ResolvedEntry]]:
        grouped: Dict[Category, List[ResolvedEntry]] = {category: [] for category in self.order}
        for entry in entries:
            # Effect categories fold into measures when effects are disabled
            bucket = entry.category if entry.category in grouped else Category.MEASURE
            grouped[bucket].append(entry)
        for category in grouped:
            grouped[category].sort(key=lambda entry: entry.name)
        return grouped

    def assemble(
        self,
        resolved_by_theme: Mapping[str, Sequence[ResolvedEntry]],
        exported_at: Optional[str] = None,
    ) -> Dict[str, ThemeDocument]:
        exported_at = exported_at or iso_timestamp()
        slugs = assign_theme_slugs(list(resolved_by_theme))
        documents: Dict[str, ThemeDocument] = {}
        for mode_name, entries in resolved_by_theme.items():
            slug = slugs[mode_name]
            documents[slug] = ThemeDocument(
                slug=slug,
                mode_name=mode_name,
                exported_at=exported_at,
                sections=self.group(entries),
            )
            logger.debug(
                f"Assembled theme {slug} with {documents[slug].entry_count} entries",
                extra={"theme": slug},
            )
        return documents


def assemble(
    resolved_by_theme: Mapping[str, Sequence[ResolvedEntry]],
    exported_at: Optional[str] = None,
    include_effects: bool = False,
) -> Dict[str, ThemeDocument]:
    return CssAssembler(include_effects).assemble(resolved_by_theme, exported_at)


def render_files(
    documents: Mapping[str, ThemeDocument],
    layout: OutputLayout = OutputLayout.SPLIT,
    path_prefix: str = "",
) -> Dict[str, str]:
    """Flatten documents to ``{path_prefix}/{theme}/{file}`` -> content."""
    prefix = path_prefix.strip("/")
    files: Dict[str, str] = {}
    for document in documents.values():
        for relative, content in document.files(layout).items():
            files[f"{prefix}/{relative}" if prefix else relative] = content
    return files
