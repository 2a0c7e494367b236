"""
Chunked, cooperative driver for variable resolution.

Variable ids are processed in fixed-size chunks. Every resolution of a
chunk is started together and joined before the next chunk begins; after
each chunk the scheduler reports progress and calls its tick once. Abort
signals are only honoured between chunks, never inside one.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..constants import ConversionDefaults
from ..error_handling import ExportError
from ..metrics import ExportMetrics
from ..models import (
    Diagnostic,
    DiagnosticCode,
    ResolvedEntry,
    VariableCollection,
)
from ..protocols import AsyncioTick, ProgressReporter, SchedulerTick, VariableSource
from .resolver import ConversionSession, VariableGraphResolver

logger = logging.getLogger(__name__)

# Mode display name -> entries of that theme, in discovery order
ThemeEntries = Dict[str, List[ResolvedEntry]]

_WorkItem = Tuple[VariableCollection, str]


def chunked(items: Sequence, size: int) -> List[Sequence]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class BatchScheduler:
    """Drives a ConversionSession over every variable of every collection."""

    def __init__(
        self,
        session: ConversionSession,
        chunk_size: int = ConversionDefaults.VARIABLE_BATCH_SIZE,
        tick: Optional[SchedulerTick] = None,
        progress: Optional[ProgressReporter] = None,
        checkpoint: Optional[Callable[[str], None]] = None,
        metrics: Optional[ExportMetrics] = None,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.session = session
        self.resolver = VariableGraphResolver(session)
        self.chunk_size = chunk_size
        self.tick = tick or AsyncioTick()
        self.progress = progress
        self.checkpoint = checkpoint
        self.metrics = metrics

    async def run(self, collections: Sequence[VariableCollection]) -> ThemeEntries:
        themes: ThemeEntries = {}
        for collection in collections:
            for mode in collection.modes:
                themes.setdefault(mode.name, [])

        work: List[_WorkItem] = [
            (collection, variable_id)
            for collection in collections
            for variable_id in collection.variable_ids
        ]
        total = len(work)
        processed = 0
        seen_names: Dict[str, set] = {theme: set() for theme in themes}

        for index, chunk in enumerate(chunked(work, self.chunk_size)):
            if self.checkpoint is not None:
                self.checkpoint(f"chunk {index + 1}")

            results = await asyncio.gather(
                *(self._process(collection, variable_id) for collection, variable_id in chunk)
            )
            for produced in results:
                for theme, entry in produced:
                    if entry.name in seen_names[theme]:
                        logger.warning(
                            f"Duplicate CSS variable {entry.name} in theme {theme}, keeping the first",
                            extra={"theme": theme},
                        )
                        continue
                    seen_names[theme].add(entry.name)
                    themes[theme].append(entry)

            processed += len(chunk)
            if self.metrics is not None:
                await self.metrics.record_processed(len(chunk))
            if self.progress is not None:
                self.progress(processed, total)
            await self.tick.yield_control()

        # Modes that produced nothing are not themes
        empty = [theme for theme, entries in themes.items() if not entries]
        for theme in empty:
            logger.info(f"Mode {theme} produced no variables, skipping it", extra={"theme": theme})
            del themes[theme]

        logger.info(
            f"Resolved {total} variables into {len(themes)} theme(s) "
            f"with {len(self.session.diagnostics)} diagnostic(s)"
        )
        return themes

    async def _process(
        self, collection: VariableCollection, variable_id: str
    ) -> List[Tuple[str, ResolvedEntry]]:
        try:
            variable = await self.session.get_variable(variable_id)
        except ExportError:
            raise
        except Exception as e:
            logger.warning(f"Failed to fetch variable {variable_id} from {collection.name}: {e}")
            await self._record(
                Diagnostic.error(
                    DiagnosticCode.VARIABLE_UNAVAILABLE,
                    variable_id,
                    f"Variable could not be fetched: {e}",
                )
            )
            return []
        if variable is None:
            logger.warning(
                f"Variable {variable_id} listed in collection {collection.name} not found"
            )
            return []

        css_name = self.session.css_name(variable.name)
        category = self.session.category_for(variable.name)
        produced: List[Tuple[str, ResolvedEntry]] = []

        for mode in collection.modes:
            if mode.mode_id not in variable.values_by_mode:
                await self._record(
                    Diagnostic.warning(
                        DiagnosticCode.MISSING_MODE_VALUE,
                        variable.name,
                        f"No value for mode {mode.name}",
                    )
                )
                continue

            text, diagnostic = await self.resolver.resolve(variable, mode.mode_id)
            await self._record(diagnostic)
            if not text:
                logger.debug(
                    f"Dropping {variable.name} in mode {mode.name}: empty value",
                    extra={"theme": mode.name},
                )
                continue

            produced.append(
                (
                    mode.name,
                    ResolvedEntry(
                        name=css_name,
                        value=text,
                        category=category,
                        source_id=variable.id,
                        diagnostic=diagnostic,
                    ),
                )
            )
        return produced

    async def _record(self, diagnostic: Optional[Diagnostic]) -> None:
        if diagnostic is None:
            return
        self.session.record(diagnostic)
        if self.metrics is not None:
            await self.metrics.record_diagnostic(diagnostic.level.value)


async def annotate_code_syntax(
    source: VariableSource,
    entries: Sequence[ResolvedEntry],
    batch_size: int = ConversionDefaults.SYNTAX_BATCH_SIZE,
    tick: Optional[SchedulerTick] = None,
    platform: str = ConversionDefaults.CODE_SYNTAX_PLATFORM,
) -> int:
    """
    Set ``var(--name)`` as each entry's code syntax in the design tool.

    Runs in batches with one tick per batch. A failing annotation is logged
    and skipped. Returns the number of variables annotated.
    """
    tick = tick or AsyncioTick()
    targets = [entry for entry in entries if entry.source_id]
    annotated = 0

    for batch in chunked(targets, batch_size):
        outcomes = await asyncio.gather(
            *(
                source.set_code_syntax(entry.source_id, platform, f"var({entry.name})")
                for entry in batch
            ),
            return_exceptions=True,
        )
        for entry, outcome in zip(batch, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Failed to set code syntax for {entry.name}: {outcome}")
            else:
                annotated += 1
        await tick.yield_control()

    return annotated
