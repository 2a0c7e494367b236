import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from .configuration import OutputLayout
from .error_handling import ExportError

__version__ = "1.0.0"


def _logging_level(verbose: int) -> str:
    if verbose == 1:
        return "INFO"
    if verbose >= 2:
        return "DEBUG"
    return "WARNING"


async def _dry_run(
    variables: Path, path: str, layout: str, effects: bool, output_dir: Optional[Path]
) -> int:
    from .conversion import InMemoryVariableSource
    from .services import build_theme_files, convert_variables

    source = InMemoryVariableSource.from_file(variables)
    outcome = await convert_variables(source, include_effects=effects)
    files = build_theme_files(
        outcome.themes, path=path, layout=OutputLayout(layout), include_effects=effects
    )
    for diagnostic in outcome.diagnostics:
        click.echo(str(diagnostic), err=True)

    for file_path, content in files.items():
        if output_dir is None:
            click.echo(file_path)
            continue
        target = output_dir / file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        click.echo(f"Wrote {target}")
    return 0


async def _export(variables: Path, overrides: dict, as_json: bool) -> int:
    from .configuration import ExportConfig
    from .conversion import InMemoryVariableSource
    from .services import export_variables

    config = ExportConfig.from_env(**overrides)
    source = InMemoryVariableSource.from_file(variables)
    result = await export_variables(config, source)

    if as_json:
        click.echo(json.dumps(result.model_dump(), indent=2))
    else:
        click.echo(result.message)
    return 0 if result.success else 1


@click.command()
@click.option(
    "--variables",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON snapshot of the design tool's variable collections",
)
@click.option("--owner", help="Repository owner [env: FIGMA_EXPORT_OWNER]")
@click.option("--repo", help="Repository name [env: FIGMA_EXPORT_REPO]")
@click.option("--path", "dest_path", help="Destination directory [env: FIGMA_EXPORT_PATH]")
@click.option("--token", help="GitHub token [env: GITHUB_TOKEN or FIGMA_EXPORT_TOKEN]")
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Load environment variables from this .env file",
)
@click.option(
    "--layout",
    type=click.Choice([layout.value for layout in OutputLayout]),
    help="One file per section (split) or one file per theme (single)",
)
@click.option("--effects/--no-effects", default=False, help="Emit shadow and gradient sections")
@click.option("--dry-run", is_flag=True, help="Generate the files without publishing")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="With --dry-run, write the generated files here",
)
@click.option("--json", "as_json", is_flag=True, help="Print the export result as JSON")
@click.option("-v", "--verbose", count=True)
@click.option("--json-logs", is_flag=True, help="Emit structured JSON log lines")
def main(
    variables: Path,
    owner: Optional[str],
    repo: Optional[str],
    dest_path: Optional[str],
    token: Optional[str],
    env_file: Optional[Path],
    layout: Optional[str],
    effects: bool,
    dry_run: bool,
    output_dir: Optional[Path],
    as_json: bool,
    verbose: int,
    json_logs: bool,
) -> None:
    """Export Figma variables as CSS and publish them to GitHub in one commit"""
    from .logging_config import configure_logging

    configure_logging(_logging_level(verbose), structured=json_logs)
    logger = logging.getLogger(__name__)

    if env_file:
        load_dotenv(env_file)
        logger.info(f"Loaded environment variables from {env_file}")

    overrides = {
        "owner": owner,
        "repo": repo,
        "path": dest_path,
        "token": token,
        "layout": layout,
        "include_effect_categories": effects,
    }

    try:
        if dry_run:
            path = dest_path or os.environ.get("FIGMA_EXPORT_PATH", "")
            code = asyncio.run(
                _dry_run(variables, path, layout or OutputLayout.SPLIT.value, effects, output_dir)
            )
        else:
            code = asyncio.run(_export(variables, overrides, as_json))
    except ExportError as e:
        click.echo(f"Error: {e.message}", err=True)
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
