"""
Export service: variables in, one commit out.

    validate config -> acquire guard -> convert -> annotate code syntax
    -> assemble -> build file map -> commit builder -> ExportResult

Every failure is reported as ``ExportResult(success=False, message=...)``;
nothing raises out of ``export_variables``.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Union

from ..configuration import ExportConfig, OutputLayout, validate_config
from ..constants import ConversionDefaults
from ..conversion import (
    BatchScheduler,
    ConversionSession,
    ThemeEntries,
    annotate_code_syntax,
)
from ..css import CssAssembler, iso_timestamp, render_files
from ..error_handling import ConversionError, ExportError
from ..github import CommitBuilder, CommitPlan, ExportResult, GitHubClient, create_http_session
from ..github.client import SessionFactory
from ..github.commit_builder import utc_now
from ..metrics import ExportMetrics
from ..models import Diagnostic
from ..protocols import ProgressReporter, SchedulerTick, VariableSource
from ..session import CancellationToken, ExportGuard, ExportSession, SessionState, export_guard

logger = logging.getLogger(__name__)


class ConversionOutcome(NamedTuple):
    themes: ThemeEntries
    diagnostics: List[Diagnostic]

    @property
    def variable_count(self) -> int:
        return len(
            {entry.source_id or entry.name for entries in self.themes.values() for entry in entries}
        )


async def convert_variables(
    source: VariableSource,
    *,
    include_effects: bool = False,
    chunk_size: int = ConversionDefaults.VARIABLE_BATCH_SIZE,
    tick: Optional[SchedulerTick] = None,
    progress: Optional[ProgressReporter] = None,
    checkpoint: Optional[Callable[[str], None]] = None,
    metrics: Optional[ExportMetrics] = None,
) -> ConversionOutcome:
    """
    Resolve every variable of every collection, grouped by mode name.

    Raises:
        ConversionError: no collections exist, or nothing could be converted.
    """
    collections = await source.list_collections()
    if not collections:
        raise ConversionError("No variable collections found")

    session = ConversionSession(source, include_effects=include_effects)
    scheduler = BatchScheduler(
        session,
        chunk_size=chunk_size,
        tick=tick,
        progress=progress,
        checkpoint=checkpoint,
        metrics=metrics,
    )
    themes = await scheduler.run(collections)

    if not any(themes.values()):
        raise ConversionError("No valid CSS variables could be generated")
    return ConversionOutcome(themes, list(session.diagnostics))


def build_theme_files(
    themes: ThemeEntries,
    *,
    path: str = "",
    layout: OutputLayout = OutputLayout.SPLIT,
    include_effects: bool = False,
    exported_at: Optional[str] = None,
) -> Dict[str, str]:
    """Render converted themes to ``{path}/{theme}/{file}`` -> CSS text."""
    documents = CssAssembler(include_effects).assemble(themes, exported_at)
    return render_files(documents, layout=OutputLayout(layout), path_prefix=path)


def theme_slugs_of(files: Dict[str, str], path: str) -> List[str]:
    prefix = f"{path.strip('/')}/" if path.strip("/") else ""
    slugs: List[str] = []
    for file_path in files:
        slug = file_path[len(prefix):].split("/", 1)[0]
        if slug not in slugs:
            slugs.append(slug)
    return slugs


async def _publish(
    config: ExportConfig,
    files: Dict[str, str],
    theme_names: Sequence[str],
    session: ExportSession,
    client: Optional[GitHubClient],
    session_factory: SessionFactory,
    now: Callable[[], datetime],
) -> CommitPlan:
    if client is not None:
        builder = CommitBuilder.from_config(
            client, config, checkpoint=session.checkpoint, now=now, job_id=session.job_id
        )
        return await builder.publish(files, theme_names)

    async with session_factory() as http:
        client = GitHubClient.from_config(
            config,
            http,
            deadline=session.deadline,
            metrics=session.export_metrics,
            job_id=session.job_id,
        )
        builder = CommitBuilder.from_config(
            client, config, checkpoint=session.checkpoint, now=now, job_id=session.job_id
        )
        return await builder.publish(files, theme_names)


async def export_variables(
    config: Union[ExportConfig, Dict[str, Any]],
    source: VariableSource,
    *,
    guard: Optional[ExportGuard] = None,
    progress: Optional[ProgressReporter] = None,
    cancel_token: Optional[CancellationToken] = None,
    clock: Callable[[], float] = time.monotonic,
    tick: Optional[SchedulerTick] = None,
    client: Optional[GitHubClient] = None,
    session_factory: SessionFactory = create_http_session,
    now: Callable[[], datetime] = utc_now,
    job_id: Optional[str] = None,
) -> ExportResult:
    """Convert the source's variables and publish them as one commit."""
    try:
        config = validate_config(config)
    except ExportError as e:
        return ExportResult(success=False, message=e.message, job_id=job_id)

    guard = guard or export_guard
    session = ExportSession(
        job_id=job_id,
        deadline_seconds=config.export_deadline,
        cancel_token=cancel_token,
        clock=clock,
    )
    extra = session.log_extra
    outcome: Optional[ConversionOutcome] = None
    files: Dict[str, str] = {}
    operation = "acquire_guard"

    try:
        async with guard.acquire(session.job_id):
            session.transition(SessionState.CONVERTING)
            operation = "convert"
            outcome = await convert_variables(
                source,
                include_effects=config.include_effect_categories,
                chunk_size=config.chunk_size,
                tick=tick,
                progress=progress,
                checkpoint=session.checkpoint,
                metrics=session.export_metrics,
            )

            operation = "annotate_code_syntax"
            # Modes without entries never become themes
            first_theme = next(iter(outcome.themes.values()))
            annotated = await annotate_code_syntax(
                source, first_theme, batch_size=config.syntax_batch_size, tick=tick
            )
            logger.info(f"Annotated {annotated} variable(s) with code syntax", extra=extra)

            operation = "assemble"
            files = build_theme_files(
                outcome.themes,
                path=config.path,
                layout=config.layout,
                include_effects=config.include_effect_categories,
                exported_at=iso_timestamp(now()),
            )
            themes = theme_slugs_of(files, config.path)

            session.transition(SessionState.PUBLISHING)
            operation = "publish"
            plan = await _publish(config, files, themes, session, client, session_factory, now)
            session.transition(SessionState.COMPLETED)

    except ExportError as e:
        context = session.fail(e, operation)
        await session.export_metrics.record_error(type(e).__name__)
        logger.error(
            f"Export {session.job_id} failed during {operation} "
            f"({context.severity.value}): {e.message}",
            extra=extra,
        )
        return await _failure(session, e.message, outcome, files)
    except Exception as e:
        session.fail(e, operation)
        await session.export_metrics.record_error(type(e).__name__)
        logger.exception(f"Unexpected error in export {session.job_id} during {operation}", extra=extra)
        return await _failure(session, f"Unexpected error: {e}", outcome, files)

    message = (
        f"Successfully exported {outcome.variable_count} variables across "
        f"{len(themes)} theme(s) to {plan.feature_branch} in a single commit"
    )
    logger.info(message, extra=extra)
    return ExportResult(
        success=True,
        message=message,
        job_id=session.job_id,
        branch=plan.feature_branch,
        commit_sha=plan.new_commit_sha,
        files=list(files),
        themes=themes,
        variable_count=outcome.variable_count,
        diagnostics=[str(d) for d in outcome.diagnostics],
        metrics=await session.export_metrics.get_metrics(),
    )


async def _failure(
    session: ExportSession,
    message: str,
    outcome: Optional[ConversionOutcome],
    files: Dict[str, str],
) -> ExportResult:
    return ExportResult(
        success=False,
        message=message,
        job_id=session.job_id,
        files=list(files),
        variable_count=outcome.variable_count if outcome else 0,
        diagnostics=[str(d) for d in outcome.diagnostics] if outcome else [],
        metrics=await session.export_metrics.get_metrics(),
    )
