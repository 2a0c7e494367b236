"""
Atomic multi-file commit through the GitHub Git Data API.

The builder walks seven strictly sequential steps:

    resolve_base -> create_feature_ref -> fetch_base_tree -> create_blobs
    -> create_tree -> create_commit -> update_ref

Each step consumes the previous step's output. Blobs, the tree and the
commit are unreachable until the final non-forcing ref update, so a failure
at any earlier step leaves the feature branch at the base commit. Abort
signals are checked before each step starts, never during a network call.
"""

import base64
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..configuration import ExportConfig
from ..constants import GitHubExportDefaults, OutputDefaults
from ..error_handling import (
    BaseBranchNotFoundError,
    BranchCollisionError,
    ConfigError,
    ConversionError,
    GitHubAPIError,
    error_for_status,
)
from .client import GitHubClient, GitHubResponse
from .models import CommitPlan, TreeEntry

logger = logging.getLogger(__name__)


class CommitStep(str, Enum):
    RESOLVE_BASE = "resolve_base"
    CREATE_FEATURE_REF = "create_feature_ref"
    FETCH_BASE_TREE = "fetch_base_tree"
    CREATE_BLOBS = "create_blobs"
    CREATE_TREE = "create_tree"
    CREATE_COMMIT = "create_commit"
    UPDATE_REF = "update_ref"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime, tz_name: str) -> Tuple[str, str]:
    """
    Format an export moment in a civil timezone.

    Returns:
        (label, slug), e.g. ("2026-03-01 10:30 CET", "20260301-1030")
    """
    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown timezone '{tz_name}'") from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(zone)
    label = f"{local.strftime('%Y-%m-%d %H:%M')} {local.tzname()}"
    return label, local.strftime("%Y%m%d-%H%M")


def themes_label(theme_names: Sequence[str]) -> str:
    if len(theme_names) == 1:
        return theme_names[0]
    return f"{len(theme_names)} themes ({', '.join(theme_names)})"


def build_commit_message(label: str, theme_names: Sequence[str], base_branch: str) -> str:
    return (
        f"{GitHubExportDefaults.COMMIT_TITLE_PREFIX} {label}\n\n"
        f"Exported themes: {themes_label(theme_names)}\n"
        f"Base branch: {base_branch}"
    )


def encode_content(content: str) -> str:
    """Base64 blob content; empty files get a placeholder comment."""
    text = content or OutputDefaults.EMPTY_FILE_CONTENT
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _sha(response: GitHubResponse, operation: str, *keys: str) -> str:
    value: Any = response.data
    for key in keys:
        value = value.get(key) if isinstance(value, dict) else None
    if not isinstance(value, str) or not value:
        raise GitHubAPIError(
            f"Unexpected response during {operation}: missing {'.'.join(keys)}",
            status=response.status,
            operation=operation,
        )
    return value


class CommitBuilder:
    """Publishes a file map as one commit on a new feature branch."""

    def __init__(
        self,
        client: GitHubClient,
        base_branch_candidates: Sequence[str] = GitHubExportDefaults.BASE_BRANCH_CANDIDATES,
        branch_prefix: str = GitHubExportDefaults.BRANCH_PREFIX,
        tz_name: str = GitHubExportDefaults.TIMEZONE,
        max_branch_attempts: int = GitHubExportDefaults.MAX_BRANCH_ATTEMPTS,
        checkpoint: Optional[Callable[[str], None]] = None,
        now: Callable[[], datetime] = utc_now,
        job_id: Optional[str] = None,
    ):
        self.client = client
        self.base_branch_candidates = list(base_branch_candidates)
        self.branch_prefix = branch_prefix
        self.tz_name = tz_name
        self.max_branch_attempts = max_branch_attempts
        self.checkpoint = checkpoint
        self.now = now
        self.job_id = job_id
        self.plan = CommitPlan()
        self.step: Optional[CommitStep] = None

    @classmethod
    def from_config(
        cls,
        client: GitHubClient,
        config: ExportConfig,
        checkpoint: Optional[Callable[[str], None]] = None,
        now: Callable[[], datetime] = utc_now,
        job_id: Optional[str] = None,
    ) -> "CommitBuilder":
        return cls(
            client,
            base_branch_candidates=config.base_branch_candidates,
            branch_prefix=config.branch_prefix,
            tz_name=config.timezone,
            max_branch_attempts=config.max_branch_attempts,
            checkpoint=checkpoint,
            now=now,
            job_id=job_id,
        )

    def _enter(self, step: CommitStep) -> None:
        if self.checkpoint is not None:
            self.checkpoint(step.value)
        self.step = step
        logger.info(f"Commit step: {step.value}", extra={"job_id": self.job_id, "step": step.value})

    async def publish(self, files: Mapping[str, str], theme_names: Sequence[str]) -> CommitPlan:
        """
        Run every step and return the completed plan.

        ``files`` maps repository paths to file content. On failure the
        exception propagates and ``self.plan`` shows how far the export got.
        """
        if not files:
            raise ConversionError("No CSS files to publish")

        label, slug = format_timestamp(self.now(), self.tz_name)

        self._enter(CommitStep.RESOLVE_BASE)
        await self._resolve_base()

        self._enter(CommitStep.CREATE_FEATURE_REF)
        await self._create_feature_ref(f"{self.branch_prefix}{slug}")

        self._enter(CommitStep.FETCH_BASE_TREE)
        await self._fetch_base_tree()

        self._enter(CommitStep.CREATE_BLOBS)
        await self._create_blobs(files)

        self._enter(CommitStep.CREATE_TREE)
        await self._create_tree()

        self._enter(CommitStep.CREATE_COMMIT)
        await self._create_commit(build_commit_message(label, theme_names, self.plan.base_branch))

        self._enter(CommitStep.UPDATE_REF)
        await self._update_ref()

        logger.info(
            f"Published {len(self.plan.entries)} file(s) to {self.plan.feature_branch} "
            f"as {self.plan.new_commit_sha}",
            extra={"job_id": self.job_id},
        )
        return self.plan

    async def _resolve_base(self) -> None:
        operation = CommitStep.RESOLVE_BASE.value
        statuses = []
        for candidate in self.base_branch_candidates:
            response = await self.client.get(f"refs/heads/{candidate}", operation=operation)
            if response.status in (401, 403):
                self.client.raise_for_status(response, operation)
            # A prefix-only match comes back as a list of refs
            if response.ok and isinstance(response.data, dict):
                self.plan.base_branch = candidate
                self.plan.base_commit_sha = _sha(response, operation, "object", "sha")
                logger.info(
                    f"Base branch: {candidate} @ {self.plan.base_commit_sha}",
                    extra={"job_id": self.job_id, "step": operation},
                )
                return
            statuses.append(response.status)
            logger.debug(f"Base branch candidate {candidate} not found ({response.status})")

        if statuses and all(status == 404 for status in statuses):
            # GitHub answers 404 for every ref of a missing or invisible repository
            raise BaseBranchNotFoundError(
                "Failed to resolve base branch. Every candidate "
                f"({', '.join(self.base_branch_candidates)}) returned 404 Not Found.\n\n"
                f"The repository '{self.client.repository}' may not exist, or your token "
                "may not have access to it.\n"
                f"Check that https://github.com/{self.client.repository} exists, the token has "
                "the 'repo' scope, and at least one of the base branches exists."
            )

        raise BaseBranchNotFoundError(
            "Failed to resolve base branch. None of these branches exists in "
            f"{self.client.repository}: {', '.join(self.base_branch_candidates)}\n\n"
            "Please check:\n"
            "1. The repository exists\n"
            "2. Your GitHub token has the repo scope\n"
            "3. At least one of the base branches exists"
        )

    async def _create_feature_ref(self, branch_name: str) -> None:
        operation = CommitStep.CREATE_FEATURE_REF.value
        for attempt in range(self.max_branch_attempts):
            candidate = branch_name if attempt == 0 else f"{branch_name}-{attempt}"
            response = await self.client.post(
                "refs",
                {"ref": f"refs/heads/{candidate}", "sha": self.plan.base_commit_sha},
                operation=operation,
            )
            if response.ok:
                self.plan.feature_branch = candidate
                logger.info(
                    f"Created feature branch: {candidate}",
                    extra={"job_id": self.job_id, "step": operation},
                )
                return

            error = error_for_status(
                response.status, operation, self.client.repository, response.message
            )
            if not isinstance(error, BranchCollisionError):
                raise error
            logger.warning(f"Branch {candidate} already exists, trying another name")

        raise GitHubAPIError(
            f"Failed to create a unique feature branch after {self.max_branch_attempts} attempts",
            status=422,
            operation=operation,
        )

    async def _fetch_base_tree(self) -> None:
        operation = CommitStep.FETCH_BASE_TREE.value
        response = await self.client.get(
            f"commits/{self.plan.base_commit_sha}", operation=operation
        )
        self.client.raise_for_status(response, operation)
        self.plan.base_tree_sha = _sha(response, operation, "tree", "sha")

    async def _create_blobs(self, files: Mapping[str, str]) -> None:
        operation = CommitStep.CREATE_BLOBS.value
        for path, content in files.items():
            response = await self.client.post(
                "blobs",
                {"content": encode_content(content), "encoding": "base64"},
                operation=operation,
            )
            self.client.raise_for_status(response, operation)
            self.plan.entries.append(TreeEntry(path=path, sha=_sha(response, operation, "sha")))
            logger.debug(f"Created blob for {path}", extra={"job_id": self.job_id, "step": operation})

    async def _create_tree(self) -> None:
        operation = CommitStep.CREATE_TREE.value
        response = await self.client.post(
            "trees",
            {
                "base_tree": self.plan.base_tree_sha,
                "tree": [entry.model_dump() for entry in self.plan.entries],
            },
            operation=operation,
        )
        self.client.raise_for_status(response, operation)
        self.plan.new_tree_sha = _sha(response, operation, "sha")

    async def _create_commit(self, message: str) -> None:
        operation = CommitStep.CREATE_COMMIT.value
        self.plan.commit_message = message
        response = await self.client.post(
            "commits",
            {
                "message": message,
                "tree": self.plan.new_tree_sha,
                "parents": [self.plan.base_commit_sha],
            },
            operation=operation,
        )
        self.client.raise_for_status(response, operation)
        self.plan.new_commit_sha = _sha(response, operation, "sha")

    async def _update_ref(self) -> None:
        operation = CommitStep.UPDATE_REF.value
        response = await self.client.patch(
            f"refs/heads/{self.plan.feature_branch}",
            {"sha": self.plan.new_commit_sha, "force": False},
            operation=operation,
        )
        self.client.raise_for_status(response, operation)
        self.plan.ref_updated = True
