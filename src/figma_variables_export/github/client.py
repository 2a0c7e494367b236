"""GitHub API client and authentication"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import aiohttp

from ..configuration import ExportConfig, looks_like_github_token
from ..constants import GitHubAPIDefaults
from ..error_handling import (
    ErrorContext,
    ExportTimeoutError,
    TransientAPIError,
    error_for_status,
    recoverable,
)
from ..metrics import ExportMetrics
from ..session import Deadline

logger = logging.getLogger(__name__)


@dataclass
class GitHubResponse:
    """Status and decoded JSON body of one API call."""

    status: int
    data: Any = field(default_factory=dict)
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def message(self) -> str:
        if isinstance(self.data, dict):
            return str(self.data.get("message", "") or "")
        return ""


@dataclass
class GitHubClient:
    """GitHub API client scoped to one repository, with retries and a deadline.

    Retryable statuses (429, 5xx) and dropped connections are retried with
    exponential backoff. Any other response is returned as-is; callers turn
    non-2xx responses into errors with ``raise_for_status``.
    """

    token: str
    session: aiohttp.ClientSession
    owner: str
    repo: str
    base_url: str = GitHubAPIDefaults.BASE_URL
    request_timeout: float = GitHubAPIDefaults.REQUEST_TIMEOUT_SECONDS
    max_retries: int = GitHubAPIDefaults.MAX_RETRIES
    backoff_factor: float = GitHubAPIDefaults.BACKOFF_FACTOR
    max_backoff: float = GitHubAPIDefaults.MAX_BACKOFF_SECONDS
    deadline: Optional[Deadline] = None
    metrics: Optional[ExportMetrics] = None
    job_id: Optional[str] = None

    def __post_init__(self):
        if not looks_like_github_token(self.token):
            logger.debug("GitHub token format not recognised, continuing anyway")
        self.base_url = self.base_url.rstrip("/")
        self._send = recoverable(
            max_retries=self.max_retries,
            backoff_factor=self.backoff_factor,
            max_delay=self.max_backoff,
            on_retry=self._on_retry,
        )(self._send_once)

    @classmethod
    def from_config(
        cls,
        config: ExportConfig,
        session: aiohttp.ClientSession,
        deadline: Optional[Deadline] = None,
        metrics: Optional[ExportMetrics] = None,
        job_id: Optional[str] = None,
    ) -> "GitHubClient":
        return cls(
            token=config.token,
            session=session,
            owner=config.owner,
            repo=config.repo,
            base_url=config.api_base_url,
            request_timeout=config.request_timeout,
            max_retries=config.max_retries,
            backoff_factor=config.backoff_factor,
            max_backoff=config.max_backoff,
            deadline=deadline,
            metrics=metrics,
            job_id=job_id,
        )

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": GitHubAPIDefaults.ACCEPT_HEADER,
            "User-Agent": GitHubAPIDefaults.USER_AGENT,
            "X-GitHub-Api-Version": GitHubAPIDefaults.API_VERSION,
        }

    def git_url(self, endpoint: str) -> str:
        """URL of a Git Data API endpoint of this repository."""
        return f"{self.base_url}/repos/{self.owner}/{self.repo}/git/{endpoint.lstrip('/')}"

    def _timeout(self, operation: str) -> aiohttp.ClientTimeout:
        total = self.request_timeout
        if self.deadline is not None:
            self.deadline.check(operation)
            remaining = self.deadline.remaining()
            if remaining is not None:
                total = min(total, remaining)
        return aiohttp.ClientTimeout(total=total)

    async def _on_retry(self, context: ErrorContext) -> None:
        if self.metrics is not None:
            await self.metrics.record_retry()

    async def _send_once(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Dict[str, Any]],
        operation: str,
    ) -> GitHubResponse:
        timeout = self._timeout(operation)
        started = time.monotonic()
        try:
            async with self.session.request(
                method,
                self.git_url(endpoint),
                headers=self.headers,
                json=payload,
                timeout=timeout,
            ) as response:
                try:
                    data = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    data = {}
                result = GitHubResponse(
                    status=response.status,
                    data=data if data is not None else {},
                    reason=response.reason or "",
                )
        except asyncio.TimeoutError as e:
            if self.deadline is not None and self.deadline.expired:
                raise ExportTimeoutError(f"Export deadline reached during {operation}") from e
            raise TransientAPIError(f"Request timed out during {operation}", operation=operation) from e

        duration_ms = (time.monotonic() - started) * 1000
        if self.metrics is not None:
            await self.metrics.record_api_call(operation, result.status, duration_ms)
        logger.debug(
            f"{method} {endpoint} -> {result.status} ({duration_ms:.0f}ms)",
            extra={"job_id": self.job_id, "step": operation, "duration_ms": round(duration_ms)},
        )

        if result.status == 429 or result.status >= 500:
            raise error_for_status(result.status, operation, self.repository, result.message)
        return result

    async def request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        operation: str = "",
    ) -> GitHubResponse:
        """Send one request, retrying transient failures."""
        return await self._send(method, endpoint, payload, operation or f"{method} {endpoint}")

    async def get(self, endpoint: str, operation: str = "") -> GitHubResponse:
        return await self.request("GET", endpoint, operation=operation)

    async def post(self, endpoint: str, payload: Dict[str, Any], operation: str = "") -> GitHubResponse:
        return await self.request("POST", endpoint, payload, operation)

    async def patch(self, endpoint: str, payload: Dict[str, Any], operation: str = "") -> GitHubResponse:
        return await self.request("PATCH", endpoint, payload, operation)

    def raise_for_status(self, response: GitHubResponse, operation: str) -> None:
        if not response.ok:
            raise error_for_status(response.status, operation, self.repository, response.message)


SessionFactory = Callable[[], aiohttp.ClientSession]


def create_http_session() -> aiohttp.ClientSession:
    """Create the aiohttp session (caller is responsible for closing)."""
    return aiohttp.ClientSession()
