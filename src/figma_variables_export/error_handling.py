"""Error classification and recovery for the Figma variables exporter."""

import asyncio
import functools
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

import aiohttp

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Classification of error severity levels."""

    CRITICAL = "critical"  # Export must abort, nothing can be retried
    HIGH = "high"  # Export must abort
    MEDIUM = "medium"  # Operation might recover on retry
    LOW = "low"  # Recovered locally with a fallback


class ExportError(Exception):
    """Base class for every failure the exporter reports to its caller."""

    severity = ErrorSeverity.HIGH
    recoverable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(ExportError):
    """Missing or invalid export configuration; raised before any network call."""

    severity = ErrorSeverity.CRITICAL


class ConversionError(ExportError):
    """The variable graph produced nothing that could be exported."""


class ResolutionError(ExportError):
    """A single value could not be converted; recovered with a fallback."""

    severity = ErrorSeverity.LOW
    recoverable = True


class ExportInProgressError(ExportError):
    """Another export is already running in this process."""


class ExportCancelledError(ExportError):
    """The export was cancelled at a chunk or commit-step boundary."""


class ExportTimeoutError(ExportError):
    """The export ran past its deadline."""


class BaseBranchNotFoundError(ExportError):
    """None of the candidate base branches exists in the repository."""

    severity = ErrorSeverity.CRITICAL


class GitHubAPIError(ExportError):
    """Non-2xx response from the GitHub API."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        operation: str = "",
        api_message: str = "",
    ):
        super().__init__(message)
        self.status = status
        self.operation = operation
        self.api_message = api_message


class AuthenticationError(GitHubAPIError):
    severity = ErrorSeverity.CRITICAL


class RepositoryNotFoundError(GitHubAPIError):
    severity = ErrorSeverity.CRITICAL


class BranchCollisionError(GitHubAPIError):
    """The feature branch name is taken; retried with a numeric suffix."""

    severity = ErrorSeverity.MEDIUM
    recoverable = True


class TransientAPIError(GitHubAPIError):
    """Rate limiting or a server-side failure that may succeed on retry."""

    severity = ErrorSeverity.MEDIUM
    recoverable = True


class ErrorContext:
    """Context information about an error for recovery decisions."""

    def __init__(
        self,
        error: Exception,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        operation: str = "",
        job_id: Optional[str] = None,
        recoverable: bool = True,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.error = error
        self.severity = severity
        self.operation = operation
        self.job_id = job_id
        self.recoverable = recoverable
        self.metadata = metadata or {}
        self.handled = False
        self.retry_count = 0
        self.error_time = time.time()


class ErrorRecoveryStrategy:
    """Strategy for retrying transient errors with exponential backoff."""

    def __init__(
        self,
        max_retries: int = 3,
        backoff_factor: float = 1.0,
        max_delay: Optional[float] = None,
    ):
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.max_delay = max_delay

    def should_retry(self, context: ErrorContext) -> bool:
        """Determine if an error should be retried."""
        if not context.recoverable:
            return False

        if context.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
            return False

        return context.retry_count < self.max_retries

    def get_retry_delay(self, context: ErrorContext) -> float:
        """Calculate delay before retry."""
        delay = self.backoff_factor * (2**context.retry_count)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay


def classify_error(error: Exception, operation: str = "") -> ErrorContext:
    """
    Classify an error and create an appropriate ErrorContext.

    Args:
        error: The exception that occurred
        operation: The operation during which the error occurred

    Returns:
        ErrorContext with appropriate severity and recoverability settings
    """
    if isinstance(error, ExportError):
        return ErrorContext(
            error=error,
            severity=error.severity,
            operation=operation,
            recoverable=error.recoverable,
        )

    # Dropped connections never reached the server's object store
    if isinstance(error, (aiohttp.ClientConnectionError, aiohttp.ServerTimeoutError)):
        return ErrorContext(
            error=error,
            severity=ErrorSeverity.MEDIUM,
            operation=operation,
            recoverable=True,
        )

    if isinstance(error, (KeyboardInterrupt, SystemExit, MemoryError)):
        return ErrorContext(
            error=error,
            severity=ErrorSeverity.CRITICAL,
            operation=operation,
            recoverable=False,
        )

    return ErrorContext(
        error=error,
        severity=ErrorSeverity.HIGH,
        operation=operation,
        recoverable=False,
    )


def recoverable(
    max_retries: int = 3,
    backoff_factor: float = 1.0,
    max_delay: Optional[float] = None,
    retry_on: Tuple[Type[BaseException], ...] = (
        TransientAPIError,
        aiohttp.ClientConnectionError,
    ),
    on_retry: Optional[Callable[[ErrorContext], Awaitable[None]]] = None,
):
    """Decorator for coroutines that should retry transient errors.

    Only exceptions listed in ``retry_on`` that ``classify_error`` marks as
    recoverable are retried; everything else propagates immediately.
    ``on_retry`` is awaited before each backoff sleep.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> T:
            context: Optional[ErrorContext] = None
            strategy = ErrorRecoveryStrategy(max_retries, backoff_factor, max_delay)

            while True:
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if context is None:
                        context = classify_error(e, func.__name__)
                    else:
                        context.error = e
                        context.retry_count += 1

                    if not strategy.should_retry(context):
                        logger.error(
                            f"Failed after {context.retry_count} retries in {func.__name__}: {e}"
                        )
                        raise

                    delay = strategy.get_retry_delay(context)
                    logger.warning(
                        f"Error in {func.__name__}, retry {context.retry_count + 1}/"
                        f"{max_retries} after {delay}s: {e}"
                    )
                    if on_retry is not None:
                        await on_retry(context)
                    await asyncio.sleep(delay)

        return async_wrapper

    return decorator


def error_for_status(
    status: int,
    operation: str,
    repository: str,
    api_message: str = "",
) -> GitHubAPIError:
    """Build the exception (with actionable guidance) for a non-2xx response."""
    detail = f"\nAPI Response: {api_message}" if api_message else ""

    if status == 401:
        return AuthenticationError(
            "Authentication Failed (401 Unauthorized)\n\n"
            "Your GitHub token is invalid or expired.\n"
            "Create a new token at: https://github.com/settings/tokens/new"
            f"{detail}",
            status=status,
            operation=operation,
            api_message=api_message,
        )

    if status == 403:
        return AuthenticationError(
            "GitHub Access Denied (403 Forbidden)\n\n"
            "Your GitHub token doesn't have the required permissions.\n"
            "Use a token with the 'repo' scope (contents: write for fine-grained tokens).\n"
            f"Repository: {repository}"
            f"{detail}",
            status=status,
            operation=operation,
            api_message=api_message,
        )

    if status == 404:
        return RepositoryNotFoundError(
            "Repository Not Found (404)\n\n"
            f"The repository '{repository}' doesn't exist or your token can't access it.\n"
            f"Check that https://github.com/{repository} exists and the token has access to it."
            f"{detail}",
            status=status,
            operation=operation,
            api_message=api_message,
        )

    if status == 422 and "already exists" in api_message.lower():
        return BranchCollisionError(
            f"Reference already exists during {operation}",
            status=status,
            operation=operation,
            api_message=api_message,
        )

    if status == 429 or status >= 500:
        return TransientAPIError(
            f"GitHub API temporarily unavailable during {operation}: {status}{detail}",
            status=status,
            operation=operation,
            api_message=api_message,
        )

    return GitHubAPIError(
        f"Failed to {operation}: {status}{detail}",
        status=status,
        operation=operation,
        api_message=api_message,
    )
