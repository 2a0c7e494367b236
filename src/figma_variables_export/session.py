"""
Export session management.

- ExportSession: one export job (job id, lifecycle state, metrics, caches'
  owner), created per invocation and discarded afterwards.
- CancellationToken / Deadline: cooperative abort signals checked at chunk
  and commit-step boundaries.
- ExportGuard: the single-slot mutex rejecting a second concurrent export.
"""

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, AsyncIterator, Dict, Optional

from .error_handling import (
    ErrorContext,
    ExportCancelledError,
    ExportInProgressError,
    ExportTimeoutError,
    classify_error,
)
from .metrics import ExportMetrics

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CREATED = auto()
    CONVERTING = auto()
    PUBLISHING = auto()
    COMPLETED = auto()
    FAILED = auto()
    CANCELLED = auto()


_TRANSITIONS = {
    SessionState.CREATED: {SessionState.CONVERTING, SessionState.FAILED, SessionState.CANCELLED},
    SessionState.CONVERTING: {SessionState.PUBLISHING, SessionState.COMPLETED, SessionState.FAILED, SessionState.CANCELLED},
    SessionState.PUBLISHING: {SessionState.COMPLETED, SessionState.FAILED, SessionState.CANCELLED},
    SessionState.COMPLETED: set(),
    SessionState.FAILED: set(),
    SessionState.CANCELLED: set(),
}


class CancellationToken:
    """Cooperative cancellation signal for one export."""

    def __init__(self):
        self._cancelled = False
        self.reason = ""

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._cancelled = True
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, where: str = "") -> None:
        if self._cancelled:
            suffix = f" before {where}" if where else ""
            raise ExportCancelledError(f"Export cancelled{suffix}: {self.reason}")


class Deadline:
    """Overall time budget for one export."""

    def __init__(self, seconds: Optional[float], clock=time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._started = clock()

    def remaining(self) -> Optional[float]:
        if self.seconds is None:
            return None
        return max(0.0, self.seconds - (self._clock() - self._started))

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, where: str = "") -> None:
        if self.expired:
            suffix = f" before {where}" if where else ""
            raise ExportTimeoutError(
                f"Export exceeded its {self.seconds:g}s deadline{suffix}"
            )


@dataclass
class SessionMetrics:
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    state_transitions: int = 0

    def as_dict(self) -> Dict[str, Any]:
        end = self.end_time if self.end_time is not None else time.time()
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "state_transitions": self.state_transitions,
            "duration": end - self.start_time,
        }


class ExportSession:
    """
    Represents a single export job.
    Owns the job id, lifecycle state, metrics and abort signals.
    """

    def __init__(
        self,
        job_id: Optional[str] = None,
        deadline_seconds: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
        clock=time.monotonic,
    ):
        self.job_id = job_id or uuid.uuid4().hex
        self.state = SessionState.CREATED
        self.metrics = SessionMetrics()
        self.export_metrics = ExportMetrics()
        self.cancel_token = cancel_token or CancellationToken()
        self.deadline = Deadline(deadline_seconds, clock=clock)
        self._error_context: Optional[ErrorContext] = None
        logger.info(f"Export session {self.job_id} created", extra={"job_id": self.job_id})

    @property
    def log_extra(self) -> Dict[str, str]:
        return {"job_id": self.job_id}

    @property
    def is_finished(self) -> bool:
        return self.state in (
            SessionState.COMPLETED,
            SessionState.FAILED,
            SessionState.CANCELLED,
        )

    def transition(self, new_state: SessionState) -> bool:
        if new_state not in _TRANSITIONS[self.state]:
            logger.warning(
                f"Export session {self.job_id} cannot move from "
                f"{self.state.name} to {new_state.name}",
                extra=self.log_extra,
            )
            return False
        self.state = new_state
        self.metrics.state_transitions += 1
        if self.is_finished:
            self.metrics.end_time = time.time()
        logger.debug(
            f"Export session {self.job_id} -> {new_state.name}", extra=self.log_extra
        )
        return True

    def checkpoint(self, where: str = "") -> None:
        """Abort point between chunks and before each commit step."""
        self.cancel_token.raise_if_cancelled(where)
        self.deadline.check(where)

    def fail(self, error: Exception, operation: str = "") -> ErrorContext:
        context = classify_error(error, operation=operation)
        context.job_id = self.job_id
        self._error_context = context
        if isinstance(error, ExportCancelledError):
            self.transition(SessionState.CANCELLED)
        else:
            self.transition(SessionState.FAILED)
        return context

    def get_error_context(self) -> Optional[ErrorContext]:
        return self._error_context

    def get_metrics(self) -> Dict[str, Any]:
        return self.metrics.as_dict()

    def get_state(self) -> str:
        return self.state.name

    def __repr__(self):
        return f"<ExportSession id={self.job_id} state={self.state.name}>"


class ExportGuard:
    """Single-slot mutex around the export entry point."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._active_job_id: Optional[str] = None

    @property
    def active_job_id(self) -> Optional[str]:
        return self._active_job_id

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def acquire(self, job_id: str) -> AsyncIterator[None]:
        if self._lock.locked():
            logger.warning(
                f"Export {job_id} rejected, export {self._active_job_id} is still running",
                extra={"job_id": job_id},
            )
            raise ExportInProgressError(
                f"An export is already running (job {self._active_job_id})"
            )
        await self._lock.acquire()
        self._active_job_id = job_id
        try:
            yield
        finally:
            self._active_job_id = None
            self._lock.release()


# The only process-wide mutable state
export_guard = ExportGuard()
