"""
Protocols for cooperative scheduling and progress reporting.

The batch scheduler never decides how it yields: it calls a SchedulerTick
once per chunk. The asyncio implementation suspends to the event loop; a
worker-thread or UI-host implementation can be dropped in without touching
the resolution algorithm.
"""

import asyncio
from typing import Protocol, runtime_checkable
from abc import abstractmethod


@runtime_checkable
class SchedulerTick(Protocol):
    """Continuation point called between chunks."""

    @abstractmethod
    async def yield_control(self) -> None:
        """Give the host a chance to run before the next chunk starts."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Receives monotonic progress updates."""

    @abstractmethod
    def __call__(self, processed: int, total: int) -> None:
        ...


class AsyncioTick:
    """Yields once to the running event loop."""

    async def yield_control(self) -> None:
        await asyncio.sleep(0)
