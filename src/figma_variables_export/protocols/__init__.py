"""
Protocol definitions for the exporter's collaborator interfaces.

These protocols define the boundary between the conversion core and the
host it runs in:

- VariableSource: the design tool's variable API
- SchedulerTick: how the batch scheduler yields between chunks
- ProgressReporter: where progress counters go

Usage:
    >>> from figma_variables_export.protocols import VariableSource
    >>>
    >>> class PluginBridge(VariableSource):
    ...     async def list_collections(self):
    ...         ...
"""

from .scheduler_protocol import AsyncioTick, ProgressReporter, SchedulerTick
from .variable_source_protocol import VariableSource

__all__ = [
    "AsyncioTick",
    "ProgressReporter",
    "SchedulerTick",
    "VariableSource",
]
