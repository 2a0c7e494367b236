import asyncio
import time
from typing import Any, Dict, Optional
from collections import defaultdict


class ExportMetrics:
    """
    Metrics for one export job.
    Created with the job's session and discarded with it.
    Safe to share between the tasks of one event loop.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._metrics = self._empty()

    @staticmethod
    def _empty() -> Dict[str, Any]:
        return {
            "api_calls": defaultdict(int),
            "status_codes": defaultdict(int),
            "retries": 0,
            "api_durations_ms": [],
            "diagnostics": defaultdict(int),
            "variables_processed": 0,
            "errors": defaultdict(int),
            "start_time": time.time(),
        }

    async def record_api_call(
        self, step: str, status: int, duration_ms: Optional[float] = None
    ):
        async with self._lock:
            self._metrics["api_calls"][step] += 1
            self._metrics["status_codes"][str(status)] += 1
            if duration_ms is not None:
                self._metrics["api_durations_ms"].append(duration_ms)

    async def record_retry(self):
        async with self._lock:
            self._metrics["retries"] += 1

    async def record_diagnostic(self, level: str):
        async with self._lock:
            self._metrics["diagnostics"][level] += 1

    async def record_processed(self, count: int):
        async with self._lock:
            self._metrics["variables_processed"] += count

    async def record_error(self, error_type: str):
        async with self._lock:
            self._metrics["errors"][error_type] += 1

    async def get_metrics(self) -> Dict[str, Any]:
        async with self._lock:
            durations = self._metrics["api_durations_ms"]
            avg_api_duration = sum(durations) / len(durations) if durations else 0
            return {
                "api_calls": dict(self._metrics["api_calls"]),
                "total_api_calls": sum(self._metrics["api_calls"].values()),
                "status_codes": dict(self._metrics["status_codes"]),
                "retries": self._metrics["retries"],
                "avg_api_duration_ms": avg_api_duration,
                "diagnostics": dict(self._metrics["diagnostics"]),
                "variables_processed": self._metrics["variables_processed"],
                "errors": dict(self._metrics["errors"]),
                "elapsed_sec": time.time() - self._metrics["start_time"],
            }

    async def reset(self):
        async with self._lock:
            self._metrics = self._empty()
