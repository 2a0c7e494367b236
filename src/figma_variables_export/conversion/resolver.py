"""
Variable graph resolution.

ConversionSession owns everything one conversion caches (variable lookups
and CSS names, both bounded) plus the diagnostics it collects. It is built
per export and dropped afterwards, so no state survives between exports.

VariableGraphResolver turns one variable's value for one mode into CSS
text, following alias references with the same mode id. It never raises
for malformed input: every failure becomes a deterministic fallback plus a
diagnostic.
"""

import logging
from collections import OrderedDict
from typing import FrozenSet, List, Optional

from ..constants import ConversionDefaults, FallbackValues
from ..error_handling import ExportError, ResolutionError
from ..models import (
    AliasRef,
    Category,
    Diagnostic,
    DiagnosticCode,
    DiagnosticLevel,
    Resolution,
    ResolvedType,
    Variable,
)
from ..protocols import VariableSource
from .classifier import TypeClassifier
from .naming import css_variable_name
from .values import convert_color, convert_number, convert_text

logger = logging.getLogger(__name__)

_FALLBACKS = {
    ResolvedType.COLOR: FallbackValues.COLOR,
    ResolvedType.FLOAT: FallbackValues.NUMBER,
    ResolvedType.STRING: FallbackValues.TEXT,
    ResolvedType.BOOLEAN: FallbackValues.TEXT,
}


class _BoundedCache(OrderedDict):
    """Least-recently-used mapping that never exceeds ``max_size`` entries."""

    def __init__(self, max_size: int):
        super().__init__()
        self.max_size = max_size

    def get_fresh(self, key):
        if key not in self:
            return None
        self.move_to_end(key)
        return self[key]

    def put(self, key, value) -> None:
        self[key] = value
        self.move_to_end(key)
        while len(self) > self.max_size:
            self.popitem(last=False)


class ConversionSession:
    """Per-export conversion state."""

    def __init__(
        self,
        source: VariableSource,
        include_effects: bool = False,
        max_cache_size: int = ConversionDefaults.MAX_CACHE_SIZE,
    ):
        self.source = source
        self.include_effects = include_effects
        self.classify = TypeClassifier(include_effects)
        self.diagnostics: List[Diagnostic] = []
        self._variables = _BoundedCache(max_cache_size)
        self._css_names = _BoundedCache(max_cache_size)

    async def get_variable(self, variable_id: str) -> Optional[Variable]:
        cached = self._variables.get_fresh(variable_id)
        if cached is not None:
            return cached
        variable = await self.source.get_variable(variable_id)
        if variable is not None:
            self._variables.put(variable_id, variable)
        return variable

    def css_name(self, variable_name: str) -> str:
        cached = self._css_names.get_fresh(variable_name)
        if cached is None:
            cached = css_variable_name(variable_name)
            self._css_names.put(variable_name, cached)
        return cached

    def category_for(self, variable_name: str) -> Category:
        return self.classify(variable_name)

    def record(self, diagnostic: Optional[Diagnostic]) -> None:
        if diagnostic is None:
            return
        self.diagnostics.append(diagnostic)
        log = logger.error if diagnostic.level == DiagnosticLevel.ERROR else logger.warning
        log(str(diagnostic))

    @property
    def cache_sizes(self) -> dict:
        return {"variables": len(self._variables), "css_names": len(self._css_names)}


class VariableGraphResolver:
    """Resolves (variable, mode id) pairs to stylesheet-ready text."""

    def __init__(self, session: ConversionSession):
        self.session = session

    async def resolve(self, variable: Variable, mode_id: str) -> Resolution:
        return await self._resolve(variable, mode_id, frozenset(), variable)

    async def _resolve(
        self,
        variable: Variable,
        mode_id: str,
        visited: FrozenSet[str],
        origin: Variable,
    ) -> Resolution:
        if variable.id in visited:
            return self._fallback(
                origin,
                Diagnostic.error(
                    DiagnosticCode.CYCLE_DETECTED,
                    origin.name,
                    f"Alias cycle detected at {variable.name} ({variable.id})",
                ),
            )
        visited = visited | {variable.id}

        if mode_id not in variable.values_by_mode:
            return self._fallback(
                origin,
                Diagnostic.error(
                    DiagnosticCode.UNRESOLVED_ALIAS,
                    origin.name,
                    f"{variable.name} has no value for mode {mode_id}",
                ),
            )

        raw = variable.values_by_mode[mode_id]
        if isinstance(raw, AliasRef):
            target = await self._fetch_target(raw.id, origin)
            if isinstance(target, Resolution):
                return target
            return await self._resolve(target, mode_id, visited, origin)

        return self._convert_literal(variable, raw, origin)

    async def _fetch_target(self, variable_id: str, origin: Variable):
        try:
            target = await self.session.get_variable(variable_id)
        except ExportError:
            raise
        except Exception as e:
            logger.warning(f"Failed to fetch alias target {variable_id}: {e}")
            return self._fallback(
                origin,
                Diagnostic.error(
                    DiagnosticCode.UNRESOLVED_ALIAS,
                    origin.name,
                    f"Alias target {variable_id} could not be fetched: {e}",
                ),
            )
        if target is None:
            return self._fallback(
                origin,
                Diagnostic.error(
                    DiagnosticCode.MISSING_ALIAS_TARGET,
                    origin.name,
                    f"Alias target {variable_id} does not exist",
                ),
            )
        return target

    def _convert_literal(self, variable: Variable, raw, origin: Variable) -> Resolution:
        # Keyword heuristics use the variable that actually holds the literal
        try:
            if variable.resolved_type == ResolvedType.COLOR:
                return convert_color(raw, variable.name)
            if variable.resolved_type == ResolvedType.FLOAT:
                return convert_number(raw, variable.name)
            if variable.resolved_type == ResolvedType.STRING:
                return convert_text(raw, variable.name)
        except ResolutionError as e:
            return self._fallback(
                origin,
                Diagnostic.error(DiagnosticCode.INVALID_VALUE, origin.name, e.message),
            )

        return Resolution(
            FallbackValues.TEXT,
            Diagnostic.warning(
                DiagnosticCode.UNSUPPORTED_TYPE,
                origin.name,
                f"Unsupported variable type {variable.resolved_type.value}",
            ),
        )

    @staticmethod
    def _fallback(origin: Variable, diagnostic: Diagnostic) -> Resolution:
        return Resolution(_FALLBACKS[origin.resolved_type], diagnostic)
