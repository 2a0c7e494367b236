"""Snapshot-backed VariableSource.

A snapshot is the JSON the design tool's variable API returns, gathered in
one document::

    {
      "collections": [{"id": ..., "name": ..., "variableIds": [...], "modes": [...]}],
      "variables": [{"id": ..., "name": ..., "resolvedType": ..., "valuesByMode": {...}}]
    }

``variables`` may also be an object keyed by variable id.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..error_handling import ConversionError
from ..models import Variable, VariableCollection

logger = logging.getLogger(__name__)


class InMemoryVariableSource:
    """VariableSource over an already loaded set of collections and variables."""

    def __init__(
        self,
        collections: Iterable[VariableCollection],
        variables: Iterable[Variable],
    ):
        self._collections = list(collections)
        self._variables: Dict[str, Variable] = {v.id: v for v in variables}
        # variable id -> platform -> syntax
        self.annotations: Dict[str, Dict[str, str]] = {}
        self.lookups: List[str] = []

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "InMemoryVariableSource":
        raw_variables = data.get("variables", [])
        if isinstance(raw_variables, dict):
            raw_variables = list(raw_variables.values())
        try:
            collections = [
                VariableCollection.model_validate(item)
                for item in data.get("collections", [])
            ]
            variables = [Variable.model_validate(item) for item in raw_variables]
        except ValidationError as e:
            raise ConversionError(f"Invalid variable snapshot: {e}") from e
        logger.debug(
            f"Loaded snapshot with {len(collections)} collection(s) "
            f"and {len(variables)} variable(s)"
        )
        return cls(collections, variables)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InMemoryVariableSource":
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConversionError(f"Cannot read variable snapshot {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConversionError(f"Variable snapshot {path} must be a JSON object")
        return cls.from_snapshot(data)

    async def list_collections(self) -> List[VariableCollection]:
        return list(self._collections)

    async def get_variable(self, variable_id: str) -> Optional[Variable]:
        self.lookups.append(variable_id)
        return self._variables.get(variable_id)

    async def set_code_syntax(self, variable_id: str, platform: str, syntax: str) -> None:
        if variable_id not in self._variables:
            raise KeyError(f"Unknown variable {variable_id}")
        self.annotations.setdefault(variable_id, {})[platform] = syntax

    def annotated(self, platform: str) -> List[Tuple[str, str]]:
        return [
            (variable_id, syntaxes[platform])
            for variable_id, syntaxes in self.annotations.items()
            if platform in syntaxes
        ]
