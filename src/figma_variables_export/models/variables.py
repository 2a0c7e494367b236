"""Pydantic models for design-tool variables.

The field aliases match the keys of the design tool's variable API so a
snapshot can be validated as-is, while Python code uses snake_case names.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolvedType(str, Enum):
    COLOR = "COLOR"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"


class Color(BaseModel):
    """RGB(A) color with channels nominally in [0, 1]."""

    r: float
    g: float
    b: float
    a: Optional[float] = None


class AliasRef(BaseModel):
    """Reference to another variable; carries no value itself."""

    type: Literal["VARIABLE_ALIAS"] = "VARIABLE_ALIAS"
    id: str


# Unknown shapes are kept as plain dicts so conversion can report them
# instead of rejecting the whole snapshot.
VariableValue = Union[AliasRef, Color, bool, float, str, Dict[str, Any]]


def _coerce_value(raw: Any) -> Any:
    if not isinstance(raw, dict):
        return raw
    if raw.get("type") == "VARIABLE_ALIAS" and isinstance(raw.get("id"), str):
        return AliasRef(id=raw["id"])
    channels = [raw.get(channel) for channel in ("r", "g", "b")]
    if all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in channels):
        alpha = raw.get("a")
        return Color(
            r=raw["r"],
            g=raw["g"],
            b=raw["b"],
            a=alpha if isinstance(alpha, (int, float)) else None,
        )
    return raw


class Variable(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    resolved_type: ResolvedType = Field(alias="resolvedType")
    values_by_mode: Dict[str, VariableValue] = Field(
        default_factory=dict, alias="valuesByMode"
    )

    @field_validator("values_by_mode", mode="before")
    @classmethod
    def _coerce_mode_values(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {mode_id: _coerce_value(raw) for mode_id, raw in value.items()}


class Mode(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mode_id: str = Field(alias="modeId")
    name: str


class VariableCollection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    variable_ids: List[str] = Field(default_factory=list, alias="variableIds")
    modes: List[Mode] = Field(default_factory=list)
