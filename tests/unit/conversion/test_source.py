"""Tests for the snapshot-backed variable source."""

import json

import pytest

from figma_variables_export.conversion import InMemoryVariableSource
from figma_variables_export.error_handling import ConversionError
from figma_variables_export.models import AliasRef, Color, ResolvedType
from figma_variables_export.protocols import VariableSource

from tests.fixtures.design_variables import LIGHT, alias, collection, color, snapshot, variable


class TestInMemoryVariableSource:
    def test_satisfies_protocol(self, two_theme_source):
        assert isinstance(two_theme_source, VariableSource)

    @pytest.mark.asyncio
    async def test_snapshot_values_are_typed(self):
        data = snapshot(
            [collection("c", "Tokens", ["a", "b"], [(LIGHT, "Light")])],
            [
                variable("a", "bg/color", "COLOR", {LIGHT: color(1, 0, 0, 0.5)}),
                variable("b", "fg/color", "COLOR", {LIGHT: alias("a")}),
            ],
        )
        source = InMemoryVariableSource.from_snapshot(data)

        a = await source.get_variable("a")
        b = await source.get_variable("b")
        assert a.resolved_type == ResolvedType.COLOR
        assert a.values_by_mode[LIGHT] == Color(r=1, g=0, b=0, a=0.5)
        assert b.values_by_mode[LIGHT] == AliasRef(id="a")
        assert await source.get_variable("nope") is None

    def test_variables_keyed_by_id(self):
        data = {
            "collections": [collection("c", "Tokens", ["a"], [(LIGHT, "Light")])],
            "variables": {"a": variable("a", "space/gap", "FLOAT", {LIGHT: 8})},
        }
        source = InMemoryVariableSource.from_snapshot(data)
        assert source._variables["a"].name == "space/gap"

    def test_invalid_snapshot(self):
        with pytest.raises(ConversionError, match="Invalid variable snapshot"):
            InMemoryVariableSource.from_snapshot({"variables": [{"id": "a"}]})

    def test_from_file(self, temp_dir, two_theme_data):
        path = temp_dir / "variables.json"
        path.write_text(json.dumps(two_theme_data))
        source = InMemoryVariableSource.from_file(path)
        assert len(source._variables) == 3

    def test_from_file_rejects_non_object(self, temp_dir):
        path = temp_dir / "variables.json"
        path.write_text("[]")
        with pytest.raises(ConversionError):
            InMemoryVariableSource.from_file(path)

    @pytest.mark.asyncio
    async def test_records_annotations(self, two_theme_source):
        await two_theme_source.set_code_syntax("v-spacing", "WEB", "var(--spacingMd)")
        assert two_theme_source.annotated("WEB") == [("v-spacing", "var(--spacingMd)")]
