"""End-to-end export: snapshot in, one commit out, against a scripted GitHub."""

import pytest
from unittest.mock import MagicMock

from figma_variables_export.conversion import InMemoryVariableSource
from figma_variables_export.github import CommitStep
from figma_variables_export.services import (
    build_theme_files,
    convert_variables,
    export_variables,
)
from figma_variables_export.error_handling import ConversionError
from figma_variables_export.session import CancellationToken

from tests.fixtures.design_variables import (
    DARK,
    LIGHT,
    collection,
    single_theme_snapshot,
    snapshot,
    two_theme_snapshot,
    variable,
)
from tests.fixtures.github_responses import BASE_SHA, NEW_COMMIT_SHA, FakeGitHubClient

BRANCH = "feat/figma-variables-20260301-1030"


class TestExportVariables:
    @pytest.mark.asyncio
    async def test_two_themes_single_commit(
        self, export_config, two_theme_source, fake_github, fixed_now, guard
    ):
        result = await export_variables(
            export_config, two_theme_source, guard=guard, client=fake_github, now=fixed_now
        )

        assert result.success, result.message
        assert len(fake_github.calls_for("POST", "refs")) == 1
        assert len(fake_github.calls_for("POST", "blobs")) == 6
        trees = fake_github.calls_for("POST", "trees")
        assert len(trees) == 1
        assert len(trees[0][2]["tree"]) == 6
        commits = fake_github.calls_for("POST", "commits")
        assert len(commits) == 1
        assert commits[0][2]["parents"] == [BASE_SHA]
        assert len(fake_github.calls_for("PATCH")) == 1

        assert result.branch == BRANCH
        assert result.commit_sha == NEW_COMMIT_SHA
        assert result.themes == ["light", "dark"]
        assert result.message == (
            f"Successfully exported 3 variables across 2 theme(s) to {BRANCH} in a single commit"
        )
        assert "src/styles/tokens/dark/measures.css" in result.files

    @pytest.mark.asyncio
    async def test_published_css(self, export_config, two_theme_source, fake_github, fixed_now, guard):
        await export_variables(
            export_config, two_theme_source, guard=guard, client=fake_github, now=fixed_now
        )
        contents = list(fake_github.blobs.values())
        dark_measures = [c for c in contents if "--spacingMd: 1.5rem;" in c]
        assert len(dark_measures) == 1
        assert "Exported at: 2026-03-01T09:30:00.000Z" in dark_measures[0]

    @pytest.mark.asyncio
    async def test_first_theme_annotated(self, export_config, two_theme_source, fake_github, fixed_now, guard):
        await export_variables(
            export_config, two_theme_source, guard=guard, client=fake_github, now=fixed_now
        )
        assert two_theme_source.annotations["v-spacing"] == {"WEB": "var(--spacingMd)"}
        assert len(two_theme_source.annotations) == 3

    @pytest.mark.asyncio
    async def test_leading_empty_mode_is_skipped(self, export_config, fake_github, fixed_now, guard):
        data = two_theme_snapshot()
        data["collections"].insert(0, collection("c-base", "Base", [], [("m-base", "Base")]))
        source = InMemoryVariableSource.from_snapshot(data)

        result = await export_variables(
            export_config, source, guard=guard, client=fake_github, now=fixed_now
        )

        assert result.success, result.message
        assert result.themes == ["light", "dark"]
        assert not any("/base/" in path for path in result.files)
        assert len(fake_github.calls_for("POST", "blobs")) == 6
        assert sorted(variable_id for variable_id, _ in source.annotated("WEB")) == [
            "v-family",
            "v-primary",
            "v-spacing",
        ]

    @pytest.mark.asyncio
    async def test_tree_failure_is_atomic(self, export_config, two_theme_source, fixed_now, guard):
        client = FakeGitHubClient(fail_on={CommitStep.CREATE_TREE.value: 500})

        result = await export_variables(
            export_config, two_theme_source, guard=guard, client=client, now=fixed_now
        )

        assert result.success is False
        assert client.refs[BRANCH] == BASE_SHA
        assert client.calls_for("PATCH") == []

    @pytest.mark.asyncio
    async def test_missing_config_fails_before_network(self, two_theme_source, fake_github, guard):
        result = await export_variables(
            {"owner": "acme", "repo": "", "path": "tokens", "token": ""},
            two_theme_source,
            guard=guard,
            client=fake_github,
        )

        assert result.success is False
        assert "GitHub repo is not set" in result.message
        assert "GitHub token is not set" in result.message
        assert fake_github.calls == []

    @pytest.mark.asyncio
    async def test_auth_failure_message(self, export_config, two_theme_source, fixed_now, guard):
        client = FakeGitHubClient(fail_on={CommitStep.CREATE_FEATURE_REF.value: 401})
        result = await export_variables(
            export_config, two_theme_source, guard=guard, client=client, now=fixed_now
        )
        assert result.success is False
        assert "Authentication Failed" in result.message

    @pytest.mark.asyncio
    async def test_concurrent_export_rejected(
        self, export_config, two_theme_source, fake_github, fixed_now, guard
    ):
        async with guard.acquire("running-job"):
            result = await export_variables(
                export_config, two_theme_source, guard=guard, client=fake_github, now=fixed_now
            )

        assert result.success is False
        assert "already running" in result.message
        assert fake_github.calls == []
        assert guard.busy is False

    @pytest.mark.asyncio
    async def test_cancelled_export(self, export_config, fake_github, fixed_now, guard):
        source = InMemoryVariableSource.from_snapshot(single_theme_snapshot(25))
        token = CancellationToken()
        export_config.chunk_size = 10

        result = await export_variables(
            export_config,
            source,
            guard=guard,
            client=fake_github,
            now=fixed_now,
            cancel_token=token,
            progress=lambda processed, total: token.cancel(),
        )

        assert result.success is False
        assert "cancelled" in result.message
        assert fake_github.calls == []

    @pytest.mark.asyncio
    async def test_deadline_expiry(self, export_config, two_theme_source, fake_github, fixed_now, guard):
        ticks = iter([0.0] + [1000.0] * 50)
        export_config.export_deadline = 60

        result = await export_variables(
            export_config,
            two_theme_source,
            guard=guard,
            client=fake_github,
            now=fixed_now,
            clock=lambda: next(ticks),
        )

        assert result.success is False
        assert "deadline" in result.message
        assert fake_github.calls_for("PATCH") == []

    @pytest.mark.asyncio
    async def test_progress_reported(self, export_config, two_theme_source, fake_github, fixed_now, guard):
        progress = MagicMock()
        await export_variables(
            export_config,
            two_theme_source,
            guard=guard,
            client=fake_github,
            now=fixed_now,
            progress=progress,
        )
        progress.assert_called_once_with(3, 3)

    @pytest.mark.asyncio
    async def test_metrics_attached(self, export_config, two_theme_source, fake_github, fixed_now, guard):
        result = await export_variables(
            export_config, two_theme_source, guard=guard, client=fake_github, now=fixed_now
        )
        assert result.metrics["variables_processed"] == 3
        assert result.job_id


class TestConvertOnly:
    @pytest.mark.asyncio
    async def test_no_collections(self):
        with pytest.raises(ConversionError, match="No variable collections"):
            await convert_variables(InMemoryVariableSource.from_snapshot(snapshot([], [])))

    @pytest.mark.asyncio
    async def test_nothing_convertible(self):
        data = single_theme_snapshot(1)
        data["variables"][0]["resolvedType"] = "BOOLEAN"
        with pytest.raises(ConversionError, match="No valid CSS variables"):
            await convert_variables(InMemoryVariableSource.from_snapshot(data))

    @pytest.mark.asyncio
    async def test_single_real_theme_keeps_theme_slug(self):
        data = snapshot(
            [
                collection("c-tokens", "Tokens", ["a"], [("m-1", "Mode 1")]),
                collection("c-empty", "Empty", [], [("m-value", "Value")]),
            ],
            [variable("a", "spacing/md", "FLOAT", {"m-1": 16})],
        )
        outcome = await convert_variables(InMemoryVariableSource.from_snapshot(data))
        files = build_theme_files(outcome.themes, path="out")

        assert list(files) == [
            "out/theme/colors.css",
            "out/theme/fonts.css",
            "out/theme/measures.css",
        ]

    @pytest.mark.asyncio
    async def test_failing_lookup_does_not_abort(self):
        data = snapshot(
            [collection("c", "Tokens", ["bad", "a"], [(LIGHT, "Light"), (DARK, "Dark")])],
            [
                variable("bad", "spacing/sm", "FLOAT", {LIGHT: 8, DARK: 8}),
                variable("a", "spacing/md", "FLOAT", {LIGHT: 16, DARK: 24}),
            ],
        )
        source = InMemoryVariableSource.from_snapshot(data)
        original_get = source.get_variable

        async def get_variable(variable_id):
            if variable_id == "bad":
                raise RuntimeError("plugin API hiccup")
            return await original_get(variable_id)

        source.get_variable = get_variable
        outcome = await convert_variables(source)

        assert [e.name for e in outcome.themes["Dark"]] == ["--spacingMd"]
        assert outcome.variable_count == 1
        assert [str(d.code.value) for d in outcome.diagnostics] == ["variable_unavailable"]

    @pytest.mark.asyncio
    async def test_build_theme_files(self, two_theme_source):
        outcome = await convert_variables(two_theme_source)
        files = build_theme_files(outcome.themes, path="tokens", layout="single")
        assert list(files) == ["tokens/light/variables.css", "tokens/dark/variables.css"]
        assert outcome.variable_count == 3
