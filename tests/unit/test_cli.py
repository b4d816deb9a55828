"""Unit tests for the command-line interface."""

import json
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from model_router.cli import app
from model_router.services.resolver import ModelResolver

runner = CliRunner()


@pytest.fixture
def cli_resolver(resolver: ModelResolver):
    """Make the CLI use the test resolver."""
    with patch("model_router.cli.main.get_resolver", return_value=resolver):
        yield resolver


class TestModelsCommand:
    """Tests for `model-router models`."""

    def test_models_json_lists_enabled(self, cli_resolver: ModelResolver, fake_environ: dict):
        fake_environ["CEREBRAS_API_KEY"] = "csk"

        result = runner.invoke(app, ["--output", "json", "--env-file", "", "models"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == len(data["models"])
        assert all(m["provider"] == "cerebras" and m["enabled"] for m in data["models"])

    def test_models_all_includes_disabled(self, cli_resolver: ModelResolver):
        result = runner.invoke(app, ["-o", "json", "--env-file", "", "models", "--all"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == len(cli_resolver.registry)
        assert not any(m["enabled"] for m in data["models"])

    def test_models_json_flag(self, cli_resolver: ModelResolver, fake_environ: dict):
        fake_environ["AI_GATEWAY_API_KEY"] = "gw"

        result = runner.invoke(app, ["--env-file", "", "models", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] > 0
        assert all(m["provider"] == "gateway" for m in data["models"])

    def test_models_human_output(self, cli_resolver: ModelResolver):
        result = runner.invoke(app, ["--env-file", "", "models", "--all"], env={"COLUMNS": "200"})

        assert result.exit_code == 0
        assert "cerebras/gpt-oss-120b" in result.stdout


class TestCheckCommand:
    """Tests for `model-router check`."""

    def test_check_passes_and_skips(self, cli_resolver: ModelResolver, fake_environ: dict):
        fake_environ["CEREBRAS_API_KEY"] = "csk"

        result = runner.invoke(
            app,
            ["-o", "json", "--env-file", "", "check", "cerebras/gpt-oss-120b", "google/gemini-2.5-flash"],
        )

        assert result.exit_code == 0
        results = {r["model_id"]: r for r in json.loads(result.stdout)["results"]}
        assert results["cerebras/gpt-oss-120b"]["status"] == "passed"
        assert results["cerebras/gpt-oss-120b"]["tokens"] == {"input": 12, "output": 8}
        assert results["google/gemini-2.5-flash"]["status"] == "skipped"
        assert "AI_GATEWAY_API_KEY" in results["google/gemini-2.5-flash"]["error"]

    def test_check_failure_exit_code(self, cli_resolver: ModelResolver, fake_environ: dict):
        fake_environ["CEREBRAS_API_KEY"] = "csk"
        client = cli_resolver.resolve("cerebras/gpt-oss-120b").handle.client
        client.chat.side_effect = httpx.ReadTimeout("timed out")

        result = runner.invoke(app, ["-o", "json", "--env-file", "", "check", "cerebras/gpt-oss-120b"])

        assert result.exit_code == 1
        [entry] = json.loads(result.stdout)["results"]
        assert entry["status"] == "failed"
        assert "timed out" in entry["error"]

    def test_check_unknown_model_fails(self, cli_resolver: ModelResolver):
        result = runner.invoke(app, ["-o", "json", "--env-file", "", "check", "nope/model"])

        assert result.exit_code == 1
        [entry] = json.loads(result.stdout)["results"]
        assert entry["status"] == "failed"
        assert "not supported" in entry["error"]
