"""Tests for the thinktank CLI (run, models, config)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from thinktank.cli import app
from thinktank.errors import ApiError
from thinktank.llm.models import LLMAvailableModel
from thinktank.llm.registry import ProviderRegistry

from conftest import FakeProvider

runner = CliRunner()

CONFIG_YAML = """\
models:
  - provider: openai
    model_id: gpt-4o
  - provider: anthropic
    model_id: claude-3-7-sonnet-20250219
groups:
  coding:
    system_prompt:
      text: "You are a senior engineer."
    models:
      - provider: openai
        model_id: gpt-4o
"""


class ListingProvider(FakeProvider):
    async def list_models(self, api_key=None):
        return [LLMAvailableModel(id="fake-1", description="First fake")]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def workdir(tmp_path, monkeypatch):
    """Empty project directory with no user-global config."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return tmp_path


@pytest.fixture()
def project(workdir):
    (workdir / "thinktank.yaml").write_text(CONFIG_YAML)
    (workdir / "prompt.txt").write_text("What is 2 + 2?")
    return workdir


@pytest.fixture()
def fakes():
    return {
        "openai": FakeProvider("openai", text="gpt answer"),
        "anthropic": FakeProvider("anthropic", text="claude answer"),
    }


@pytest.fixture()
def mock_registry(fakes):
    """Patch the registry factory at the CLI import site."""
    reg = ProviderRegistry()
    for provider in fakes.values():
        reg.register_provider(provider)
    with patch("thinktank.cli.create_default_registry", return_value=reg):
        yield reg


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRun:
    def test_all_enabled_models(self, project, mock_registry):
        result = runner.invoke(app, ["run", "prompt.txt"])
        assert result.exit_code == 0, result.output
        assert "gpt answer" in result.output
        assert "claude answer" in result.output

    def test_prompt_and_group_prompt_reach_provider(self, project, mock_registry, fakes):
        result = runner.invoke(app, ["run", "prompt.txt", "--group", "coding"])
        assert result.exit_code == 0, result.output
        call = fakes["openai"].calls[0]
        assert call["prompt"] == "What is 2 + 2?"
        assert call["system_prompt"].text == "You are a senior engineer."
        assert fakes["anthropic"].calls == []

    def test_explicit_model_and_cli_options(self, project, mock_registry, fakes):
        result = runner.invoke(
            app,
            [
                "run",
                "prompt.txt",
                "-m",
                "openai:gpt-4o",
                "--temperature",
                "0.3",
                "--max-tokens",
                "50",
                "--system-prompt",
                "Be terse.",
            ],
        )
        assert result.exit_code == 0, result.output
        call = fakes["openai"].calls[0]
        assert call["options"] == {"temperature": 0.3, "max_tokens": 50}
        assert call["system_prompt"].text == "Be terse."

    def test_one_failure_exits_nonzero(self, project, mock_registry, fakes):
        async def fail(*args, **kwargs):
            raise ApiError("quota gone", provider_id="anthropic")

        fakes["anthropic"].generate = fail
        result = runner.invoke(app, ["run", "prompt.txt"])
        assert result.exit_code == 1
        assert "gpt answer" in result.output
        assert "quota gone" in result.output
        assert "1 of 2 model(s) failed." in result.output

    def test_output_writes_one_file_per_model(self, project, mock_registry):
        result = runner.invoke(app, ["run", "prompt.txt", "-g", "coding", "-o", "out"])
        assert result.exit_code == 0, result.output
        assert "Wrote 1 file(s) to" in result.output
        written = (project / "out" / "coding-openai-gpt-4o.md").read_text()
        assert written.startswith("# openai:gpt-4o (coding group)")
        assert "gpt answer" in written
        assert "## Metadata" not in written

    def test_output_with_metadata_and_failure(self, project, mock_registry, fakes):
        async def fail(*args, **kwargs):
            raise ApiError("quota gone", provider_id="anthropic")

        fakes["anthropic"].generate = fail
        result = runner.invoke(
            app, ["run", "prompt.txt", "--output", "out", "--include-metadata"]
        )
        assert result.exit_code == 1
        assert "Wrote 2 file(s) to" in result.output
        failed = (project / "out" / "anthropic-claude-3-7-sonnet-20250219.md").read_text()
        assert "## Error" in failed
        assert "quota gone" in failed

    def test_missing_prompt_file(self, project, mock_registry):
        result = runner.invoke(app, ["run", "missing.txt"])
        assert result.exit_code == 1
        assert "File system error" in result.output

    def test_unknown_model(self, project, mock_registry):
        result = runner.invoke(app, ["run", "prompt.txt", "-m", "openai:gpt-5"])
        assert result.exit_code == 1
        assert "not found in configuration" in result.output

    def test_unknown_group(self, project, mock_registry):
        result = runner.invoke(app, ["run", "prompt.txt", "-g", "nope"])
        assert result.exit_code == 1
        assert 'Group "nope" not found' in result.output

    def test_missing_config_path(self, project):
        result = runner.invoke(app, ["--config", "nope.yaml", "run", "prompt.txt"])
        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_broken_config(self, workdir):
        (workdir / "thinktank.yaml").write_text("models: [unclosed\n")
        (workdir / "prompt.txt").write_text("hi")
        result = runner.invoke(app, ["run", "prompt.txt"])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output


# ---------------------------------------------------------------------------
# models
# ---------------------------------------------------------------------------


class TestModels:
    def test_configured_table(self, project, no_api_keys):
        result = runner.invoke(app, ["models"])
        assert result.exit_code == 0, result.output
        assert "openai:gpt-4o" in result.output
        assert "coding" in result.output
        assert "missing" in result.output

    def test_provider_filter(self, project):
        result = runner.invoke(app, ["models", "--provider", "anthropic"])
        assert result.exit_code == 0, result.output
        assert "openai:gpt-4o" not in result.output

    def test_available(self, project):
        reg = ProviderRegistry()
        reg.register_provider(ListingProvider("openai"))
        with patch("thinktank.cli.create_default_registry", return_value=reg):
            result = runner.invoke(app, ["models", "--available"])
        assert result.exit_code == 0, result.output
        assert "fake-1" in result.output
        assert "First fake" in result.output

    def test_available_without_listing_support(self, project, mock_registry):
        result = runner.invoke(app, ["models", "--available", "-p", "openai"])
        assert result.exit_code == 1
        assert "No model listing" in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_init_creates_file(self, workdir):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0, result.output
        assert Path("thinktank.yaml").read_text().startswith("# thinktank.yaml")

    def test_init_refuses_to_overwrite(self, project):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert Path("thinktank.yaml").read_text() == CONFIG_YAML

    def test_init_force_repairs_broken_file(self, workdir):
        (workdir / "thinktank.yaml").write_text("models: [unclosed\n")
        result = runner.invoke(app, ["config", "init", "--force"])
        assert result.exit_code == 0, result.output
        assert "models:" in Path("thinktank.yaml").read_text()

    def test_path_without_config(self, workdir):
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0, result.output
        assert "No configuration file found" in result.output

    def test_path_with_project_config(self, project):
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0, result.output
        assert "thinktank.yaml" in result.output

    def test_path_with_missing_cli_config(self, workdir):
        result = runner.invoke(app, ["--config", "nope.yaml", "config", "path"])
        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_show_resolved_config(self, project):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0, result.output
        assert "thinktank.yaml" in result.output
        assert "gpt-4o" in result.output
        assert "You are a senior engineer." in result.output

    def test_show_defaults_without_file(self, workdir):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0, result.output
        assert "built-in defaults" in result.output
        assert "Default model group" in result.output

    def test_show_broken_config(self, workdir):
        (workdir / "thinktank.yaml").write_text("models: [unclosed\n")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output

    def test_add_model(self, project):
        result = runner.invoke(
            app, ["config", "add-model", "google:gemini-2.5-pro", "--temperature", "0.2"]
        )
        assert result.exit_code == 0, result.output
        assert "Added" in result.output
        raw = yaml.safe_load(Path("thinktank.yaml").read_text())
        assert raw["models"][-1] == {
            "provider": "google",
            "model_id": "gemini-2.5-pro",
            "options": {"temperature": 0.2},
        }

    def test_add_duplicate_model(self, project):
        result = runner.invoke(app, ["config", "add-model", "openai:gpt-4o"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_remove_model_reports_groups(self, project):
        result = runner.invoke(app, ["config", "remove-model", "openai:gpt-4o"])
        assert result.exit_code == 0, result.output
        assert "coding" in result.output
        assert "gpt-4o" not in Path("thinktank.yaml").read_text()

    def test_remove_unknown_model(self, project):
        result = runner.invoke(app, ["config", "remove-model", "openai:gpt-5"])
        assert result.exit_code == 1
        assert "not found in configuration" in result.output

    def test_disable_and_enable(self, project):
        result = runner.invoke(app, ["config", "disable", "openai:gpt-4o"])
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(Path("thinktank.yaml").read_text())["models"][0]["enabled"] is False

        result = runner.invoke(app, ["config", "enable", "openai:gpt-4o"])
        assert result.exit_code == 0, result.output
        assert "enabled" not in yaml.safe_load(Path("thinktank.yaml").read_text())["models"][0]

    def test_edit_uses_cli_config_path(self, workdir):
        (workdir / "custom.yaml").write_text(CONFIG_YAML)
        result = runner.invoke(
            app, ["--config", "custom.yaml", "config", "disable", "openai:gpt-4o"]
        )
        assert result.exit_code == 0, result.output
        assert "enabled: false" in (workdir / "custom.yaml").read_text()
        assert not (workdir / "thinktank.yaml").exists()
