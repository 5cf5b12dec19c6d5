"""Tests for the click entry point in multiagent_consensus/cli.py."""

import json
from dataclasses import replace
from pathlib import Path

import pytest
from click.testing import CliRunner

import multiagent_consensus.cli as cli
from config.config_loader import AppConfig, CacheConfig, FileCacheOptions
from multiagent_consensus.providers.base import ProviderError
from tests.conftest import MockProvider, ok


@pytest.fixture
def providers() -> dict[str, MockProvider]:
    return {
        "pa": MockProvider("pa", ["model-a"], "8"),
        "pb": MockProvider("pb", ["model-b"], "8"),
        "pc": MockProvider("pc", ["model-c"], "8"),
    }


@pytest.fixture
def app_config(sample_app_config: AppConfig, tmp_path: Path) -> AppConfig:
    consensus = replace(
        sample_app_config.consensus,
        cache=CacheConfig(file=FileCacheOptions(cache_dir=tmp_path / "cache")),
    )
    return replace(sample_app_config, consensus=consensus)


@pytest.fixture
def patched(monkeypatch, app_config, providers):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(cli, "load_config", lambda *args: app_config)
    monkeypatch.setattr(cli, "build_providers", lambda config: providers)
    return providers


def test_runs_debate_and_saves_transcript(patched, tmp_path: Path):
    out = tmp_path / "out"
    result = CliRunner().invoke(
        cli.main,
        ["What is 4+4?", "--skip-health-check", "--output", str(out), "--json", str(tmp_path / "r.json")],
    )
    assert result.exit_code == 0, result.output
    assert len(list(out.glob("*.md"))) == 1
    data = json.loads((tmp_path / "r.json").read_text(encoding="utf-8"))
    assert data["answer"] == "8"
    assert data["debate_metadata"]["consensus_round"] == 1
    patched["pc"].generate_response.assert_not_awaited()


def test_models_option_overrides_settings(patched, tmp_path: Path):
    result = CliRunner().invoke(
        cli.main,
        ["Pick one", "--skip-health-check", "--models", "model-b,model-c", "--output", str(tmp_path)],
    )
    assert result.exit_code == 0, result.output
    patched["pa"].generate_response.assert_not_awaited()
    patched["pc"].generate_response.assert_awaited()


def test_question_from_file(patched, tmp_path: Path):
    question = tmp_path / "q.md"
    question.write_text("  What is 4+4?\n", encoding="utf-8")
    result = CliRunner().invoke(cli.main, ["--file", str(question), "--skip-health-check", "--output", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert patched["pa"].generate_response.await_args.args[1].count("What is 4+4?") == 1


def test_missing_question_exits(patched):
    result = CliRunner().invoke(cli.main, ["--skip-health-check"])
    assert result.exit_code == 1
    assert "Provide a QUESTION" in result.output


def test_no_providers_exits(monkeypatch, app_config):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(cli, "load_config", lambda *args: app_config)
    monkeypatch.setattr(cli, "build_providers", lambda config: {})
    result = CliRunner().invoke(cli.main, ["Pick one"])
    assert result.exit_code == 1
    assert "No providers available" in result.output


def test_invalid_rounds_is_config_error(patched):
    result = CliRunner().invoke(cli.main, ["Pick one", "--rounds", "0", "--skip-health-check"])
    assert result.exit_code == 1
    assert "Config error" in result.output


def test_min_rounds_above_rounds_rejected_before_health_check(patched):
    result = CliRunner().invoke(cli.main, ["Pick one", "--rounds", "1", "--min-rounds", "2"])
    assert result.exit_code == 1
    assert "Config error" in result.output
    assert "Checking models" not in result.output
    for provider in patched.values():
        provider.generate_response.assert_not_awaited()


def test_single_model_rejected_before_health_check(patched):
    result = CliRunner().invoke(cli.main, ["Pick one", "--models", "model-a"])
    assert result.exit_code == 1
    assert "Config error" in result.output
    patched["pa"].generate_response.assert_not_awaited()


def test_unknown_method_rejected_by_click(patched):
    result = CliRunner().invoke(cli.main, ["Pick one", "--method", "plurality"])
    assert result.exit_code == 2


def test_debate_error_exits_non_zero(patched, tmp_path: Path):
    patched["pb"].generate_response.side_effect = ProviderError("pb", "boom", model="model-b")
    result = CliRunner().invoke(cli.main, ["Pick one", "--skip-health-check", "--output", str(tmp_path)])
    assert result.exit_code == 1
    assert "Debate error" in result.output


def test_health_check_drops_failed_model(patched, tmp_path: Path):
    patched["pa"].generate_response.side_effect = ProviderError("pa", "401 Unauthorized")
    result = CliRunner().invoke(
        cli.main,
        ["Pick one", "--models", "model-a,model-b,model-c", "--output", str(tmp_path)],
        input="y\n",
    )
    assert result.exit_code == 0, result.output
    assert "FAIL" in result.output
    # Only the health ping reached the failing provider
    assert patched["pa"].generate_response.await_count == 1


def test_health_check_too_few_models_exits(patched):
    patched["pa"].generate_response.side_effect = ProviderError("pa", "down")
    result = CliRunner().invoke(cli.main, ["Pick one"])
    assert result.exit_code == 1
    assert "Fewer than 2 models" in result.output


def test_clear_cache_only(patched, app_config):
    cache_dir = app_config.consensus.cache.file.cache_dir
    cache_dir.mkdir(parents=True)
    (cache_dir / "stale.json").write_text("{}", encoding="utf-8")
    result = CliRunner().invoke(cli.main, ["--clear-cache", "--cache-adapter", "file"])
    assert result.exit_code == 0, result.output
    assert "Cache cleared" in result.output
    assert list(cache_dir.iterdir()) == []


def test_cache_flag_reports_stats(patched, tmp_path: Path):
    patched["pa"].generate_response.return_value = ok("A")
    result = CliRunner().invoke(
        cli.main,
        ["Pick one", "--cache", "--skip-health-check", "--rounds", "2", "--output", str(tmp_path)],
    )
    assert result.exit_code == 0, result.output
    assert "Cache:" in result.output


def test_apply_overrides(app_config):
    consensus = cli._apply_overrides(
        app_config.consensus,
        models="x, y",
        rounds=5,
        min_rounds=2,
        method="unanimous",
        cache=True,
        cache_adapter="file",
        bypass_cache=True,
        bust_cache=False,
        anonymize=True,
    )
    assert consensus.models == ["x", "y"]
    assert consensus.max_rounds == 5
    assert consensus.debate.min_rounds == 2
    assert consensus.consensus_method == "unanimous"
    assert (consensus.cache.enabled, consensus.cache.adapter, consensus.cache.bypass) == (True, "file", True)
    assert not consensus.debate.reveal_model_identities
    # The loaded config is left untouched
    assert app_config.consensus.max_rounds == 3
