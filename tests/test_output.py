"""Tests for multiagent_consensus/output.py."""

import json
from pathlib import Path

import pytest

from multiagent_consensus.models import (
    AgreementAnalysis,
    AgreementEdge,
    AgreementLevel,
    CacheStats,
    ConsensusResult,
    DebateMetadata,
    ModelResponse,
    ResultMetadata,
    Round,
)
from multiagent_consensus.output import _slug, print_result, print_round_summary, save_json, save_to_file


def test_slug_basic():
    assert _slug("Should we use YAML or JSON?") == "should-we-use-yaml-or-json"


def test_slug_max_len():
    assert len(_slug("a" * 100)) <= 40


def test_slug_special_chars():
    result = _slug("API vs. SDK (2024)")
    assert "." not in result
    assert "(" not in result
    assert ")" not in result


@pytest.fixture
def sample_result(sample_round: Round) -> ConsensusResult:
    round_two = Round(
        number=2,
        responses=[
            ModelResponse(
                model="model-a",
                text="YAML it is.",
                confidence=0.8,
                agreements=(AgreementEdge("model-a", "model-b", True, "agree with model-b"),),
            ),
            ModelResponse(model="model-b", text="YAML it is.", confidence=0.8),
        ],
    )
    return ConsensusResult(
        answer="YAML it is.",
        models=["model-a", "model-b"],
        metadata=ResultMetadata(
            total_tokens=42,
            processing_time_ms=1500.0,
            rounds=2,
            consensus_method="majority",
            confidence_scores={"model-a": 0.8, "model-b": 0.8},
            caching_enabled=True,
            cache_stats=CacheStats(hits=1, misses=3, time_saved_ms=120.0),
        ),
        debate_metadata=DebateMetadata(
            query_type="unknown",
            consensus_reached=True,
            consensus_round=2,
            used_specialized_prompts=True,
            agreement_analysis=AgreementAnalysis(by_round=[AgreementLevel(2, 1.0)], trend="stable"),
        ),
        enhanced_history=[sample_round, round_two],
    )


def test_save_to_file_creates_file(tmp_path: Path, sample_result):
    saved = save_to_file(sample_result, "Should we use YAML or JSON?", tmp_path / "output")
    assert saved.exists()
    assert saved.suffix == ".md"
    assert "should-we-use-yaml" in saved.name


def test_save_to_file_content(tmp_path: Path, sample_result):
    content = save_to_file(sample_result, "YAML or JSON?", tmp_path).read_text(encoding="utf-8")
    assert "# Consensus Debate: YAML or JSON?" in content
    assert "**Models:** model-a, model-b" in content
    assert "**Consensus:** round 2" in content
    assert "**Cache:** 1 hits, 3 misses, 120ms saved" in content
    assert "## Round 1: Initial Responses" in content
    assert "## Round 2: Debate" in content
    assert "- agrees with model-b" in content
    assert content.rstrip().endswith("YAML it is.")


def test_save_to_file_without_consensus(tmp_path: Path, sample_result):
    sample_result.debate_metadata.consensus_reached = False
    sample_result.debate_metadata.consensus_round = None
    content = save_to_file(sample_result, "q", tmp_path).read_text(encoding="utf-8")
    assert "**Consensus:** not reached" in content


def test_save_json(tmp_path: Path, sample_result):
    path = save_json(sample_result, tmp_path / "out" / "result.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["answer"] == "YAML it is."
    assert data["metadata"]["cache_stats"]["hits"] == 1
    assert data["debate_metadata"]["agreement_analysis"]["by_round"] == [{"round": 2, "agreement_level": 1.0}]
    assert data["enhanced_history"][1]["responses"][0]["agreements"][0]["to_model"] == "model-b"
    assert data["history"] is None


def test_console_rendering_does_not_raise(sample_result, capsys):
    for rnd in sample_result.enhanced_history:
        print_round_summary(rnd)
    print_result(sample_result)
    out = capsys.readouterr().out
    assert "Round 2 Summary" in out
    assert "Consensus Reached" in out
