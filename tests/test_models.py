"""Tests for multiagent_consensus/models.py dataclasses."""

import dataclasses

import pytest

from multiagent_consensus.models import (
    CacheStats,
    ConsensusResult,
    DebateMetadata,
    DebateState,
    ModelResponse,
    ResultMetadata,
    Round,
    TokenUsage,
)


def test_model_response_is_frozen():
    r = ModelResponse(model="gpt-4o", text="8", confidence=0.9)
    with pytest.raises(dataclasses.FrozenInstanceError):
        r.text = "9"  # type: ignore[misc]


def test_model_response_defaults():
    r = ModelResponse(model="gpt-4o", text="8", confidence=0.9)
    assert r.token_usage == TokenUsage()
    assert r.agreements == ()


def test_round_default_responses():
    assert Round(number=1).responses == []


def test_debate_state_defaults():
    state = DebateState()
    assert state.history == []
    assert state.current_round == 0
    assert not state.consensus_reached
    assert state.consensus_round is None
    assert state.final_answer == ""


def test_consensus_result_to_dict(sample_round):
    result = ConsensusResult(
        answer="Use YAML.",
        models=["model-a", "model-b"],
        metadata=ResultMetadata(
            total_tokens=22,
            processing_time_ms=10.0,
            rounds=1,
            consensus_method="majority",
            cache_stats=CacheStats(hits=2),
        ),
        debate_metadata=DebateMetadata(
            query_type="unknown",
            consensus_reached=False,
            consensus_round=None,
            used_specialized_prompts=True,
        ),
        enhanced_history=[sample_round],
    )
    data = result.to_dict()
    assert data["metadata"]["cache_stats"] == {"hits": 2, "misses": 0, "time_saved_ms": 0.0}
    assert data["enhanced_history"][0]["responses"][1]["token_usage"]["total"] == 12
    assert data["debate_metadata"]["agreement_analysis"] == {"by_round": [], "trend": "stable"}
