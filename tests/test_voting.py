"""Tests for multiagent_consensus/voting.py."""

import pytest

from multiagent_consensus.errors import ConfigurationError
from multiagent_consensus.models import ModelResponse
from multiagent_consensus.voting import get_consensus_method, majority, supermajority, unanimous, vote, vote_with_checker


def _responses(*texts: str) -> list[ModelResponse]:
    return [ModelResponse(model=f"m{i}", text=t, confidence=0.9) for i, t in enumerate(texts)]


def test_majority_reached():
    result = majority(["A", "A", "B"])
    assert result.reached
    assert result.answer == "A"


def test_majority_tie_not_reached():
    result = majority(["A", "A", "B", "B"])
    assert not result.reached
    assert result.answer in {"A", "B"}


def test_majority_accepts_model_responses():
    result = majority(_responses("8", "8", "9"))
    assert result.reached
    assert result.answer == "8"


def test_grouping_is_exact_text():
    assert not majority(["8", "8 ", "8\n"]).reached


def test_supermajority_three_of_four():
    result = supermajority(["A", "A", "A", "B"])
    assert result.reached
    assert result.answer == "A"


def test_supermajority_two_of_three_not_reached():
    assert not supermajority(["A", "A", "B"]).reached


def test_unanimous():
    assert unanimous(["A", "A"]).reached
    result = unanimous(["A", "B"])
    assert not result.reached
    assert result.answer in {"A", "B"}


@pytest.mark.parametrize("rule", [majority, supermajority, unanimous])
def test_empty_input_not_reached(rule):
    result = rule([])
    assert not result.reached
    assert result.answer == ""


def test_vote_dispatches_by_name():
    assert vote("unanimous", ["x", "x"]).reached
    assert not vote("supermajority", ["x", "x", "y"]).reached


def test_unknown_method_raises():
    with pytest.raises(ConfigurationError, match="consensus_method"):
        get_consensus_method("plurality")


def test_checker_decides_and_first_response_is_answer():
    responses = _responses("It is 8", "Eight")
    result = vote_with_checker(lambda rs: all("8" in r.text for r in rs), responses)
    assert not result.reached
    assert result.answer == "It is 8"
    assert vote_with_checker(lambda rs: True, responses).reached
