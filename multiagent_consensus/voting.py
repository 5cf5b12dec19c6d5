"""Agreement rules over a round's responses. Pure functions, no I/O."""

from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from multiagent_consensus.errors import ConfigurationError
from multiagent_consensus.models import ModelResponse

ResponseLike = ModelResponse | str


@dataclass(frozen=True)
class VoteResult:
    reached: bool
    answer: str


def _texts(responses: Sequence[ResponseLike]) -> list[str]:
    return [r.text if isinstance(r, ModelResponse) else r for r in responses]


def _top(texts: list[str]) -> tuple[str, int]:
    # Counter keeps first-seen order, so ties go to the earliest text
    text, count = Counter(texts).most_common(1)[0]
    return text, count


def majority(responses: Sequence[ResponseLike]) -> VoteResult:
    texts = _texts(responses)
    if not texts:
        return VoteResult(False, "")
    text, count = _top(texts)
    return VoteResult(count > len(texts) / 2, text)


def supermajority(responses: Sequence[ResponseLike]) -> VoteResult:
    texts = _texts(responses)
    if not texts:
        return VoteResult(False, "")
    text, count = _top(texts)
    return VoteResult(count >= len(texts) * 0.75, text)


def unanimous(responses: Sequence[ResponseLike]) -> VoteResult:
    texts = _texts(responses)
    if not texts:
        return VoteResult(False, "")
    first = texts[0]
    return VoteResult(all(t == first for t in texts), first)


VOTING_METHODS: dict[str, Callable[[Sequence[ResponseLike]], VoteResult]] = {
    "majority": majority,
    "supermajority": supermajority,
    "unanimous": unanimous,
}


def get_consensus_method(method: str) -> Callable[[Sequence[ResponseLike]], VoteResult]:
    """Look up a voting rule by name.

    Raises:
        ConfigurationError: If ``method`` is not a known rule.
    """
    try:
        return VOTING_METHODS[method]
    except KeyError:
        raise ConfigurationError.unsupported_value("consensus_method", method, list(VOTING_METHODS)) from None


def vote(method: str, responses: Sequence[ResponseLike]) -> VoteResult:
    return get_consensus_method(method)(responses)


def vote_with_checker(
    checker: Callable[[Sequence[ResponseLike]], bool],
    responses: Sequence[ResponseLike],
) -> VoteResult:
    """Custom predicate decides agreement; the first response is the answer."""
    texts = _texts(responses)
    return VoteResult(bool(checker(responses)), texts[0] if texts else "")
