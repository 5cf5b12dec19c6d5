"""Text heuristics over model responses: agreement, confidence, trend."""

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

from multiagent_consensus.models import AgreementEdge, AgreementLevel, AgreementTrend, ModelResponse

_AGREE_WORDS = "agree|concur|support|correct|accurate"
_DISAGREE_WORDS = "disagree|incorrect|inaccurate|wrong|mistaken"
# Only values in [0, 1]; "85", "85%" and "1.5" read as no confidence given
_CONFIDENCE = re.compile(r"confidence:\s*(0?\.\d+|1(?:\.0+)?|0)(?!\d|\.\d|%)", re.IGNORECASE)

TREND_THRESHOLD = 0.05


class ResponseAnalyzer(ABC):
    """Derives agreement and confidence signals from response text."""

    @abstractmethod
    def extract_agreements(
        self, model: str, text: str, previous: Sequence[tuple[str, str]]
    ) -> tuple[AgreementEdge, ...]:
        """Edges from ``model`` to each previous ``(model, label)`` its text mentions."""
        ...

    @abstractmethod
    def extract_confidence(self, text: str) -> float | None:
        ...

    def agreement_level(self, responses: Sequence[ModelResponse]) -> float:
        """Share of agreeing edges in a round; 0.5 when there are none."""
        edges = [edge for r in responses for edge in r.agreements]
        if not edges:
            return 0.5
        return sum(1 for edge in edges if edge.agrees) / len(edges)

    def agreement_trend(self, levels: Sequence[AgreementLevel]) -> AgreementTrend:
        if len(levels) <= 1:
            return "stable"
        deltas = [b.agreement_level - a.agreement_level for a, b in zip(levels, levels[1:])]
        if all(d > TREND_THRESHOLD for d in deltas):
            return "increasing"
        if all(d < -TREND_THRESHOLD for d in deltas):
            return "decreasing"
        if all(abs(d) <= TREND_THRESHOLD for d in deltas):
            return "stable"
        return "fluctuating"


def _explanation(text: str, match: re.Match) -> str:
    start = max(0, match.start() - 50)
    end = min(len(text), match.end() + 100)
    return text[start:end].strip()


class HeuristicResponseAnalyzer(ResponseAnalyzer):
    """Keyword search for agree/disagree wording near another model's label."""

    def extract_agreements(
        self, model: str, text: str, previous: Sequence[tuple[str, str]]
    ) -> tuple[AgreementEdge, ...]:
        edges = []
        for prev_model, label in previous:
            name = re.escape(label)
            agree = re.search(rf"({_AGREE_WORDS}).*?({name})", text, re.IGNORECASE)
            disagree = re.search(rf"({_DISAGREE_WORDS}).*?({name})", text, re.IGNORECASE)
            match = agree or disagree
            if match is None:
                continue
            edges.append(
                AgreementEdge(
                    from_model=model,
                    to_model=prev_model,
                    agrees=agree is not None,
                    explanation=_explanation(text, match),
                )
            )
        return tuple(edges)

    def extract_confidence(self, text: str) -> float | None:
        match = _CONFIDENCE.search(text)
        if not match:
            return None
        return float(match.group(1))
