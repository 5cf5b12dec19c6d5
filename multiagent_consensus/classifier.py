"""Heuristic query classification used to pick a round-one prompt."""

import re

from multiagent_consensus.models import QueryType

_ARITHMETIC = re.compile(r"[\d\s+\-*=(),.%]+")

FACTUAL_INDICATORS = (
    "what is",
    "calculate",
    "solve",
    "how many",
    "when did",
    "who is",
    "where is",
    "which",
    "list",
    "name",
    "define",
    "explain",
)

ABSTRACT_INDICATORS = (
    "why",
    "how should",
    "meaning of",
    "purpose of",
    "ethics of",
    "moral",
    "philosophically",
    "subjective",
    "perspective",
    "impact of",
    "implications",
    "meaning",
    "value",
    "believe",
    "opinion",
    "thoughts on",
    "feel about",
    "what is the meaning",
    "what is the purpose",
    "philosophical",
    "philosophy",
)


def detect_query_type(query: str) -> QueryType:
    """Classify ``query`` as factual, abstract or unknown.

    A query that is mostly an arithmetic expression is factual. Otherwise
    abstract wording wins over a factual lead-in.
    """
    lowered = query.lower()

    match = _ARITHMETIC.search(lowered)
    if match and len(match.group(0)) > len(lowered) * 0.5:
        return "factual"

    if any(indicator in lowered for indicator in ABSTRACT_INDICATORS):
        return "abstract"

    for indicator in FACTUAL_INDICATORS:
        if lowered.startswith(indicator):
            if indicator == "what is" and any(w in lowered for w in ("meaning", "purpose", "philosophy")):
                return "abstract"
            return "factual"

    return "unknown"
