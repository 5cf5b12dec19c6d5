"""Pure dataclasses for the consensus debate pipeline. No logic, no deps."""

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

QueryType = Literal["factual", "abstract", "unknown"]
ConsensusMethod = Literal["majority", "supermajority", "unanimous"]
AgreementTrend = Literal["increasing", "decreasing", "stable", "fluctuating"]


@dataclass(frozen=True)
class TokenUsage:
    prompt: int = 0
    completion: int = 0
    total: int = 0


@dataclass(frozen=True)
class ProviderResponse:
    text: str
    token_usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class AgreementEdge:
    from_model: str
    to_model: str
    agrees: bool
    explanation: str | None = None


@dataclass(frozen=True)
class ModelResponse:
    model: str
    text: str
    confidence: float
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    agreements: tuple[AgreementEdge, ...] = ()


@dataclass
class Round:
    number: int
    responses: list[ModelResponse] = field(default_factory=list)


@dataclass(frozen=True)
class AgreementLevel:
    round: int
    agreement_level: float


@dataclass
class DebateState:
    history: list[Round] = field(default_factory=list)
    current_round: int = 0
    consensus_reached: bool = False
    consensus_round: int | None = None
    agreement_levels: list[AgreementLevel] = field(default_factory=list)
    final_answer: str = ""
    total_tokens: int = 0


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    time_saved_ms: float = 0.0


@dataclass
class ResultMetadata:
    total_tokens: int
    processing_time_ms: float
    rounds: int
    consensus_method: str
    confidence_scores: dict[str, float] = field(default_factory=dict)
    caching_enabled: bool = False
    cache_stats: CacheStats | None = None


@dataclass
class AgreementAnalysis:
    by_round: list[AgreementLevel] = field(default_factory=list)
    trend: AgreementTrend = "stable"


@dataclass
class DebateMetadata:
    query_type: QueryType
    consensus_reached: bool
    consensus_round: int | None
    used_specialized_prompts: bool
    agreement_analysis: AgreementAnalysis = field(default_factory=AgreementAnalysis)


@dataclass
class ConsensusResult:
    answer: str
    models: list[str]
    metadata: ResultMetadata
    debate_metadata: DebateMetadata
    enhanced_history: list[Round] = field(default_factory=list)
    history: list[Round] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RequestOptions:
    temperature: float | None = None
    max_tokens: int | None = None
    system_message: str | None = None
