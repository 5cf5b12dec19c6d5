"""Debate orchestration: parallel model calls, critique rounds, voting."""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import replace

from config.config_loader import ConsensusConfig, validate_consensus_config
from multiagent_consensus.analysis import HeuristicResponseAnalyzer, ResponseAnalyzer
from multiagent_consensus.classifier import detect_query_type
from multiagent_consensus.errors import (
    ConfigurationError,
    ConsensusProcessError,
    DebateAbortedError,
    ValidationError,
)
from multiagent_consensus.models import (
    AgreementAnalysis,
    AgreementLevel,
    ConsensusResult,
    DebateMetadata,
    DebateState,
    ModelResponse,
    ProviderResponse,
    QueryType,
    RequestOptions,
    ResultMetadata,
    Round,
)
from multiagent_consensus.prompts import format_previous_responses
from multiagent_consensus.providers.base import AIProvider
from multiagent_consensus.providers.registry import find_provider
from multiagent_consensus.voting import VoteResult, get_consensus_method, vote_with_checker

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
FINAL_ROUND_TEMPERATURE = 0.5
INITIAL_CONFIDENCE = 0.9
DEFAULT_CONFIDENCE = 0.8


class DebateOrchestrator:
    """Runs models through rounds of answer and critique until they agree.

    Round one asks every model the query on its own. Each later round shows
    every model all answers from the round before and asks for a revised
    answer. After each round, including the first, the configured voting rule
    (or custom checker) decides whether the debate is over, so with the
    default ``debate.min_rounds`` of 1 independent answers that already agree
    end the debate without a critique round. Consensus only counts from
    ``debate.min_rounds`` on. When ``max_rounds`` runs out the last vote's
    answer is used anyway, unless ``debate.require_consensus`` is set.
    """

    def __init__(
        self,
        config: ConsensusConfig,
        providers: list[AIProvider],
        analyzer: ResponseAnalyzer | None = None,
        on_round_complete: Callable[[Round], None] | None = None,
    ) -> None:
        validate_consensus_config(config)

        self._config = config
        self._vote_rule = get_consensus_method(config.consensus_method)
        self._analyzer = analyzer or HeuristicResponseAnalyzer()
        self._on_round_complete = on_round_complete

        self._providers: dict[str, AIProvider] = {}
        for model in config.models:
            provider = find_provider(providers, model)
            if provider is None:
                raise ConfigurationError(f"No provider found for model: {model}")
            self._providers[model] = provider

    # -- prompts and options -------------------------------------------------

    def _initial_template(self, query_type: QueryType) -> str:
        prompts = self._config.prompts
        if query_type == "factual":
            return prompts.factual
        if query_type == "abstract":
            return prompts.abstract
        return prompts.initial

    def _labels(self, previous: Round) -> list[tuple[str, str]]:
        if self._config.debate.reveal_model_identities:
            return [(r.model, r.model) for r in previous.responses]
        return [(r.model, f"Model {i}") for i, r in enumerate(previous.responses, start=1)]

    def _options(self, model: str, final: bool) -> RequestOptions:
        opts = self._config.model_config.get(model)
        temperature = opts.temperature if opts else None
        if temperature is None:
            temperature = FINAL_ROUND_TEMPERATURE if final else DEFAULT_TEMPERATURE
        return RequestOptions(
            temperature=temperature,
            max_tokens=opts.max_tokens if opts else None,
            system_message=opts.system_prompt if opts else None,
        )

    # -- model calls ---------------------------------------------------------

    async def _call_model(
        self,
        model: str,
        prompt: str,
        options: RequestOptions,
        round_number: int,
    ) -> ProviderResponse:
        provider = self._providers[model]
        try:
            return await provider.generate_response(model, prompt, options)
        except Exception as exc:
            logger.warning("Model %s failed in round %d: %s", model, round_number, exc)
            raise DebateAbortedError(model, round_number, str(exc)) from exc

    async def _fan_out(
        self,
        prompts: dict[str, str],
        round_number: int,
        final: bool,
    ) -> list[ProviderResponse]:
        """Call every model concurrently; results come back in model order."""
        logger.info("Starting round %d with %d models", round_number, len(prompts))
        tasks = [
            self._call_model(model, prompts[model], self._options(model, final), round_number)
            for model in self._config.models
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return results

    # -- rounds --------------------------------------------------------------

    async def _initial_round(self, query: str, query_type: QueryType) -> Round:
        template = self._initial_template(query_type)
        prompts = {model: template.format(question=query) for model in self._config.models}
        results = await self._fan_out(prompts, 1, final=False)
        return Round(
            number=1,
            responses=[
                ModelResponse(
                    model=model,
                    text=res.text,
                    confidence=INITIAL_CONFIDENCE,
                    token_usage=res.token_usage,
                )
                for model, res in zip(self._config.models, results)
            ],
        )

    async def _debate_round(self, query: str, previous: Round, number: int) -> Round:
        final = number == self._config.max_rounds
        labels = self._labels(previous)
        block = format_previous_responses(
            [(label, r.text) for (_, label), r in zip(labels, previous.responses)]
        )
        template = self._config.prompts.final_round if final else self._config.prompts.debate_round
        prompt = template.format(round=number, question=query, previous_responses=block)
        results = await self._fan_out({model: prompt for model in self._config.models}, number, final)

        responses = []
        for model, res in zip(self._config.models, results):
            confidence = DEFAULT_CONFIDENCE
            if final:
                extracted = self._analyzer.extract_confidence(res.text)
                if extracted is not None:
                    confidence = extracted
            responses.append(
                ModelResponse(
                    model=model,
                    text=res.text,
                    confidence=confidence,
                    token_usage=res.token_usage,
                    agreements=self._analyzer.extract_agreements(model, res.text, labels),
                )
            )
        return Round(number=number, responses=responses)

    def _vote(self, round_: Round) -> VoteResult:
        checker = self._config.debate.consensus_checker
        if checker is not None:
            return vote_with_checker(checker, round_.responses)
        return self._vote_rule(round_.responses)

    def _commit(
        self, state: DebateState, round_: Round, on_round_complete: Callable[[Round], None] | None
    ) -> VoteResult:
        state.history.append(round_)
        state.current_round = round_.number
        state.total_tokens += sum(r.token_usage.total for r in round_.responses)
        if round_.number > 1:
            state.agreement_levels.append(
                AgreementLevel(round=round_.number, agreement_level=self._analyzer.agreement_level(round_.responses))
            )

        result = self._vote(round_)
        if result.reached and round_.number >= self._config.debate.min_rounds:
            state.consensus_reached = True
            state.consensus_round = round_.number
            state.final_answer = result.answer

        logger.info(
            "Round %d complete: consensus %s",
            round_.number,
            "reached" if state.consensus_reached else "not reached",
        )
        if on_round_complete:
            on_round_complete(round_)
        return result

    async def run_debate(
        self,
        query: str,
        on_round_complete: Callable[[Round], None] | None = None,
    ) -> ConsensusResult:
        """Debate ``query`` to a single answer.

        ``on_round_complete`` overrides the callback given at construction for
        this run only.

        Raises:
            ValidationError: If the query is empty.
            DebateAbortedError: If any model call fails.
            ConsensusProcessError: In strict mode when no consensus is reached.
        """
        if not query or not query.strip():
            raise ValidationError.empty_input("query")

        start = time.monotonic()
        debate = self._config.debate
        query_type: QueryType = detect_query_type(query) if debate.use_specialized_prompts else "unknown"
        logger.info("Query classified as %s", query_type)

        callback = on_round_complete or self._on_round_complete
        state = DebateState()
        last_vote = self._commit(state, await self._initial_round(query, query_type), callback)

        while not state.consensus_reached and state.current_round < self._config.max_rounds:
            round_ = await self._debate_round(query, state.history[-1], state.current_round + 1)
            last_vote = self._commit(state, round_, callback)

        if not state.consensus_reached:
            if debate.require_consensus:
                raise ConsensusProcessError.no_consensus_reached(
                    self._config.consensus_method, state.current_round
                )
            logger.info("No consensus after %d rounds, using last vote", state.current_round)
            state.final_answer = last_vote.answer

        return self._build_result(state, query_type, (time.monotonic() - start) * 1000)

    def _build_result(self, state: DebateState, query_type: QueryType, elapsed_ms: float) -> ConsensusResult:
        last = state.history[-1]
        history = None
        if self._config.include_history:
            history = [
                Round(number=r.number, responses=[replace(resp, agreements=()) for resp in r.responses])
                for r in state.history
            ]
        return ConsensusResult(
            answer=state.final_answer,
            models=list(self._config.models),
            metadata=ResultMetadata(
                total_tokens=state.total_tokens,
                processing_time_ms=elapsed_ms,
                rounds=state.current_round,
                consensus_method=self._config.consensus_method,
                confidence_scores={r.model: r.confidence for r in last.responses},
                caching_enabled=self._config.cache.enabled,
            ),
            debate_metadata=DebateMetadata(
                query_type=query_type,
                consensus_reached=state.consensus_reached,
                consensus_round=state.consensus_round,
                used_specialized_prompts=self._config.debate.use_specialized_prompts,
                agreement_analysis=AgreementAnalysis(
                    by_round=list(state.agreement_levels),
                    trend=self._analyzer.agreement_trend(state.agreement_levels),
                ),
            ),
            enhanced_history=list(state.history),
            history=history,
        )
