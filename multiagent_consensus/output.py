"""Rich console output and markdown/JSON file save for debate results."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from multiagent_consensus.models import CacheStats, ConsensusResult, ModelResponse, Round

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _response_preview(response: ModelResponse, words: int = 50) -> str:
    """Return first N words of a response."""
    all_words = response.text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _agreement_summary(response: ModelResponse) -> str:
    if not response.agreements:
        return ""
    marks = [f"{'+' if e.agrees else '-'}{e.to_model}" for e in response.agreements]
    return " | " + " ".join(marks)


def _cache_line(stats: CacheStats | None) -> str:
    if stats is None:
        return "off"
    return f"{stats.hits} hits, {stats.misses} misses, {stats.time_saved_ms:.0f}ms saved"


def print_round_summary(round_: Round) -> None:
    """Print a brief summary of round responses to the console."""
    console.print(Rule(f"[bold cyan]Round {round_.number} Summary[/bold cyan]"))
    for resp in round_.responses:
        console.print(
            Panel(
                _response_preview(resp),
                title=f"[bold]{resp.model}[/bold]",
                subtitle=f"confidence {resp.confidence:.2f}{_agreement_summary(resp)}",
                border_style="dim",
            )
        )


def print_result(result: ConsensusResult) -> None:
    """Print the final answer and debate metadata using Rich markdown."""
    meta = result.metadata
    debate = result.debate_metadata
    title = "Consensus Reached" if debate.consensus_reached else "No Consensus (best answer)"
    console.print(Rule(f"[bold green]{title}[/bold green]"))
    console.print(
        Text(
            f"Rounds: {meta.rounds} | "
            f"Method: {meta.consensus_method} | "
            f"Query type: {debate.query_type} | "
            f"Agreement trend: {debate.agreement_analysis.trend} | "
            f"Tokens: {meta.total_tokens} | "
            f"Duration: {meta.processing_time_ms / 1000:.1f}s",
            style="dim",
        )
    )
    if meta.caching_enabled:
        console.print(Text(f"Cache: {_cache_line(meta.cache_stats)}", style="dim"))
    console.print(Markdown(result.answer))


def save_to_file(result: ConsensusResult, question: str, output_dir: Path) -> Path:
    """Save the full debate transcript as a markdown file.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = output_dir / f"{timestamp}_{_slug(question)}.md"

    meta = result.metadata
    debate = result.debate_metadata
    consensus = f"round {debate.consensus_round}" if debate.consensus_reached else "not reached"

    lines: list[str] = [
        f"# Consensus Debate: {question[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Models:** {', '.join(result.models)}",
        f"**Method:** {meta.consensus_method}",
        f"**Consensus:** {consensus}",
        f"**Rounds:** {meta.rounds}",
        f"**Query type:** {debate.query_type}",
        f"**Agreement trend:** {debate.agreement_analysis.trend}",
        f"**Tokens:** {meta.total_tokens}",
        f"**Duration:** {meta.processing_time_ms / 1000:.1f}s",
    ]
    if meta.caching_enabled:
        lines.append(f"**Cache:** {_cache_line(meta.cache_stats)}")
    lines += ["", "---", ""]

    for rnd in result.enhanced_history:
        round_label = "Initial Responses" if rnd.number == 1 else "Debate"
        lines.append(f"## Round {rnd.number}: {round_label}")
        lines.append("")
        for resp in rnd.responses:
            lines.append(f"### {resp.model}")
            lines.append("")
            lines.append(resp.text)
            lines.append("")
            lines.append(
                f"*Confidence: {resp.confidence:.2f}"
                + (f" | Tokens: {resp.token_usage.total}" if resp.token_usage.total else "")
                + "*"
            )
            for edge in resp.agreements:
                verb = "agrees with" if edge.agrees else "disagrees with"
                lines.append(f"- {verb} {edge.to_model}")
            lines.append("")

    lines += ["## Final Answer", "", result.answer, ""]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Debate saved to: %s", filepath)
    return filepath


def save_json(result: ConsensusResult, path: Path) -> Path:
    """Write ``result.to_dict()`` as pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Result JSON saved to: %s", path)
    return path
