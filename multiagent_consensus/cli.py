"""Click CLI: orchestrates config loading, provider selection, debate, and output."""

import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import (
    CACHE_ADAPTERS,
    CONSENSUS_METHODS,
    AppConfig,
    ConsensusConfig,
    load_config,
    validate_consensus_config,
)
from multiagent_consensus.engine import ConsensusEngine
from multiagent_consensus.errors import ConsensusError
from multiagent_consensus.healthcheck import run_health_checks
from multiagent_consensus.models import Round
from multiagent_consensus.output import print_result, print_round_summary, save_json, save_to_file
from multiagent_consensus.providers.base import AIProvider
from multiagent_consensus.providers.registry import build_providers

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _apply_overrides(
    config: ConsensusConfig,
    models: str | None,
    rounds: int | None,
    min_rounds: int | None,
    method: str | None,
    cache: bool | None,
    cache_adapter: str | None,
    bypass_cache: bool,
    bust_cache: bool,
    anonymize: bool,
) -> ConsensusConfig:
    """Return a copy of ``config`` with CLI flags applied. Flags win over settings."""
    debate = config.debate
    if min_rounds is not None:
        debate = replace(debate, min_rounds=min_rounds)
    if anonymize:
        debate = replace(debate, reveal_model_identities=False)

    cache_cfg = config.cache
    if cache is not None:
        cache_cfg = replace(cache_cfg, enabled=cache)
    if cache_adapter:
        cache_cfg = replace(cache_cfg, adapter=cache_adapter)
    if bypass_cache:
        cache_cfg = replace(cache_cfg, bypass=True)
    if bust_cache:
        cache_cfg = replace(cache_cfg, bust_cache=True)

    return replace(
        config,
        models=[m.strip() for m in models.split(",") if m.strip()] if models else list(config.models),
        max_rounds=rounds if rounds is not None else config.max_rounds,
        consensus_method=method or config.consensus_method,
        debate=debate,
        cache=cache_cfg,
    )


def _check_and_filter_models(providers: list[AIProvider], models: list[str]) -> list[str]:
    """Run health checks, print results, and ask user what to do on failures.

    Returns the models that passed. Exits if the user declines to continue
    or fewer than two models pass.
    """
    console.print("\n[bold]Checking models...[/bold]")
    results: dict[str, tuple[bool, str]] = asyncio.run(run_health_checks(providers, models))

    failed: list[str] = []
    for model in models:
        ok, err = results[model]
        if ok:
            console.print(f"  [green]OK  [/green] {model}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {model}: {short_err}")
            failed.append(model)

    if not failed:
        console.print()
        return models

    working = [m for m in models if m not in failed]
    if len(working) < 2:
        console.print("\n[bold red]Error:[/bold red] Fewer than 2 models passed the health check.")
        sys.exit(1)

    console.print(f"\n[yellow]{len(failed)} model(s) failed:[/yellow] {', '.join(failed)}")
    console.print(f"Working models: {', '.join(working)}")

    if not click.confirm("Continue with working models only?", default=True):
        sys.exit(0)

    console.print()
    return working


async def _run_single(
    question_text: str,
    consensus: ConsensusConfig,
    providers: list[AIProvider],
    output_dir: Path,
    json_path: Path | None,
) -> Path:
    """Run one debate, print it, and return the saved transcript path."""
    engine = ConsensusEngine(consensus, providers)

    console.print(
        f"\n[bold cyan]Multi-agent consensus[/bold cyan] - {len(consensus.models)} models, "
        f"up to {consensus.max_rounds} rounds [{consensus.consensus_method}]"
    )
    console.print(f"Models: {', '.join(consensus.models)}")
    console.print(f"Question: [italic]{question_text[:80]}{'...' if len(question_text) > 80 else ''}[/italic]\n")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:

            def on_round_complete(rnd: Round) -> None:
                progress.print(f"[green]OK[/green] Round {rnd.number} complete ({len(rnd.responses)} responses)")

            progress.add_task("Running debate rounds...", total=None)
            result = await engine.run(question_text, on_round_complete=on_round_complete)
    finally:
        await engine.close()

    for rnd in result.enhanced_history:
        print_round_summary(rnd)

    print_result(result)

    saved_path = save_to_file(result, question_text, output_dir)
    console.print(f"\n[dim]Saved to: {saved_path}[/dim]")
    if json_path is not None:
        save_json(result, json_path)
        console.print(f"[dim]JSON: {json_path}[/dim]")
    return saved_path


async def _clear_cache(consensus: ConsensusConfig) -> None:
    engine = ConsensusEngine(consensus, [])
    try:
        await engine.clear_cache()
    finally:
        await engine.close()


@click.command()
@click.argument("question", required=False)
@click.option("--file", "question_file", type=click.Path(exists=True), help="Read question from a text/markdown file")
@click.option("--config", "config_path", type=click.Path(exists=True), default=None,
              help="Settings YAML (default: config/settings.yaml)")
@click.option("--models", default=None, help="Comma-separated model list, overrides settings")
@click.option("--rounds", default=None, type=int, help="Maximum number of debate rounds")
@click.option("--min-rounds", default=None, type=int, help="Rounds to run before consensus may be accepted")
@click.option("--method", type=click.Choice(CONSENSUS_METHODS), default=None, help="Voting rule")
@click.option("--cache/--no-cache", "cache", default=None, help="Enable or disable response caching")
@click.option("--cache-adapter", type=click.Choice(CACHE_ADAPTERS), default=None, help="Cache backend")
@click.option("--bypass-cache", is_flag=True, help="Neither read nor write the cache")
@click.option("--bust-cache", is_flag=True, help="Skip cache reads but overwrite entries")
@click.option("--clear-cache", is_flag=True, help="Empty the configured cache before running")
@click.option("--anonymize", is_flag=True, help="Label previous responses as 'Model N' in debate prompts")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--json", "json_path", type=click.Path(), default=None, help="Also write the result as JSON")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def main(
    question: str | None,
    question_file: str | None,
    config_path: str | None,
    models: str | None,
    rounds: int | None,
    min_rounds: int | None,
    method: str | None,
    cache: bool | None,
    cache_adapter: str | None,
    bypass_cache: bool,
    bust_cache: bool,
    clear_cache: bool,
    anonymize: bool,
    output_path: str | None,
    json_path: str | None,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """Multi-agent consensus -- debate a question across several LLMs.

    \b
    Examples:
      consensus "What is 4+4?" --models gpt-4o,claude-sonnet-4-20250514
      consensus "Is free will an illusion?" --rounds 4 --method supermajority
      consensus --file question.md --cache --cache-adapter file
      consensus --clear-cache --cache-adapter file
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        app_config: AppConfig = load_config(Path(config_path)) if config_path else load_config()
        consensus = _apply_overrides(
            app_config.consensus, models, rounds, min_rounds, method,
            cache, cache_adapter, bypass_cache, bust_cache, anonymize,
        )
        validate_consensus_config(consensus)
    except (FileNotFoundError, ConsensusError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if clear_cache:
        try:
            asyncio.run(_clear_cache(replace(consensus, cache=replace(consensus.cache, enabled=True))))
        except ConsensusError as exc:
            console.print(f"[bold red]Config error:[/bold red] {exc}")
            sys.exit(1)
        console.print("[green]Cache cleared.[/green]")

    if question_file:
        question_text = Path(question_file).read_text(encoding="utf-8").strip()
    elif question:
        question_text = question
    elif clear_cache:
        return
    else:
        console.print("[bold red]Error:[/bold red] Provide a QUESTION argument or --file.")
        sys.exit(1)

    providers = list(build_providers(app_config).values())
    if not providers:
        console.print("[bold red]Error:[/bold red] No providers available. Check API keys in .env.")
        sys.exit(1)

    if not skip_health_check:
        consensus = replace(consensus, models=_check_and_filter_models(providers, consensus.models))

    output_dir = Path(output_path) if output_path else app_config.output_dir
    try:
        asyncio.run(
            _run_single(
                question_text=question_text,
                consensus=consensus,
                providers=providers,
                output_dir=output_dir,
                json_path=Path(json_path) if json_path else None,
            )
        )
    except ConsensusError as exc:
        console.print(f"[bold red]Debate error:[/bold red] {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
