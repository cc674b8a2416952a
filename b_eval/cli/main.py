"""CLI entrypoint for b-eval — typer app for managing and running evaluations."""

import asyncio
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.table import Table

from b_eval.config.domain.config import HarnessConfig
from b_eval.config.infrastructure.observer import StructlogConfigObserver
from b_eval.config.infrastructure.yaml_loader import YamlConfigLoader
from b_eval.core.errors import BEvalError
from b_eval.evaluation.application.comparison import ComparisonOrchestrator
from b_eval.evaluation.application.orchestrator import EvaluationOrchestrator
from b_eval.evaluation.application.service import EvaluationService
from b_eval.evaluation.domain.comparison import ComparisonResults
from b_eval.evaluation.domain.evaluation import (
    STAGE_ORDER,
    EvaluationResults,
    EvaluationStatusView,
    PromptConfig,
)
from b_eval.evaluation.domain.observer import EvaluationObserver
from b_eval.evaluation.infrastructure.composite_observer import CompositeEvaluationObserver
from b_eval.evaluation.infrastructure.json_store import JsonFileStore
from b_eval.evaluation.infrastructure.observer import StructlogEvaluationObserver
from b_eval.evaluation.infrastructure.progress_observer import ProgressEvaluationObserver
from b_eval.oracle.infrastructure.observer import StructlogOracleObserver
from b_eval.oracle.infrastructure.registry import (
    create_interactive_oracle,
    create_oneshot_oracle,
)

app = typer.Typer(add_completion=False)

_console = Console()


@dataclass(frozen=True)
class _CliContext:
    config: HarnessConfig
    log_format: str


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except KeyboardInterrupt:
        typer.echo("Evaluation interrupted.", err=True)
        raise typer.Exit(code=1) from None
    except BEvalError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _build_service(ctx: typer.Context) -> EvaluationService:
    """Wire the store, oracles and observers from the loaded configuration."""
    state: _CliContext = ctx.obj
    config = state.config

    store = JsonFileStore(path=config.store.path)
    oracle_observer = StructlogOracleObserver()
    observers: list[EvaluationObserver] = [StructlogEvaluationObserver()]
    if state.log_format != "json":
        observers.append(ProgressEvaluationObserver())
    observer = CompositeEvaluationObserver(observers=observers)

    orchestrator = EvaluationOrchestrator(
        store=store,
        behaviors=store,
        oracle=create_oneshot_oracle(config=config.oracle, observer=oracle_observer),
        interactive=create_interactive_oracle(
            config=config.agent, observer=oracle_observer
        ),
        rollout_settings=config.rollout,
        timeouts=config.timeouts,
        observer=observer,
    )
    return EvaluationService(
        evaluations=store,
        comparisons=store,
        behaviors=store,
        orchestrator=orchestrator,
        comparison_orchestrator=ComparisonOrchestrator(
            store=store, evaluations=orchestrator, observer=observer
        ),
    )


def _format_score(score: float | None) -> str:
    return "n/a" if score is None else f"{score:.2f}"


def _print_results(results: EvaluationResults) -> None:
    typer.echo(f"Overall score: {_format_score(results.overall_score)}")
    distribution = results.score_distribution
    if distribution is not None:
        typer.echo(
            f"Distribution:  min {distribution.min:.2f}  max {distribution.max:.2f}"
            f"  mean {distribution.mean:.2f}  std {distribution.std:.2f}"
        )
    if results.key_quotes:
        typer.echo("Key quotes:")
        for evidence in results.key_quotes:
            typer.echo(f'  "{evidence.quote}"')
    if results.failure_patterns:
        typer.echo("Failure patterns:")
        for pattern in results.failure_patterns:
            typer.echo(f"  - {pattern}")


def _print_status(view: EvaluationStatusView) -> None:
    typer.echo(f"Evaluation {view.id}: {view.status}")
    for stage in STAGE_ORDER:
        record = getattr(view.stages, stage)
        line = f"  {stage:<14} {record.status}"
        total = getattr(record, "total", 0)
        if total:
            line += f" ({record.completed}/{total})"
        if record.error:
            line += f"  {record.error}"
        typer.echo(line)
    if view.error:
        typer.echo(f"Error: {view.error}")
    if view.results is not None:
        _print_results(view.results)


def _print_comparison(name: str, results: ComparisonResults) -> None:
    winner = "tie" if results.winner == "tie" else f"variant {results.winner}"
    typer.echo(f"Comparison {name}: {winner}")
    typer.echo(
        f"  A {results.score_a:.2f}  B {results.score_b:.2f}"
        f"  difference {results.difference:.2f}"
    )


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to harness config YAML (defaults apply when omitted)",
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
) -> None:
    """Evaluate behaviors of an interactive coding agent."""
    _configure_structlog(log_format=log_format)
    loader = YamlConfigLoader(observer=StructlogConfigObserver())
    with _reporting_errors():
        config = loader.load(path=config_path)
    ctx.obj = _CliContext(config=config, log_format=log_format)


@app.command()
def behaviors(ctx: typer.Context) -> None:
    """List built-in and custom behaviors."""
    with _reporting_errors():
        service = _build_service(ctx)
        table = Table("Key", "Description")
        for behavior in service.list_behaviors():
            table.add_row(behavior.key, behavior.description)
        _console.print(table)


@app.command("add-behavior")
def add_behavior(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Unique behavior key"),
    description: str = typer.Argument(..., help="What the behavior looks like"),
) -> None:
    """Register a custom behavior."""
    with _reporting_errors():
        behavior = _build_service(ctx).add_behavior(key, description)
        typer.echo(f"Added behavior {behavior.key}")


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Evaluation name"),
    behavior_key: str = typer.Argument(..., help="Behavior to measure"),
    tier: str | None = typer.Option(None, "--tier", help="quick, standard or comprehensive"),
    num_scenarios: int | None = typer.Option(None, "--scenarios"),
    num_judges: int | None = typer.Option(None, "--judges"),
    max_turns: int | None = typer.Option(None, "--max-turns"),
    diversity: float | None = typer.Option(None, "--diversity"),
    system_prompt: str | None = typer.Option(
        None, "--system-prompt", help="System prompt for the agent under test"
    ),
    variant: str | None = typer.Option(None, "--variant"),
) -> None:
    """Create a pending evaluation and print its id."""
    with _reporting_errors():
        evaluation = _build_service(ctx).create_evaluation(
            name=name,
            behavior_key=behavior_key,
            prompt_config=PromptConfig(system_prompt=system_prompt, variant=variant),
            tier=tier,
            num_scenarios=num_scenarios,
            num_judges=num_judges,
            max_turns=max_turns,
            diversity=diversity,
        )
        typer.echo(evaluation.id)


@app.command()
def run(
    ctx: typer.Context,
    evaluation_id: str = typer.Argument(..., help="Evaluation id"),
) -> None:
    """Run a pending evaluation to completion."""
    with _reporting_errors():
        results = asyncio.run(_build_service(ctx).run_evaluation(evaluation_id))
        _print_results(results)


@app.command()
def status(
    ctx: typer.Context,
    evaluation_id: str = typer.Argument(..., help="Evaluation id"),
) -> None:
    """Show stage progress and results for an evaluation."""
    with _reporting_errors():
        _print_status(_build_service(ctx).get_status(evaluation_id))


@app.command("list")
def list_records(ctx: typer.Context) -> None:
    """List evaluations and comparisons."""
    with _reporting_errors():
        service = _build_service(ctx)
        evaluations = Table("Id", "Name", "Behavior", "Tier", "Status", "Score")
        for evaluation in service.list_evaluations():
            score = evaluation.results.overall_score if evaluation.results else None
            evaluations.add_row(
                evaluation.id,
                evaluation.name,
                evaluation.behavior_key,
                evaluation.config.tier,
                evaluation.status,
                _format_score(score),
            )
        _console.print(evaluations)

        comparisons = service.list_comparisons()
        if comparisons:
            table = Table("Id", "Name", "A", "B", "Status", "Winner")
            for comparison in comparisons:
                table.add_row(
                    comparison.id,
                    comparison.name,
                    comparison.evaluation_a,
                    comparison.evaluation_b,
                    comparison.status,
                    comparison.results.winner if comparison.results else "",
                )
            _console.print(table)


@app.command()
def delete(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Evaluation id, or comparison id with --comparison"),
    comparison: bool = typer.Option(False, "--comparison", help="Delete a comparison"),
) -> None:
    """Delete an evaluation or a comparison record."""
    with _reporting_errors():
        service = _build_service(ctx)
        if comparison:
            service.delete_comparison(record_id)
        else:
            service.delete_evaluation(record_id)
        typer.echo(f"Deleted {record_id}")


@app.command()
def compare(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Comparison name"),
    behavior_key: str = typer.Argument(..., help="Behavior to measure"),
    system_prompt_a: str | None = typer.Option(None, "--system-prompt-a"),
    system_prompt_b: str | None = typer.Option(None, "--system-prompt-b"),
    variant_a: str | None = typer.Option("A", "--variant-a"),
    variant_b: str | None = typer.Option("B", "--variant-b"),
    tier: str | None = typer.Option(None, "--tier", help="quick, standard or comprehensive"),
    num_scenarios: int | None = typer.Option(None, "--scenarios"),
    num_judges: int | None = typer.Option(None, "--judges"),
    max_turns: int | None = typer.Option(None, "--max-turns"),
    diversity: float | None = typer.Option(None, "--diversity"),
) -> None:
    """Create and run an A/B comparison of two prompt configurations."""
    with _reporting_errors():
        service = _build_service(ctx)
        record = service.create_comparison(
            name=name,
            behavior_key=behavior_key,
            prompt_config_a=PromptConfig(system_prompt=system_prompt_a, variant=variant_a),
            prompt_config_b=PromptConfig(system_prompt=system_prompt_b, variant=variant_b),
            tier=tier,
            num_scenarios=num_scenarios,
            num_judges=num_judges,
            max_turns=max_turns,
            diversity=diversity,
        )
        typer.echo(f"Comparison {record.id}: A={record.evaluation_a} B={record.evaluation_b}")
        results = asyncio.run(service.run_comparison(record.id))
        _print_comparison(name, results)


if __name__ == "__main__":
    app()
