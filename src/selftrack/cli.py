"""CLI for running selftrack analyses over an exported log file."""

from __future__ import annotations

import json
import logging
from datetime import datetime

import click

from selftrack.config import load_settings
from selftrack.errors import SelftrackError


def _load(file: str):
    from selftrack.loader import load_export

    try:
        return load_export(file)
    except SelftrackError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False),
              help="Read settings from this .env file.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, env_file: str | None) -> None:
    """selftrack: correlations and experiment quotas for health logs."""
    try:
        settings = load_settings(env_file)
    except SelftrackError as exc:
        raise click.ClickException(str(exc)) from exc
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ctx.obj = settings


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--top", "-n", default=10, help="Show only the N strongest pairs.")
@click.option("--output", "-o", default=None, help="Write all results as JSON.")
@click.pass_obj
def correlate(settings, file: str, top: int, output: str | None) -> None:
    """Rank every variable pair by correlation strength."""
    from selftrack.correlation.alignment import numeric_variables
    from selftrack.correlation.engine import compute_all_correlations

    export = _load(file)
    variables = numeric_variables(export.logs)
    results = compute_all_correlations(export.logs, min_points=settings.min_points)

    click.echo(f"{len(export.logs)} logs, {len(variables)} numeric variables")
    if len(results) == 0:
        click.echo("No correlations found. Log more overlapping days to see results.")
    for res in results[:top]:
        click.echo(
            f"  {res.correlation_coefficient:+.3f}  {res.strength_label.value:<11}  "
            f"{res.variable1} ~ {res.variable2}  (n={res.point_count})"
        )

    if output:
        with open(output, "w") as f:
            json.dump([r.to_dict() for r in results], f, indent=2)
        click.echo(f"\nResults written to {output}")


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.argument("variable1")
@click.argument("variable2")
@click.option("--lags", default=0, help="Also correlate with VARIABLE2 shifted up to N rows later.")
@click.pass_obj
def detail(settings, file: str, variable1: str, variable2: str, lags: int) -> None:
    """Show the full correlation detail for one pair."""
    from selftrack.correlation.engine import compute_correlation_detail, interpret_correlation
    from selftrack.correlation.stats import lag_correlations

    export = _load(file)
    res = compute_correlation_detail(
        export.logs, variable1, variable2, min_points=settings.min_points,
    )
    if res is None:
        click.echo(f"Not enough matching days for {variable1} and {variable2}.")
        return

    click.echo(interpret_correlation(res))
    if res.p_value is not None:
        click.echo(f"  p-value: {res.p_value:.4f}")
    if res.confidence_95 is not None:
        lo, hi = res.confidence_95
        click.echo(f"  95% CI:  [{lo:.3f}, {hi:.3f}]")
    line = res.regression_line
    if line.is_degenerate:
        click.echo("  Trend:   none (all values of the first variable are equal)")
    else:
        click.echo(f"  Trend:   y = {line.slope:.4f}x + {line.intercept:.4f}")

    if lags > 0:
        x = [p.value_a for p in res.matched]
        y = [p.value_b for p in res.matched]
        for lag, r in lag_correlations(x, y, max_lag=lags):
            click.echo(f"  lag {lag}: r = {r:+.3f}")


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--now", "now_str", default=None, help="Evaluate at this ISO time (default: now).")
@click.pass_obj
def experiments(settings, file: str, now_str: str | None) -> None:
    """Show which active experiments still need logs right now."""
    from selftrack.experiments.models import partition_experiments
    from selftrack.experiments.quota import (
        evaluate_experiments,
        experiment_progress,
        select_blocking_experiment,
    )
    from selftrack.records import calendar_day

    try:
        now = datetime.fromisoformat(now_str) if now_str else datetime.now()
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--now") from exc

    export = _load(file)
    today = now.date()
    active, completed = partition_experiments(export.experiments, today)
    running = [exp for exp in active if exp.is_active_on(today)]
    todays = [log for log in export.logs if calendar_day(log.date) == today]
    states = evaluate_experiments(running, todays, now)

    click.echo(f"{len(running)} running, {len(active) - len(running)} upcoming, "
               f"{len(completed)} completed")
    for exp, state in zip(running, states):
        progress = experiment_progress(exp, export.logs, today)
        flag = "LOG NOW" if state.must_log_now else ("pending" if state.needs_more_logs else "done")
        click.echo(
            f"  [{flag:<7}] {exp.variable}: {state.logs_logged_today}/{exp.frequency_per_day} today, "
            f"{progress.completion_rate}% complete, streak {progress.streak}d"
        )

    blocking = select_blocking_experiment(states)
    if blocking is not None:
        click.echo(f"\nBlocking experiment: {blocking.experiment_id}")


if __name__ == "__main__":
    main()
