"""
DiabetesControl — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (DB init, submission, history report, export).
  5. Report result to stdout.

Install and run::

    pip install -e .
    diabetes-control --help
    diabetes-control init-db
    diabetes-control validate-config
    diabetes-control submit answers.json --save-report
    diabetes-control show-history
    diabetes-control show-trends
    diabetes-control export-history --format csv
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="diabetes-control",
    help="DiabetesControl — type 1 diabetes self-management questionnaire CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from diabetes_control.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from diabetes_control.utils.logging import configure_logging
    configure_logging(config.logging)


def _build_store(config, db_path: Optional[str] = None):
    """Return a ``SQLiteHistoryStore`` for the configured (or overridden) path."""
    from diabetes_control.db.history_store import SQLiteHistoryStore

    return SQLiteHistoryStore(
        db_path=db_path or config.history.db_path,
        wal_mode=config.history.wal_mode,
        busy_timeout_ms=config.history.busy_timeout_ms,
    )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite history database.

    Safe to run multiple times; all DDL uses IF NOT EXISTS.
    """
    from diabetes_control.db.schema import ALL_TABLE_NAMES

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    store = _build_store(config, db_path)
    typer.echo(f"Initializing database at: {store.db_path}")
    store.initialize()

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    import os

    config = _load_config_or_exit(config_path)
    key_present = bool(os.environ.get(config.advisory.api_key_env))

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  History DB path:  {config.history.db_path}")
    typer.echo(f"  Advisory enabled: {config.advisory.enabled}")
    typer.echo(f"  Advisory model:   {config.advisory.model}")
    typer.echo(
        f"  Advisory key:     {config.advisory.api_key_env} "
        f"({'set' if key_present else 'not set'})"
    )
    typer.echo(f"  Report dir:       {config.report.output_dir}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("submit")
def submit(
    answers_file: str = typer.Argument(
        ...,
        help="JSON file with one questionnaire response (camelCase form keys).",
    ),
    no_advisory: bool = typer.Option(
        False,
        "--no-advisory",
        help="Skip the remote advisory call and score locally.",
    ),
    save_report: bool = typer.Option(
        False,
        "--save-report",
        help="Write the recommendation document to the report directory.",
    ),
    report_dir: Optional[str] = typer.Option(
        None,
        "--report-dir",
        help="Override report directory from config (implies --save-report).",
    ),
    share: bool = typer.Option(
        False,
        "--share",
        help="Also print the plain-text share message.",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Score a questionnaire response, record it, and show trends.

    When advisory is enabled and the API key is available the response is
    analysed remotely; any advisory failure falls back to local scoring.
    """
    from pydantic import ValidationError

    from diabetes_control.advisory.client import AdvisoryClient
    from diabetes_control.models.answers import AnswerSet
    from diabetes_control.pipeline.submission import SubmissionService
    from diabetes_control.reporting.export import export_recommendation_report
    from diabetes_control.reporting.formatters import (
        format_recommendation_report,
        format_share_text,
        format_trend_report,
    )
    from diabetes_control.utils.time_utils import utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    answers_path = Path(answers_file)
    if not answers_path.exists():
        typer.echo(f"[ERROR] Answers file not found: {answers_path}", err=True)
        raise typer.Exit(code=1)

    try:
        with open(answers_path, encoding="utf-8") as f:
            raw_answers = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)

    if not isinstance(raw_answers, dict):
        typer.echo("[ERROR] Answers file must contain a JSON object.", err=True)
        raise typer.Exit(code=1)

    try:
        answers = AnswerSet.model_validate(raw_answers)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid questionnaire answers:\n{exc}", err=True)
        raise typer.Exit(code=1)

    advisory = None
    if config.advisory.enabled and not no_advisory:
        advisory = AdvisoryClient.from_config(config.advisory)

    service = SubmissionService(_build_store(config, db_path), advisory=advisory)
    outcome = service.submit(answers)

    generated_at = outcome.history[-1].recorded_at if outcome.history else utcnow()

    typer.echo(format_recommendation_report(answers, outcome.result, generated_at))
    typer.echo(format_trend_report(outcome.trends))

    if share:
        typer.echo("")
        typer.echo("=== Compartir ===")
        typer.echo(format_share_text(outcome.result))

    if save_report or report_dir:
        out_dir = Path(report_dir or config.report.output_dir)
        path = export_recommendation_report(answers, outcome.result, out_dir, generated_at)
        typer.echo("")
        typer.echo(f"  Report: {path}")

    typer.echo("")
    if not outcome.stored:
        typer.echo("[WARN] Submission could not be saved to history.", err=True)
    typer.echo(
        f"[OK] Submission scored ({outcome.result.source}): "
        f"{outcome.result.score}/{outcome.result.max_score}."
    )


@app.command("show-history")
def show_history(
    last: Optional[int] = typer.Option(
        None,
        "--last",
        "-n",
        help="Only show the N most recent submissions.",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print the stored submission history, oldest first."""
    from diabetes_control.pipeline.submission import SubmissionService
    from diabetes_control.reporting.formatters import format_history_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if last is not None and last < 1:
        typer.echo("[ERROR] --last must be at least 1.", err=True)
        raise typer.Exit(code=1)

    entries = SubmissionService(_build_store(config, db_path)).load_history()
    if last is not None:
        entries = entries[-last:]
    typer.echo(format_history_table(entries))


@app.command("show-trends")
def show_trends(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print the trend report over the stored history."""
    from diabetes_control.pipeline.submission import SubmissionService
    from diabetes_control.reporting.formatters import format_trend_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    trends = SubmissionService(_build_store(config, db_path)).current_trends()
    typer.echo(format_trend_report(trends))


@app.command("export-history")
def export_history(
    fmt: str = typer.Option(
        "csv",
        "--format",
        "-f",
        help="Export format: csv or json.",
    ),
    out: Optional[str] = typer.Option(
        None,
        "--out",
        "-o",
        help="Destination file (default: <report dir>/diabetes_history.<format>).",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Export the stored history as a flat CSV or a JSON document."""
    from diabetes_control.pipeline.submission import SubmissionService
    from diabetes_control.reporting.export import (
        HISTORY_EXPORT_COLUMNS,
        export_to_csv,
        export_to_json,
        flatten_history_for_export,
        history_to_json_records,
    )

    fmt = fmt.lower()
    if fmt not in ("csv", "json"):
        typer.echo(f"[ERROR] Unsupported format '{fmt}'. Use csv or json.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    entries = SubmissionService(_build_store(config, db_path)).load_history()
    out_path = Path(out) if out else Path(config.report.output_dir) / f"diabetes_history.{fmt}"

    if fmt == "csv":
        export_to_csv(
            flatten_history_for_export(entries), out_path, fieldnames=HISTORY_EXPORT_COLUMNS
        )
    else:
        export_to_json(history_to_json_records(entries), out_path)

    typer.echo(f"  Exported {len(entries)} submission(s) to {out_path}")
    typer.echo("[OK] History exported.")


if __name__ == "__main__":
    app()
