"\"\"\"Typer CLI entrypoint for the compatibility scoring pipeline.\"\"\""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .core.evaluators import KNOWN_FIELDS
from .errors import InvalidCriteriaSet
from .logging import configure_logging
from .pipeline import AuditLogger, CriteriaLoader
from .registry import CriterionRegistry
from .schemas import describe, load_config, referenced_fields

app = typer.Typer(help="Candidate/job compatibility scoring CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter("Config file must be a YAML object", param_name="config")
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc


def _report_invalid(exc: InvalidCriteriaSet) -> typer.Exit:
    typer.echo(f"Invalid criteria set: {exc}", err=True)
    for problem in exc.problems:
        typer.echo(f"  - {problem}", err=True)
    return typer.Exit(code=1)


@app.command()
def run(
    candidates: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidates JSONL path."),
    criteria: Path = typer.Option(
        ..., exists=True, readable=True, dir_okay=False, help="Job criteria set (JSON or YAML)."
    ),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    json_logs: bool = typer.Option(True, "--json-logs/--plain-logs", help="Render logs as JSON lines."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    workers: Optional[int] = typer.Option(None, min=1, help="Maximum concurrent scoring workers."),
) -> None:
    """Score every candidate against one job's criteria set."""
    settings = _load_settings(config)
    if workers is not None:
        settings.setdefault("batch", {})["max_workers"] = workers

    configure_logging(log_level, json_output=json_logs)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        results = pipeline.run(
            candidates_path=candidates,
            criteria_path=criteria,
            output_path=output,
            audit_logger=audit_logger,
        )
    except InvalidCriteriaSet as exc:
        raise _report_invalid(exc) from exc
    typer.echo(f"Processed {len(results)} candidates. Results saved to {output}.")


@app.command()
def validate(
    criteria: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Criteria file to check."),
) -> None:
    """Check a criteria set without scoring anything."""
    try:
        job = CriteriaLoader(CriterionRegistry.builtin()).load(criteria)
    except InvalidCriteriaSet as exc:
        raise _report_invalid(exc) from exc
    for criterion in job.criteria:
        typer.echo(
            f"  [{criterion.kind.value}] {criterion.id} ({criterion.category.value}, weight {criterion.weight:g}): "
            f"{describe(criterion.condition)}"
        )
        for field in sorted(referenced_fields(criterion.condition) - KNOWN_FIELDS):
            typer.echo(f"warning: {criterion.id} reads unknown field '{field}' and will score as missing data")
    typer.echo(f"{job.job_id} v{job.version}: {len(job.criteria)} criteria, weights OK.")


@app.command()
def templates() -> None:
    """List the built-in criteria templates."""
    for template in CriterionRegistry.builtin().templates():
        weights = ", ".join(f"{name}={weight:g}" for name, weight in template.category_weights.items())
        typer.echo(f"{template.id}\t{template.name}\t{len(template.criteria)} criteria\t{weights}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
