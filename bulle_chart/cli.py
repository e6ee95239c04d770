"""
Bulle Chart CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Open the dataset (runs the legacy migration / version stamp).
  4. Call the ``TaxonomyService`` or a read-side calculator.
  5. Report result to stdout.

Any ``BulleChartError`` is printed as ``[ERROR] ...`` and exits with code 1.

Install and run::

    pip install -e .
    bulle-chart --help
    bulle-chart init-db
    bulle-chart add-profession "Développeur"
    bulle-chart add-category "Technique"
    bulle-chart add-criterion 1 "Défis techniques" --weight 20 --type advantage
    bulle-chart compare
    bulle-chart recommend --priority 1=5
"""

from __future__ import annotations

import json
import random
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

app = typer.Typer(
    name="bulle-chart",
    help="Bulle Chart: compare professions by weighted interests and motivations.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from bulle_chart.config import load_config

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
    from bulle_chart.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


@contextmanager
def _open_store(config, db_path: Optional[str] = None) -> Iterator:
    """Yield a ``TaxonomyStore`` over the configured backend.

    The dataset is migrated / version-stamped on open.
    """
    from bulle_chart.db.connection import open_database
    from bulle_chart.storage.backends import MemoryBackend, SqliteBackend
    from bulle_chart.storage.collections import CollectionStore
    from bulle_chart.storage.legacy import initialize_dataset
    from bulle_chart.storage.taxonomy_store import TaxonomyStore

    def _build(backend):
        collections = CollectionStore(backend)
        report, status = initialize_dataset(
            collections, config.migration.default_profession_name
        )
        if report.migrated:
            typer.echo(
                f"  Migrated legacy data: {report.criteria_extracted} criteria, "
                f"{report.weights_created} weights."
            )
        if not status.is_current:
            typer.echo(
                f"  [WARN] Data version {status.stored_version} differs from "
                f"{status.current_version}; consider 'bulle-chart reset'.",
                err=True,
            )
        return TaxonomyStore(collections)

    if config.storage.backend == "memory":
        yield _build(MemoryBackend())
        return

    with open_database(config.storage, db_path) as conn:
        yield _build(SqliteBackend(conn))


def _make_service(store, config, profession_id: Optional[int] = None):
    from bulle_chart.services.taxonomy_service import TaxonomyService

    service = TaxonomyService(store, config.limits)
    if profession_id is not None:
        service.set_active_profession(profession_id)
    return service


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Translate core errors into ``[ERROR]`` output and exit code 1."""
    from bulle_chart.errors import BulleChartError, ProfessionDeletionError, ValidationFailure

    try:
        yield
    except ValidationFailure as exc:
        typer.echo(f"[ERROR] {exc.message}", err=True)
        raise typer.Exit(code=1)
    except ProfessionDeletionError as exc:
        typer.echo(f"[ERROR] Cannot delete profession {exc.profession_id}: {exc.reason.value}", err=True)
        raise typer.Exit(code=1)
    except BulleChartError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _parse_priorities(values: Optional[list[str]]) -> dict[int, int]:
    priorities: dict[int, int] = {}
    for raw in values or []:
        try:
            cat, prio = raw.split("=", 1)
            priorities[int(cat)] = int(prio)
        except ValueError:
            typer.echo(f"[ERROR] Invalid priority '{raw}' (expected CATEGORY_ID=1..5).", err=True)
            raise typer.Exit(code=1)
    return priorities


_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")
_DB_OPTION = typer.Option(None, "--db-path", help="Override DB path from config.")


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Initialize the SQLite database and stamp the data version.

    Safe to run multiple times; all DDL uses IF NOT EXISTS.
    """
    from bulle_chart.db.schema import ALL_TABLE_NAMES

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.storage.db_path
    typer.echo(f"Initializing database at: {target_path}")
    with _open_store(config, db_path) as store:
        version = store.collections.get_data_version()

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo(f"  Data version: {version}")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print full config as JSON."),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Storage backend:  {config.storage.backend}")
    typer.echo(f"  Database path:    {config.storage.db_path}")
    typer.echo(f"  Max professions:  {config.limits.max_professions}")
    typer.echo(f"  Max categories:   {config.limits.max_categories}")
    typer.echo(f"  Weight range:     {config.limits.min_weight}-{config.limits.max_weight}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))


@app.command("check-version")
def check_version(
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Report the stored data version. Exits 1 when it is not current."""
    from bulle_chart.storage.legacy import check_data_version

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store:
        status = check_data_version(store.collections)

    typer.echo(f"  Stored version:  {status.stored_version}")
    typer.echo(f"  Current version: {status.current_version}")
    if not status.is_current:
        typer.echo("[STALE] Data version mismatch; run 'bulle-chart reset'.")
        raise typer.Exit(code=1)
    typer.echo("[OK] Data is current.")


@app.command("reset")
def reset(
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt."),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Erase every profession, category, criterion and weight."""
    from bulle_chart.storage.legacy import DATA_VERSION

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if not yes:
        typer.confirm("This deletes all data. Continue?", abort=True)

    with _open_store(config, db_path) as store:
        store.reset(DATA_VERSION)
    typer.echo("[OK] Dataset reset.")


# ── Professions ───────────────────────────────────────────────────────────────

@app.command("add-profession")
def add_profession(
    name: str = typer.Argument(..., help="Profession name."),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create a profession, copying the latest profession's weights."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        profession = _make_service(store, config).add_profession({"name": name})
    typer.echo(f"[OK] Profession {profession.id} '{profession.name}' created.")


@app.command("list-professions")
def list_professions(
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List professions (the default active one is marked with *)."""
    from bulle_chart.reporting.formatters import format_profession_list

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store:
        service = _make_service(store, config)
        typer.echo(format_profession_list(store.load_professions(), service.active_profession_id))


@app.command("rename-profession")
def rename_profession(
    profession_id: int = typer.Argument(...),
    name: str = typer.Argument(...),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rename a profession."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        profession = _make_service(store, config).rename_profession(profession_id, {"name": name})
    typer.echo(f"[OK] Profession {profession.id} renamed to '{profession.name}'.")


@app.command("delete-profession")
def delete_profession(
    profession_id: int = typer.Argument(...),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Delete a profession and its weights."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        deleted = _make_service(store, config).delete_profession(profession_id)
    if not deleted:
        typer.echo(f"[ERROR] Profession {profession_id} not found.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[OK] Profession {profession_id} deleted.")


# ── Taxonomy ──────────────────────────────────────────────────────────────────

@app.command("add-category")
def add_category(
    name: str = typer.Argument(..., help="Professional interest name."),
    color: Optional[str] = typer.Option(None, "--color", help="Hex colour (default: first free)."),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create a professional interest shared by every profession."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        category = _make_service(store, config).add_category({"name": name, "color": color})
    typer.echo(f"[OK] Category {category.id} '{category.name}' ({category.color}) created.")


@app.command("delete-category")
def delete_category(
    category_id: int = typer.Argument(...),
    with_criteria: bool = typer.Option(
        False, "--with-criteria", help="Also delete the category's key motivations."
    ),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Delete a professional interest."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        service = _make_service(store, config)
        if with_criteria:
            deleted = service.delete_category_with_criteria(category_id)
        else:
            deleted = service.delete_category(category_id)
    if not deleted:
        typer.echo(f"[ERROR] Category {category_id} not found.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[OK] Category {category_id} deleted.")


@app.command("add-criterion")
def add_criterion(
    category_id: int = typer.Argument(...),
    name: str = typer.Argument(..., help="Key motivation name."),
    weight: Optional[float] = typer.Option(None, "--weight", help="Importance 1-30."),
    criterion_type: Optional[str] = typer.Option(None, "--type", help="advantage ... disadvantage."),
    profession_id: Optional[int] = typer.Option(
        None, "--profession", help="Profession receiving the weight (default: first)."
    ),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Add a key motivation to a category, weighted for one profession."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        service = _make_service(store, config, profession_id)
        criterion = service.add_criterion(
            category_id, {"name": name, "weight": weight, "type": criterion_type}
        )
    typer.echo(f"[OK] Criterion {criterion.id} '{criterion.name}' added to category {category_id}.")


@app.command("set-weight")
def set_weight(
    profession_id: int = typer.Argument(...),
    criterion_id: int = typer.Argument(...),
    weight: float = typer.Argument(..., help="Importance 1-30."),
    criterion_type: Optional[str] = typer.Option(None, "--type"),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Set one profession's weight (and optionally type) for a criterion."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        row = _make_service(store, config).set_criterion_weight(
            profession_id, criterion_id, weight, criterion_type
        )
    typer.echo(
        f"[OK] Profession {row.profession_id} / criterion {row.criterion_id}: "
        f"weight {row.weight}, type {row.type.value}."
    )


@app.command("apply-template")
def apply_template(
    profession_id: Optional[int] = typer.Option(None, "--profession"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a reproducible template."),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Fill the taxonomy with random suggested interests and motivations."""
    from bulle_chart.templates.profession_template import generate_profession_template

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    template = generate_profession_template(
        rng=random.Random(seed), category_count=config.limits.max_categories
    )
    with _open_store(config, db_path) as store, _handle_errors():
        created = _make_service(store, config, profession_id).apply_template(template)
    typer.echo(f"[OK] Template applied: {len(created)} categories created.")


@app.command("suggest")
def suggest(
    kind: str = typer.Argument(..., help="'categories' or 'criteria'."),
    search: str = typer.Option("", "--search", help="Filter (case and accent insensitive)."),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List suggested names not yet used."""
    from bulle_chart.templates.suggestions import (
        CATEGORY_SUGGESTIONS,
        CRITERION_SUGGESTIONS,
        filter_suggestions,
    )

    if kind not in ("categories", "criteria"):
        typer.echo("[ERROR] kind must be 'categories' or 'criteria'.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store:
        if kind == "categories":
            pool, used = CATEGORY_SUGGESTIONS, [c.name for c in store.load_categories()]
        else:
            pool, used = CRITERION_SUGGESTIONS, [c.name for c in store.load_criteria()]
    for name in filter_suggestions(search, pool, used):
        typer.echo(f"  {name}")


# ── Read-side ─────────────────────────────────────────────────────────────────

@app.command("show")
def show(
    profession_id: Optional[int] = typer.Option(None, "--profession"),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print one profession's interests, motivations and weights."""
    from bulle_chart.reporting.formatters import format_profession_view

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store, _handle_errors():
        service = _make_service(store, config, profession_id)
        if service.active_profession_id is None:
            typer.echo("  (no professions yet; run 'add-profession' first)")
            return
        profession = store.get_profession(service.active_profession_id)
        typer.echo(
            format_profession_view(
                profession, store.get_categories_for_profession(profession.id)
            )
        )


@app.command("compare")
def compare(
    profession_ids: Optional[list[int]] = typer.Option(
        None, "--profession", help="Repeatable; default: all professions."
    ),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print comparison metrics side by side."""
    from bulle_chart.comparison.metrics import calculate_professions_metrics
    from bulle_chart.reporting.formatters import format_metrics_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config, db_path) as store:
        professions = {p.id: p for p in store.load_professions()}
        ids = profession_ids or list(professions)
        metrics = calculate_professions_metrics(store, ids)
    typer.echo(format_metrics_table(metrics, professions))


@app.command("recommend")
def recommend(
    profession_ids: Optional[list[int]] = typer.Option(
        None, "--profession", help="Repeatable; default: all professions."
    ),
    priorities: Optional[list[str]] = typer.Option(
        None, "--priority", help="CATEGORY_ID=1..5, repeatable."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Recommend the best-fitting profession."""
    from dataclasses import asdict

    from bulle_chart.models.preferences import RecommendationPreferences
    from bulle_chart.recommendations.ranker import get_recommendation
    from bulle_chart.reporting.formatters import format_recommendation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    defaults = RecommendationPreferences(
        advantage_weight=config.recommendation.advantage_weight,
        disadvantage_weight=config.recommendation.disadvantage_weight,
    )
    overrides = {"priority_categories": _parse_priorities(priorities)} if priorities else None

    with _open_store(config, db_path) as store:
        professions = {p.id: p for p in store.load_professions()}
        ids = profession_ids or list(professions)
        try:
            recommendation = get_recommendation(store, ids, overrides, defaults=defaults)
        except ValueError as exc:
            typer.echo(f"[ERROR] Invalid preferences: {exc}", err=True)
            raise typer.Exit(code=1)

    if as_json:
        payload = None
        if recommendation is not None:
            payload = asdict(recommendation)
            payload["preferences"] = recommendation.preferences.model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
        return
    typer.echo(format_recommendation(recommendation, professions))


if __name__ == "__main__":
    app()
