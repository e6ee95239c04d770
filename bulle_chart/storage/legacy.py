"""
Legacy single-profession migration and the data-version check.

Before multi-profession support, a dataset held categories and criteria
only, with the weight embedded on each criterion. Older datasets also used
French field names (``nom``, ``couleur``, ``poids``, ``criteres``) and
embedded the criteria list inside each category.

``migrate_legacy_data()`` folds such a dataset into the current schema:

  1. Synthesise one default profession.
  2. Pull embedded criteria out of categories into the criteria collection.
  3. Normalise field aliases to the canonical names, once, here.
  4. Back-fill one weight row per criterion for the default profession from
     the legacy weight (15 when absent), type neutral.
  5. Move the id counters past every id seen.

The migration runs only when zero professions exist, the dataset is not
stamped with the current version, and category/criterion data exists.
Otherwise it is a no-op, so calling it on every start-up is safe.

``is_data_version_current()`` is the pure comparison the start-up flow uses
to decide whether to offer a reset; the prompt itself is not part of the core.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from bulle_chart.models.meta import DataVersionStatus, MigrationReport
from bulle_chart.models.taxonomy import (
    DEFAULT_WEIGHT,
    Category,
    Criterion,
    CriterionWeight,
    Profession,
    utc_now,
)
from bulle_chart.storage.collections import (
    CATEGORIES_KEY,
    CRITERIA_KEY,
    CollectionStore,
)
from bulle_chart.taxonomy.criterion_taxonomy import DEFAULT_CRITERION_TYPE
from bulle_chart.taxonomy.palette import COLOR_PALETTE, first_free_color

logger = logging.getLogger(__name__)

DATA_VERSION = "2.0.0"
DEFAULT_PROFESSION_NAME = "Mon métier"


def is_data_version_current(stored: Optional[str], current: str = DATA_VERSION) -> bool:
    """Return ``True`` when the stored data version equals the current one."""
    return stored == current


def check_data_version(
    collections: CollectionStore,
    current: str = DATA_VERSION,
) -> DataVersionStatus:
    """Compare the dataset's stored version marker to ``current``."""
    stored = collections.get_data_version()
    return DataVersionStatus(
        stored_version=stored,
        current_version=current,
        is_current=is_data_version_current(stored, current),
    )


def migrate_legacy_data(
    collections: CollectionStore,
    profession_name: str = DEFAULT_PROFESSION_NAME,
    now: Optional[datetime] = None,
) -> MigrationReport:
    """Fold a legacy single-profession dataset into the multi-profession schema.

    Args:
        collections: Dataset to migrate in place.
        profession_name: Name for the synthesised default profession.
        now: Timestamp for records lacking ``created_at`` (defaults to UTC now).

    Returns:
        ``MigrationReport`` describing what was done.
    """
    if collections.load_professions():
        return MigrationReport(migrated=False, reason="professions already exist")
    if is_data_version_current(collections.get_data_version()):
        return MigrationReport(migrated=False, reason="data version is current")

    raw_categories = _as_dict_list(collections.load_raw(CATEGORIES_KEY))
    raw_criteria = _as_dict_list(collections.load_raw(CRITERIA_KEY))
    if not raw_categories and not raw_criteria:
        return MigrationReport(migrated=False, reason="no legacy data")

    now = now or utc_now()

    categories: list[Category] = []
    pending: list[tuple[dict[str, Any], int]] = []
    used_colors: set[str] = set()
    extracted = 0

    for raw in raw_categories:
        category_id = _as_int(raw.get("id")) or collections.allocate_id("category")
        color = raw.get("color") or raw.get("couleur")
        if not color or color in used_colors:
            color = first_free_color(used_colors) or COLOR_PALETTE[0]
        used_colors.add(color)
        categories.append(
            Category(
                id=category_id,
                name=str(raw.get("name") or raw.get("nom") or "").strip(),
                color=color,
                created_at=raw.get("created_at") or now,
            )
        )
        embedded = raw.get("criteria") or raw.get("criteres") or []
        for item in _as_dict_list(embedded):
            pending.append((item, category_id))
            extracted += 1

    known_category_ids = {c.id for c in categories}
    for raw in raw_criteria:
        category_id = _as_int(raw.get("category_id", raw.get("categoryId")))
        if category_id is None or category_id not in known_category_ids:
            logger.warning("Dropping legacy criterion with unknown category: %s", raw)
            continue
        pending.append((raw, category_id))

    criteria: list[Criterion] = []
    legacy_weights: dict[int, int] = {}
    seen_ids: set[int] = set()
    for raw, category_id in pending:
        criterion_id = _as_int(raw.get("id"))
        if criterion_id is None or criterion_id in seen_ids:
            criterion_id = collections.allocate_id("criterion")
        seen_ids.add(criterion_id)
        criteria.append(
            Criterion(
                id=criterion_id,
                category_id=category_id,
                name=str(raw.get("name") or raw.get("nom") or "").strip(),
                created_at=raw.get("created_at") or now,
            )
        )
        legacy_weights[criterion_id] = _legacy_weight(raw)

    profession = Profession(
        id=collections.allocate_id("profession"),
        name=profession_name.strip(),
        created_at=now,
    )
    weights = [
        CriterionWeight(
            profession_id=profession.id,
            category_id=c.category_id,
            criterion_id=c.id,
            weight=legacy_weights[c.id],
            type=DEFAULT_CRITERION_TYPE,
        )
        for c in criteria
    ]

    _advance_counter(collections, "category", [c.id for c in categories])
    _advance_counter(collections, "criterion", [c.id for c in criteria])

    collections.save_categories(categories)
    collections.save_criteria(criteria)
    collections.save_criterion_weights(weights)
    collections.save_professions([profession])
    collections.set_data_version(DATA_VERSION)

    logger.info(
        "Migrated legacy dataset: %d categories, %d criteria (%d embedded), "
        "default profession %d.",
        len(categories), len(criteria), extracted, profession.id,
    )
    return MigrationReport(
        migrated=True,
        profession_id=profession.id,
        criteria_extracted=extracted,
        weights_created=len(weights),
    )


def initialize_dataset(
    collections: CollectionStore,
    profession_name: str = DEFAULT_PROFESSION_NAME,
) -> tuple[MigrationReport, DataVersionStatus]:
    """Start-up hook: migrate legacy data, stamp empty datasets, report version.

    A brand-new (empty, unversioned) dataset is stamped with the current
    version so it is not mistaken for a legacy one later.
    """
    report = migrate_legacy_data(collections, profession_name=profession_name)
    if (
        collections.get_data_version() is None
        and not collections.load_professions()
        and not collections.load_raw(CATEGORIES_KEY)
        and not collections.load_raw(CRITERIA_KEY)
    ):
        collections.set_data_version(DATA_VERSION)
    return report, check_data_version(collections)


# ── Private helpers ────────────────────────────────────────────────────────────

def _as_dict_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _legacy_weight(raw: dict[str, Any]) -> int:
    value = raw.get("weight", raw.get("poids"))
    if value is None:
        return DEFAULT_WEIGHT
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return DEFAULT_WEIGHT


def _advance_counter(collections: CollectionStore, kind: str, ids: list[int]) -> None:
    if not ids:
        return
    floor = max(ids) + 1
    if collections.get_next_id(kind) < floor:
        collections.set_next_id(kind, floor)
