"""
Taxonomy Store: CRUD over professions, categories, criteria and
per-profession criterion weights, plus the per-profession join.

The store is the sole owner of persisted state. It does NOT validate:
name emptiness, weight range, colour uniqueness and cardinality limits are
checked by ``bulle_chart.validation`` in the service layer before any store
call. The store only trims names and keeps referential bookkeeping
consistent within one call:

  - ``delete_criterion`` removes the criterion's weight rows for every
    profession.
  - ``delete_profession`` removes the profession's weight rows.
  - ``delete_category`` removes the category row only; callers must delete
    its criteria first.

Every mutation reads the full collection, applies the change and writes the
full collection back. There is no locking; mutations must be sequenced.

Join view
---------
``get_categories_for_professions(ids)`` reads each collection once, indexes
weight rows by ``(profession_id, criterion_id)`` and groups criteria by
category, then assembles one ``CategoryForProfession`` list per requested
profession. Every category appears (even with zero criteria); each carries
only the criteria the profession has a weight row for, in creation order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from bulle_chart.errors import CategoryNotFoundError
from bulle_chart.models.taxonomy import (
    DEFAULT_WEIGHT,
    Category,
    CategoryForProfession,
    Criterion,
    CriterionView,
    CriterionWeight,
    Profession,
    utc_now,
)
from bulle_chart.storage.collections import CollectionStore
from bulle_chart.taxonomy.criterion_taxonomy import DEFAULT_CRITERION_TYPE, CriterionType

logger = logging.getLogger(__name__)

CHART_COLOR_MODES = frozenset({"category", "type"})
DEFAULT_CHART_COLOR_MODE = "category"


class TaxonomyStore:
    """CRUD and join operations over one dataset.

    Attributes:
        collections: The typed collection store.
    """

    def __init__(self, collections: CollectionStore) -> None:
        self.collections = collections

    # ── Professions ───────────────────────────────────────────────────────────

    def load_professions(self) -> list[Profession]:
        return self.collections.load_professions()

    def get_profession(self, profession_id: int) -> Optional[Profession]:
        return next((p for p in self.load_professions() if p.id == profession_id), None)

    def add_profession(self, name: str) -> Profession:
        """Create a profession with the next profession id."""
        professions = self.collections.load_professions()
        profession = Profession(
            id=self.collections.allocate_id("profession"),
            name=name.strip(),
            created_at=utc_now(),
        )
        professions.append(profession)
        self.collections.save_professions(professions)
        logger.info("Added profession %d '%s'.", profession.id, profession.name)
        return profession

    def update_profession(
        self,
        profession_id: int,
        name: Optional[str] = None,
    ) -> Optional[Profession]:
        """Rename a profession. Returns ``None`` if not found."""
        professions = self.collections.load_professions()
        for idx, profession in enumerate(professions):
            if profession.id != profession_id:
                continue
            if name is not None:
                profession = profession.model_copy(update={"name": name.strip()})
                professions[idx] = profession
                self.collections.save_professions(professions)
            return profession
        return None

    def delete_profession(self, profession_id: int) -> bool:
        """Delete a profession and every weight row it owns.

        Returns:
            ``False`` if no profession has that id.
        """
        professions = self.collections.load_professions()
        remaining = [p for p in professions if p.id != profession_id]
        if len(remaining) == len(professions):
            return False
        self.collections.save_professions(remaining)

        weights = self.collections.load_criterion_weights()
        self.collections.save_criterion_weights(
            [w for w in weights if w.profession_id != profession_id]
        )

        modes = self.collections.load_chart_color_modes()
        if modes.pop(str(profession_id), None) is not None:
            self.collections.save_chart_color_modes(modes)

        logger.info("Deleted profession %d.", profession_id)
        return True

    def initialize_profession_weights(
        self,
        new_profession_id: int,
        source_profession_id: int,
    ) -> list[CriterionWeight]:
        """Seed a new profession with a straight copy of another's weight rows.

        Rows the new profession already has are left untouched.

        Returns:
            The new profession's weight rows after seeding.
        """
        weights = self.collections.load_criterion_weights()
        existing = {w.criterion_id for w in weights if w.profession_id == new_profession_id}
        copies = [
            w.model_copy(update={"profession_id": new_profession_id})
            for w in weights
            if w.profession_id == source_profession_id and w.criterion_id not in existing
        ]
        weights.extend(copies)
        self.collections.save_criterion_weights(weights)
        logger.info(
            "Seeded profession %d with %d weight rows from profession %d.",
            new_profession_id, len(copies), source_profession_id,
        )
        return [w for w in weights if w.profession_id == new_profession_id]

    # ── Categories ────────────────────────────────────────────────────────────

    def load_categories(self) -> list[Category]:
        return self.collections.load_categories()

    def get_category(self, category_id: int) -> Optional[Category]:
        return next((c for c in self.load_categories() if c.id == category_id), None)

    def add_category(self, name: str, color: str) -> Category:
        """Create a category with no criteria."""
        categories = self.collections.load_categories()
        category = Category(
            id=self.collections.allocate_id("category"),
            name=name.strip(),
            color=color,
            created_at=utc_now(),
        )
        categories.append(category)
        self.collections.save_categories(categories)
        logger.info("Added category %d '%s'.", category.id, category.name)
        return category

    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Optional[Category]:
        """Patch a category's name and/or colour. Returns ``None`` if not found."""
        categories = self.collections.load_categories()
        for idx, category in enumerate(categories):
            if category.id != category_id:
                continue
            update: dict[str, str] = {}
            if name is not None:
                update["name"] = name.strip()
            if color is not None:
                update["color"] = color
            if update:
                category = category.model_copy(update=update)
                categories[idx] = category
                self.collections.save_categories(categories)
            return category
        return None

    def delete_category(self, category_id: int) -> bool:
        """Remove the category row. Callers must delete its criteria first."""
        categories = self.collections.load_categories()
        remaining = [c for c in categories if c.id != category_id]
        if len(remaining) == len(categories):
            return False
        self.collections.save_categories(remaining)
        logger.info("Deleted category %d.", category_id)
        return True

    # ── Criteria ──────────────────────────────────────────────────────────────

    def load_criteria(self) -> list[Criterion]:
        return self.collections.load_criteria()

    def get_criterion(self, criterion_id: int) -> Optional[Criterion]:
        return next((c for c in self.load_criteria() if c.id == criterion_id), None)

    def criteria_for_category(self, category_id: int) -> list[Criterion]:
        return [c for c in self.load_criteria() if c.category_id == category_id]

    def add_criterion(
        self,
        category_id: int,
        name: str,
        profession_id: Optional[int] = None,
        weight: int = DEFAULT_WEIGHT,
        criterion_type: Optional[CriterionType] = None,
    ) -> Criterion:
        """Create a criterion under a category.

        When ``profession_id`` is given the weight row for that profession is
        written in the same call, so the criterion is never left without a
        weight for the active profession.

        Raises:
            CategoryNotFoundError: If ``category_id`` is unknown.
        """
        if self.get_category(category_id) is None:
            raise CategoryNotFoundError(category_id)

        criteria = self.collections.load_criteria()
        criterion = Criterion(
            id=self.collections.allocate_id("criterion"),
            category_id=category_id,
            name=name.strip(),
            created_at=utc_now(),
        )
        criteria.append(criterion)
        self.collections.save_criteria(criteria)
        logger.info(
            "Added criterion %d '%s' to category %d.",
            criterion.id, criterion.name, category_id,
        )

        if profession_id is not None:
            self.set_criterion_weight(
                profession_id, category_id, criterion.id, weight, criterion_type
            )
        return criterion

    def update_criterion(
        self,
        criterion_id: int,
        name: Optional[str] = None,
    ) -> Optional[Criterion]:
        """Rename a criterion for every profession. Weights are untouched."""
        criteria = self.collections.load_criteria()
        for idx, criterion in enumerate(criteria):
            if criterion.id != criterion_id:
                continue
            if name is not None:
                criterion = criterion.model_copy(update={"name": name.strip()})
                criteria[idx] = criterion
                self.collections.save_criteria(criteria)
            return criterion
        return None

    def delete_criterion(self, criterion_id: int) -> bool:
        """Delete a criterion and its weight rows for every profession."""
        criteria = self.collections.load_criteria()
        remaining = [c for c in criteria if c.id != criterion_id]
        if len(remaining) == len(criteria):
            return False

        weights = self.collections.load_criterion_weights()
        self.collections.save_criterion_weights(
            [w for w in weights if w.criterion_id != criterion_id]
        )
        self.collections.save_criteria(remaining)
        logger.info("Deleted criterion %d.", criterion_id)
        return True

    # ── Criterion weights ─────────────────────────────────────────────────────

    def load_criterion_weights(self) -> list[CriterionWeight]:
        return self.collections.load_criterion_weights()

    def _find_weight(self, profession_id: int, criterion_id: int) -> Optional[CriterionWeight]:
        return next(
            (
                w for w in self.collections.load_criterion_weights()
                if w.profession_id == profession_id and w.criterion_id == criterion_id
            ),
            None,
        )

    def get_criterion_weight(self, profession_id: int, criterion_id: int) -> int:
        row = self._find_weight(profession_id, criterion_id)
        return row.weight if row else DEFAULT_WEIGHT

    def get_criterion_type(self, profession_id: int, criterion_id: int) -> CriterionType:
        row = self._find_weight(profession_id, criterion_id)
        return row.type if row else DEFAULT_CRITERION_TYPE

    def _upsert_weight(
        self,
        profession_id: int,
        category_id: int,
        criterion_id: int,
        weight: Optional[float],
        criterion_type: Optional[CriterionType],
    ) -> CriterionWeight:
        weights = self.collections.load_criterion_weights()
        index = next(
            (
                i for i, w in enumerate(weights)
                if w.profession_id == profession_id and w.criterion_id == criterion_id
            ),
            None,
        )
        existing = weights[index] if index is not None else None

        row = CriterionWeight(
            profession_id=profession_id,
            category_id=category_id,
            criterion_id=criterion_id,
            weight=(
                int(round(float(weight))) if weight is not None
                else (existing.weight if existing else DEFAULT_WEIGHT)
            ),
            type=(
                criterion_type if criterion_type is not None
                else (existing.type if existing else DEFAULT_CRITERION_TYPE)
            ),
        )
        if index is None:
            weights.append(row)
        else:
            weights[index] = row
        self.collections.save_criterion_weights(weights)
        return row

    def set_criterion_weight(
        self,
        profession_id: int,
        category_id: int,
        criterion_id: int,
        weight: float,
        criterion_type: Optional[CriterionType] = None,
    ) -> CriterionWeight:
        """Upsert the weight row for exactly one ``(profession, criterion)`` pair.

        The existing type is preserved when ``criterion_type`` is omitted.
        Other professions' rows for the same criterion are never touched.
        """
        return self._upsert_weight(
            profession_id, category_id, criterion_id, weight, criterion_type
        )

    def set_criterion_type(
        self,
        profession_id: int,
        category_id: int,
        criterion_id: int,
        criterion_type: CriterionType,
    ) -> CriterionWeight:
        """Upsert only the type of one weight row, keeping its weight."""
        return self._upsert_weight(
            profession_id, category_id, criterion_id, None, criterion_type
        )

    # ── Join view ─────────────────────────────────────────────────────────────

    def get_categories_for_professions(
        self,
        profession_ids: list[int],
    ) -> dict[int, list[CategoryForProfession]]:
        """Build the join view for several professions from one read of each collection.

        Args:
            profession_ids: Professions to build views for. Falsy ids are skipped.

        Returns:
            ``{profession_id: [CategoryForProfession, ...]}``.
        """
        wanted = {pid for pid in profession_ids if pid}
        if not wanted:
            return {}

        categories = self.collections.load_categories()
        criteria = self.collections.load_criteria()
        weights = self.collections.load_criterion_weights()

        weight_index: dict[tuple[int, int], CriterionWeight] = {
            (w.profession_id, w.criterion_id): w
            for w in weights
            if w.profession_id in wanted
        }
        criteria_by_category: dict[int, list[Criterion]] = defaultdict(list)
        for criterion in criteria:
            criteria_by_category[criterion.category_id].append(criterion)

        result: dict[int, list[CategoryForProfession]] = {}
        for pid in profession_ids:
            if not pid or pid in result:
                continue
            views: list[CategoryForProfession] = []
            for category in categories:
                resolved: list[CriterionView] = []
                for criterion in criteria_by_category.get(category.id, []):
                    row = weight_index.get((pid, criterion.id))
                    if row is None:
                        continue
                    resolved.append(
                        CriterionView(
                            id=criterion.id,
                            name=criterion.name,
                            weight=row.weight,
                            type=row.type,
                        )
                    )
                views.append(
                    CategoryForProfession(
                        id=category.id,
                        name=category.name,
                        color=category.color,
                        criteria=resolved,
                    )
                )
            result[pid] = views
        return result

    def get_categories_for_profession(
        self,
        profession_id: int,
    ) -> list[CategoryForProfession]:
        """Join view for one profession; ``[]`` for a falsy id."""
        if not profession_id:
            return []
        return self.get_categories_for_professions([profession_id])[profession_id]

    # ── Dataset-level helpers ─────────────────────────────────────────────────

    def has_taxonomy_data(self) -> bool:
        """True if any category or criterion exists."""
        return bool(self.collections.load_categories() or self.collections.load_criteria())

    def get_chart_color_mode(self, profession_id: int) -> str:
        modes = self.collections.load_chart_color_modes()
        return modes.get(str(profession_id), DEFAULT_CHART_COLOR_MODE)

    def set_chart_color_mode(self, profession_id: int, mode: str) -> bool:
        """Persist the chart colouring mode for one profession.

        Raises:
            ValueError: If ``mode`` is not ``"category"`` or ``"type"``.
        """
        if mode not in CHART_COLOR_MODES:
            raise ValueError(
                f"Chart color mode must be one of {sorted(CHART_COLOR_MODES)}, got '{mode}'."
            )
        modes = self.collections.load_chart_color_modes()
        modes[str(profession_id)] = mode
        return self.collections.save_chart_color_modes(modes)

    def reset(self, data_version: str) -> None:
        """Wipe the dataset and stamp it with ``data_version``."""
        self.collections.clear()
        self.collections.set_data_version(data_version)
        logger.warning("Dataset reset; data version set to %s.", data_version)


def category_total_weight(category: CategoryForProfession) -> int:
    """Sum of a joined category's criterion weights (15 for a falsy weight)."""
    return sum(c.weight or DEFAULT_WEIGHT for c in category.criteria)
