"""
Taxonomy service: validated mutations over the Taxonomy Store.

The store writes whatever it is given; this service is the only caller that
mutates it. Each public method:

  1. normalises payload aliases once (``nom`` -> ``name``, ``poids`` ->
     ``weight``, ``couleur`` -> ``color``),
  2. runs the ``bulle_chart.validation`` rules and raises
     ``ValidationFailure`` with the first failing message,
  3. calls the store, sequencing multi-step changes (clone weights after a
     new profession, delete criteria before their category).

The service also tracks the *active* profession, the one that receives the
weight row whenever a criterion is added.

Usage::

    service = TaxonomyService(store, config.limits)
    dev = service.add_profession({"name": "Développeur"})
    cat = service.add_category({"nom": "Technique"})
    service.add_criterion(cat.id, {"name": "Défis techniques", "poids": 20})
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from bulle_chart.config import LimitsConfig
from bulle_chart.errors import (
    CategoryNotEmptyError,
    DeletionReason,
    NoActiveProfessionError,
    ProfessionDeletionError,
    ValidationFailure,
)
from bulle_chart.models.taxonomy import Category, Criterion, CriterionWeight, Profession
from bulle_chart.storage.taxonomy_store import TaxonomyStore
from bulle_chart.taxonomy.criterion_taxonomy import CriterionType
from bulle_chart.taxonomy.palette import first_free_color
from bulle_chart.templates.profession_template import ProfessionTemplate
from bulle_chart.validation import (
    coerce_weight,
    is_color_used,
    validate_category_limit,
    validate_category_name,
    validate_criterion_limit,
    validate_criterion_name,
    validate_criterion_type,
    validate_profession_limit,
    validate_profession_name,
    validate_weight,
)

logger = logging.getLogger(__name__)

PAYLOAD_ALIASES: dict[str, str] = {
    "nom":     "name",
    "poids":   "weight",
    "couleur": "color",
}

COLOR_IN_USE_MESSAGE = "Cette couleur est déjà utilisée par un autre intérêt professionnel"
NO_FREE_COLOR_MESSAGE = "Toutes les couleurs sont déjà utilisées"
PROFESSION_NOT_FOUND_MESSAGE = "Métier non trouvé"
CATEGORY_NOT_FOUND_MESSAGE = "Intérêt professionnel non trouvé"
CRITERION_NOT_FOUND_MESSAGE = "Motivation clé non trouvée"


def normalize_payload(data: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Map legacy French keys onto canonical ones.

    The canonical key wins when both spellings are present with a value.
    """
    payload = dict(data or {})
    for alias, canonical in PAYLOAD_ALIASES.items():
        if alias not in payload:
            continue
        value = payload.pop(alias)
        if payload.get(canonical) in (None, ""):
            payload[canonical] = value
    return payload


def _raise_if(message: Optional[str]) -> None:
    if message:
        raise ValidationFailure(message)


class TaxonomyService:
    """Validated CRUD over one dataset.

    Attributes:
        store:                The Taxonomy Store being mutated.
        limits:               Cardinality and weight limits.
        active_profession_id: Profession that receives new criterion weights.
    """

    def __init__(
        self,
        store: TaxonomyStore,
        limits: Optional[LimitsConfig] = None,
        active_profession_id: Optional[int] = None,
    ) -> None:
        self.store = store
        self.limits = limits or LimitsConfig()
        self.active_profession_id = active_profession_id
        if self.active_profession_id is None:
            professions = store.load_professions()
            if professions:
                self.active_profession_id = professions[0].id

    # ── Professions ───────────────────────────────────────────────────────────

    def add_profession(self, data: Mapping[str, Any]) -> Profession:
        """Create a profession and make it active.

        The new profession starts with a copy of the weight rows of the most
        recently created existing profession.

        Raises:
            ValidationFailure: Empty name or profession limit reached.
        """
        payload = normalize_payload(data)
        _raise_if(validate_profession_name(payload.get("name")))

        existing = self.store.load_professions()
        _raise_if(validate_profession_limit(len(existing), self.limits))

        profession = self.store.add_profession(payload["name"])
        if existing:
            source = max(existing, key=lambda p: (p.created_at, p.id))
            seeded = self.store.initialize_profession_weights(profession.id, source.id)
            logger.info(
                "Profession %d starts from profession %d (%d weight rows).",
                profession.id, source.id, len(seeded),
            )

        self.active_profession_id = profession.id
        return profession

    def rename_profession(self, profession_id: int, data: Mapping[str, Any]) -> Profession:
        payload = normalize_payload(data)
        if "name" in payload:
            _raise_if(validate_profession_name(payload["name"]))
        updated = self.store.update_profession(profession_id, name=payload.get("name"))
        if updated is None:
            raise ValidationFailure(PROFESSION_NOT_FOUND_MESSAGE)
        return updated

    def delete_profession(self, profession_id: int) -> bool:
        """Delete a profession, guarding the last one.

        The last remaining profession can only go when no category and no
        criterion exists (and ``limits.allow_delete_last_empty_profession``
        is set). When the active profession is deleted the first remaining
        profession becomes active.

        Raises:
            ProfessionDeletionError: With ``reason`` set to
                ``CANNOT_DELETE_LAST_PROFESSION_WITH_DATA`` or
                ``CANNOT_DELETE_LAST_PROFESSION``.
        """
        professions = self.store.load_professions()
        is_last = len(professions) == 1 and professions[0].id == profession_id
        if is_last:
            if self.store.has_taxonomy_data():
                raise ProfessionDeletionError(
                    DeletionReason.CANNOT_DELETE_LAST_PROFESSION_WITH_DATA, profession_id
                )
            if not self.limits.allow_delete_last_empty_profession:
                raise ProfessionDeletionError(
                    DeletionReason.CANNOT_DELETE_LAST_PROFESSION, profession_id
                )

        deleted = self.store.delete_profession(profession_id)
        if deleted and self.active_profession_id == profession_id:
            remaining = [p for p in professions if p.id != profession_id]
            self.active_profession_id = remaining[0].id if remaining else None
        return deleted

    def set_active_profession(self, profession_id: int) -> Profession:
        profession = self.store.get_profession(profession_id)
        if profession is None:
            raise ValidationFailure(PROFESSION_NOT_FOUND_MESSAGE)
        self.active_profession_id = profession.id
        return profession

    def _require_active_profession(self) -> int:
        if self.active_profession_id is None:
            raise NoActiveProfessionError("Create or select a profession first.")
        return self.active_profession_id

    def _require_profession(self, profession_id: int) -> None:
        if self.store.get_profession(profession_id) is None:
            raise ValidationFailure(PROFESSION_NOT_FOUND_MESSAGE)

    # ── Categories ────────────────────────────────────────────────────────────

    def add_category(self, data: Mapping[str, Any]) -> Category:
        """Create a category.

        A missing colour is replaced by the first free palette colour. Categories
        only exist alongside a profession; a dataset with categories and no
        profession would be read as legacy data on the next open.

        Raises:
            NoActiveProfessionError: No profession exists yet.
            ValidationFailure: Empty name, category limit, or colour in use.
        """
        payload = normalize_payload(data)
        _raise_if(validate_category_name(payload.get("name")))
        self._require_active_profession()

        categories = self.store.load_categories()
        _raise_if(validate_category_limit(len(categories), self.limits))

        color = payload.get("color")
        if not color:
            color = first_free_color({c.color for c in categories})
            if color is None:
                raise ValidationFailure(NO_FREE_COLOR_MESSAGE)
        elif is_color_used(color, categories):
            raise ValidationFailure(COLOR_IN_USE_MESSAGE)

        return self.store.add_category(payload["name"], color)

    def update_category(self, category_id: int, data: Mapping[str, Any]) -> Category:
        payload = normalize_payload(data)
        if "name" in payload:
            _raise_if(validate_category_name(payload["name"]))

        color = payload.get("color")
        if color and is_color_used(color, self.store.load_categories(), exclude_id=category_id):
            raise ValidationFailure(COLOR_IN_USE_MESSAGE)

        updated = self.store.update_category(
            category_id, name=payload.get("name"), color=color or None
        )
        if updated is None:
            raise ValidationFailure(CATEGORY_NOT_FOUND_MESSAGE)
        return updated

    def delete_category(self, category_id: int) -> bool:
        """Delete an empty category.

        Raises:
            CategoryNotEmptyError: If criteria still reference the category.
        """
        remaining = self.store.criteria_for_category(category_id)
        if remaining:
            raise CategoryNotEmptyError(category_id, len(remaining))
        return self.store.delete_category(category_id)

    def delete_category_with_criteria(self, category_id: int) -> bool:
        """Delete every criterion of a category, then the category."""
        for criterion in self.store.criteria_for_category(category_id):
            self.store.delete_criterion(criterion.id)
        return self.store.delete_category(category_id)

    # ── Criteria ──────────────────────────────────────────────────────────────

    def add_criterion(self, category_id: int, data: Mapping[str, Any]) -> Criterion:
        """Create a criterion and its weight row for the active profession.

        ``weight`` defaults to ``limits.default_weight`` and ``type`` to
        neutral.

        Raises:
            ValidationFailure: Empty name, bad weight or type, or the
                per-category limit is reached.
            NoActiveProfessionError: No profession is active.
            CategoryNotFoundError: Unknown category.
        """
        payload = normalize_payload(data)
        _raise_if(validate_criterion_name(payload.get("name")))

        weight = payload.get("weight")
        if weight is None:
            weight = self.limits.default_weight
        _raise_if(validate_weight(weight, self.limits))

        criterion_type = payload.get("type")
        if criterion_type is not None:
            _raise_if(validate_criterion_type(criterion_type))

        _raise_if(
            validate_criterion_limit(
                len(self.store.criteria_for_category(category_id)), self.limits
            )
        )
        profession_id = self._require_active_profession()

        return self.store.add_criterion(
            category_id,
            payload["name"],
            profession_id=profession_id,
            weight=coerce_weight(weight),
            criterion_type=CriterionType(criterion_type) if criterion_type else None,
        )

    def update_criterion(
        self,
        profession_id: int,
        criterion_id: int,
        data: Mapping[str, Any],
    ) -> Criterion:
        """Rename a criterion and/or change its weight or type for one profession.

        The name is shared by every profession; weight and type only change
        for ``profession_id``.
        """
        payload = normalize_payload(data)
        if "name" in payload:
            _raise_if(validate_criterion_name(payload["name"]))
        if payload.get("weight") is not None:
            _raise_if(validate_weight(payload["weight"], self.limits))
        if payload.get("type") is not None:
            _raise_if(validate_criterion_type(payload["type"]))

        self._require_profession(profession_id)
        criterion = self.store.get_criterion(criterion_id)
        if criterion is None:
            raise ValidationFailure(CRITERION_NOT_FOUND_MESSAGE)

        if "name" in payload:
            criterion = self.store.update_criterion(criterion_id, name=payload["name"])

        criterion_type = CriterionType(payload["type"]) if payload.get("type") else None
        if payload.get("weight") is not None:
            self.store.set_criterion_weight(
                profession_id,
                criterion.category_id,
                criterion_id,
                coerce_weight(payload["weight"]),
                criterion_type,
            )
        elif criterion_type is not None:
            self.store.set_criterion_type(
                profession_id, criterion.category_id, criterion_id, criterion_type
            )
        return criterion

    def set_criterion_weight(
        self,
        profession_id: int,
        criterion_id: int,
        weight: Any,
        criterion_type: Optional[str] = None,
    ) -> CriterionWeight:
        """Validate and upsert one profession's weight (and optionally type)."""
        _raise_if(validate_weight(weight, self.limits))
        if criterion_type is not None:
            _raise_if(validate_criterion_type(criterion_type))

        self._require_profession(profession_id)
        criterion = self.store.get_criterion(criterion_id)
        if criterion is None:
            raise ValidationFailure(CRITERION_NOT_FOUND_MESSAGE)
        return self.store.set_criterion_weight(
            profession_id,
            criterion.category_id,
            criterion_id,
            coerce_weight(weight),
            CriterionType(criterion_type) if criterion_type else None,
        )

    def delete_criterion(self, criterion_id: int) -> bool:
        return self.store.delete_criterion(criterion_id)

    # ── Templates ─────────────────────────────────────────────────────────────

    def apply_template(self, template: ProfessionTemplate) -> list[Category]:
        """Seed categories and criteria from a template for the active profession.

        Categories whose name or colour is already taken are skipped, as are
        categories beyond the category limit. Criteria beyond the
        per-category limit are dropped.

        Returns:
            The categories created.
        """
        profession_id = self._require_active_profession()
        created: list[Category] = []

        for template_category in template.categories:
            categories = self.store.load_categories()
            if validate_category_limit(len(categories), self.limits):
                logger.warning("Category limit reached; template truncated.")
                break

            taken_names = {c.name.lower() for c in categories}
            if template_category.name.lower() in taken_names:
                continue
            color = template_category.color
            if is_color_used(color, categories):
                color = first_free_color({c.color for c in categories})
                if color is None:
                    break

            category = self.store.add_category(template_category.name, color)
            created.append(category)
            for index, template_criterion in enumerate(template_category.criteria):
                if validate_criterion_limit(index, self.limits):
                    break
                self.store.add_criterion(
                    category.id,
                    template_criterion.name,
                    profession_id=profession_id,
                    weight=template_criterion.weight,
                    criterion_type=template_criterion.type,
                )

        logger.info(
            "Applied template to profession %d: %d categories.", profession_id, len(created)
        )
        return created
