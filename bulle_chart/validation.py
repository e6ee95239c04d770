"""
Pure validation rules applied before any Taxonomy Store mutation.

Every ``validate_*`` function returns ``None`` when the input is valid or a
user-facing message otherwise. Messages are displayed verbatim and are not
meant to be pattern-matched. Nothing here touches storage.

The store does not re-validate, so any caller that mutates the store
directly is responsible for running these first. Read-only consumers (the
comparison aggregator and the recommendation engine) skip validation.

Limits default to ``LimitsConfig()``; pass the loaded config section to
honour overrides.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional

from bulle_chart.config import LimitsConfig
from bulle_chart.models.taxonomy import Category
from bulle_chart.taxonomy.criterion_taxonomy import CriterionType

_DEFAULT_LIMITS = LimitsConfig()


def _is_blank(name: Any) -> bool:
    return not isinstance(name, str) or not name.strip()


def validate_category_name(name: Any) -> Optional[str]:
    if _is_blank(name):
        return "Please enter a name for the professional interest"
    return None


def validate_criterion_name(name: Any) -> Optional[str]:
    if _is_blank(name):
        return "Please enter a name for the key motivation"
    return None


def validate_profession_name(name: Any) -> Optional[str]:
    if _is_blank(name):
        return "Le nom du métier est obligatoire"
    return None


def coerce_weight(weight: Any) -> Optional[float]:
    """Return ``weight`` as a finite float, or ``None`` if it is not numeric.

    Accepts ints, floats and numeric strings (``"12"``, ``" 7.5 "``);
    booleans are rejected.
    """
    if isinstance(weight, bool):
        return None
    try:
        value = float(weight)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def validate_weight(weight: Any, limits: LimitsConfig = _DEFAULT_LIMITS) -> Optional[str]:
    """Weight must be numeric and within ``[min_weight, max_weight]``."""
    value = coerce_weight(weight)
    if value is None or value < limits.min_weight or value > limits.max_weight:
        return f"Importance must be between {limits.min_weight} and {limits.max_weight}"
    return None


def validate_criterion_type(criterion_type: Any) -> Optional[str]:
    try:
        CriterionType(criterion_type)
    except ValueError:
        valid = ", ".join(t.value for t in CriterionType)
        return f"Type must be one of: {valid}"
    return None


def validate_category_limit(
    current_count: int,
    limits: LimitsConfig = _DEFAULT_LIMITS,
) -> Optional[str]:
    if current_count >= limits.max_categories:
        return f"You cannot add more than {limits.max_categories} professional interests"
    return None


def validate_criterion_limit(
    current_count: int,
    limits: LimitsConfig = _DEFAULT_LIMITS,
) -> Optional[str]:
    """``current_count`` is the number of criteria already in the target category."""
    if current_count >= limits.max_criteria_per_category:
        return (
            f"You cannot add more than {limits.max_criteria_per_category} "
            "key motivations per professional interest"
        )
    return None


def validate_profession_limit(
    current_count: int,
    limits: LimitsConfig = _DEFAULT_LIMITS,
) -> Optional[str]:
    if current_count >= limits.max_professions:
        return f"Vous ne pouvez pas créer plus de {limits.max_professions} métiers"
    return None


def is_color_used(
    color: str,
    categories: Iterable[Category],
    exclude_id: Optional[int] = None,
) -> bool:
    """True if a category other than ``exclude_id`` already uses ``color``."""
    return any(cat.id != exclude_id and cat.color == color for cat in categories)
