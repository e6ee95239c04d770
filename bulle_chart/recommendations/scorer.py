"""
Recommendation scoring: converts one profession's joined categories into a
total score with a per-category breakdown.

Score formula (per category with at least one criterion)
---------------------------------------------------------
    category_score = total_weight * type_multiplier * priority_multiplier

    total_score    = sum of every non-zero category_score   (no rounding)

Component explanations
----------------------
total_weight:
    Sum of the profession's weights across the category's criteria. A
    falsy weight counts as the default 15.

type_multiplier (evaluated in order, first match wins):
    1. 1.5 : advantage + small_advantage share of total_weight >= 50%
    2. 0.5 : small_disadvantage + disadvantage share >= 50%
    3. 1.0 : neutral majority, or no group reaches 50%

priority_multiplier:
    From ``preferences.priority_categories[category_id]`` (default 3):
    5 -> 2.0, 4 -> 1.5, 3 -> 1.0, 2 -> 0.5, 1 -> 0.2

Categories without criteria contribute nothing and are left out of the
breakdown entirely (no zero entry).

``advantage_weight`` / ``disadvantage_weight`` in the preferences are not
read here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bulle_chart.models.preferences import RecommendationPreferences
from bulle_chart.models.taxonomy import DEFAULT_WEIGHT, CategoryForProfession, CriterionView
from bulle_chart.taxonomy.criterion_taxonomy import (
    ADVANTAGE_TYPES,
    DISADVANTAGE_TYPES,
    CriterionType,
    coerce_criterion_type,
)

MAJORITY_THRESHOLD_PCT = 50.0

ADVANTAGE_MULTIPLIER = 1.5
DISADVANTAGE_MULTIPLIER = 0.5
NEUTRAL_MULTIPLIER = 1.0

PRIORITY_MULTIPLIERS: dict[int, float] = {
    5: 2.0,
    4: 1.5,
    3: 1.0,
    2: 0.5,
    1: 0.2,
}


@dataclass
class TypeDistribution:
    """Weight summed per criterion type."""

    advantage:          float = 0
    small_advantage:    float = 0
    neutral:            float = 0
    small_disadvantage: float = 0
    disadvantage:       float = 0

    def add(self, criterion_type: CriterionType, weight: float) -> None:
        attr = coerce_criterion_type(criterion_type).value
        setattr(self, attr, getattr(self, attr) + weight)

    def merge(self, other: "TypeDistribution") -> None:
        for t in CriterionType:
            setattr(self, t.value, getattr(self, t.value) + getattr(other, t.value))

    @property
    def advantage_total(self) -> float:
        return sum(getattr(self, t.value) for t in ADVANTAGE_TYPES)

    @property
    def disadvantage_total(self) -> float:
        return sum(getattr(self, t.value) for t in DISADVANTAGE_TYPES)

    @property
    def total(self) -> float:
        return sum(getattr(self, t.value) for t in CriterionType)

    def as_dict(self) -> dict[str, float]:
        return {t.value: getattr(self, t.value) for t in CriterionType}


@dataclass
class CategoryScore:
    """Score contribution of one category to a profession's total."""

    category_id:         int
    category_name:       str
    score:               float
    total_weight:        float
    type_multiplier:     float
    priority_multiplier: float


@dataclass
class ProfessionScore:
    """Total score of one profession with its per-category breakdown."""

    profession_id:   int
    total_score:     float
    category_scores: list[CategoryScore] = field(default_factory=list)


def criterion_weight(criterion: CriterionView) -> float:
    """Resolved weight of a joined criterion (default 15 when falsy)."""
    return criterion.weight or DEFAULT_WEIGHT


def build_type_distribution(criteria: list[CriterionView]) -> TypeDistribution:
    """Sum criterion weights per type; unknown types count as neutral."""
    dist = TypeDistribution()
    for criterion in criteria:
        dist.add(criterion.type, criterion_weight(criterion))
    return dist


def type_multiplier(distribution: TypeDistribution, total_weight: float) -> float:
    """Majority-type multiplier for one category.

    Rules (first match wins):
        1. advantage share >= 50%    -> 1.5
        2. disadvantage share >= 50% -> 0.5
        3. anything else             -> 1.0
    """
    if total_weight == 0:
        return NEUTRAL_MULTIPLIER

    advantage_pct = distribution.advantage_total / total_weight * 100
    disadvantage_pct = distribution.disadvantage_total / total_weight * 100

    if advantage_pct >= MAJORITY_THRESHOLD_PCT:
        return ADVANTAGE_MULTIPLIER
    if disadvantage_pct >= MAJORITY_THRESHOLD_PCT:
        return DISADVANTAGE_MULTIPLIER
    return NEUTRAL_MULTIPLIER


def priority_multiplier(priority: int) -> float:
    """Multiplier for a 1–5 category priority; anything unlisted maps to 0.2."""
    return PRIORITY_MULTIPLIERS.get(priority, PRIORITY_MULTIPLIERS[1])


def compute_category_score(
    category: CategoryForProfession,
    preferences: RecommendationPreferences,
) -> CategoryScore | None:
    """Score one joined category.

    Returns:
        ``None`` for a category without criteria, else its ``CategoryScore``.
    """
    if not category.criteria:
        return None

    distribution = build_type_distribution(category.criteria)
    total_weight = distribution.total
    t_mult = type_multiplier(distribution, total_weight)
    p_mult = priority_multiplier(preferences.priority_for(category.id))

    return CategoryScore(
        category_id=category.id,
        category_name=category.name,
        score=total_weight * t_mult * p_mult,
        total_weight=total_weight,
        type_multiplier=t_mult,
        priority_multiplier=p_mult,
    )


def compute_profession_score(
    profession_id: int,
    categories: list[CategoryForProfession],
    preferences: RecommendationPreferences,
) -> ProfessionScore:
    """Sum every non-zero category score of one profession.

    Args:
        profession_id: Profession being scored.
        categories:    Its join view (from the Taxonomy Store).
        preferences:   Priorities per category.

    Returns:
        ``ProfessionScore`` with categories in join-view order.
    """
    total = 0.0
    breakdown: list[CategoryScore] = []
    for category in categories:
        scored = compute_category_score(category, preferences)
        if scored is None or scored.score == 0:
            continue
        total += scored.score
        breakdown.append(scored)

    return ProfessionScore(
        profession_id=profession_id,
        total_score=total,
        category_scores=breakdown,
    )
