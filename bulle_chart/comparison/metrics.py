"""
Comparison metrics: per-profession aggregate statistics from the join view.

For each profession, categories without criteria are filtered out first,
then:

  total_weight         sum of every criterion weight (15 when falsy)
  total_criteria_count number of criteria across categories
  categories_count     categories that have at least one criterion
  type_distribution    weight summed per criterion type
  category_details     weight / criteria count / type split per category
  top_categories       3 heaviest categories (ties keep category order)
  top_criteria         3 heaviest criteria (ties keep join order)
  global_score         exactly total_weight, no multipliers

``global_score`` is a different, simpler metric than the recommendation
engine's ``total_score``; both are shown side by side.

``calculate_professions_metrics()`` builds every profession from one batched
join call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from bulle_chart.models.taxonomy import CategoryForProfession
from bulle_chart.recommendations.scorer import (
    TypeDistribution,
    build_type_distribution,
    criterion_weight,
)
from bulle_chart.storage.taxonomy_store import TaxonomyStore

TOP_N = 3


@dataclass
class CategoryDetail:
    id:                int
    name:              str
    color:             str
    weight:            float
    criteria_count:    int
    type_distribution: TypeDistribution


@dataclass
class TopCategory:
    name:   str
    weight: float
    color:  str


@dataclass
class TopCriterion:
    name:          str
    weight:        float
    type:          str
    category_name: str


@dataclass
class ProfessionMetrics:
    """Aggregate statistics for one profession."""

    profession_id:        int
    global_score:         float
    total_weight:         float
    total_criteria_count: int
    categories_count:     int
    type_distribution:    TypeDistribution
    category_details:     list[CategoryDetail] = field(default_factory=list)
    top_categories:       list[TopCategory] = field(default_factory=list)
    top_criteria:         list[TopCriterion] = field(default_factory=list)


def build_profession_metrics(
    profession_id: int,
    categories: list[CategoryForProfession],
) -> ProfessionMetrics:
    """Aggregate one profession's join view.

    Args:
        profession_id: Profession the view belongs to.
        categories:    Its ``CategoryForProfession`` list.

    Returns:
        ``ProfessionMetrics``.
    """
    with_criteria = [c for c in categories if c.criteria]

    total_weight: float = 0
    total_criteria = 0
    distribution = TypeDistribution()
    details: list[CategoryDetail] = []

    for category in with_criteria:
        cat_dist = build_type_distribution(category.criteria)
        cat_weight = cat_dist.total
        total_weight += cat_weight
        total_criteria += len(category.criteria)
        distribution.merge(cat_dist)
        details.append(
            CategoryDetail(
                id=category.id,
                name=category.name,
                color=category.color,
                weight=cat_weight,
                criteria_count=len(category.criteria),
                type_distribution=cat_dist,
            )
        )

    top_categories = [
        TopCategory(name=d.name, weight=d.weight, color=d.color)
        for d in sorted(details, key=lambda d: -d.weight)[:TOP_N]
    ]

    all_criteria = [
        (criterion, category.name)
        for category in with_criteria
        for criterion in category.criteria
    ]
    top_criteria = [
        TopCriterion(
            name=criterion.name,
            weight=criterion_weight(criterion),
            type=criterion.type.value,
            category_name=category_name,
        )
        for criterion, category_name in sorted(
            all_criteria, key=lambda pair: -criterion_weight(pair[0])
        )[:TOP_N]
    ]

    return ProfessionMetrics(
        profession_id=profession_id,
        global_score=total_weight,
        total_weight=total_weight,
        total_criteria_count=total_criteria,
        categories_count=len(with_criteria),
        type_distribution=distribution,
        category_details=details,
        top_categories=top_categories,
        top_criteria=top_criteria,
    )


def calculate_profession_metrics(
    store: TaxonomyStore,
    profession_id: int,
) -> Optional[ProfessionMetrics]:
    """Metrics for one profession; ``None`` for a falsy id."""
    if not profession_id:
        return None
    return build_profession_metrics(
        profession_id, store.get_categories_for_profession(profession_id)
    )


def calculate_professions_metrics(
    store: TaxonomyStore,
    profession_ids: list[int],
) -> dict[int, ProfessionMetrics]:
    """Metrics for several professions from a single batched join.

    Returns:
        ``{profession_id: ProfessionMetrics}``; ``{}`` for an empty list.
    """
    if not profession_ids:
        return {}

    categories_by_profession = store.get_categories_for_professions(profession_ids)
    return {
        pid: build_profession_metrics(pid, categories_by_profession.get(pid, []))
        for pid in profession_ids
        if pid
    }
