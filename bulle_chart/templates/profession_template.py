"""
Random starter taxonomy for a new profession.

``generate_profession_template()`` picks category names and criterion names
at random from the suggestion lists and gives each category a distinct
palette colour. Every criterion starts at the default weight with a neutral
type. Criterion names are dealt out in consecutive slices, so when the list
runs out the last categories receive fewer (or no) criteria.

Pass a seeded ``random.Random`` for reproducible templates.
"""

from __future__ import annotations

import random
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bulle_chart.models.taxonomy import DEFAULT_WEIGHT
from bulle_chart.taxonomy.criterion_taxonomy import DEFAULT_CRITERION_TYPE, CriterionType
from bulle_chart.taxonomy.palette import COLOR_PALETTE
from bulle_chart.templates.suggestions import CATEGORY_SUGGESTIONS, CRITERION_SUGGESTIONS


class TemplateCriterion(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    weight: int = DEFAULT_WEIGHT
    type: CriterionType = DEFAULT_CRITERION_TYPE


class TemplateCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    color: str
    criteria: list[TemplateCriterion] = Field(default_factory=list)


class ProfessionTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: list[TemplateCategory] = Field(default_factory=list)


def generate_profession_template(
    rng: Optional[random.Random] = None,
    category_count: int = 10,
    criteria_per_category: int = 5,
) -> ProfessionTemplate:
    """Build a random template.

    Args:
        rng: Random source; defaults to a fresh unseeded ``random.Random``.
        category_count: Categories to generate (capped by palette size).
        criteria_per_category: Criteria per category.

    Returns:
        ``ProfessionTemplate``.
    """
    rng = rng or random.Random()
    category_count = min(category_count, len(COLOR_PALETTE), len(CATEGORY_SUGGESTIONS))

    category_names = rng.sample(CATEGORY_SUGGESTIONS, len(CATEGORY_SUGGESTIONS))
    criterion_names = rng.sample(CRITERION_SUGGESTIONS, len(CRITERION_SUGGESTIONS))
    colors = rng.sample(COLOR_PALETTE, len(COLOR_PALETTE))

    categories = []
    for index, name in enumerate(category_names[:category_count]):
        start = index * criteria_per_category
        chunk = criterion_names[start:start + criteria_per_category]
        categories.append(
            TemplateCategory(
                name=name,
                color=colors[index],
                criteria=[TemplateCriterion(name=c) for c in chunk],
            )
        )
    return ProfessionTemplate(categories=categories)
