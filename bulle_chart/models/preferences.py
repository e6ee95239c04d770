"""
Recommendation preference model.

``advantage_weight`` / ``disadvantage_weight`` are accepted and returned
unchanged in every recommendation result, but the current scoring formula
uses a fixed-threshold type multiplier instead of reading them.

``priority_categories`` maps a category id to a 1–5 priority. Categories
without an entry use ``DEFAULT_PRIORITY`` (3, multiplier 1.0).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PRIORITY = 3
VALID_PRIORITIES = frozenset({1, 2, 3, 4, 5})


class RecommendationPreferences(BaseModel):
    """User-tunable inputs to ``get_recommendation()``.

    Attributes:
        advantage_weight: Share given to advantages; any float is echoed back.
        disadvantage_weight: Share given to disadvantages; any float is echoed back.
        priority_categories: ``{category_id: priority}`` with priority in 1..5.
    """

    model_config = ConfigDict(frozen=True)

    advantage_weight: float = 0.6
    disadvantage_weight: float = 0.4
    priority_categories: dict[int, int] = Field(default_factory=dict)

    @field_validator("priority_categories")
    @classmethod
    def validate_priorities(cls, v: dict[int, int]) -> dict[int, int]:
        for category_id, priority in v.items():
            if priority not in VALID_PRIORITIES:
                raise ValueError(
                    f"Priority for category {category_id} must be one of "
                    f"{sorted(VALID_PRIORITIES)}, got {priority}."
                )
        return v

    def priority_for(self, category_id: int) -> int:
        """Return the priority for a category, ``DEFAULT_PRIORITY`` when unset."""
        return self.priority_categories.get(category_id, DEFAULT_PRIORITY)
