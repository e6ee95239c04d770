"""
Taxonomy entity models.

Four persisted records and one derived view:

  - ``Profession``     : one of up to 5 roles being compared.
  - ``Category``       : a shared "professional interest" with a unique colour.
  - ``Criterion``      : a shared "key motivation" owned by one category.
  - ``CriterionWeight``: the only per-profession record: weight and type of
    one criterion for one profession.
  - ``CategoryForProfession``: the join of a category, its criteria and one
    profession's weight rows. This is the only shape the comparison
    aggregator and the recommendation engine ever see.

Persisted records hold identifying fields only: a category does not embed
its criteria, and a criterion does not embed a weight. Renaming a criterion
therefore never rewrites any profession's weights.

All models are frozen. The store produces updated copies with
``model_copy(update=...)``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bulle_chart.taxonomy.criterion_taxonomy import (
    DEFAULT_CRITERION_TYPE,
    CriterionType,
    coerce_criterion_type,
)

DEFAULT_WEIGHT = 15


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp used for ``created_at`` fields."""
    return datetime.now(tz=timezone.utc)


class Profession(BaseModel):
    """A profession being evaluated.

    Attributes:
        id: Store-assigned, never reused.
        name: Trimmed display name.
        created_at: UTC creation time.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    created_at: datetime = Field(default_factory=utc_now)


class Category(BaseModel):
    """A professional interest, shared by every profession.

    Attributes:
        id: Store-assigned, never reused.
        name: Trimmed display name.
        color: Hex colour from the palette; unique among categories.
        created_at: UTC creation time.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    color: str
    created_at: datetime = Field(default_factory=utc_now)


class Criterion(BaseModel):
    """A key motivation. Its name is shared; weight/type live in ``CriterionWeight``."""

    model_config = ConfigDict(frozen=True)

    id: int
    category_id: int
    name: str
    created_at: datetime = Field(default_factory=utc_now)


class CriterionWeight(BaseModel):
    """Weight and type of one criterion for one profession.

    Exactly one row exists per ``(profession_id, criterion_id)`` pair. Rows
    written before the type field existed load as neutral; a null weight
    loads as 15.
    """

    model_config = ConfigDict(frozen=True)

    profession_id: int
    category_id: int
    criterion_id: int
    weight: int = DEFAULT_WEIGHT
    type: CriterionType = DEFAULT_CRITERION_TYPE

    @field_validator("weight", mode="before")
    @classmethod
    def default_missing_weight(cls, v: object) -> object:
        return DEFAULT_WEIGHT if v is None else v

    @field_validator("type", mode="before")
    @classmethod
    def default_missing_type(cls, v: object) -> CriterionType:
        return coerce_criterion_type(v)


# ── Derived join view ─────────────────────────────────────────────────────────


class CriterionView(BaseModel):
    """A criterion with weight/type resolved for one profession."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    weight: int = DEFAULT_WEIGHT
    type: CriterionType = DEFAULT_CRITERION_TYPE

    @field_validator("weight", mode="before")
    @classmethod
    def default_missing_weight(cls, v: object) -> object:
        return DEFAULT_WEIGHT if v is None else v

    @field_validator("type", mode="before")
    @classmethod
    def default_missing_type(cls, v: object) -> CriterionType:
        return coerce_criterion_type(v)


class CategoryForProfession(BaseModel):
    """A category with the criteria one profession has weight rows for."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    color: str
    criteria: list[CriterionView] = Field(default_factory=list)

    @property
    def has_criteria(self) -> bool:
        return bool(self.criteria)
