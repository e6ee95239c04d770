"""Tests for the taxonomy, preference and metadata pydantic models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from bulle_chart.models.meta import DataVersionStatus, MigrationReport
from bulle_chart.models.preferences import DEFAULT_PRIORITY, RecommendationPreferences
from bulle_chart.models.taxonomy import (
    CategoryForProfession,
    Criterion,
    CriterionView,
    CriterionWeight,
    Profession,
)
from bulle_chart.taxonomy.criterion_taxonomy import CriterionType


class TestTaxonomyModels:
    def test_frozen(self):
        prof = Profession(id=1, name="Dev")
        with pytest.raises(ValidationError):
            prof.name = "Other"

    def test_created_at_is_utc(self):
        assert Profession(id=1, name="Dev").created_at.tzinfo is not None

    def test_json_round_trip(self):
        crit = Criterion(
            id=3, category_id=1, name="Autonomie",
            created_at=datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )
        dumped = crit.model_dump(mode="json")
        assert dumped["created_at"].startswith("2025-01-02T03:04:05")
        assert Criterion.model_validate(dumped) == crit

    def test_weight_defaults(self):
        row = CriterionWeight(profession_id=1, category_id=2, criterion_id=3)
        assert row.weight == 15
        assert row.type == CriterionType.NEUTRAL

    @pytest.mark.parametrize("raw", [None, "", "bogus"])
    def test_weight_type_coerced(self, raw):
        row = CriterionWeight(profession_id=1, category_id=2, criterion_id=3, type=raw)
        assert row.type == CriterionType.NEUTRAL

    def test_category_view_has_criteria(self):
        empty = CategoryForProfession(id=1, name="A", color="#6BB6FF")
        assert empty.has_criteria is False
        full = empty.model_copy(update={"criteria": [CriterionView(id=1, name="X")]})
        assert full.has_criteria is True

    def test_model_copy_leaves_original(self):
        prof = Profession(id=1, name="Dev")
        renamed = prof.model_copy(update={"name": "Lead"})
        assert prof.name == "Dev"
        assert renamed.name == "Lead"


class TestRecommendationPreferences:
    def test_defaults(self):
        prefs = RecommendationPreferences()
        assert prefs.advantage_weight == 0.6
        assert prefs.disadvantage_weight == 0.4
        assert prefs.priority_for(42) == DEFAULT_PRIORITY

    @pytest.mark.parametrize("field", ["advantage_weight", "disadvantage_weight"])
    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_share_accepted_unchanged(self, field, value):
        prefs = RecommendationPreferences(**{field: value})
        assert getattr(prefs, field) == value

    @pytest.mark.parametrize("priority", [0, 6])
    def test_priority_range(self, priority):
        with pytest.raises(ValidationError):
            RecommendationPreferences(priority_categories={1: priority})

    def test_string_keys_coerced(self):
        prefs = RecommendationPreferences.model_validate({"priority_categories": {"3": 5}})
        assert prefs.priority_for(3) == 5


class TestMetaModels:
    def test_version_status(self):
        status = DataVersionStatus(current_version="2.0.0", is_current=False)
        assert status.stored_version is None

    def test_migration_report_defaults(self):
        report = MigrationReport(migrated=False, reason="no legacy data")
        assert report.criteria_extracted == 0
        assert report.profession_id is None
