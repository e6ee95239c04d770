"""
Tests for bulle_chart/validation.py.

Every rule returns None when valid and a user-facing message otherwise.
"""

from __future__ import annotations

import pytest

from bulle_chart.config import LimitsConfig
from bulle_chart.models.taxonomy import Category
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


# ── Names ─────────────────────────────────────────────────────────────────────

class TestNames:
    @pytest.mark.parametrize("name", ["", "   ", None, 12])
    def test_blank_names_rejected(self, name):
        assert validate_category_name(name) is not None
        assert validate_criterion_name(name) is not None
        assert validate_profession_name(name) == "Le nom du métier est obligatoire"

    def test_valid_names(self):
        assert validate_category_name("Technique") is None
        assert validate_criterion_name(" Autonomie ") is None
        assert validate_profession_name("Dev") is None


# ── Weights ───────────────────────────────────────────────────────────────────

class TestWeights:
    @pytest.mark.parametrize("weight", [1, 15, 30, "12", " 7.5 ", 29.9])
    def test_in_range(self, weight):
        assert validate_weight(weight) is None

    @pytest.mark.parametrize("weight", [0, 31, -4, "abc", None, True, float("nan"), float("inf")])
    def test_out_of_range_or_not_numeric(self, weight):
        assert validate_weight(weight) == "Importance must be between 1 and 30"

    def test_custom_limits(self):
        limits = LimitsConfig(min_weight=5, max_weight=10, default_weight=7)
        assert validate_weight(4, limits) == "Importance must be between 5 and 10"
        assert validate_weight(10, limits) is None

    def test_coerce_weight(self):
        assert coerce_weight("20") == 20.0
        assert coerce_weight(False) is None
        assert coerce_weight([]) is None


def test_criterion_type():
    assert validate_criterion_type("advantage") is None
    assert validate_criterion_type("small_disadvantage") is None
    assert "Type must be one of" in validate_criterion_type("excellent")


# ── Limits ────────────────────────────────────────────────────────────────────

class TestLimits:
    def test_category_limit(self):
        assert validate_category_limit(9) is None
        assert validate_category_limit(10) == (
            "You cannot add more than 10 professional interests"
        )

    def test_criterion_limit(self):
        assert validate_criterion_limit(109) is None
        assert validate_criterion_limit(110) is not None

    def test_profession_limit(self):
        assert validate_profession_limit(4) is None
        assert validate_profession_limit(5) == "Vous ne pouvez pas créer plus de 5 métiers"

    def test_overridden_limit(self):
        assert validate_profession_limit(2, LimitsConfig(max_professions=2)) is not None


# ── Colours ───────────────────────────────────────────────────────────────────

class TestColorUsed:
    categories = [
        Category(id=1, name="A", color="#6BB6FF"),
        Category(id=2, name="B", color="#66D9A3"),
    ]

    def test_used(self):
        assert is_color_used("#6BB6FF", self.categories) is True

    def test_unused(self):
        assert is_color_used("#FFB366", self.categories) is False

    def test_excluded_category_ignored(self):
        assert is_color_used("#6BB6FF", self.categories, exclude_id=1) is False
        assert is_color_used("#66D9A3", self.categories, exclude_id=1) is True
