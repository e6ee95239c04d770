"""
Tests for bulle_chart/recommendations/ranker.py.

What we test
------------
calculate_confidence():
  - Fewer than two professions -> 100 / "Très fiable".
  - [100, 20] -> 80 / "Très fiable"; [100, 100] -> 0 / "Peu fiable";
    [0, 0] -> 0 / "Non fiable".
  - Tier boundaries at 80 / 60 / 40; half-up rounding of the percentage.
  - A third score never changes the result.

build_explanation():
  - "Points forts" lists the winner's top three categories by score.
  - The second-place line only appears when the runner-up scored > 0.
  - A warning appears when confidence < 40.

get_recommendation():
  - None for an empty id list.
  - Ties keep input order.
  - Preferences merge over defaults and are echoed back.
"""

from __future__ import annotations

import pytest

from bulle_chart.models.preferences import RecommendationPreferences
from bulle_chart.recommendations.ranker import (
    Confidence,
    build_explanation,
    calculate_confidence,
    get_recommendation,
    merge_preferences,
    rank_scores,
)
from bulle_chart.recommendations.scorer import CategoryScore, ProfessionScore


def _scores(*totals: float) -> list[ProfessionScore]:
    return [ProfessionScore(profession_id=i + 1, total_score=t) for i, t in enumerate(totals)]


def _cat(cat_id: int, score: float) -> CategoryScore:
    return CategoryScore(
        category_id=cat_id,
        category_name=f"Cat {cat_id}",
        score=score,
        total_weight=score,
        type_multiplier=1.0,
        priority_multiplier=1.0,
    )


# ── calculate_confidence ──────────────────────────────────────────────────────

class TestConfidence:
    def test_single_profession(self):
        conf = calculate_confidence(_scores(42))
        assert (conf.percentage, conf.label) == (100, "Très fiable")

    def test_no_profession(self):
        assert calculate_confidence([]).percentage == 100

    def test_clear_winner(self):
        conf = calculate_confidence(_scores(100, 20))
        assert (conf.percentage, conf.label) == (80, "Très fiable")

    def test_tie(self):
        conf = calculate_confidence(_scores(100, 100))
        assert (conf.percentage, conf.label) == (0, "Peu fiable")

    def test_all_zero(self):
        conf = calculate_confidence(_scores(0, 0))
        assert (conf.percentage, conf.label) == (0, "Non fiable")

    @pytest.mark.parametrize("second, label", [
        (10, "Très fiable"),
        (35, "Fiable"),
        (55, "Moyennement fiable"),
        (80, "Peu fiable"),
    ])
    def test_labels(self, second, label):
        assert calculate_confidence(_scores(100, second)).label == label

    def test_order_independent(self):
        assert calculate_confidence(_scores(20, 100)).percentage == 80

    def test_third_place_ignored(self):
        assert calculate_confidence(_scores(100, 50, 49)) == calculate_confidence(_scores(100, 50))

    def test_half_up_rounding(self):
        # (200 - 175) / 200 = 12.5%
        conf = calculate_confidence(_scores(200, 175))
        assert conf.raw_pct == pytest.approx(12.5)
        assert conf.percentage == 13


def test_rank_scores_stable():
    ranked = rank_scores(_scores(5, 9, 9, 1))
    assert [s.profession_id for s in ranked] == [2, 3, 1, 4]


# ── build_explanation ─────────────────────────────────────────────────────────

class TestExplanation:
    def test_points(self):
        winner = ProfessionScore(
            profession_id=1,
            total_score=100,
            category_scores=[_cat(1, 10), _cat(2, 40), _cat(3, 30), _cat(4, 20)],
        )
        runner_up = ProfessionScore(profession_id=2, total_score=50)
        expl = build_explanation([winner, runner_up], calculate_confidence([winner, runner_up]))
        assert expl.points == [
            "Points forts : Cat 2, Cat 3, Cat 4",
            "Score supérieur de 50.0% par rapport au second métier",
        ]
        assert expl.warnings == []

    def test_zero_runner_up_has_no_comparison(self):
        winner = ProfessionScore(profession_id=1, total_score=10, category_scores=[_cat(1, 10)])
        expl = build_explanation(
            [winner, ProfessionScore(profession_id=2, total_score=0)],
            Confidence(percentage=100, label="Très fiable", raw_pct=100.0),
        )
        assert expl.points == ["Points forts : Cat 1"]

    def test_low_confidence_warning(self):
        ranked = _scores(100, 90)
        expl = build_explanation(ranked, calculate_confidence(ranked))
        assert expl.warnings == [
            "Les scores sont très proches. La recommandation est peu fiable."
        ]

    def test_no_categories_no_points(self):
        expl = build_explanation(
            _scores(0), Confidence(percentage=100, label="Très fiable", raw_pct=100.0)
        )
        assert expl.points == []


# ── merge_preferences ─────────────────────────────────────────────────────────

class TestMergePreferences:
    def test_none_returns_defaults(self):
        defaults = RecommendationPreferences(advantage_weight=0.7)
        assert merge_preferences(None, defaults) is defaults

    def test_partial_dict(self):
        merged = merge_preferences({"priority_categories": {3: 5}})
        assert merged.priority_categories == {3: 5}
        assert merged.advantage_weight == 0.6

    def test_invalid_priority(self):
        with pytest.raises(ValueError):
            merge_preferences({"priority_categories": {3: 9}})


# ── get_recommendation ────────────────────────────────────────────────────────

class TestGetRecommendation:
    def test_empty_ids(self, store):
        assert get_recommendation(store, []) is None

    def test_winner(self, store, seeded):
        # dev: Technique 35 (adv share 30/35) * 1.5 = 52.5, Relationnel 12 -> 64.5
        # designer: Technique 9 * 0.5 = 4.5, Relationnel 25 * 1.5 = 37.5 -> 42.0
        rec = get_recommendation(store, [seeded.designer.id, seeded.dev.id])
        assert rec.recommended_profession_id == seeded.dev.id
        assert rec.recommended_score == pytest.approx(64.5)
        assert [s.profession_id for s in rec.all_scores] == [seeded.dev.id, seeded.designer.id]
        assert rec.explanation.points[0] == "Points forts : Technique, Relationnel"

    def test_priorities_change_winner(self, store, seeded):
        rec = get_recommendation(
            store,
            [seeded.dev.id, seeded.designer.id],
            {"priority_categories": {seeded.technique.id: 1, seeded.relationnel.id: 5}},
        )
        # dev: 52.5 * 0.2 + 12 * 2 = 34.5 ; designer: 4.5 * 0.2 + 37.5 * 2 = 75.9
        assert rec.recommended_profession_id == seeded.designer.id
        assert rec.recommended_score == pytest.approx(75.9)

    def test_tie_keeps_input_order(self, store):
        a = store.add_profession("A")
        b = store.add_profession("B")
        rec = get_recommendation(store, [b.id, a.id])
        assert rec.recommended_profession_id == b.id
        assert rec.confidence.label == "Non fiable"

    def test_preferences_echoed(self, store, seeded):
        defaults = RecommendationPreferences(advantage_weight=0.8, disadvantage_weight=0.2)
        rec = get_recommendation(store, [seeded.dev.id], None, defaults=defaults)
        assert rec.preferences.advantage_weight == 0.8
        assert rec.confidence.percentage == 100

    def test_out_of_range_preferences_echoed(self, store, seeded):
        defaults = RecommendationPreferences(advantage_weight=1.5, disadvantage_weight=-0.2)
        rec = get_recommendation(store, [seeded.dev.id], None, defaults=defaults)
        assert rec.preferences.advantage_weight == 1.5
        assert rec.preferences.disadvantage_weight == -0.2
