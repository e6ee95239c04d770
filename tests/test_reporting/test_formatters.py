"""Tests for bulle_chart.reporting.formatters."""

from __future__ import annotations

from bulle_chart.comparison.metrics import calculate_professions_metrics
from bulle_chart.models.taxonomy import CategoryForProfession, CriterionView, Profession
from bulle_chart.recommendations.ranker import get_recommendation
from bulle_chart.reporting.formatters import (
    format_metrics_table,
    format_profession_list,
    format_profession_view,
    format_recommendation,
)


# ── format_profession_list ────────────────────────────────────────────────────


def test_profession_list_empty() -> None:
    """Empty list points the user at add-profession."""
    assert "add-profession" in format_profession_list([])


def test_profession_list_marks_active() -> None:
    """Only the active profession carries the '*' marker."""
    text = format_profession_list(
        [Profession(id=1, name="Dev"), Profession(id=2, name="Designer")], active_id=2
    )
    rows = text.split("\n")[2:]
    assert "*" not in rows[0]
    assert rows[1].strip().startswith("*")
    assert "Designer" in rows[1]


# ── format_profession_view ────────────────────────────────────────────────────


def test_profession_view_empty() -> None:
    text = format_profession_view(Profession(id=1, name="Dev"), [])
    assert "=== Dev (id 1) ===" in text
    assert "no professional interests" in text


def test_profession_view_bands_and_labels() -> None:
    """Each criterion shows its weight, French type label and weight band."""
    category = CategoryForProfession(
        id=1,
        name="Technique",
        color="#6BB6FF",
        criteria=[
            CriterionView(id=1, name="Défis techniques", weight=20, type="advantage"),
            CriterionView(id=2, name="Télétravail", weight=3),
        ],
    )
    text = format_profession_view(Profession(id=1, name="Dev"), [category])
    assert "[Technique]  #6BB6FF  total 23" in text
    assert "Avantage" in text
    assert "small_disadvantage (19-24)" in text
    assert "Neutre" in text
    assert "advantage (1-6)" in text


def test_profession_view_category_without_criteria() -> None:
    category = CategoryForProfession(id=1, name="Vide", color="#FFB366")
    text = format_profession_view(Profession(id=1, name="Dev"), [category])
    assert "(no key motivations)" in text


# ── format_metrics_table ──────────────────────────────────────────────────────


def test_metrics_table_empty() -> None:
    assert "(nothing to compare)" in format_metrics_table({}, {})


def test_metrics_table_rows(store, seeded) -> None:
    """One row per profession with score and top interests."""
    professions = {p.id: p for p in store.load_professions()}
    metrics = calculate_professions_metrics(store, list(professions))
    text = format_metrics_table(metrics, professions)
    dev_row = next(line for line in text.split("\n") if line.strip().startswith("Développeur"))
    assert "47" in dev_row
    assert "Technique, Relationnel" in dev_row


def test_metrics_table_unknown_profession_name(store, seeded) -> None:
    """A profession missing from the name map falls back to '#id'."""
    metrics = calculate_professions_metrics(store, [seeded.dev.id])
    text = format_metrics_table(metrics, {})
    assert f"#{seeded.dev.id}" in text


# ── format_recommendation ─────────────────────────────────────────────────────


def test_recommendation_none() -> None:
    assert "(no professions to rank)" in format_recommendation(None, {})


def test_recommendation_winner(store, seeded) -> None:
    professions = {p.id: p for p in store.load_professions()}
    rec = get_recommendation(store, list(professions))
    text = format_recommendation(rec, professions)
    assert "Recommended: Développeur  (score 64.5)" in text
    assert f"Confidence:  {rec.confidence.percentage}%" in text
    assert "- Points forts : Technique, Relationnel" in text
    # 64.5 vs 42.0 is a 35% gap, below the reliability threshold
    assert "[WARN]" in text


def test_recommendation_single_profession_no_warning(store, seeded) -> None:
    """A lone candidate is fully reliable, so no warning line."""
    rec = get_recommendation(store, [seeded.designer.id])
    text = format_recommendation(rec, {seeded.designer.id: seeded.designer})
    assert "Confidence:  100%  Très fiable" in text
    assert "[WARN]" not in text
