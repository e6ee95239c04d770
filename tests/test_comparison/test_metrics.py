"""
Tests for bulle_chart/comparison/metrics.py.

What we test
------------
- global_score equals total_weight (no multipliers).
- Counts ignore categories without criteria.
- Type distribution sums weights per type.
- top_categories / top_criteria: three heaviest, stable on ties.
- Batched variant matches the single variant; {} / None for empty input.
"""

from __future__ import annotations

from bulle_chart.comparison.metrics import (
    build_profession_metrics,
    calculate_profession_metrics,
    calculate_professions_metrics,
)
from bulle_chart.models.taxonomy import CategoryForProfession, CriterionView


def test_dev_metrics(store, seeded):
    m = calculate_profession_metrics(store, seeded.dev.id)
    assert m.profession_id == seeded.dev.id
    assert m.total_weight == 47
    assert m.global_score == m.total_weight
    assert m.total_criteria_count == 4
    assert m.categories_count == 2
    assert m.type_distribution.advantage == 30
    assert m.type_distribution.neutral == 17
    assert m.type_distribution.disadvantage == 0


def test_category_details(store, seeded):
    m = calculate_profession_metrics(store, seeded.designer.id)
    details = {d.name: d for d in m.category_details}
    assert set(details) == {"Technique", "Relationnel"}
    assert details["Technique"].weight == 9
    assert details["Technique"].criteria_count == 3
    assert details["Technique"].type_distribution.disadvantage == 9


def test_top_categories_and_criteria(store, seeded):
    m = calculate_profession_metrics(store, seeded.dev.id)
    assert [(t.name, t.weight) for t in m.top_categories] == [
        ("Technique", 35), ("Relationnel", 12),
    ]
    assert [(t.name, t.weight, t.category_name) for t in m.top_criteria] == [
        ("Autonomie", 20, "Technique"),
        ("Relations clients", 12, "Relationnel"),
        ("Défis techniques", 10, "Technique"),
    ]
    assert m.top_criteria[0].type == "advantage"


def test_top_ties_keep_order():
    categories = [
        CategoryForProfession(
            id=i,
            name=f"C{i}",
            color="#6BB6FF",
            criteria=[CriterionView(id=i, name=f"K{i}", weight=10)],
        )
        for i in range(1, 6)
    ]
    m = build_profession_metrics(1, categories)
    assert [t.name for t in m.top_categories] == ["C1", "C2", "C3"]
    assert [t.name for t in m.top_criteria] == ["K1", "K2", "K3"]


def test_falsy_weight_counts_as_default():
    cat = CategoryForProfession(
        id=1, name="C", color="#6BB6FF", criteria=[CriterionView(id=1, name="K", weight=0)]
    )
    m = build_profession_metrics(1, [cat])
    assert m.total_weight == 15
    assert m.top_criteria[0].weight == 15


def test_batch_matches_single(store, seeded):
    batch = calculate_professions_metrics(store, [seeded.dev.id, seeded.designer.id])
    assert list(batch) == [seeded.dev.id, seeded.designer.id]
    assert batch[seeded.dev.id] == calculate_profession_metrics(store, seeded.dev.id)
    assert batch[seeded.designer.id] == calculate_profession_metrics(store, seeded.designer.id)


def test_empty_inputs(store):
    assert calculate_professions_metrics(store, []) == {}
    assert calculate_profession_metrics(store, 0) is None


def test_profession_without_weights(store, seeded):
    newcomer = store.add_profession("Vide")
    m = calculate_profession_metrics(store, newcomer.id)
    assert m.total_weight == 0
    assert m.categories_count == 0
    assert m.top_categories == []
