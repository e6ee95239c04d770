"""
Recommendation ranker: scores every candidate profession, ranks them, and
builds the recommendation with a confidence label and an explanation.

Usage flow
----------
1. store.get_categories_for_professions(ids)      (one batched join)
2. compute_profession_score(...) per id            (input order)
3. rank_scores(scores)                             (stable, descending)
4. calculate_confidence(scores)                    (top two scores only)
5. build_explanation(ranked, confidence)

``get_recommendation()`` runs the whole flow and returns ``None`` for an
empty id list without touching the store.

Confidence tiers
----------------
    fewer than 2 professions     -> 100%  "Très fiable"
    best score == 0              ->   0%  "Non fiable"
    diff = (best - second) / best * 100
        >= 80 "Très fiable" | >= 60 "Fiable" | >= 40 "Moyennement fiable"
        otherwise "Peu fiable"

A third-place score never affects confidence. Ties at the top keep input
order.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from bulle_chart.models.preferences import RecommendationPreferences
from bulle_chart.recommendations.scorer import ProfessionScore, compute_profession_score
from bulle_chart.storage.taxonomy_store import TaxonomyStore

logger = logging.getLogger(__name__)

LABEL_VERY_RELIABLE = "Très fiable"
LABEL_RELIABLE = "Fiable"
LABEL_MODERATELY_RELIABLE = "Moyennement fiable"
LABEL_LOW_RELIABILITY = "Peu fiable"
LABEL_NOT_RELIABLE = "Non fiable"

CONFIDENCE_TIERS: tuple[tuple[float, str], ...] = (
    (80.0, LABEL_VERY_RELIABLE),
    (60.0, LABEL_RELIABLE),
    (40.0, LABEL_MODERATELY_RELIABLE),
)
LOW_CONFIDENCE_THRESHOLD = 40

TOP_CATEGORY_COUNT = 3

PreferencesInput = Union[RecommendationPreferences, dict[str, Any], None]


@dataclass
class Confidence:
    """How decisively the winner beats the runner-up.

    Attributes:
        percentage: Rounded difference percentage, 0–100.
        label:      Tier label.
        raw_pct:    Unrounded difference percentage.
    """

    percentage: int
    label:      str
    raw_pct:    float


@dataclass
class Explanation:
    points:   list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class Recommendation:
    """Outcome of ``get_recommendation()``.

    ``preferences`` echoes the merged preferences, including the currently
    unused advantage/disadvantage weights, so callers can read them back.
    """

    recommended_profession_id: int
    recommended_score:         float
    confidence:                Confidence
    all_scores:                list[ProfessionScore]
    explanation:               Explanation
    preferences:               RecommendationPreferences


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rank_scores(scores: list[ProfessionScore]) -> list[ProfessionScore]:
    """Sort descending by total score; equal scores keep their input order."""
    return sorted(scores, key=lambda s: -s.total_score)


def calculate_confidence(scores: list[ProfessionScore]) -> Confidence:
    """Confidence from the gap between the two best scores."""
    if len(scores) < 2:
        return Confidence(percentage=100, label=LABEL_VERY_RELIABLE, raw_pct=100.0)

    ranked = rank_scores(scores)
    best = ranked[0].total_score
    second = ranked[1].total_score

    if best == 0:
        return Confidence(percentage=0, label=LABEL_NOT_RELIABLE, raw_pct=0.0)

    diff_pct = (best - second) / best * 100
    label = LABEL_LOW_RELIABILITY
    for threshold, tier_label in CONFIDENCE_TIERS:
        if diff_pct >= threshold:
            label = tier_label
            break

    return Confidence(
        percentage=_round_half_up(diff_pct),
        label=label,
        raw_pct=diff_pct,
    )


def build_explanation(
    ranked: list[ProfessionScore],
    confidence: Confidence,
) -> Explanation:
    """Assemble the human-readable explanation for the winning profession.

    Args:
        ranked:     Scores sorted by ``rank_scores()``; the winner is first.
        confidence: Result of ``calculate_confidence()``.

    Returns:
        ``Explanation`` with up to two points and at most one warning.
    """
    explanation = Explanation()
    winner = ranked[0]

    top = sorted(winner.category_scores, key=lambda c: -c.score)[:TOP_CATEGORY_COUNT]
    if top:
        names = ", ".join(c.category_name for c in top)
        explanation.points.append(f"Points forts : {names}")

    if len(ranked) > 1 and ranked[1].total_score > 0:
        diff_pct = (winner.total_score - ranked[1].total_score) / winner.total_score * 100
        explanation.points.append(
            f"Score supérieur de {diff_pct:.1f}% par rapport au second métier"
        )

    if confidence.percentage < LOW_CONFIDENCE_THRESHOLD:
        explanation.warnings.append(
            "Les scores sont très proches. La recommandation est peu fiable."
        )

    return explanation


def merge_preferences(
    preferences: PreferencesInput,
    defaults: Optional[RecommendationPreferences] = None,
) -> RecommendationPreferences:
    """Overlay caller preferences on the defaults.

    A dict may carry any subset of fields; missing fields keep the default.
    """
    base = defaults or RecommendationPreferences()
    if preferences is None:
        return base
    if isinstance(preferences, RecommendationPreferences):
        return preferences
    merged = {**base.model_dump(), **preferences}
    return RecommendationPreferences.model_validate(merged)


def get_recommendation(
    store: TaxonomyStore,
    profession_ids: list[int],
    preferences: PreferencesInput = None,
    defaults: Optional[RecommendationPreferences] = None,
) -> Optional[Recommendation]:
    """Recommend the best-fitting profession among ``profession_ids``.

    Args:
        store:          Taxonomy Store providing the join view.
        profession_ids: Candidates, in the order used for tie-breaking.
        preferences:    Caller preferences (model, partial dict or ``None``).
        defaults:       Base preferences, typically from ``AppConfig``.

    Returns:
        ``Recommendation``, or ``None`` when ``profession_ids`` is empty.
    """
    if not profession_ids:
        return None

    final_preferences = merge_preferences(preferences, defaults)
    categories_by_profession = store.get_categories_for_professions(profession_ids)

    scores = [
        compute_profession_score(
            pid, categories_by_profession.get(pid, []), final_preferences
        )
        for pid in profession_ids
    ]
    ranked = rank_scores(scores)
    confidence = calculate_confidence(scores)
    explanation = build_explanation(ranked, confidence)

    winner = ranked[0]
    logger.info(
        "Recommended profession %d (score %.2f, confidence %d%% %s) among %d.",
        winner.profession_id, winner.total_score,
        confidence.percentage, confidence.label, len(scores),
    )
    return Recommendation(
        recommended_profession_id=winner.profession_id,
        recommended_score=winner.total_score,
        confidence=confidence,
        all_scores=ranked,
        explanation=explanation,
        preferences=final_preferences,
    )
