"""
ASCII terminal formatters for CLI commands.

All formatters accept already-computed objects (join views, metrics,
recommendations) and return plain multi-line strings suitable for
``typer.echo()``. Nothing here reads storage.

No third-party dependencies (no ``rich``, no ``colorama``).

Weight bands
------------
``format_profession_view()`` tags every criterion with its weight band so a
reader can see the advantage / disadvantage reading of each weight::

  [Technique]  #6BB6FF  total 35
      Défis techniques          20  small_disadvantage  (19-24)
"""

from __future__ import annotations

from typing import Optional

from bulle_chart.comparison.metrics import ProfessionMetrics
from bulle_chart.models.taxonomy import CategoryForProfession, Profession
from bulle_chart.recommendations.ranker import Recommendation
from bulle_chart.storage.taxonomy_store import category_total_weight
from bulle_chart.taxonomy.criterion_taxonomy import (
    CRITERION_TYPE_LABELS,
    WEIGHT_BAND_RANGES,
    weight_band,
)


def _profession_name(professions: dict[int, Profession], profession_id: int) -> str:
    profession = professions.get(profession_id)
    return profession.name if profession else f"#{profession_id}"


# ── Professions ──────────────────────────────────────────────────────────────


def format_profession_list(
    professions: list[Profession],
    active_id: Optional[int] = None,
) -> str:
    """One line per profession, active one marked with ``*``."""
    if not professions:
        return "  (no professions yet; run 'add-profession' first)"
    lines = [f"  {'':1} {'ID':>3}  {'Name':<30}  Created"]
    lines.append("  " + "-" * 52)
    for p in professions:
        marker = "*" if p.id == active_id else " "
        lines.append(
            f"  {marker} {p.id:>3}  {p.name[:30]:<30}  {p.created_at:%Y-%m-%d}"
        )
    return "\n".join(lines)


# ── Join view ────────────────────────────────────────────────────────────────


def format_profession_view(
    profession: Profession,
    categories: list[CategoryForProfession],
) -> str:
    """Format one profession's join view, category by category.

    Args:
        profession: Profession the view belongs to (header).
        categories: Output of ``get_categories_for_profession()``.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== {profession.name} (id {profession.id}) ===")

    if not categories:
        lines.append("  (no professional interests yet)")
        return "\n".join(lines)

    for category in categories:
        lines.append("")
        lines.append(
            f"  [{category.name}]  {category.color}  "
            f"total {category_total_weight(category)}"
        )
        if not category.criteria:
            lines.append("      (no key motivations)")
            continue
        for criterion in category.criteria:
            band = weight_band(criterion.weight)
            lo, hi = WEIGHT_BAND_RANGES[band]
            lines.append(
                f"      {criterion.name[:28]:<28}  {criterion.weight:>3}  "
                f"{CRITERION_TYPE_LABELS[criterion.type]:<24}  "
                f"{band.value} ({lo}-{hi})"
            )
    return "\n".join(lines)


# ── Comparison ───────────────────────────────────────────────────────────────


def format_metrics_table(
    metrics: dict[int, ProfessionMetrics],
    professions: dict[int, Profession],
) -> str:
    """Side-by-side comparison table, one row per profession.

    Args:
        metrics:     ``calculate_professions_metrics()`` output.
        professions: ``{id: Profession}`` for display names.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Profession Comparison ===")
    if not metrics:
        lines.append("  (nothing to compare)")
        return "\n".join(lines)

    header = (
        f"  {'Profession':<24}  {'Score':>7}  {'Criteria':>8}  {'Cats':>4}  "
        f"{'Adv':>5}  {'Neu':>5}  {'Dis':>5}  Top interests"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for pid, m in metrics.items():
        dist = m.type_distribution
        top = ", ".join(t.name for t in m.top_categories) or "-"
        lines.append(
            f"  {_profession_name(professions, pid)[:24]:<24}  "
            f"{m.global_score:>7.0f}  {m.total_criteria_count:>8}  "
            f"{m.categories_count:>4}  {dist.advantage_total:>5.0f}  "
            f"{dist.neutral:>5.0f}  {dist.disadvantage_total:>5.0f}  {top}"
        )
    return "\n".join(lines)


# ── Recommendation ───────────────────────────────────────────────────────────


def format_recommendation(
    recommendation: Optional[Recommendation],
    professions: dict[int, Profession],
) -> str:
    """Winner, confidence, ranked scores and explanation."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Recommendation ===")
    if recommendation is None:
        lines.append("  (no professions to rank)")
        return "\n".join(lines)

    winner = _profession_name(professions, recommendation.recommended_profession_id)
    conf = recommendation.confidence
    lines.append(f"  Recommended: {winner}  (score {recommendation.recommended_score:.1f})")
    lines.append(f"  Confidence:  {conf.percentage}%  {conf.label}")
    lines.append("")

    ranked = sorted(recommendation.all_scores, key=lambda s: -s.total_score)
    for rank, score in enumerate(ranked, start=1):
        lines.append(
            f"  {rank:>2}. {_profession_name(professions, score.profession_id)[:30]:<30}  "
            f"{score.total_score:>9.1f}"
        )

    if recommendation.explanation.points:
        lines.append("")
        for point in recommendation.explanation.points:
            lines.append(f"  - {point}")
    for warning in recommendation.explanation.warnings:
        lines.append(f"  [WARN] {warning}")
    return "\n".join(lines)
