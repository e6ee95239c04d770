"""
Criterion vocabulary: the five criterion types and the weight bands.

Two independent dimensions describe a criterion for one profession:
  - ``CriterionType``: the *direction*: does this motivation count for or
    against the profession?
  - ``WeightBand``   : the *magnitude bucket* a 1–30 weight falls into,
    used to colour criteria by importance.

The type is chosen explicitly by the user and is NOT derived from the weight
band; the two only share vocabulary.

Usage example::

    from bulle_chart.taxonomy.criterion_taxonomy import CriterionType, weight_band

    t = CriterionType.SMALL_ADVANTAGE
    band = weight_band(22)   # WeightBand.SMALL_DISADVANTAGE

This module has NO imports from any other ``bulle_chart`` package.
"""

from enum import StrEnum


class CriterionType(StrEnum):
    """Advantage/disadvantage direction of a criterion for one profession."""

    ADVANTAGE = "advantage"
    """Clearly counts in favour of the profession."""

    SMALL_ADVANTAGE = "small_advantage"
    """Mildly in favour."""

    NEUTRAL = "neutral"
    """No opinion ("NSP"); the default for every new weight row."""

    SMALL_DISADVANTAGE = "small_disadvantage"
    """Mildly against."""

    DISADVANTAGE = "disadvantage"
    """Clearly counts against the profession."""


DEFAULT_CRITERION_TYPE = CriterionType.NEUTRAL

ADVANTAGE_TYPES: frozenset[CriterionType] = frozenset({
    CriterionType.ADVANTAGE,
    CriterionType.SMALL_ADVANTAGE,
})

DISADVANTAGE_TYPES: frozenset[CriterionType] = frozenset({
    CriterionType.SMALL_DISADVANTAGE,
    CriterionType.DISADVANTAGE,
})

CRITERION_TYPE_LABELS: dict[CriterionType, str] = {
    CriterionType.ADVANTAGE:          "Avantage",
    CriterionType.SMALL_ADVANTAGE:    "Petit avantage",
    CriterionType.NEUTRAL:            "Neutre",
    CriterionType.SMALL_DISADVANTAGE: "Petit désavantage",
    CriterionType.DISADVANTAGE:       "Désavantage",
}


def coerce_criterion_type(value: object) -> CriterionType:
    """Return ``value`` as a ``CriterionType``, neutral for empty/unknown input.

    Stored rows written by older versions may carry no type at all, or an
    empty string. Both read as neutral.
    """
    if isinstance(value, CriterionType):
        return value
    if isinstance(value, str) and value:
        try:
            return CriterionType(value)
        except ValueError:
            return DEFAULT_CRITERION_TYPE
    return DEFAULT_CRITERION_TYPE


class WeightBand(StrEnum):
    """Six-point buckets of the 1–30 weight scale."""

    ADVANTAGE = "advantage"                      # 1–6
    SMALL_ADVANTAGE = "small_advantage"          # 7–12
    NSP = "nsp"                                  # 13–18
    SMALL_DISADVANTAGE = "small_disadvantage"    # 19–24
    DISADVANTAGE = "disadvantage"                # 25–30


WEIGHT_BAND_RANGES: dict[WeightBand, tuple[int, int]] = {
    WeightBand.ADVANTAGE:          (1, 6),
    WeightBand.SMALL_ADVANTAGE:    (7, 12),
    WeightBand.NSP:                (13, 18),
    WeightBand.SMALL_DISADVANTAGE: (19, 24),
    WeightBand.DISADVANTAGE:       (25, 30),
}

# WCAG AA contrast against white text
WEIGHT_BAND_COLORS: dict[WeightBand, str] = {
    WeightBand.ADVANTAGE:          "#1e6b47",
    WeightBand.SMALL_ADVANTAGE:    "#2d8659",
    WeightBand.NSP:                "#b85d0a",
    WeightBand.SMALL_DISADVANTAGE: "#b84c6b",
    WeightBand.DISADVANTAGE:       "#b71c1c",
}


def weight_band(weight: float) -> WeightBand:
    """Return the band a weight falls into.

    Only upper bounds are compared, so a fractional weight between two
    ranges (12.5) joins the heavier one. Anything up to 6 is
    ``WeightBand.ADVANTAGE``; anything above 24 is ``WeightBand.DISADVANTAGE``.
    """
    for band in (
        WeightBand.ADVANTAGE,
        WeightBand.SMALL_ADVANTAGE,
        WeightBand.NSP,
        WeightBand.SMALL_DISADVANTAGE,
    ):
        if weight <= WEIGHT_BAND_RANGES[band][1]:
            return band
    return WeightBand.DISADVANTAGE
