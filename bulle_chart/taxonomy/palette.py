"""
Category colour palette.

The palette is deliberately limited to 10 colours: category colours are
unique, so the palette size is also the hard cap on the number of
categories (see ``LimitsConfig.max_categories``).
"""

COLOR_PALETTE: tuple[str, ...] = (
    "#6BB6FF",  # soft blue
    "#66D9A3",  # soft green
    "#FFB366",  # soft orange
    "#FF7F9F",  # soft rose
    "#B894FF",  # soft violet
    "#5DD9E8",  # soft cyan
    "#FF8CC8",  # soft pink
    "#8B9AFF",  # soft indigo
    "#4DD9B8",  # soft turquoise
    "#FFCC66",  # soft yellow
)

DEFAULT_COLOR = COLOR_PALETTE[0]


def first_free_color(used: set[str] | frozenset[str]) -> str | None:
    """Return the first palette colour not in ``used``, or ``None`` if exhausted."""
    for color in COLOR_PALETTE:
        if color not in used:
            return color
    return None
