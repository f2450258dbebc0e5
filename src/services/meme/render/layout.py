"""
Text layout for meme caption zones.

Sizes and wraps a caption using fixed-width heuristics rather than real glyph
metrics, so the result depends only on the text, the zone and the image size:

- font size: ``zone_width / len(text) * 2`` clamped to the zone's font range
- characters per line: ``zone_width / (font_size * 0.6)``
- line height: ``font_size * 1.2``
- outline stroke: ``font_size * 0.08``
"""

import math
from dataclasses import dataclass
from typing import Literal

from src.services.meme.render.errors import ZoneOverflow
from src.services.meme.templates.models import TextZone

FONT_SIZE_FACTOR = 2.0
CHAR_WIDTH_RATIO = 0.6
LINE_HEIGHT_RATIO = 1.2
STROKE_WIDTH_RATIO = 0.08

TextAnchor = Literal["start", "middle", "end"]

_TEXT_ANCHORS: dict[str, TextAnchor] = {
    "left": "start",
    "center": "middle",
    "right": "end",
}


@dataclass(frozen=True)
class ZoneBounds:
    """A zone converted to absolute pixels."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_zone(cls, zone: TextZone, image_width: int, image_height: int) -> "ZoneBounds":
        return cls(
            x=zone.x / 100 * image_width,
            y=zone.y / 100 * image_height,
            width=zone.width / 100 * image_width,
            height=zone.height / 100 * image_height,
        )


@dataclass(frozen=True)
class LinePlacement:
    """One wrapped line and the point it is anchored at.

    ``y`` is the line's vertical middle; ``x`` is its start, middle or end
    depending on the layout's ``text_anchor``.
    """

    text: str
    x: float
    y: float


@dataclass(frozen=True)
class RenderedLayout:
    zone_id: str
    font_size: int
    max_chars_per_line: int
    line_height: float
    stroke_width: float
    text_anchor: TextAnchor
    bounds: ZoneBounds
    placements: tuple[LinePlacement, ...]

    @property
    def lines(self) -> list[str]:
        return [p.text for p in self.placements]

    @property
    def block_height(self) -> float:
        return len(self.placements) * self.line_height

    @property
    def overflows_zone(self) -> bool:
        return self.block_height > self.bounds.height


def compute_font_size(text: str, zone: TextZone, zone_pixel_width: float) -> int:
    """Heuristic font size for ``text``, always within the zone's font range."""
    if not text:
        raise ValueError("Cannot size empty text; skip zones without captions")

    candidate = zone_pixel_width / len(text) * FONT_SIZE_FACTOR
    clamped = min(zone.max_font_size, max(zone.min_font_size, candidate))
    return math.floor(clamped)


def max_chars_for(zone_pixel_width: float, font_size: int) -> int:
    return math.floor(zone_pixel_width / (font_size * CHAR_WIDTH_RATIO))


def wrap_text(text: str, max_chars_per_line: int) -> list[str]:
    """Greedily pack whitespace-separated words into lines.

    A word longer than ``max_chars_per_line`` gets a line of its own and is
    never split.
    """
    lines: list[str] = []
    current = ""

    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_chars_per_line:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word

    if current:
        lines.append(current)

    return lines


def _anchor_x(zone: TextZone, bounds: ZoneBounds) -> float:
    if zone.align == "center":
        return bounds.x + bounds.width / 2
    if zone.align == "right":
        return bounds.x + bounds.width
    return bounds.x


def _first_line_y(
    zone: TextZone, bounds: ZoneBounds, font_size: int, line_count: int, line_height: float
) -> float:
    block_height = line_count * line_height
    if zone.valign == "top":
        return bounds.y + font_size
    if zone.valign == "bottom":
        return bounds.y + bounds.height - block_height + font_size
    return bounds.y + bounds.height / 2 - block_height / 2 + line_height / 2


def compute_layout(
    text: str,
    zone: TextZone,
    image_width: int,
    image_height: int,
    strict: bool = False,
) -> RenderedLayout:
    """Size, wrap and position ``text`` inside ``zone``.

    Args:
        text: Caption for the zone. Must contain at least one word.
        zone: Zone definition in percent coordinates.
        image_width: Actual pixel width of the loaded template image.
        image_height: Actual pixel height of the loaded template image.
        strict: Raise ZoneOverflow instead of letting text spill past the zone.

    Raises:
        ValueError: If ``text`` has no words.
        ZoneOverflow: In strict mode, when the wrapped block is taller than the zone.
    """
    if not text or not text.split():
        raise ValueError(f"No text for zone '{zone.id}'; callers must skip empty zones")

    bounds = ZoneBounds.from_zone(zone, image_width, image_height)
    font_size = compute_font_size(text, zone, bounds.width)
    max_chars = max_chars_for(bounds.width, font_size)
    lines = wrap_text(text, max_chars)
    line_height = font_size * LINE_HEIGHT_RATIO

    if strict and len(lines) * line_height > bounds.height:
        raise ZoneOverflow(zone.id, len(lines) * line_height, bounds.height)

    x = _anchor_x(zone, bounds)
    first_y = _first_line_y(zone, bounds, font_size, len(lines), line_height)
    placements = tuple(
        LinePlacement(text=line.upper(), x=x, y=first_y + i * line_height)
        for i, line in enumerate(lines)
    )

    return RenderedLayout(
        zone_id=zone.id,
        font_size=font_size,
        max_chars_per_line=max_chars,
        line_height=line_height,
        stroke_width=font_size * STROKE_WIDTH_RATIO,
        text_anchor=_TEXT_ANCHORS[zone.align],
        bounds=bounds,
        placements=placements,
    )
