"""
Fit a caption into a slot's bounding box.

The caption is wrapped on whitespace at the slot's configured font size. If the
wrapped block is wider or taller than the box, the size is lowered by a fixed
step and the text is wrapped again, down to a floor. Words are only broken
between characters once the floor is reached. Text that still does not fit is
rejected instead of being clipped.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from PIL import ImageFont

from ..logger import get_logger
from .assets import AssetCache
from .errors import TextTooLargeError
from .models import LayoutLine, LayoutPlan, RenderOptions, SlotBox, SlotConfig

logger = get_logger("caption_core.text_fit")


def build_caption(text: str, config: SlotConfig) -> str:
    return f"{config.text_prefix}{text.strip()}{config.text_suffix}"


def compose(
    text: str,
    config: SlotConfig,
    options: Optional[RenderOptions] = None,
    fonts: Optional[AssetCache] = None,
) -> LayoutPlan:
    options = options or RenderOptions()
    fonts = fonts or AssetCache()
    caption = build_caption(text, config)
    box = config.box

    if not caption.strip():
        return LayoutPlan(lines=(), font_size=config.font_size, effective_font_scale=1.0)

    size = config.font_size
    floor = max(1, min(options.min_font_size, size))
    step = max(1, options.font_size_step)

    while True:
        font = fonts.font(config.font_path, size)
        at_floor = size <= floor
        lines = wrap_text(caption, font, box.width, break_words=at_floor, stroke_width=options.stroke_width)
        if lines is not None:
            line_height = measure_line_height(font, options)
            if len(lines) * line_height <= box.height:
                logger.debug("caption fits %s at %spx in %s lines", config.label, size, len(lines))
                return _place_lines(lines, font, size, line_height, config, options)

        if at_floor:
            raise TextTooLargeError(caption, floor)
        size = max(floor, size - step)


def measure_line_height(font: ImageFont.FreeTypeFont, options: RenderOptions) -> int:
    ascent, descent = font.getmetrics()
    glyph_height = ascent + descent + 2 * options.stroke_width
    return max(1, math.ceil(glyph_height * (1 + options.line_spacing)))


def text_extent(font: ImageFont.FreeTypeFont, text: str, stroke_width: int = 0) -> Tuple[float, float]:
    """Horizontal ink extent of ``text`` relative to its origin."""
    if not text:
        return 0.0, 0.0
    left, _, right, _ = font.getbbox(text, stroke_width=stroke_width, anchor="ls")
    return left, right


def text_width(font: ImageFont.FreeTypeFont, text: str, stroke_width: int = 0) -> float:
    left, right = text_extent(font, text, stroke_width)
    return right - left


def wrap_text(
    text: str,
    font: ImageFont.FreeTypeFont,
    max_width: float,
    *,
    break_words: bool = False,
    stroke_width: int = 0,
) -> Optional[List[str]]:
    """Greedily wrap ``text``; ``None`` means it cannot fit ``max_width`` at this size."""
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(font, candidate, stroke_width) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
                current = ""
            if text_width(font, word, stroke_width) <= max_width:
                current = word
                continue
            if not break_words:
                return None

            pieces = _break_word(word, font, max_width, stroke_width)
            if pieces is None:
                return None
            lines.extend(pieces[:-1])
            current = pieces[-1]

        lines.append(current)
    return lines


def _break_word(
    word: str,
    font: ImageFont.FreeTypeFont,
    max_width: float,
    stroke_width: int,
) -> Optional[List[str]]:
    pieces: List[str] = []
    current = ""
    for char in word:
        candidate = current + char
        if text_width(font, candidate, stroke_width) <= max_width:
            current = candidate
            continue
        if not current:
            return None
        pieces.append(current)
        current = char
        if text_width(font, current, stroke_width) > max_width:
            return None
    pieces.append(current)
    return pieces


def _place_lines(
    lines: List[str],
    font: ImageFont.FreeTypeFont,
    size: int,
    line_height: int,
    config: SlotConfig,
    options: RenderOptions,
) -> LayoutPlan:
    box: SlotBox = config.box
    ascent, descent = font.getmetrics()
    stroke = options.stroke_width
    glyph_height = ascent + descent + 2 * stroke
    # Spacing is split evenly above and below each line.
    leading = (line_height - glyph_height) / 2
    block_top = box.top + (box.height - len(lines) * line_height) / 2

    placed = []
    for index, line in enumerate(lines):
        line_top = block_top + index * line_height + leading
        baseline = line_top + stroke + ascent
        left, right = text_extent(font, line, stroke)
        ink_left = box.left + (box.width - (right - left)) / 2
        placed.append(
            LayoutLine(
                text=line,
                x=ink_left - left,
                y=baseline,
                bounds=(ink_left, line_top, ink_left + (right - left), line_top + glyph_height),
            )
        )

    return LayoutPlan(
        lines=tuple(placed),
        font_size=size,
        effective_font_scale=size / config.font_size,
        line_height=line_height,
    )
