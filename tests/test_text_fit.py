import math

import pytest

from caption_bot.caption_core.errors import TextTooLargeError
from caption_bot.caption_core.models import RenderOptions
from caption_bot.caption_core.text_fit_draw import (
    build_caption,
    compose,
    measure_line_height,
    text_width,
    wrap_text,
)

from .conftest import RecordingAssetCache, make_slot

LONG_TEXT = (
    "did you just say that the quick brown fox jumps over the lazy dog "
    "while the five boxing wizards jump quickly over the sphinx of black quartz"
)


def test_short_text_is_one_centered_line(base_image, assets):
    slot = make_slot(base_image, box=(100, 100, 300, 300), font_size=12)
    plan = compose("HI", slot, fonts=assets)

    assert len(plan.lines) == 1
    assert plan.font_size == 12
    assert plan.effective_font_scale == 1.0

    x0, y0, x1, y1 = plan.lines[0].bounds
    assert abs((x0 - 100) - (300 - x1)) <= 1
    assert abs((y0 - 100) - (300 - y1)) <= 1
    assert plan.lines[0].width == text_width(assets.font(None, 12), "HI")


def test_every_line_lies_within_the_box(base_image, assets):
    slot = make_slot(base_image, box=(50, 60, 250, 340), font_size=30)
    plan = compose(LONG_TEXT, slot, fonts=assets)

    assert len(plan.lines) > 1
    for line in plan.lines:
        assert slot.box.contains(line.bounds), line


def test_wrapped_lines_keep_every_word_in_order(base_image, assets):
    slot = make_slot(base_image, box=(0, 0, 200, 400), font_size=20)
    plan = compose(LONG_TEXT, slot, fonts=assets)

    assert " ".join(line.text for line in plan.lines).split() == LONG_TEXT.split()


def test_compose_is_deterministic(base_image, assets):
    slot = make_slot(base_image, box=(10, 10, 190, 390), font_size=28)
    assert compose(LONG_TEXT, slot, fonts=assets) == compose(LONG_TEXT, slot, fonts=RecordingAssetCache())


def test_fallback_only_tries_smaller_sizes(base_image):
    fonts = RecordingAssetCache()
    slot = make_slot(base_image, box=(0, 0, 160, 90), font_size=40)
    plan = compose(LONG_TEXT, slot, RenderOptions(font_size_step=3), fonts=fonts)

    assert fonts.font_sizes[0] == 40
    assert fonts.font_sizes == sorted(set(fonts.font_sizes), reverse=True)
    assert plan.font_size == fonts.font_sizes[-1]
    assert plan.font_size < 40
    assert plan.effective_font_scale == plan.font_size / 40


def test_text_that_cannot_fit_is_rejected(base_image, assets):
    slot = make_slot(base_image, box=(0, 0, 300, 12), font_size=20)
    with pytest.raises(TextTooLargeError) as excinfo:
        compose(LONG_TEXT * 3, slot, fonts=assets)
    assert excinfo.value.min_font_size == 8


def test_box_shorter_than_a_line_at_the_floor_is_rejected(base_image, assets):
    slot = make_slot(base_image, box=(0, 0, 300, 4), font_size=12)
    with pytest.raises(TextTooLargeError):
        compose("hi", slot, fonts=assets)


def test_floor_never_exceeds_configured_size(base_image):
    fonts = RecordingAssetCache()
    slot = make_slot(base_image, box=(0, 0, 300, 3), font_size=6)
    with pytest.raises(TextTooLargeError) as excinfo:
        compose("hi", slot, fonts=fonts)
    assert fonts.font_sizes == [6]
    assert excinfo.value.min_font_size == 6


def test_long_word_is_split_only_at_the_floor(base_image, assets):
    word = "abcdefghijklmnopqrstuvwxyz"
    slot = make_slot(base_image, box=(0, 0, 40, 300), font_size=16)
    plan = compose(word, slot, RenderOptions(min_font_size=8), fonts=assets)

    assert plan.font_size == 8
    assert len(plan.lines) > 1
    assert "".join(line.text for line in plan.lines) == word
    for line in plan.lines:
        assert slot.box.contains(line.bounds)


def test_prefix_and_suffix_frame_trimmed_text(base_image, assets):
    slot = make_slot(base_image, box=(0, 0, 400, 400), text_prefix="<", text_suffix=">")
    assert build_caption("  hello  ", slot) == "<hello>"
    assert compose("  hello  ", slot, fonts=assets).text == "<hello>"


def test_empty_text_renders_prefix_and_suffix(base_image, assets):
    slot = make_slot(base_image, text_prefix="did you just say", text_suffix="?")
    plan = compose("   ", slot, fonts=assets)
    assert plan.text == "did you just say?"


def test_empty_caption_is_an_empty_plan(base_image, assets):
    plan = compose("  \n ", make_slot(base_image), fonts=assets)
    assert plan.lines == ()
    assert plan.is_empty


def test_explicit_newlines_break_lines(base_image, assets):
    plan = compose("top\nbottom", make_slot(base_image), fonts=assets)
    assert [line.text for line in plan.lines] == ["top", "bottom"]
    assert plan.lines[1].y - plan.lines[0].y == plan.line_height


def test_lines_are_individually_centered(base_image, assets):
    slot = make_slot(base_image, box=(0, 0, 400, 400), font_size=20)
    plan = compose("a\nmuch longer line", slot, fonts=assets)
    for line in plan.lines:
        x0, _, x1, _ = line.bounds
        assert abs(x0 - (400 - x1)) <= 1


def test_wrap_text_reports_overflowing_word(assets):
    font = assets.font(None, 20)
    assert wrap_text("supercalifragilistic", font, 30) is None
    assert wrap_text("supercalifragilistic", font, 30, break_words=True)


def test_wrap_text_rejects_character_wider_than_box(assets):
    font = assets.font(None, 40)
    assert wrap_text("W", font, 2, break_words=True) is None


def test_line_height_includes_spacing(assets):
    font = assets.font(None, 20)
    ascent, descent = font.getmetrics()
    assert measure_line_height(font, RenderOptions(line_spacing=0)) == ascent + descent
    assert measure_line_height(font, RenderOptions(line_spacing=0.5)) > ascent + descent


def test_stroke_keeps_lines_inside_the_box(base_image, assets):
    slot = make_slot(base_image, box=(100, 100, 300, 300), font_size=24)
    plan = compose(LONG_TEXT, slot, RenderOptions(stroke_width=3), fonts=assets)
    for line in plan.lines:
        assert slot.box.contains(line.bounds)


def test_line_height_includes_stroke(assets):
    font = assets.font(None, 20)
    ascent, descent = font.getmetrics()
    options = RenderOptions(line_spacing=0.15, stroke_width=3)
    assert measure_line_height(font, options) == math.ceil((ascent + descent + 6) * 1.15)
