import pytest

from caption_bot.caption_core.errors import (
    DuplicateCommand,
    InvalidBox,
    InvalidFontSize,
    MultipleDefaults,
    NoDefaultSlot,
    UnknownSlot,
)
from caption_bot.caption_core.registry import SlotRegistry

from .conftest import make_slot


def test_load_indexes_commands_and_default(registry):
    assert len(registry) == 2
    assert registry.commands == ("wide",)
    assert registry.default_id == 0
    assert registry.default is registry.get(0)


def test_duplicate_command_is_rejected_case_insensitively(base_image):
    slots = [
        make_slot(base_image, command="wide"),
        make_slot(base_image, command="WIDE"),
    ]
    with pytest.raises(DuplicateCommand):
        SlotRegistry.load(slots)


def test_empty_commands_do_not_collide(base_image):
    registry = SlotRegistry.load([make_slot(base_image, command=""), make_slot(base_image)])
    assert registry.commands == ()


def test_two_defaults_fail_to_load(base_image):
    slots = [
        make_slot(base_image, command="", is_default=True),
        make_slot(base_image, command="", is_default=True),
    ]
    with pytest.raises(MultipleDefaults):
        SlotRegistry.load(slots)


@pytest.mark.parametrize("box", [(10, 10, 10, 50), (10, 10, 50, 5), (60, 0, 50, 10)])
def test_degenerate_box_fails_to_load(base_image, box):
    with pytest.raises(InvalidBox):
        SlotRegistry.load([make_slot(base_image, box=box)])


@pytest.mark.parametrize("font_size", [0, -4])
def test_non_positive_font_size_fails_to_load(base_image, font_size):
    with pytest.raises(InvalidFontSize):
        SlotRegistry.load([make_slot(base_image, font_size=font_size)])


def test_lookup_matched_command(registry):
    assert registry.lookup("wide").command == "wide"
    assert registry.lookup("Wide").command == "wide"


def test_lookup_without_token_uses_default(registry):
    assert registry.lookup(None) is registry.default
    assert registry.lookup("") is registry.default


def test_lookup_unmatched_token_falls_back_to_default(registry):
    assert registry.resolve("hello") == (0, False)
    assert registry.lookup("!wider") is registry.default


def test_lookup_without_default_fails(base_image):
    registry = SlotRegistry.load([make_slot(base_image, command="wide")])
    assert registry.lookup("wide").command == "wide"
    with pytest.raises(NoDefaultSlot):
        registry.lookup(None)
    with pytest.raises(NoDefaultSlot):
        registry.lookup("hello")


def test_no_default_slot_is_an_unknown_slot():
    assert issubclass(NoDefaultSlot, UnknownSlot)


@pytest.mark.parametrize("slot_id", [-1, 2, "wide"])
def test_get_unknown_slot_id(registry, slot_id):
    with pytest.raises(UnknownSlot):
        registry.get(slot_id)
