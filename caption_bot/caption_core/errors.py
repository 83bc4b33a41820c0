"""Exceptions raised while loading slots and rendering captions."""

from __future__ import annotations

from typing import Optional


class CaptionError(RuntimeError):
    """Base class for every expected caption failure."""


class ConfigError(CaptionError):
    """The slot configuration is unusable; the bot must not start."""


class DuplicateCommand(ConfigError):
    def __init__(self, command: str):
        super().__init__(f"Command '{command}' is configured for more than one image.")
        self.command = command


class MultipleDefaults(ConfigError):
    def __init__(self, count: int):
        super().__init__(f"{count} images are marked is_default; at most one is allowed.")
        self.count = count


class InvalidBox(ConfigError):
    def __init__(self, box: object, slot: str = ""):
        where = f" for {slot}" if slot else ""
        super().__init__(f"Bounding box{where} has no area: {box}")
        self.box = box


class InvalidFontSize(ConfigError):
    def __init__(self, font_size: int, slot: str = ""):
        where = f" for {slot}" if slot else ""
        super().__init__(f"Font size{where} must be positive, got {font_size}.")
        self.font_size = font_size


class RenderError(CaptionError):
    """A single request could not be rendered."""


class UnknownSlot(RenderError):
    def __init__(self, slot_id: object):
        super().__init__(f"No image is configured for slot {slot_id!r}.")
        self.slot_id = slot_id


class NoDefaultSlot(UnknownSlot):
    def __init__(self):
        RenderError.__init__(self, "No command matched and no default image is configured.")
        self.slot_id = None


class TextTooLargeError(RenderError):
    def __init__(self, text: str, min_font_size: int):
        super().__init__(
            f"Text of {len(text)} characters does not fit the box even at {min_font_size}px."
        )
        self.text = text
        self.min_font_size = min_font_size


class AssetIoError(RenderError):
    """An image or font file could not be read."""

    def __init__(self, path: object, reason: Optional[str] = None):
        message = f"Unable to read {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path


class DecodeError(RenderError):
    """The base image is not in a format Pillow can decode."""


class FontError(RenderError):
    """The font file exists but is not a usable font."""
