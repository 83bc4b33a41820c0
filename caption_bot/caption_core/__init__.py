"""
Text fitting and compositing engine for caption slots.
"""

from .assets import AssetCache
from .image_compose import render
from .registry import SlotRegistry
from .text_fit_draw import compose

__all__ = ["AssetCache", "SlotRegistry", "compose", "render"]
