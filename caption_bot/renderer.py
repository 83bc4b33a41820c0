from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .caption_core.assets import AssetCache
from .caption_core.image_compose import render as render_plan
from .caption_core.models import LayoutPlan, RenderedImage, RenderOptions, RenderRequest
from .caption_core.registry import SlotRegistry
from .caption_core.text_fit_draw import compose
from .config import CaptionConfigData
from .logger import get_logger

logger = get_logger("renderer")


@dataclass(frozen=True)
class RenderResult:
    image: RenderedImage
    request: RenderRequest
    plan: LayoutPlan


def split_command(message: str) -> Tuple[Optional[str], str]:
    """Split a message into its first whitespace-delimited token and the rest."""
    parts = message.strip().split(None, 1)
    if not parts:
        return None, ""
    return parts[0], parts[1] if len(parts) > 1 else ""


class CaptionRenderer:
    """Routes a message to a slot and renders its caption."""

    def __init__(
        self,
        registry: SlotRegistry,
        options: Optional[RenderOptions] = None,
        assets: Optional[AssetCache] = None,
    ):
        self.registry = registry
        self.options = options or RenderOptions()
        self.assets = assets or AssetCache()

    @classmethod
    def from_config(cls, config: CaptionConfigData) -> "CaptionRenderer":
        return cls(config.registry, config.options)

    def route(self, message: str) -> RenderRequest:
        token, rest = split_command(message)
        slot_id, matched = self.registry.resolve(token)
        raw_text = rest if matched else message
        return RenderRequest(slot_id=slot_id, raw_text=raw_text)

    def layout(self, request: RenderRequest) -> LayoutPlan:
        slot = self.registry.get(request.slot_id)
        return compose(request.raw_text, slot, self.options, self.assets)

    def render(self, request: RenderRequest) -> RenderResult:
        slot = self.registry.get(request.slot_id)
        plan = compose(request.raw_text, slot, self.options, self.assets)
        image = render_plan(
            slot.image_path,
            plan,
            slot.font_path,
            options=self.options,
            assets=self.assets,
        )
        return RenderResult(image=image, request=request, plan=plan)

    def handle(self, message: str) -> RenderedImage:
        request = self.route(message)
        slot = self.registry.get(request.slot_id)
        logger.info("Rendering %s for %r", slot.label, request.raw_text)
        return self.render(request).image
