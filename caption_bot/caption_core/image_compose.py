from __future__ import annotations

import io
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw

from ..logger import get_logger
from .assets import AssetCache
from .errors import RenderError
from .models import LayoutPlan, RenderedImage, RenderOptions

logger = get_logger("caption_core.image_compose")

# Formats that cannot carry an alpha channel.
OPAQUE_FORMATS = {"JPEG", "BMP"}
FILE_SUFFIXES = {"JPEG": ".jpg", "TIFF": ".tif"}


def draw_plan(
    image_path: Path,
    plan: LayoutPlan,
    font_path: Optional[Path],
    *,
    options: Optional[RenderOptions] = None,
    assets: Optional[AssetCache] = None,
) -> Image.Image:
    """Draw ``plan`` onto a fresh copy of the image at ``image_path``."""
    options = options or RenderOptions()
    assets = assets or AssetCache()

    base = assets.image(image_path)
    canvas = base.convert("RGBA")
    if plan.is_empty:
        return canvas

    font = assets.font(font_path, plan.font_size)
    draw = ImageDraw.Draw(canvas)
    for line in plan.lines:
        if not line.text:
            continue
        draw.text(
            (line.x, line.y),
            line.text,
            font=font,
            fill=tuple(options.text_color),
            anchor="ls",
            stroke_width=options.stroke_width,
            stroke_fill=tuple(options.stroke_color) if options.stroke_width else None,
        )
    return canvas


def encode_image(image: Image.Image, output_format: str, filename_stem: str = "caption") -> RenderedImage:
    fmt = output_format.upper()
    if fmt in OPAQUE_FORMATS and image.mode != "RGB":
        image = image.convert("RGB")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt)
    except (KeyError, ValueError, OSError) as exc:
        raise RenderError(f"Unable to encode image as {fmt}: {exc}") from exc

    suffix = FILE_SUFFIXES.get(fmt, f".{fmt.lower()}")
    return RenderedImage(
        data=buffer.getvalue(),
        content_type=Image.MIME.get(fmt, "application/octet-stream"),
        filename=f"{filename_stem}{suffix}",
    )


def render(
    image_path: Path,
    plan: LayoutPlan,
    font_path: Optional[Path],
    *,
    options: Optional[RenderOptions] = None,
    assets: Optional[AssetCache] = None,
) -> RenderedImage:
    options = options or RenderOptions()
    canvas = draw_plan(image_path, plan, font_path, options=options, assets=assets)
    logger.debug("drew %s lines at %spx onto %s", len(plan.lines), plan.font_size, image_path)
    return encode_image(canvas, options.output_format, Path(image_path).stem)
