from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

Color = Tuple[int, ...]

DEFAULT_MIN_FONT_SIZE = 8
DEFAULT_FONT_SIZE_STEP = 2
DEFAULT_LINE_SPACING = 0.15
DEFAULT_OUTPUT_FORMAT = "PNG"


@dataclass(frozen=True)
class SlotBox:
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def contains(self, bounds: Tuple[float, float, float, float]) -> bool:
        x0, y0, x1, y1 = bounds
        return self.left <= x0 and x1 <= self.right and self.top <= y0 and y1 <= self.bottom


@dataclass(frozen=True)
class SlotConfig:
    """One base image with the box its caption must fit in."""

    image_path: Path
    font_path: Optional[Path]
    font_size: int
    box: SlotBox
    command: Optional[str] = None
    is_default: bool = False
    text_prefix: str = ""
    text_suffix: str = ""

    @property
    def label(self) -> str:
        if self.command:
            return self.command
        if self.is_default:
            return "default"
        return self.image_path.name


@dataclass(frozen=True)
class RenderOptions:
    min_font_size: int = DEFAULT_MIN_FONT_SIZE
    font_size_step: int = DEFAULT_FONT_SIZE_STEP
    line_spacing: float = DEFAULT_LINE_SPACING
    text_color: Color = (0, 0, 0)
    stroke_width: int = 0
    stroke_color: Color = (255, 255, 255)
    output_format: str = DEFAULT_OUTPUT_FORMAT


@dataclass(frozen=True)
class RenderRequest:
    slot_id: int
    raw_text: str


@dataclass(frozen=True)
class LayoutLine:
    """A run of text drawn with its baseline origin at (x, y)."""

    text: str
    x: float
    y: float
    bounds: Tuple[float, float, float, float]

    @property
    def width(self) -> float:
        return self.bounds[2] - self.bounds[0]

    @property
    def height(self) -> float:
        return self.bounds[3] - self.bounds[1]


@dataclass(frozen=True)
class LayoutPlan:
    lines: Tuple[LayoutLine, ...]
    font_size: int
    effective_font_scale: float
    line_height: int = 0

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not any(line.text for line in self.lines)


@dataclass(frozen=True)
class RenderedImage:
    data: bytes = field(repr=False)
    content_type: str
    filename: str
