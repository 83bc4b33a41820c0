from pathlib import Path
from typing import List, Optional, Tuple

import pytest
from PIL import Image

from caption_bot.caption_core.assets import AssetCache
from caption_bot.caption_core.models import RenderOptions, SlotBox, SlotConfig
from caption_bot.caption_core.registry import SlotRegistry


def make_slot(
    image_path: Path,
    box: Tuple[int, int, int, int] = (100, 100, 300, 300),
    font_size: int = 12,
    command: Optional[str] = None,
    is_default: bool = False,
    text_prefix: str = "",
    text_suffix: str = "",
    font_path: Optional[Path] = None,
) -> SlotConfig:
    return SlotConfig(
        image_path=image_path,
        font_path=font_path,
        font_size=font_size,
        box=SlotBox(*box),
        command=command,
        is_default=is_default,
        text_prefix=text_prefix,
        text_suffix=text_suffix,
    )


class RecordingAssetCache(AssetCache):
    """Remembers every font size requested, in order."""

    def __init__(self):
        super().__init__()
        self.font_sizes: List[int] = []

    def font(self, path, size):
        self.font_sizes.append(size)
        return super().font(path, size)


@pytest.fixture
def base_image(tmp_path) -> Path:
    path = tmp_path / "base.png"
    Image.new("RGB", (400, 400), (255, 255, 255)).save(path)
    return path


@pytest.fixture
def wide_image(tmp_path) -> Path:
    path = tmp_path / "wide.png"
    Image.new("RGBA", (800, 200), (255, 255, 255, 255)).save(path)
    return path


@pytest.fixture
def assets() -> AssetCache:
    return AssetCache()


@pytest.fixture
def options() -> RenderOptions:
    return RenderOptions()


@pytest.fixture
def registry(base_image, wide_image) -> SlotRegistry:
    return SlotRegistry.load(
        [
            make_slot(base_image, font_size=24, is_default=True, text_prefix='"', text_suffix='"'),
            make_slot(wide_image, box=(20, 20, 780, 180), font_size=36, command="wide"),
        ]
    )
