"""Discord bot that writes message text onto configured images."""

from .caption_core.errors import CaptionError, ConfigError, RenderError
from .config import CaptionConfigData, load_config
from .renderer import CaptionRenderer

__version__ = "0.1.0"

__all__ = [
    "CaptionConfigData",
    "CaptionError",
    "CaptionRenderer",
    "ConfigError",
    "RenderError",
    "load_config",
]
