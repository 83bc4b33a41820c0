from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .caption_core.errors import ConfigError
from .caption_core.models import (
    DEFAULT_FONT_SIZE_STEP,
    DEFAULT_LINE_SPACING,
    DEFAULT_MIN_FONT_SIZE,
    DEFAULT_OUTPUT_FORMAT,
    RenderOptions,
    SlotBox,
    SlotConfig,
)
from .caption_core.registry import SlotRegistry
from .logger import get_logger

logger = get_logger("config")

DEFAULT_CONFIG_FILE = "config.toml"
CONFIG_PATH_ENV = "CAPTION_BOT_CONFIG"
DEFAULT_TEXT_COLOR = (0, 0, 0)
DEFAULT_STROKE_COLOR = (255, 255, 255)
REQUIRED_IMAGE_FIELDS = ("filename", "font_size", "left", "top", "right", "bottom")


@dataclass(frozen=True)
class CaptionConfigData:
    config_path: Path
    registry: SlotRegistry
    options: RenderOptions


@dataclass(frozen=True)
class BotSettings:
    token: Optional[str]
    admin_password: Optional[str]

    @classmethod
    def from_env(cls) -> "BotSettings":
        token = (os.getenv("DISCORD_BOT_TOKEN") or "").strip() or None
        password = (os.getenv("BOT_ADMIN_PASSWORD") or "").strip() or None
        return cls(token=token, admin_password=password)


def resolve_config_path(path_value: Optional[str] = None) -> Path:
    candidate = Path(path_value or os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_FILE)
    return candidate.expanduser().resolve()


def load_config(path: Path) -> CaptionConfigData:
    path = Path(path)
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file {path} does not exist.") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path} is not valid TOML: {exc}") from exc
    return parse_config(raw, path.resolve().parent, config_path=path)


def parse_config(raw: Dict[str, Any], base_dir: Path, config_path: Optional[Path] = None) -> CaptionConfigData:
    options = _parse_render_options(raw.get("render") or {})

    images = raw.get("images")
    if not isinstance(images, list) or not images:
        raise ConfigError("No images configured; add at least one [[images]] table.")

    slots = [_parse_slot(index, entry, base_dir) for index, entry in enumerate(images)]
    registry = SlotRegistry.load(slots)

    for slot in registry:
        if not slot.image_path.exists():
            logger.warning("Image for %s not found at %s", slot.label, slot.image_path)
        if slot.font_path and not slot.font_path.exists():
            logger.warning("Font for %s not found at %s", slot.label, slot.font_path)
    if registry.default is None:
        logger.warning("No default image configured; messages without a command will be rejected")

    logger.info(
        "Loaded %s images (commands: %s)",
        len(registry),
        ", ".join(registry.commands) or "none",
    )
    return CaptionConfigData(
        config_path=config_path or base_dir / DEFAULT_CONFIG_FILE,
        registry=registry,
        options=options,
    )


def _parse_slot(index: int, entry: Any, base_dir: Path) -> SlotConfig:
    where = f"images[{index}]"
    if not isinstance(entry, dict):
        raise ConfigError(f"{where} must be a table.")
    missing = [name for name in REQUIRED_IMAGE_FIELDS if name not in entry]
    if missing:
        raise ConfigError(f"{where} is missing {', '.join(missing)}.")

    image_path = _resolve_optional_path(entry.get("filename"), base_dir)
    if image_path is None:
        raise ConfigError(f"{where}.filename must not be empty.")

    command = entry.get("command")
    if command is not None and not isinstance(command, str):
        raise ConfigError(f"{where}.command must be a string.")

    return SlotConfig(
        image_path=image_path,
        font_path=_resolve_optional_path(entry.get("font"), base_dir),
        font_size=_parse_int(entry, "font_size", where),
        box=SlotBox(
            left=_parse_int(entry, "left", where),
            top=_parse_int(entry, "top", where),
            right=_parse_int(entry, "right", where),
            bottom=_parse_int(entry, "bottom", where),
        ),
        command=(command.strip() or None) if command else None,
        is_default=bool(entry.get("is_default", False)),
        text_prefix=str(entry.get("text_prefix", "")),
        text_suffix=str(entry.get("text_suffix", "")),
    )


def _parse_render_options(section: Dict[str, Any]) -> RenderOptions:
    if not isinstance(section, dict):
        raise ConfigError("[render] must be a table.")
    where = "render"
    output_format = str(section.get("output_format", DEFAULT_OUTPUT_FORMAT)).strip().upper()
    return RenderOptions(
        min_font_size=_parse_int(section, "min_font_size", where, DEFAULT_MIN_FONT_SIZE, minimum=1),
        font_size_step=_parse_int(section, "font_size_step", where, DEFAULT_FONT_SIZE_STEP, minimum=1),
        line_spacing=_parse_float(section, "line_spacing", where, DEFAULT_LINE_SPACING),
        text_color=_parse_color(section.get("text_color"), fallback=DEFAULT_TEXT_COLOR),
        stroke_width=_parse_int(section, "stroke_width", where, 0, minimum=0),
        stroke_color=_parse_color(section.get("stroke_color"), fallback=DEFAULT_STROKE_COLOR),
        output_format=output_format or DEFAULT_OUTPUT_FORMAT,
    )


def _resolve_optional_path(relative: Optional[str], base_dir: Path) -> Optional[Path]:
    if not relative:
        return None
    candidate = Path(str(relative)).expanduser()
    if not candidate.is_absolute():
        candidate = (base_dir / candidate).resolve()
    return candidate


def _parse_int(
    section: Dict[str, Any],
    key: str,
    where: str,
    default: Optional[int] = None,
    minimum: Optional[int] = None,
) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or value is None:
        raise ConfigError(f"{where}.{key} must be an integer.")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{where}.{key} must be an integer, got {value!r}.") from exc
    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{where}.{key} must be at least {minimum}, got {parsed}.")
    return parsed


def _parse_float(section: Dict[str, Any], key: str, where: str, default: float) -> float:
    value = section.get(key, default)
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{where}.{key} must be a number, got {value!r}.") from exc
    if parsed < 0:
        raise ConfigError(f"{where}.{key} must not be negative.")
    return parsed


def _parse_color(value: Any, fallback: Tuple[int, ...]) -> Tuple[int, ...]:
    if isinstance(value, (list, tuple)) and len(value) in (3, 4):
        channels: List[int] = [max(0, min(255, int(channel))) for channel in value]
        return tuple(channels)
    return fallback
