from __future__ import annotations

import io
import threading
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageFont, UnidentifiedImageError

from .errors import AssetIoError, DecodeError, FontError


class AssetCache:
    """Decoded base images and loaded fonts, keyed by path.

    Cached objects are shared between requests and must be treated as
    read-only; callers draw on copies.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._images: Dict[Path, Image.Image] = {}
        self._font_data: Dict[Path, bytes] = {}
        self._fonts: Dict[Tuple[Optional[Path], int], ImageFont.FreeTypeFont] = {}

    def image(self, path: Path) -> Image.Image:
        path = Path(path)
        with self._lock:
            cached = self._images.get(path)
        if cached is not None:
            return cached

        loaded = self._decode_image(path)
        with self._lock:
            return self._images.setdefault(path, loaded)

    def font(self, path: Optional[Path], size: int) -> ImageFont.FreeTypeFont:
        key = (Path(path) if path else None, int(size))
        with self._lock:
            cached = self._fonts.get(key)
        if cached is not None:
            return cached

        loaded = self._load_font(key[0], key[1])
        with self._lock:
            return self._fonts.setdefault(key, loaded)

    def clear(self) -> None:
        with self._lock:
            self._images.clear()
            self._font_data.clear()
            self._fonts.clear()

    @staticmethod
    def _decode_image(path: Path) -> Image.Image:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise AssetIoError(path, exc.strerror or str(exc)) from exc

        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except UnidentifiedImageError as exc:
            raise DecodeError(f"{path} is not a supported image format") from exc
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"{path} could not be decoded: {exc}") from exc
        return image

    def _load_font(self, path: Optional[Path], size: int) -> ImageFont.FreeTypeFont:
        if path is None:
            font = ImageFont.load_default(size=size)
            if not isinstance(font, ImageFont.FreeTypeFont):
                raise FontError("Pillow was built without FreeType; configure a font file")
            return font

        with self._lock:
            data = self._font_data.get(path)
        if data is None:
            try:
                data = path.read_bytes()
            except OSError as exc:
                raise AssetIoError(path, exc.strerror or str(exc)) from exc
            with self._lock:
                data = self._font_data.setdefault(path, data)

        try:
            return ImageFont.truetype(io.BytesIO(data), size)
        except OSError as exc:
            raise FontError(f"{path} is not a usable font: {exc}") from exc
