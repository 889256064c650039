from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import logging

from PIL import ImageFont


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 12.0
LABEL_PADDING_PX = 8


@dataclass
class LabelSizeCache:
    """Caller-owned memo of measured label sizes.

    Keyed by ``(text, font_family, font_size_px)`` so a style change never
    returns stale sizes; call ``invalidate`` to drop everything.
    """

    sizes: dict[tuple[str, str, float], tuple[int, int]] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0

    def measure(
        self,
        text: str,
        *,
        font_family: str = DEFAULT_FONT_FAMILY,
        font_size_px: float = DEFAULT_FONT_SIZE_PX,
    ) -> tuple[int, int]:
        key = (text, font_family, float(font_size_px))
        cached = self.sizes.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        size = text_size(text, font_family=font_family, font_size_px=font_size_px)
        self.sizes[key] = size
        return size

    def invalidate(self) -> None:
        self.sizes.clear()
        self.hits = 0
        self.misses = 0


def text_size(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> tuple[int, int]:
    font = _label_font(font_family, float(font_size_px))
    if not text:
        return (0, _line_height(font))
    left, top, right, bottom = font.getbbox(text)
    w = max(0, int(right - left))
    h = max(1, int(bottom - top))
    return (w, h)


def measure_band(
    texts: list[str],
    available: tuple[float, float],
    *,
    vertical: bool,
    cache: LabelSizeCache | None = None,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> tuple[float, float]:
    """Size of the strip an axis needs for its labels."""
    if not texts:
        return (0.0, 0.0)
    sizes = cache if cache is not None else LabelSizeCache()
    max_w = 0
    max_h = 0
    for text in texts:
        w, h = sizes.measure(text, font_family=font_family, font_size_px=font_size_px)
        max_w = max(max_w, w)
        max_h = max(max_h, h)
    avail_w, avail_h = available
    if vertical:
        return (float(max_w + LABEL_PADDING_PX), float(avail_h))
    return (float(avail_w), float(max_h + LABEL_PADDING_PX))


def _line_height(font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> int:
    if isinstance(font, ImageFont.FreeTypeFont):
        ascent, descent = font.getmetrics()
        return max(1, int(ascent + descent))
    _, top, _, bottom = font.getbbox("Ag")
    return max(1, int(bottom - top))


@lru_cache(maxsize=64)
def _label_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    for name in _font_file_names(font_family):
        # Pillow resolves bare file names against the platform font directories.
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    LOGGER.debug("no font file found for %r; measuring labels with Pillow's default font", font_family)
    return ImageFont.load_default(size=size)


def _font_file_names(font_family: str) -> tuple[str, ...]:
    family = font_family.strip() or DEFAULT_FONT_FAMILY
    compact = "".join(family.split())
    names = (family, f"{compact}.ttf", f"{compact}-Regular.ttf", f"{compact}.ttc")
    return tuple(dict.fromkeys(names))
