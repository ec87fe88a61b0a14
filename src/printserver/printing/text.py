"""Text utilities for the receipt bitmap.

- Greedy word wrapping measured in the active font
- Arabic shaping and bidi reordering (arabic-reshaper + python-bidi)
- Font lookup with fallbacks for machines without the configured fonts
"""

import logging
import os
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import arabic_reshaper
from bidi.algorithm import get_display
from PIL import ImageFont

logger = logging.getLogger(__name__)

# Known fonts with both Latin and Arabic coverage
REGULAR_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansArabic-Regular.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
    "C:/Windows/Fonts/tahoma.ttf",
    "DejaVuSans.ttf",
)

BOLD_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansArabic-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
    "C:/Windows/Fonts/tahomabd.ttf",
    "DejaVuSans-Bold.ttf",
)


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """Greedy word wrap.

    Words are joined with single spaces until the next word would push
    the line past max_width. A word wider than max_width on its own is
    emitted on its own line unmodified.

    Args:
        text: Text to wrap
        max_width: Available width in pixels
        measure: Returns the rendered width of a string

    Returns:
        Wrapped lines (empty list for blank text)
    """
    lines: List[str] = []
    current = ""

    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate

    if current:
        lines.append(current)

    return lines


def needs_shaping(text: str) -> bool:
    """Detect Arabic script that must be reshaped before drawing."""
    for ch in text:
        code = ord(ch)
        if (
            0x0600 <= code <= 0x06FF or  # Arabic
            0x0750 <= code <= 0x077F or  # Arabic Supplement
            0x08A0 <= code <= 0x08FF or  # Arabic Extended-A
            0xFB50 <= code <= 0xFDFF or  # Presentation Forms-A
            0xFE70 <= code <= 0xFEFF     # Presentation Forms-B
        ):
            return True
    return False


def shape_text(text: str) -> str:
    """Join Arabic letters and reorder to visual (left-to-right) order.

    Latin-only text is returned untouched.
    """
    if not text or not needs_shaping(text):
        return text
    return get_display(arabic_reshaper.reshape(text))


def _first_existing(paths: Sequence[str]) -> Optional[str]:
    for path in paths:
        if not path:
            continue
        if os.path.isabs(path):
            if os.path.exists(path):
                return path
            continue
        # Bare file name: let FreeType search the system font dirs
        try:
            ImageFont.truetype(path, size=12)
            return path
        except OSError:
            continue
    return None


class FontBook:
    """Resolves and caches fonts by (size, bold).

    Fonts use Pillow's basic layout engine: text is shaped by
    shape_text() beforehand, so raqm must not reorder it again.
    """

    def __init__(self, regular_path: str = "", bold_path: str = ""):
        self.regular_path = _first_existing((regular_path, *REGULAR_FONT_CANDIDATES))
        self.bold_path = (
            _first_existing((bold_path, *BOLD_FONT_CANDIDATES)) or self.regular_path
        )
        self._cache: Dict[Tuple[int, bool], ImageFont.ImageFont] = {}

        if self.regular_path:
            logger.info(f"Receipt font: {os.path.basename(self.regular_path)}")
        else:
            logger.warning("No TrueType font found, using Pillow default font")

    def get(self, size: int, bold: bool = False) -> ImageFont.ImageFont:
        """Get a font of the given pixel size."""
        key = (size, bold)
        font = self._cache.get(key)
        if font is None:
            font = self._load(size, bold)
            self._cache[key] = font
        return font

    def _load(self, size: int, bold: bool) -> ImageFont.ImageFont:
        path = self.bold_path if bold else self.regular_path
        if path:
            try:
                return ImageFont.truetype(path, size=size, layout_engine=ImageFont.Layout.BASIC)
            except OSError as e:
                logger.warning(f"Failed to load font {path}: {e}")
        return ImageFont.load_default(size=size)

    def measure(self, text: str, size: int, bold: bool = False) -> float:
        """Rendered width of text in pixels."""
        return self.get(size, bold).getlength(shape_text(text))
