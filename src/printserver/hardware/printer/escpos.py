"""ESC/POS command encoding (Epson dialect).

Only what a bitmap receipt needs: initialize, raster image, feed and cut.
"""

from PIL import Image

ESC = b'\x1b'
GS = b'\x1d'
LF = b'\x0a'


def cmd_init() -> bytes:
    """ESC @ - Initialize printer."""
    return ESC + b'@'


def cmd_feed(lines: int = 1) -> bytes:
    """ESC d n - Print and feed n lines."""
    return ESC + b'd' + bytes([max(0, min(lines, 255))])


def cmd_cut(partial: bool = False) -> bytes:
    """GS V m - Cut paper (m=0 full, m=1 partial)."""
    return GS + b'V' + (b'\x01' if partial else b'\x00')


def to_monochrome(img: Image.Image, dither: bool = True) -> Image.Image:
    """Convert to 1-bit with width padded to a multiple of 8 (white fill)."""
    img = img.convert('L')
    if img.width % 8 != 0:
        padded = Image.new('L', ((img.width // 8 + 1) * 8, img.height), 255)
        padded.paste(img, (0, 0))
        img = padded
    return img.convert('1', dither=Image.Dither.FLOYDSTEINBERG if dither else Image.Dither.NONE)


def raster_image(img: Image.Image, dither: bool = True) -> bytes:
    """Encode an image as a GS v 0 raster bit image.

    Format: GS v 0 m xL xH yL yH data
    m = 0 (normal), x = width in bytes, y = height in dots.
    Each data bit is one dot, MSB first, 1 = black.
    """
    mono = to_monochrome(img, dither)
    bytes_per_line = mono.width // 8
    height = mono.height
    if height > 0xFFFF:
        raise ValueError(f"image too tall for a single raster command: {height} dots")

    # Pillow packs mode '1' MSB first with 1 = white; the printer wants 1 = black
    data = bytes(b ^ 0xFF for b in mono.tobytes())

    return b''.join((
        GS + b'v0',
        b'\x00',
        bytes([bytes_per_line & 0xFF, (bytes_per_line >> 8) & 0xFF]),
        bytes([height & 0xFF, (height >> 8) & 0xFF]),
        data,
    ))
