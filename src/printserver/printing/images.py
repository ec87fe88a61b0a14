"""Logo and QR code loading.

Each load resolves to LoadedImage or ImageUnavailable and never raises:
a broken logo URL must not stop the receipt from printing. References
may be http(s) URLs, base64 data URIs or local file paths.
"""

import asyncio
import base64
import binascii
import logging
import stat
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union

import aiohttp
from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedImage:
    """A decoded image with its natural size."""

    image: Image.Image
    label: str

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass(frozen=True)
class ImageUnavailable:
    """The image could not be loaded; its section is skipped."""

    label: str
    reason: str = ""


ImageResult = Union[LoadedImage, ImageUnavailable]


class ImageTooLarge(Exception):
    """Download exceeded the configured size limit."""


class ImageLoader:
    """Fetches receipt images with a timeout and a size guard."""

    def __init__(
        self,
        timeout: float = 10.0,
        max_bytes: int = 5 * 1024 * 1024,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._session = session

    async def load_pair(self, logo_ref: str, qr_ref: str) -> Tuple[ImageResult, ImageResult]:
        """Load the logo and QR code concurrently."""
        if self._session is not None:
            return await self._gather(self._session, logo_ref, qr_ref)

        async with aiohttp.ClientSession() as session:
            return await self._gather(session, logo_ref, qr_ref)

    async def _gather(
        self, session: aiohttp.ClientSession, logo_ref: str, qr_ref: str
    ) -> Tuple[ImageResult, ImageResult]:
        logo, qr = await asyncio.gather(
            self.load(session, logo_ref, "Logo"),
            self.load(session, qr_ref, "QR Code"),
        )
        return logo, qr

    async def load(self, session: aiohttp.ClientSession, reference: str, label: str) -> ImageResult:
        """Load one image reference.

        Args:
            session: Client session used for http(s) references
            reference: URL, data URI or file path (may be empty)
            label: Name used in logs

        Returns:
            LoadedImage on success, ImageUnavailable otherwise
        """
        reference = (reference or "").strip()
        if not reference:
            return ImageUnavailable(label, "no reference")

        try:
            raw = await asyncio.wait_for(self._fetch(session, reference), timeout=self.timeout)
            image = _decode(raw)

        except asyncio.TimeoutError:
            logger.warning(f"Failed to load {label}: timed out after {self.timeout}s")
            return ImageUnavailable(label, "timeout")
        except Exception as e:
            logger.warning(f"Failed to load {label}: {e}")
            return ImageUnavailable(label, str(e))

        logger.info(f"{label} loaded successfully ({image.width}x{image.height}).")
        return LoadedImage(image=image, label=label)

    async def _fetch(self, session: aiohttp.ClientSession, reference: str) -> bytes:
        if reference.startswith(("http://", "https://")):
            return await self._download(session, reference)
        if reference.startswith("data:"):
            raw = _decode_data_uri(reference)
            if len(raw) > self.max_bytes:
                raise ImageTooLarge(f"{len(raw)} bytes exceeds {self.max_bytes}")
            return raw
        return await asyncio.to_thread(_read_file, Path(reference), self.max_bytes)

    async def _download(self, session: aiohttp.ClientSession, url: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with session.get(url, timeout=timeout) as response:
            response.raise_for_status()

            if response.content_length and response.content_length > self.max_bytes:
                raise ImageTooLarge(f"{response.content_length} bytes exceeds {self.max_bytes}")

            buf = bytearray()
            async for chunk in response.content.iter_chunked(64 * 1024):
                buf.extend(chunk)
                if len(buf) > self.max_bytes:
                    raise ImageTooLarge(f"body exceeds {self.max_bytes} bytes")
            return bytes(buf)


def _read_file(path: Path, max_bytes: int) -> bytes:
    # Only regular files are opened
    info = path.stat()
    if not stat.S_ISREG(info.st_mode):
        raise ValueError(f"{path} is not a regular file")
    if info.st_size > max_bytes:
        raise ImageTooLarge(f"{info.st_size} bytes exceeds {max_bytes}")

    with path.open("rb") as f:
        raw = f.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise ImageTooLarge(f"file exceeds {max_bytes} bytes")
    return raw


def _decode_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep or ";base64" not in header:
        raise ValueError("only base64 data URIs are supported")
    try:
        return base64.b64decode(payload, validate=False)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e


def _decode(raw: bytes) -> Image.Image:
    """Decode image bytes, flattening transparency onto white."""
    img = Image.open(BytesIO(raw))
    img.load()
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, "white")
        background.paste(img, mask=img.getchannel("A"))
        return background
    return img.convert("RGB")
