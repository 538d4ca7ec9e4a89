"""
Image encoding for the generative request.

Embedded data URIs are passed through untouched (payload after the first
comma). Remote images are downloaded, drawn at natural size onto a fresh RGB
canvas and re-encoded as JPEG, which normalises the format of whatever the
CDN served.
"""
import asyncio
import base64
import io
import logging
from typing import Optional

import aiohttp
from PIL import Image, ImageOps, UnidentifiedImageError

from core.config import settings
from core.exceptions import ImageLoadError

logger = logging.getLogger(__name__)

CANVAS_BACKGROUND = (255, 255, 255)


def is_data_uri(source: str) -> bool:
    return source.startswith("data:")


def strip_data_uri(source: str) -> str:
    """Return the payload after the first comma of a data URI."""
    return source.split(",", 1)[1] if "," in source else ""


class ImageEncoder:
    """Turns room/product image sources into base64 JPEG payloads"""

    def __init__(self, jpeg_quality: Optional[int] = None, fetch_timeout: Optional[int] = None):
        self.jpeg_quality = jpeg_quality or settings.jpeg_quality
        self.fetch_timeout = fetch_timeout or settings.image_fetch_timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session"""
        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.fetch_timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self.session

    async def encode(self, source: str) -> str:
        """
        Produce a base64 payload for an image source.

        Args:
            source: Remote image URL or an embedded data URI

        Returns:
            Base64 string (no data URI prefix)

        Raises:
            ImageLoadError: the remote image could not be fetched or decoded
        """
        if is_data_uri(source):
            return strip_data_uri(source)

        image_bytes = await self._fetch_bytes(source)
        return self._reencode_as_jpeg(source, image_bytes)

    async def _fetch_bytes(self, url: str) -> bytes:
        session = await self._get_session()
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise ImageLoadError(url, f"HTTP {response.status}")
                image_bytes = await response.read()
        except asyncio.TimeoutError as e:
            raise ImageLoadError(url, "timeout") from e
        except aiohttp.ClientError as e:
            raise ImageLoadError(url, f"network error: {e}") from e

        if not image_bytes:
            raise ImageLoadError(url, "empty body")

        logger.info(f"Fetched image {url} ({len(image_bytes)} bytes)")
        return image_bytes

    def _reencode_as_jpeg(self, source: str, image_bytes: bytes) -> str:
        try:
            image = Image.open(io.BytesIO(image_bytes))
            # Phone photos carry their rotation in EXIF
            image = ImageOps.exif_transpose(image)
            canvas = self._draw_on_canvas(image)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageLoadError(source, f"decode failed: {e}") from e

        buffer = io.BytesIO()
        canvas.save(buffer, format="JPEG", quality=self.jpeg_quality)
        encoded = base64.b64encode(buffer.getvalue()).decode()
        logger.info(f"Re-encoded {canvas.width}x{canvas.height} image as JPEG ({len(encoded)} base64 chars)")
        return encoded

    def _draw_on_canvas(self, image: Image.Image) -> Image.Image:
        """Draw the image at natural size onto a canvas sized to match."""
        canvas = Image.new("RGB", image.size, CANVAS_BACKGROUND)
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            rgba = image.convert("RGBA")
            canvas.paste(rgba, (0, 0), rgba)
        else:
            canvas.paste(image.convert("RGB"), (0, 0))
        return canvas

    async def close(self):
        """Close HTTP session"""
        if self.session:
            await self.session.close()
            self.session = None


# Global encoder instance
image_encoder = ImageEncoder()
