"""
Save and share actions for a generated preview.
"""
import base64
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from core.config import settings

logger = logging.getLogger(__name__)

SHARE_FILENAME = "cedora-preview.png"


@dataclass
class PreviewFile:
    """A downloadable preview image"""

    filename: str
    content: bytes
    mime_type: str = "image/png"
    path: Optional[Path] = None


@dataclass
class SharePayload:
    """What gets handed to a native share surface"""

    title: str
    text: str
    files: List[PreviewFile] = field(default_factory=list)


@dataclass
class ShareOutcome:
    shared: bool
    saved_file: Optional[PreviewFile] = None


class ShareTarget(Protocol):
    async def share(self, payload: SharePayload) -> None:
        ...


def data_uri_to_bytes(data_uri: str) -> bytes:
    return base64.b64decode(data_uri.split(",", 1)[1])


def preview_filename(handle: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{settings.preview_filename_prefix}-{handle}-{timestamp_ms}.png"


def save(result_image: str, handle: str, download_dir: Optional[str] = None) -> PreviewFile:
    """
    Build the download for a result image, named after the product handle and
    the current time in milliseconds. Writes it to download_dir when one is set.
    """
    preview = PreviewFile(filename=preview_filename(handle), content=data_uri_to_bytes(result_image))

    target_dir = download_dir if download_dir is not None else settings.preview_download_dir
    if target_dir:
        directory = Path(target_dir)
        directory.mkdir(parents=True, exist_ok=True)
        preview.path = directory / preview.filename
        preview.path.write_bytes(preview.content)
        logger.info(f"Saved preview to {preview.path} ({len(preview.content)} bytes)")

    return preview


def build_share_payload(result_image: str, product_name: str) -> SharePayload:
    return SharePayload(
        title=f"My Cedora Interior: {product_name}",
        text=f"Check out how this {product_name} looks in my space!",
        files=[PreviewFile(filename=SHARE_FILENAME, content=data_uri_to_bytes(result_image))],
    )


async def share(
    result_image: str,
    product_name: str,
    handle: str,
    target: Optional[ShareTarget] = None,
    download_dir: Optional[str] = None,
) -> ShareOutcome:
    """Share through the native surface; fall back to save on absence, failure or cancel."""
    if target is not None:
        try:
            await target.share(build_share_payload(result_image, product_name))
            return ShareOutcome(shared=True)
        except Exception as e:
            logger.info(f"Share failed or was cancelled ({type(e).__name__}), saving instead")

    try:
        return ShareOutcome(shared=False, saved_file=save(result_image, handle, download_dir))
    except OSError as e:
        logger.warning(f"Fallback save after share failed: {e}")
        return ShareOutcome(shared=False)
