"""Image fetching and normalization utilities for sticker detection."""

import asyncio
from io import BytesIO
from pathlib import Path

import requests
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from stickerguard.datatypes.image_datatypes import CANONICAL_SIZE, CanonicalRaster, ImageReference
from stickerguard.util.errors import DecodeError, FetchError
from stickerguard.util.logger import get_logger

logger = get_logger("image_utils")

register_heif_opener()

# Per-request socket timeout; the overall bound is applied by load_canonical_raster
REQUEST_TIMEOUT_SECONDS = 5


def fetch_image_bytes(source: ImageReference | str, timeout: float = REQUEST_TIMEOUT_SECONDS) -> bytes:
    """
    Return the raw bytes of an image from an HTTP(S) URL or a local path.

    This function blocks the calling thread so it should be called through
    ``asyncio.to_thread``.

    Args:
        source: URL or filesystem path of the image.
        timeout: Socket timeout for HTTP requests, in seconds.

    Returns:
        bytes: The undecoded image content.

    Raises:
        FetchError: If the URL cannot be downloaded or the file cannot be read.
    """
    ref = ImageReference(source)
    if ref.is_remote:
        try:
            logger.debug(f"[FETCH] Downloading image from {ref}")
            response = requests.get(ref.src, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"Request failed for {ref}: {exc}") from exc
        return response.content

    try:
        return Path(ref.src).expanduser().read_bytes()
    except OSError as exc:
        raise FetchError(f"Cannot read image file {ref}: {exc}") from exc


def normalize_image(image_bytes: bytes, size: int = CANONICAL_SIZE) -> CanonicalRaster:
    """
    Decode an image and stretch it to a ``size`` x ``size`` RGBA raster.

    The aspect ratio is not preserved; every source is resampled
    directly onto the square grid. Animated images contribute their first frame.

    Args:
        image_bytes: Encoded image content (PNG, JPEG, GIF, WebP, HEIF, ...).
        size: Edge length of the output raster.

    Returns:
        CanonicalRaster: The resampled pixels.

    Raises:
        DecodeError: If the bytes are not a decodable image or declare more
            pixels than Pillow allows.
    """
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            img.seek(0)
            rgba = img.convert("RGBA").resize((size, size), Image.Resampling.BILINEAR)
            data = rgba.tobytes()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, EOFError) as exc:
        raise DecodeError(f"Cannot decode image: {exc}") from exc

    return CanonicalRaster(size, size, data)


def load_canonical_raster_sync(source: ImageReference | str, timeout: float = REQUEST_TIMEOUT_SECONDS) -> CanonicalRaster:
    """Fetch and normalize ``source`` in the calling thread."""
    return normalize_image(fetch_image_bytes(source, timeout=timeout))


async def load_canonical_raster(source: ImageReference | str, timeout: float) -> CanonicalRaster:
    """
    Fetch and normalize an image off the event loop, bounded by ``timeout``.

    Raises:
        FetchError: If the source is unreachable.
        DecodeError: If the content is not an image.
        asyncio.TimeoutError: If fetching and decoding take longer than ``timeout``.
    """
    request_timeout = min(timeout, REQUEST_TIMEOUT_SECONDS)
    return await asyncio.wait_for(
        asyncio.to_thread(load_canonical_raster_sync, source, request_timeout),
        timeout=timeout,
    )


def is_image_filename(filename: str | None) -> bool:
    """Return True if the filename carries a common image extension."""
    return (filename or "").lower().endswith(
        (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".heif", ".heic")
    )
