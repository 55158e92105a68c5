"""
Pytest configuration and fixtures for StickerGuard tests.
"""

import os
import struct
import sys
import tempfile
import zlib
from io import BytesIO
from pathlib import Path

import pytest

# Keep session log files out of the source tree
os.environ.setdefault("STICKERGUARD_LOG_DIR", tempfile.mkdtemp(prefix="stickerguard-logs-"))

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from PIL import Image  # noqa: E402


def _encode_image(color, size=(32, 32), fmt="PNG") -> bytes:
    buffer = BytesIO()
    mode = "RGBA" if len(color) == 4 else "RGB"
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture()
def encode_image():
    """Return a helper that encodes a solid-colour image in memory."""
    return _encode_image


def _png_chunk(kind: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))


def _oversized_png(width=20000, height=20000) -> bytes:
    """A tiny PNG whose header declares more pixels than Pillow will open."""
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )


@pytest.fixture()
def oversized_png():
    """Return the bytes of a decompression-bomb PNG header."""
    return _oversized_png()


@pytest.fixture()
def reference_png(tmp_path: Path) -> Path:
    path = tmp_path / "reference.png"
    path.write_bytes(_encode_image((200, 120, 40, 255), size=(128, 96)))
    return path
