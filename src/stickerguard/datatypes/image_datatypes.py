"""
Image-related value types: image references found in messages and the
fixed-size rasters the similarity scorer compares.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

CANONICAL_SIZE = 64
BYTES_PER_PIXEL = 4


class ImageReference:
    """
    Type-safe wrapper for an image source found in a message.

    The source is either an ``http(s)`` URL or a local file path. It is kept as
    the raw string the platform handed over so the sticker classifier sees the
    exact URL.

    Attributes:
        _value (str): The image source string.

    Example:
        >>> ref = ImageReference("https://cdn.discordapp.com/emojis/1.png")
        >>> ref.src
        'https://cdn.discordapp.com/emojis/1.png'
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, "ImageReference"]) -> None:
        """
        Args:
            value: The source as a string or another ImageReference.

        Raises:
            ValueError: If the value is empty or not a string.
        """
        if isinstance(value, ImageReference):
            self._value = value._value
        elif isinstance(value, str):
            src = value.strip()
            if not src:
                raise ValueError("ImageReference cannot be empty")
            self._value = src
        else:
            raise ValueError(f"Cannot create ImageReference from {type(value).__name__}: {value}")

    @property
    def src(self) -> str:
        return self._value

    @property
    def is_remote(self) -> bool:
        """True when the source must be downloaded over HTTP(S)."""
        return self._value.lower().startswith(("http://", "https://"))

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"ImageReference({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ImageReference):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


@dataclass(frozen=True, slots=True)
class CanonicalRaster:
    """
    Decoded RGBA pixel buffer, row-major, 4 bytes per pixel.

    The byte length is checked against the dimensions at construction, so two
    rasters of the canonical size always have identical lengths.
    """

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        expected = self.width * self.height * BYTES_PER_PIXEL
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Raster dimensions must be positive, got {self.width}x{self.height}")
        if len(self.data) != expected:
            raise ValueError(
                f"Raster of {self.width}x{self.height} needs {expected} bytes, got {len(self.data)}"
            )

    @property
    def byte_length(self) -> int:
        return len(self.data)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @classmethod
    def filled(cls, rgba: tuple[int, int, int, int], size: int = CANONICAL_SIZE) -> "CanonicalRaster":
        """Build a raster where every pixel has the same RGBA value."""
        return cls(size, size, bytes(rgba) * (size * size))
