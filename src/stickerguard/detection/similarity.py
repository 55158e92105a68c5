"""Pixel-difference similarity between two canonical rasters."""

from stickerguard.datatypes.image_datatypes import BYTES_PER_PIXEL, CanonicalRaster

MAX_CHANNEL_VALUE = 255
# R, G and B are compared; alpha is ignored
COLOR_CHANNELS = 3


def score(a: CanonicalRaster, b: CanonicalRaster) -> float:
    """
    Return the similarity of two rasters in [0, 1].

    For every pixel the absolute R, G and B differences are averaged; the
    per-pixel values are averaged over the whole raster into ``avg_diff`` and
    the similarity is ``max(0, 1 - avg_diff / 255)``.

    Rasters of different byte length cannot be compared and score 0.
    """
    if a.byte_length != b.byte_length or a.byte_length == 0:
        return 0.0

    total_diff = 0
    for channel in range(COLOR_CHANNELS):
        total_diff += sum(
            abs(x - y)
            for x, y in zip(a.data[channel::BYTES_PER_PIXEL], b.data[channel::BYTES_PER_PIXEL])
        )

    pixel_count = a.byte_length // BYTES_PER_PIXEL
    avg_diff = total_diff / COLOR_CHANNELS / pixel_count
    return max(0.0, 1.0 - avg_diff / MAX_CHANNEL_VALUE)
