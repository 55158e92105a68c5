"""
URL heuristics that decide whether an image looks like a sticker or emoticon.

The checks are weak signals combined with OR. A false positive only costs one
extra similarity check, a false negative means the image is skipped.
"""

import re
from typing import Iterable

from stickerguard.configuration.filter_settings import DEFAULT_STICKER_HOSTS

STICKER_KEYWORDS = ("emoji", "face", "sticker")
STICKER_PATH_MARKERS = ("/emojis/", "/stickers/", "/faces/")

# Platform-generated asset names: a long hex digest plus an image extension
HEX_DIGEST_FILENAME = re.compile(r"^[a-f0-9]{32,}\.(gif|png|jpg|jpeg)$", re.IGNORECASE)


def filename_of(url: str) -> str:
    """Return the lower-cased last path segment of ``url``."""
    return url.split("/")[-1].lower()


def matches_sticker_host(url: str, hosts: Iterable[str] = DEFAULT_STICKER_HOSTS) -> bool:
    return any(host and host in url for host in hosts)


def matches_keyword(url: str) -> bool:
    return any(keyword in url for keyword in STICKER_KEYWORDS)


def matches_sticker_filename(url: str) -> bool:
    filename = filename_of(url)
    if any(keyword in filename for keyword in STICKER_KEYWORDS):
        return True
    return HEX_DIGEST_FILENAME.match(filename) is not None


def matches_path_marker(url: str) -> bool:
    return any(marker in url for marker in STICKER_PATH_MARKERS)


def is_emoticon(url: str, hosts: Iterable[str] = DEFAULT_STICKER_HOSTS) -> bool:
    """
    Return True if ``url`` plausibly points at a sticker rather than a photo.

    Args:
        url: Image URL or path as it appeared in the message.
        hosts: Host substrings of platforms that serve stickers.
    """
    if not url:
        return False
    return (
        matches_sticker_host(url, hosts)
        or matches_keyword(url)
        or matches_sticker_filename(url)
        or matches_path_marker(url)
    )
