"""
Exception taxonomy for the sticker filter.

Every error is raised close to where it originates (image fetch, decode,
platform call) and caught by the detection pipeline or the response
executor, which turn it into a structured result. None of them reach the
Discord event dispatcher.
"""


class StickerGuardError(Exception):
    """Base class for all sticker filter errors."""


class FetchError(StickerGuardError):
    """The image source could not be reached (network failure, 404, missing file)."""


class DecodeError(StickerGuardError):
    """The fetched bytes could not be decoded as an image."""


class PlatformError(StickerGuardError):
    """A moderation action was rejected by the chat platform."""


class ConfigurationMissing(StickerGuardError):
    """No reference image has been loaded, so nothing can be matched."""
