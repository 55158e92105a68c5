"""
Utility functions and helpers for StickerGuard.

- **logger.py**: Centralized logging with colored console output through
  prompt_toolkit, one rotating log file per session, and noisy library
  suppression.

- **errors.py**: Exception taxonomy (fetch, decode, platform, missing
  configuration).

- **image_utils.py**: Fetches images from URLs or local paths and normalizes
  them into canonical 64x64 RGBA rasters with Pillow.

- **discord_utils.py**: py-cord glue: converts messages into ``StickerMessage``
  events and implements the moderation platform actions.
"""
