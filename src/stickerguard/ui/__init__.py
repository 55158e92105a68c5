"""
User interface components for StickerGuard.

- **console.py**: Interactive operator console built on prompt_toolkit with
  status, enabled guild listing, configuration reload, and graceful
  shutdown/restart.
"""
