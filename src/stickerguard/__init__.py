"""
StickerGuard - Reference-Sticker Filter for Discord

StickerGuard watches enabled Discord servers for one specific sticker image and
answers it with a graduated moderation response.

Core Components:

- **Detection**: Normalizes images to a 64x64 RGBA raster and scores them
  against a single cached reference image with a pixel-difference metric
- **Sticker Classifier**: URL heuristics that keep ordinary photos out of the
  comparison
- **Moderation Engine**: Guild enablement, per-user cooldown and probability
  gates followed by the per-guild graduated response (reply, delete + warn,
  delete + warn + timeout)
- **Interactive Console**: Live status, configuration reload, and graceful
  restart/shutdown

Usage:
    from stickerguard.main import main
    main()  # Starts the bot with console interface
"""
