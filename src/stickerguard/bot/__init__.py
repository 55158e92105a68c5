"""Discord integration for StickerGuard."""
