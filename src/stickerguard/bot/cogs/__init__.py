"""
Cogs package for StickerGuard.

Each module defines a cog class and a setup function to register it with the
bot. The cogs are loaded explicitly in main.py and receive the shared
moderation engine as a constructor argument.

- **events_listener.py**: Loads the reference image on ready, maintains presence,
  and reports command errors.
- **message_listener.py**: Feeds guild messages to the moderation engine.
- **filter_cmds.py**: ``/stickerguard status`` and ``/stickerguard reload``.
"""
