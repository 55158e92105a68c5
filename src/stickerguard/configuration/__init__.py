"""
Configuration management for StickerGuard.

- **app_configuration.py**: File-locked YAML loader for ``config/app_config.yml``.
  Falls back gracefully on missing or malformed files.

- **filter_settings.py**: Immutable, validated snapshot of the ``sticker_filter``
  section (reference images, guild policies, threshold, cooldown, probability,
  response texts).
"""
