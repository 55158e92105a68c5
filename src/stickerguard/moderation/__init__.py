"""
Moderation decisions for StickerGuard.

- **cooldown_tracker.py**: Per-user last-trigger timestamps.
- **guild_policy_resolver.py**: Guild enablement and effective policy lookup.
- **platform.py**: Protocol of the platform actions the engine needs.
- **response_executor.py**: Best-effort execution of the graduated response.
- **moderation_engine.py**: Gate sequence, detection loop and response dispatch.
"""
