"""Interface the moderation engine uses to act on the chat platform."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from stickerguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID


@runtime_checkable
class ModerationPlatform(Protocol):
    """Platform actions used by the graduated response.

    Every method raises :class:`stickerguard.util.errors.PlatformError` when
    the platform rejects the action or the request fails.
    """

    async def send_message(
        self,
        channel_id: ChannelID,
        content: str,
        *,
        quote: Optional[MessageID] = None,
        mention: Optional[UserID] = None,
    ) -> None:
        """Post ``content``, optionally quoting a message and mentioning a user."""
        ...

    async def delete_message(self, channel_id: ChannelID, message_id: MessageID) -> None:
        ...

    async def mute_member(self, guild_id: GuildID, user_id: UserID, duration_millis: int) -> None:
        ...
