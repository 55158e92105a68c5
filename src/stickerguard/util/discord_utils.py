"""
discord_utils.py
================

Discord-specific glue for the sticker filter.

This module converts py-cord messages into ``StickerMessage`` events and
implements the ``ModerationPlatform`` actions (quoted reply, mention, delete,
timeout) on top of a ``discord.Bot``. All Discord failures are re-raised as
``PlatformError`` so the response executor can record them.
"""

from __future__ import annotations

import datetime
import re
from typing import Iterable, List, Optional, Union

import discord

from stickerguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from stickerguard.datatypes.image_datatypes import ImageReference
from stickerguard.datatypes.moderation_datatypes import StickerMessage
from stickerguard.util.errors import PlatformError
from stickerguard.util.image_utils import is_image_filename
from stickerguard.util.logger import get_logger

logger = get_logger("discord_utils")

EMOJI_CDN = "https://cdn.discordapp.com/emojis"

# <:name:id> and animated <a:name:id> custom emoji
CUSTOM_EMOJI_PATTERN = re.compile(r"<(a?):\w{2,32}:(\d{15,25})>")
# Bare links that end in an image extension, query string allowed
IMAGE_LINK_PATTERN = re.compile(
    r"https?://[^\s<>\"']+?\.(?:png|jpe?g|gif|webp|bmp)(?:\?[^\s<>\"']*)?(?=$|[\s<>\"'])",
    re.IGNORECASE,
)

MUTE_REASON = "Posted a filtered sticker"


# ==========================================
# Author helpers
# ==========================================

def is_ignored_author(author: Union[discord.User, discord.Member]) -> bool:
    """
    Check if an author should be ignored by the filter (bots or non-members).

    Args:
        author (discord.User | discord.Member): The user or member to check.

    Returns:
        bool: True if the author is a bot or not a guild member.
    """
    return author.bot or not isinstance(author, discord.Member)


def author_role_markers(author: Union[discord.User, discord.Member], guild: Optional[discord.Guild]) -> frozenset[str]:
    """
    Translate Discord ownership and permissions into role markers.

    ``"owner"`` is set for the guild owner and ``"admin"`` for members with the
    administrator permission.
    """
    markers: set[str] = set()
    if guild is not None and getattr(guild, "owner_id", None) == author.id:
        markers.add("owner")
    permissions = getattr(author, "guild_permissions", None)
    if permissions is not None and getattr(permissions, "administrator", False):
        markers.add("admin")
    return frozenset(markers)


# ==========================================
# Image extraction
# ==========================================

def is_image_attachment(attachment: discord.Attachment) -> bool:
    """
    Determine if a Discord attachment is an image.

    Checks the content type, then the presence of pixel dimensions, then the
    filename extension.
    """
    content_type = (attachment.content_type or "").lower()
    if content_type.startswith("image/"):
        return True
    if attachment.width is not None and attachment.height is not None:
        return True
    return is_image_filename(attachment.filename)


def extract_content_image_sources(content: str) -> List[str]:
    """
    Return image sources referenced in message text, in text order.

    Custom emoji markup is expanded to its CDN URL; bare image links are kept
    as written.
    """
    found: list[tuple[int, str]] = []
    for match in CUSTOM_EMOJI_PATTERN.finditer(content or ""):
        extension = "gif" if match.group(1) else "png"
        found.append((match.start(), f"{EMOJI_CDN}/{match.group(2)}.{extension}"))
    for match in IMAGE_LINK_PATTERN.finditer(content or ""):
        found.append((match.start(), match.group(0)))
    found.sort(key=lambda item: item[0])
    return [src for _, src in found]


def collect_image_references(message: discord.Message) -> List[ImageReference]:
    """
    Gather every image reference of a message in display order: images from
    the text first, then image attachments, then stickers.
    """
    sources: list[str] = extract_content_image_sources(message.content or "")
    sources.extend(att.url for att in message.attachments if is_image_attachment(att))
    sources.extend(url for url in (getattr(sticker, "url", None) for sticker in message.stickers) if url)

    references: list[ImageReference] = []
    for src in sources:
        try:
            references.append(ImageReference(str(src)))
        except ValueError:
            logger.debug(f"Skipping empty image source in message {message.id}")
    return references


def build_sticker_message(message: discord.Message) -> StickerMessage:
    """Convert a guild message into the platform-neutral ``StickerMessage``."""
    if message.guild is None:
        raise ValueError("Only guild messages can be converted")
    return StickerMessage(
        guild_id=GuildID.from_object(message.guild),
        user_id=UserID.from_object(message.author),
        message_id=MessageID.from_object(message),
        channel_id=ChannelID.from_object(message.channel),
        content=message.content or "",
        author_roles=author_role_markers(message.author, message.guild),
        images=tuple(collect_image_references(message)),
    )


# ==========================================
# Platform actions
# ==========================================

class DiscordModerationPlatform:
    """``ModerationPlatform`` implemented with py-cord.

    Args:
        bot: Connected client used to resolve channels, guilds and members.
    """

    def __init__(self, bot: discord.Client) -> None:
        self.bot = bot

    async def _resolve_channel(self, channel_id: ChannelID):
        channel = self.bot.get_channel(channel_id.to_int())
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(channel_id.to_int())
            except discord.HTTPException as exc:
                raise PlatformError(f"Cannot resolve channel {channel_id}: {exc}") from exc
        if not hasattr(channel, "get_partial_message"):
            raise PlatformError(f"Channel {channel_id} does not hold messages")
        return channel

    async def _resolve_member(self, guild_id: GuildID, user_id: UserID) -> discord.Member:
        guild = self.bot.get_guild(guild_id.to_int())
        try:
            if guild is None:
                guild = await self.bot.fetch_guild(guild_id.to_int())
            member = guild.get_member(user_id.to_int())
            if member is None:
                member = await guild.fetch_member(user_id.to_int())
        except discord.HTTPException as exc:
            raise PlatformError(f"Cannot resolve member {user_id} in guild {guild_id}: {exc}") from exc
        return member

    async def send_message(
        self,
        channel_id: ChannelID,
        content: str,
        *,
        quote: Optional[MessageID] = None,
        mention: Optional[UserID] = None,
    ) -> None:
        channel = await self._resolve_channel(channel_id)
        if mention is not None:
            content = f"<@{mention}> {content}"
        reference = channel.get_partial_message(quote.to_int()) if quote is not None else None
        try:
            await channel.send(
                content,
                reference=reference,
                mention_author=False,
                allowed_mentions=discord.AllowedMentions(users=True, roles=False, everyone=False),
            )
        except (discord.HTTPException, discord.ClientException) as exc:
            raise PlatformError(f"Failed to send message in channel {channel_id}: {exc}") from exc

    async def delete_message(self, channel_id: ChannelID, message_id: MessageID) -> None:
        channel = await self._resolve_channel(channel_id)
        try:
            await channel.get_partial_message(message_id.to_int()).delete()
        except discord.NotFound as exc:
            raise PlatformError(f"Message {message_id} no longer exists") from exc
        except discord.Forbidden as exc:
            raise PlatformError(f"No permission to delete message {message_id}") from exc
        except discord.HTTPException as exc:
            raise PlatformError(f"Error deleting message {message_id}: {exc}") from exc

    async def mute_member(self, guild_id: GuildID, user_id: UserID, duration_millis: int) -> None:
        member = await self._resolve_member(guild_id, user_id)
        try:
            await member.timeout_for(datetime.timedelta(milliseconds=duration_millis), reason=MUTE_REASON)
        except discord.Forbidden as exc:
            raise PlatformError(f"No permission to time out {user_id} in guild {guild_id}") from exc
        except discord.HTTPException as exc:
            raise PlatformError(f"Error timing out {user_id} in guild {guild_id}: {exc}") from exc


def format_guild_list(guild_ids: Iterable[GuildID], bot: Optional[discord.Client] = None) -> List[str]:
    """Render guild ids with their names when the bot can see the guild."""
    lines = []
    for guild_id in guild_ids:
        guild = bot.get_guild(guild_id.to_int()) if bot is not None else None
        lines.append(f"{guild.name} ({guild_id})" if guild is not None else str(guild_id))
    return lines
