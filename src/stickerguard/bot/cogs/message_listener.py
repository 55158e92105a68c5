"""Message listener Cog for StickerGuard.

This cog converts every guild message into a ``StickerMessage`` and hands it
to the moderation engine. Messages pass through untouched unless the engine
decides to respond.
"""

import discord
from discord.ext import commands

from stickerguard.datatypes.moderation_datatypes import ModerationDecision
from stickerguard.moderation.moderation_engine import ModerationEngine
from stickerguard.util import discord_utils
from stickerguard.util.logger import get_logger

logger = get_logger("message_listener_cog")


class MessageListenerCog(commands.Cog):
    """Cog responsible for feeding new messages to the sticker filter."""

    def __init__(self, discord_bot_instance, engine: ModerationEngine):
        """
        Initialize the message listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        engine:
            The moderation engine that decides on each message.
        """
        self.bot = discord_bot_instance
        self.engine = engine
        logger.info("Message listener cog loaded")

    def _should_process_message(self, message: discord.Message) -> bool:
        # Ignore DMs
        if message.guild is None:
            return False

        if discord_utils.is_ignored_author(message.author):
            return False

        return bool(message.attachments or message.stickers or message.content)

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message) -> ModerationDecision | None:
        """
        Handle new messages by running them through the sticker filter.

        Parameters
        ----------
        message:
            The Discord message that was created.
        """
        if not self._should_process_message(message):
            return None

        try:
            event = discord_utils.build_sticker_message(message)
            decision = await self.engine.handle_message(event)
        except Exception as e:
            logger.error(f"Error filtering message {message.id}: {e}", exc_info=True)
            return None

        if decision.responded:
            logger.debug(f"Responded to message {message.id} from {message.author}")
        return decision


def setup(discord_bot_instance, engine: ModerationEngine):
    """
    Register the MessageListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    engine:
        The moderation engine shared by all cogs.
    """
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance, engine))
