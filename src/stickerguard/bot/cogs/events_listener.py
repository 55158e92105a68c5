"""Lifecycle cog: loads the reference image when the client becomes ready and
reports slash-command failures back to the invoking user.
"""

import discord
from discord.ext import commands

from stickerguard.moderation.moderation_engine import ModerationEngine
from stickerguard.util.logger import get_logger

logger = get_logger("events_listener_cog")

WATCHING_ACTIVITY = "for stickers"
IDLE_ACTIVITY = "nothing (no reference image)"
COMMAND_ERROR_REPLY = "❌ Something went wrong while running this command."
PERMISSION_ERROR_REPLY = "❌ You do not have permission to use this command."


class EventsListenerCog(commands.Cog):
    """Ready handling and application command error reporting."""

    def __init__(self, discord_bot_instance, engine: ModerationEngine):
        """
        Parameters
        ----------
        discord_bot_instance:
            Bot whose presence reflects the filter state.
        engine:
            Engine initialized on the first ``on_ready``.
        """
        self.bot = discord_bot_instance
        self.engine = engine
        self._initialized = False
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Load the reference image on the first ready event and refresh presence.

        Reconnects fire ``on_ready`` again; the reference image is not reloaded then.
        """
        user = self.bot.user
        if user is None:
            logger.warning("on_ready fired before the client user was available")
        else:
            logger.info(f"Logged in as {user} (ID: {user.id})")

        if not self._initialized:
            self._initialized = True
            loaded = await self.engine.initialize()
            if not loaded:
                logger.warning("[ENGINE] Running without a reference image; no message will match")

        await self._update_presence()

    async def _update_presence(self) -> None:
        if self.bot.user is None:
            return

        loaded = self.engine.reference_loaded
        await self.bot.change_presence(
            status=discord.Status.online if loaded else discord.Status.idle,
            activity=discord.Activity(
                type=discord.ActivityType.watching,
                name=WATCHING_ACTIVITY if loaded else IDLE_ACTIVITY,
            ),
        )

    @commands.Cog.listener(name="on_application_command_error")
    async def on_application_command_error(self, application_context: discord.ApplicationContext, error: Exception):
        """Log a failed slash command and tell the invoking user.

        Parameters
        ----------
        application_context:
            Context of the failed invocation.
        error:
            The exception raised by the command or its checks.
        """
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, (commands.CheckFailure, discord.CheckFailure)):
            reply = PERMISSION_ERROR_REPLY
            logger.info(f"Permission check failed for {application_context.user}: {error}")
        else:
            reply = COMMAND_ERROR_REPLY
            command_name = getattr(application_context.command, "qualified_name", "<unknown>")
            logger.error(f"Command '{command_name}' failed: {error}", exc_info=error)

        try:
            await application_context.respond(reply, ephemeral=True)
        except discord.InteractionResponded:
            await application_context.followup.send(reply, ephemeral=True)


def setup(discord_bot_instance, engine: ModerationEngine):
    """Add :class:`EventsListenerCog` to ``discord_bot_instance``."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, engine))
