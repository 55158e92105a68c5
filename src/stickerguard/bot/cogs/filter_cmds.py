"""
Sticker filter slash commands: inspect the filter state and reload its configuration.
"""

import discord
from discord.ext import commands

from stickerguard.configuration.app_configuration import AppConfig
from stickerguard.datatypes.discord_datatypes import GuildID
from stickerguard.moderation.moderation_engine import ModerationEngine
from stickerguard.util.discord_utils import author_role_markers
from stickerguard.util.logger import get_logger

logger = get_logger("filter_commands")

LEVEL_LABELS = {
    1: "Delete + warn + mute",
    2: "Delete + warn",
    3: "Quoted reply",
}


def build_status_embed(engine: ModerationEngine, guild_id: GuildID | None) -> discord.Embed:
    """Summarize the filter state, including the policy of ``guild_id`` when given."""
    settings = engine.settings
    loaded = engine.reference_loaded
    embed = discord.Embed(
        title="🧃 Sticker Filter Status",
        color=discord.Color.green() if loaded else discord.Color.orange(),
    )
    source = engine.pipeline.reference_source
    embed.add_field(
        name="Reference Image",
        value=f"✅ `{source}`" if loaded else "⚠️ Not loaded",
        inline=False,
    )
    embed.add_field(name="Similarity Threshold", value=f"{settings.similarity:.2f}", inline=True)
    embed.add_field(name="Probability", value=f"{settings.probability:.0%}", inline=True)
    embed.add_field(name="Cooldown", value=f"{settings.cooldown_seconds}s", inline=True)

    if guild_id is not None:
        if engine.policies.is_enabled(guild_id):
            policy = engine.policies.resolve(guild_id)
            level = int(policy.level)
            value = f"Level {level}: {LEVEL_LABELS[level]}"
            if policy.level == 1:
                value += f" ({policy.mute_seconds}s)"
        else:
            value = "Disabled in this server"
        embed.add_field(name="This Server", value=value, inline=False)
    return embed


class FilterCmdsCog(commands.Cog):
    """Cog for sticker filter administration commands."""

    stickerguard = discord.SlashCommandGroup("stickerguard", "Sticker filter administration")

    def __init__(self, bot: discord.Bot, engine: ModerationEngine, config: AppConfig):
        self.bot = bot
        self.engine = engine
        self.config = config

    @stickerguard.command(name="status", description="Show the sticker filter state for this server")
    async def status(self, application_context: discord.ApplicationContext) -> None:
        """Show whether the reference image is loaded and this server's policy."""
        guild = application_context.guild
        guild_id = GuildID(guild.id) if guild else None
        await application_context.respond(embed=build_status_embed(self.engine, guild_id), ephemeral=True)

    @stickerguard.command(name="reload", description="Reload the configuration and the reference image")
    async def reload(self, application_context: discord.ApplicationContext) -> None:
        """Re-read the YAML configuration and reload the reference image."""
        if not author_role_markers(application_context.author, application_context.guild):
            await application_context.respond("❌ Only server owners and administrators can reload the filter.", ephemeral=True)
            return

        await application_context.defer(ephemeral=True)
        try:
            self.config.reload()
            loaded = await self.engine.reload(self.config.filter_settings)
        except Exception as e:
            logger.error(f"Error in reload command: {e}", exc_info=True)
            await application_context.send_followup(content=f"❌ Error: {e}", ephemeral=True)
            return

        logger.info(f"Configuration reloaded by {application_context.user}")
        if loaded:
            await application_context.send_followup(content="✅ Configuration and reference image reloaded.", ephemeral=True)
        else:
            await application_context.send_followup(
                content="⚠️ Configuration reloaded, but the reference image could not be loaded.",
                ephemeral=True,
            )


def setup(bot: discord.Bot, engine: ModerationEngine, config: AppConfig) -> None:
    """Register the filter command group with the bot."""
    bot.add_cog(FilterCmdsCog(bot, engine, config))
