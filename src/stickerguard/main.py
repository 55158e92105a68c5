"""
StickerGuard Discord Bot
========================

Watches the configured servers for one reference sticker and answers it with
the server's graduated response: a quoted reply, a deletion with a warning,
or a deletion, warning and timeout.

Run with the ``stickerguard`` console script. The process exits with
``RESTART_EXIT_CODE`` internally when the console asks for a restart and then
re-executes itself.
"""

import asyncio
import os
import sys
from pathlib import Path

import discord
from dotenv import load_dotenv

from stickerguard.bot.cogs import events_listener, filter_cmds, message_listener
from stickerguard.configuration.app_configuration import AppConfig
from stickerguard.moderation.moderation_engine import ModerationEngine
from stickerguard.ui.console import ConsoleControl, close_bot_instance, console_session
from stickerguard.util.discord_utils import DiscordModerationPlatform
from stickerguard.util.logger import get_logger

logger = get_logger("main")

RESTART_EXIT_CODE = 42


def resolve_base_dir() -> Path:
    """Return the directory holding ``.env`` and ``config/``.

    ``STICKERGUARD_HOME`` wins when set. Frozen builds (PyInstaller, Nuitka) use
    the executable's directory; a source checkout uses the repository root.
    """
    if home := os.getenv("STICKERGUARD_HOME"):
        return Path(home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


def load_environment(base_dir: Path) -> str:
    """Load ``base_dir/.env`` and return ``DISCORD_BOT_TOKEN``.

    Raises
    ------
    SystemExit
        If no token is configured.
    """
    load_dotenv(dotenv_path=base_dir / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("DISCORD_BOT_TOKEN is not set; add it to %s or the environment.", base_dir / ".env")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for reading guild message content and resolving members to mute."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.messages = True
    intents.message_content = True
    intents.members = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, engine: ModerationEngine, config: AppConfig) -> None:
    """Register the lifecycle, message and command cogs."""
    events_listener.setup(discord_bot_instance, engine)
    message_listener.setup(discord_bot_instance, engine)
    filter_cmds.setup(discord_bot_instance, engine, config)
    logger.info("Cogs registered.")


def create_bot(config: AppConfig) -> tuple[discord.Bot, ModerationEngine]:
    """Build the bot and an engine that acts through it."""
    bot = discord.Bot(intents=build_intents())
    engine = ModerationEngine(config.filter_settings, DiscordModerationPlatform(bot))
    load_cogs(bot, engine, config)
    return bot, engine


async def run_bot_session(bot: discord.Bot, token: str, control: ConsoleControl) -> int:
    """Connect the bot with the console running beside it; return 0 or 1.

    The bot is always closed before returning, whichever side ended the session.
    """
    control.set_bot(bot)
    exit_code = 0
    try:
        async with console_session(control):
            logger.info("Connecting to Discord…")
            try:
                await bot.start(token)
            except asyncio.CancelledError:
                logger.info("Bot connection cancelled.")
            except Exception as exc:
                logger.critical("Bot stopped with an error: %s", exc)
                exit_code = 1
    finally:
        control.set_bot(None)
        await close_bot_instance(bot, log_close=True)
        logger.info("Session ended.")
    return exit_code


async def async_main(base_dir: Path) -> int:
    """Load configuration, build the bot and run one session."""
    token = load_environment(base_dir)
    config = AppConfig(base_dir / "config" / "app_config.yml")

    if not config.filter_settings.guilds:
        logger.warning("[CONFIG] No guilds listed under 'sticker_filter.guilds'; every message will be ignored.")

    try:
        bot, engine = create_bot(config)
    except Exception as exc:
        logger.critical("Could not build the Discord bot: %s", exc)
        return 1

    control = ConsoleControl(engine=engine, config=config)
    exit_code = await run_bot_session(bot, token, control)

    if control.is_restart_requested():
        logger.info("Restart requested from the console.")
        return RESTART_EXIT_CODE
    return exit_code


def _system_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    logger.warning("Non-integer exit status %r; using 1", code)
    return 1


def main() -> int:
    """Console-script entry point; returns the process exit code.

    Returns
    -------
    int
        Exit code for the operating system.
    """
    base_dir = resolve_base_dir()
    os.chdir(base_dir)
    logger.info("Starting StickerGuard from %s", base_dir)

    try:
        exit_code = asyncio.run(async_main(base_dir))
    except KeyboardInterrupt:
        logger.info("Interrupted; exiting.")
        return 0
    except SystemExit as exc:
        return _system_exit_code(exc.code)
    except Exception as exc:
        logger.critical("Unhandled error while running the bot: %s", exc, exc_info=True)
        return 1

    if exit_code == RESTART_EXIT_CODE:
        logger.info("Re-executing for restart.")
        os.execv(sys.executable, [sys.executable] + sys.argv)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
