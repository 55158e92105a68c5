"""Operator console for the running bot: filter status, reloads and lifecycle control."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import discord
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import PromptSession, clear

from stickerguard.configuration.app_configuration import AppConfig
from stickerguard.moderation.moderation_engine import ModerationEngine
from stickerguard.util.discord_utils import format_guild_list
from stickerguard.util.logger import get_logger

logger = get_logger("console")

BOX_WIDTH = 45


def box_title(title: str) -> list[str]:
    """Return the three lines of a double-ruled box centred on ``title``."""
    inner = BOX_WIDTH - 2
    return [
        f"╔{'═' * inner}╗",
        f"║{title.center(inner)}║",
        f"╚{'═' * inner}╝",
    ]


def console_print(message: str, style: str = "") -> None:
    """Print through prompt_toolkit so output does not tear the active prompt."""
    print_formatted_text(FormattedText([(style, message)]) if style else message)


class ConsoleControl:
    """Shared state between the console, the bot session and ``main``.

    Args:
        engine: Filter engine shown by ``status``/``guilds`` and refreshed by ``reload``.
        config: Configuration re-read by ``reload``.
    """

    def __init__(self, engine: ModerationEngine | None = None, config: AppConfig | None = None) -> None:
        self.engine = engine
        self.config = config
        self.shutdown_event = asyncio.Event()
        self.restart_event = asyncio.Event()
        self._bot: discord.Bot | None = None

    @property
    def bot(self) -> discord.Bot | None:
        return self._bot

    def set_bot(self, bot: discord.Bot | None) -> None:
        self._bot = bot

    def request_shutdown(self) -> None:
        self.shutdown_event.set()

    def request_restart(self) -> None:
        self.restart_event.set()

    def is_shutdown_requested(self) -> bool:
        return self.shutdown_event.is_set()

    def is_restart_requested(self) -> bool:
        return self.restart_event.is_set()


async def close_bot_instance(bot: discord.Bot | None, *, log_close: bool = False) -> None:
    """Close ``bot`` unless it is missing or already closed."""
    if bot is None or bot.is_closed():
        return

    try:
        await bot.close()
    except Exception as exc:
        logger.exception("Error while closing Discord bot: %s", exc)
        return
    if log_close:
        logger.info("Discord bot connection closed.")


# ==================== Command Registry ====================

CommandHandler = Callable[[ConsoleControl, list[str]], Awaitable[None]]


@dataclass
class ConsoleCommand:
    """A console command and the names it answers to."""

    name: str
    handler: CommandHandler
    description: str
    aliases: tuple[str, ...] = field(default_factory=tuple)

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


COMMANDS: dict[str, ConsoleCommand] = {}


def console_command(name: str, description: str, *aliases: str) -> Callable[[CommandHandler], CommandHandler]:
    """Register the decorated coroutine under ``name`` and ``aliases``."""

    def register(handler: CommandHandler) -> CommandHandler:
        command = ConsoleCommand(name, handler, description, aliases)
        for key in command.names:
            COMMANDS[key] = command
        return handler

    return register


def registered_commands() -> list[ConsoleCommand]:
    """Return each command once, in registration order."""
    unique: dict[str, ConsoleCommand] = {}
    for command in COMMANDS.values():
        unique.setdefault(command.name, command)
    return list(unique.values())


# ==================== Command Handlers ====================

@console_command("help", "List the console commands", "h", "?")
async def cmd_help(control: ConsoleControl, args: list[str]) -> None:
    for line in box_title("Console Commands"):
        console_print(line, "ansigreen")
    for command in registered_commands():
        aliases = f" ({', '.join(command.aliases)})" if command.aliases else ""
        console_print(f"  {command.name}{aliases}", "ansicyan")
        console_print(f"    {command.description}")
    console_print("")


@console_command("status", "Show the reference image, filter settings and connection", "stat", "info")
async def cmd_status(control: ConsoleControl, args: list[str]) -> None:
    for line in box_title("Filter Status"):
        console_print(line, "ansiblue")

    engine = control.engine
    if engine is None:
        console_print("  Filter:      not initialized")
    else:
        settings = engine.settings
        reference = engine.pipeline.reference_source
        console_print(f"  Reference:   {'Loaded' if engine.reference_loaded else 'Missing'} ({reference or 'none'})")
        console_print(f"  Threshold:   {settings.similarity:.2f}")
        console_print(f"  Probability: {settings.probability:.0%}")
        console_print(f"  Cooldown:    {settings.cooldown_seconds}s, {len(engine.cooldowns)} user(s) tracked")

    bot = control.bot
    if bot is None:
        console_print("  Bot:         not initialized")
    else:
        console_print(f"  Bot:         {'closed' if bot.is_closed() else 'connected'}, {len(bot.guilds)} guild(s)")
        console_print(f"  Latency:     {bot.latency * 1000:.0f}ms")
    console_print("")


@console_command("guilds", "List the guilds the filter is enabled in, with their policy", "servers", "g")
async def cmd_guilds(control: ConsoleControl, args: list[str]) -> None:
    engine = control.engine
    enabled = engine.policies.enabled_guilds if engine is not None else []
    if not enabled:
        console_print("No guilds are enabled for the sticker filter.", "ansiyellow")
        return

    for line in box_title(f"Enabled Guilds ({len(enabled)})"):
        console_print(line, "ansiblue")
    for guild_id, label in zip(enabled, format_guild_list(enabled, control.bot)):
        policy = engine.policies.resolve(guild_id)
        console_print(f"  • {label}: level {int(policy.level)}, mute {policy.mute_seconds}s")
    console_print("")


@console_command("reload", "Re-read app_config.yml and reload the reference image", "r")
async def cmd_reload(control: ConsoleControl, args: list[str]) -> None:
    if control.engine is None or control.config is None:
        console_print("Filter is not initialized; nothing to reload.", "ansiyellow")
        return

    control.config.reload()
    if await control.engine.reload(control.config.filter_settings):
        console_print("Configuration and reference image reloaded.", "ansigreen")
    else:
        console_print("Configuration reloaded, but the reference image is missing.", "ansiyellow")


@console_command("clear", "Clear the screen", "cls")
async def cmd_clear(control: ConsoleControl, args: list[str]) -> None:
    clear()


@console_command("restart", "Shut the bot down and start a fresh process", "reboot")
async def cmd_restart(control: ConsoleControl, args: list[str]) -> None:
    console_print("Restarting…", "ansiyellow")
    control.request_restart()
    control.request_shutdown()
    await close_bot_instance(control.bot)


@console_command("shutdown", "Shut the bot down", "stop", "quit", "exit")
async def cmd_shutdown(control: ConsoleControl, args: list[str]) -> None:
    console_print("Shutting down…", "ansiyellow")
    control.request_shutdown()
    await close_bot_instance(control.bot)


# ==================== Dispatch ====================

async def handle_console_command(line: str, control: ConsoleControl) -> None:
    """Run the command named by the first word of ``line``."""
    words = line.split()
    if not words:
        return

    name, args = words[0].lower(), words[1:]
    command = COMMANDS.get(name)
    if command is None:
        console_print(f"Unknown command '{name}'. Type 'help' for available commands.", "ansired")
        return

    try:
        await command.handler(control, args)
    except Exception as exc:
        logger.exception("Console command '%s' failed: %s", name, exc)
        console_print(f"Error executing command: {exc}", "ansired")


async def run_console(control: ConsoleControl) -> None:
    """Prompt for commands until shutdown is requested or input ends."""
    session: PromptSession[str] = PromptSession("> ")
    for line in box_title("StickerGuard Console"):
        console_print(line, "ansigreen")
    console_print("Type 'help' for commands.", "ansibrightblack")

    with patch_stdout():
        while not control.is_shutdown_requested():
            try:
                line = await session.prompt_async()
            except (EOFError, KeyboardInterrupt):
                console_print("Shutdown requested from the console.", "ansiyellow")
                control.request_shutdown()
                await close_bot_instance(control.bot)
                return
            await handle_console_command(line, control)


@asynccontextmanager
async def console_session(control: ConsoleControl) -> AsyncIterator[ConsoleControl]:
    """Run the console in the background for the duration of the block."""
    task = asyncio.create_task(run_console(control))
    try:
        yield control
    finally:
        control.request_shutdown()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
