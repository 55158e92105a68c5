"""Tests for the interactive console commands."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from stickerguard.configuration.filter_settings import FilterSettings
from stickerguard.datatypes.discord_datatypes import GuildID
from stickerguard.datatypes.policy_datatypes import GuildPolicy, PolicyLevel
from stickerguard.moderation.moderation_engine import ModerationEngine
from stickerguard.ui import console
from stickerguard.ui.console import ConsoleControl, close_bot_instance, handle_console_command


@pytest.fixture()
def printed(monkeypatch):
    lines = []
    monkeypatch.setattr(console, "console_print", lambda message, style="": lines.append(message))
    return lines


def _engine():
    settings = FilterSettings(guilds=(GuildPolicy(GuildID(11), PolicyLevel.DELETE_AND_WARN, 60),))
    return ModerationEngine(settings, MagicMock())


@pytest.mark.asyncio
async def test_close_bot_instance_with_none():
    """Test that close_bot_instance handles None bot gracefully."""
    await close_bot_instance(None)


@pytest.mark.asyncio
async def test_close_bot_instance_with_closed_bot():
    """Test that close_bot_instance leaves an already closed bot alone."""
    bot = MagicMock()
    bot.is_closed.return_value = True
    bot.close = AsyncMock()

    await close_bot_instance(bot)

    bot.close.assert_not_called()


@pytest.mark.asyncio
async def test_close_bot_instance_closes_open_bot():
    bot = MagicMock()
    bot.is_closed.return_value = False
    bot.close = AsyncMock()

    await close_bot_instance(bot, log_close=True)

    bot.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_shutdown_command_sets_event_and_closes_bot(printed):
    control = ConsoleControl()
    bot = MagicMock()
    bot.is_closed.return_value = False
    bot.close = AsyncMock()
    control.set_bot(bot)

    await handle_console_command("quit", control)

    assert control.is_shutdown_requested()
    assert not control.is_restart_requested()
    bot.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_restart_command_requests_restart(printed):
    control = ConsoleControl()

    await handle_console_command("restart", control)

    assert control.is_restart_requested()
    assert control.is_shutdown_requested()


@pytest.mark.asyncio
async def test_status_reports_filter_state(printed):
    control = ConsoleControl(engine=_engine())

    await handle_console_command("status", control)

    text = "\n".join(printed)
    assert "Missing" in text
    assert "0.80" in text
    assert "not initialized" in text


@pytest.mark.asyncio
async def test_guilds_lists_enabled_guilds(printed):
    control = ConsoleControl(engine=_engine())

    await handle_console_command("guilds", control)

    assert any("11: level 2, mute 60s" in line for line in printed)


@pytest.mark.asyncio
async def test_guilds_without_engine(printed):
    await handle_console_command("g", ConsoleControl())

    assert printed == ["No guilds are enabled for the sticker filter."]


@pytest.mark.asyncio
async def test_reload_uses_config_and_engine(printed):
    engine = MagicMock()
    engine.reload = AsyncMock(return_value=True)
    config = MagicMock()
    control = ConsoleControl(engine=engine, config=config)

    await handle_console_command("r", control)

    config.reload.assert_called_once()
    engine.reload.assert_awaited_once_with(config.filter_settings)
    assert printed == ["Configuration and reference image reloaded."]


@pytest.mark.asyncio
async def test_handler_errors_are_reported(printed):
    engine = MagicMock()
    engine.reload = AsyncMock(side_effect=RuntimeError("disk on fire"))
    control = ConsoleControl(engine=engine, config=MagicMock())

    await handle_console_command("reload", control)

    assert printed[-1] == "Error executing command: disk on fire"


@pytest.mark.asyncio
async def test_unknown_command(printed):
    await handle_console_command("dance", ConsoleControl())

    assert "Unknown command 'dance'" in printed[-1]


@pytest.mark.asyncio
async def test_blank_command_is_ignored(printed):
    await handle_console_command("   ", ConsoleControl())

    assert printed == []


def test_every_alias_resolves_to_its_command():
    names = [command.name for command in console.registered_commands()]
    assert names == ["help", "status", "guilds", "reload", "clear", "restart", "shutdown"]
    assert console.COMMANDS["exit"].name == "shutdown"
    assert console.COMMANDS["?"].name == "help"


@pytest.mark.asyncio
async def test_help_lists_every_command(printed):
    await handle_console_command("help", ConsoleControl())

    text = "\n".join(printed)
    for command in console.registered_commands():
        assert command.name in text
