import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

from stickerguard import main
from stickerguard.ui import console
from stickerguard.util.logger import handle_exception


def test_importing_main_installs_exception_hook():
    assert sys.excepthook is handle_exception


def test_resolve_base_dir_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("STICKERGUARD_HOME", str(tmp_path))

    resolved = main.resolve_base_dir()

    assert resolved == tmp_path.resolve()


def test_resolve_base_dir_compiled(tmp_path, monkeypatch):
    monkeypatch.delenv("STICKERGUARD_HOME", raising=False)
    monkeypatch.setattr(sys, "frozen", True, raising=False)
    monkeypatch.setattr(sys, "argv", [str(tmp_path / "stickerguard.exe")])

    resolved = main.resolve_base_dir()

    assert resolved == (tmp_path / "stickerguard.exe").resolve().parent


def test_resolve_base_dir_source(monkeypatch):
    monkeypatch.delenv("STICKERGUARD_HOME", raising=False)
    monkeypatch.setattr(sys, "frozen", False, raising=False)
    monkeypatch.setattr(sys, "compiled", False, raising=False)

    resolved = main.resolve_base_dir()

    assert resolved == main.Path(main.__file__).resolve().parents[2]


def test_load_environment_requires_token(tmp_path, monkeypatch):
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)

    with pytest.raises(SystemExit):
        main.load_environment(tmp_path)


def test_load_environment_reads_dotenv(tmp_path, monkeypatch):
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)
    (tmp_path / ".env").write_text("DISCORD_BOT_TOKEN=abc123\n", encoding="utf-8")

    assert main.load_environment(tmp_path) == "abc123"
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)


def test_build_intents_enables_message_content():
    intents = main.build_intents()

    assert intents.message_content
    assert intents.members


def test_load_cogs_registers_all_cogs():
    bot = MagicMock()

    main.load_cogs(bot, MagicMock(), MagicMock())

    names = [type(call.args[0]).__name__ for call in bot.add_cog.call_args_list]
    assert names == ["EventsListenerCog", "MessageListenerCog", "FilterCmdsCog"]


@pytest.mark.asyncio
async def test_run_bot_session_closes_bot_after_start(monkeypatch):
    monkeypatch.setattr(console, "run_console", AsyncMock())
    bot = MagicMock()
    bot.start = AsyncMock()
    bot.is_closed.return_value = False
    bot.close = AsyncMock()
    control = console.ConsoleControl()

    exit_code = await main.run_bot_session(bot, "token", control)

    assert exit_code == 0
    bot.start.assert_awaited_once_with("token")
    bot.close.assert_awaited_once()
    assert control.bot is None


@pytest.mark.asyncio
async def test_run_bot_session_reports_runtime_errors(monkeypatch):
    monkeypatch.setattr(console, "run_console", AsyncMock())
    bot = MagicMock()
    bot.start = AsyncMock(side_effect=RuntimeError("gateway down"))
    bot.is_closed.return_value = True
    control = console.ConsoleControl()

    assert await main.run_bot_session(bot, "token", control) == 1


@pytest.mark.asyncio
async def test_async_main_returns_restart_code(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "load_environment", lambda base_dir: "token")
    monkeypatch.setattr(main, "create_bot", lambda config: (MagicMock(), MagicMock()))

    async def fake_session(bot, token, control):
        control.request_restart()
        return 0

    monkeypatch.setattr(main, "run_bot_session", fake_session)

    assert await main.async_main(tmp_path) == main.RESTART_EXIT_CODE


def test_main_maps_system_exit(monkeypatch, tmp_path):
    monkeypatch.setenv("STICKERGUARD_HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)

    def fake_run(coro):
        coro.close()
        raise SystemExit(3)

    monkeypatch.setattr(main.asyncio, "run", fake_run)

    assert main.main() == 3
