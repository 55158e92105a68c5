import pytest

from stickerguard.datatypes.action_datatypes import ActionType, ErrorKind
from stickerguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from stickerguard.datatypes.moderation_datatypes import StickerMessage
from stickerguard.datatypes.policy_datatypes import GuildPolicy, PolicyLevel
from stickerguard.moderation.response_executor import ResponseExecutor

from fakes import FakePlatform

GUILD = GuildID(10)
USER = UserID(20)
CHANNEL = ChannelID(30)
MESSAGE = MessageID(40)


def _message(roles=frozenset()) -> StickerMessage:
    return StickerMessage(GUILD, USER, MESSAGE, CHANNEL, author_roles=frozenset(roles))


def _executor(platform: FakePlatform) -> ResponseExecutor:
    return ResponseExecutor(platform, reply_text="sugar", warning_text="stop it")


@pytest.mark.asyncio
async def test_reply_only_quotes_the_message():
    platform = FakePlatform()
    result = await _executor(platform).execute(_message(), GuildPolicy(GUILD, PolicyLevel.REPLY_ONLY))

    assert platform.calls == [("send", CHANNEL, "sugar", MESSAGE, None)]
    assert result.completed == [ActionType.REPLY]
    assert result.ok


@pytest.mark.asyncio
async def test_reply_only_applies_to_privileged_authors_too():
    platform = FakePlatform()
    result = await _executor(platform).execute(_message({"owner"}), GuildPolicy(GUILD, PolicyLevel.REPLY_ONLY))

    assert platform.operations == ["send"]
    assert result.privileged is True


@pytest.mark.asyncio
async def test_delete_and_warn_runs_in_order():
    platform = FakePlatform()
    result = await _executor(platform).execute(_message(), GuildPolicy(GUILD, PolicyLevel.DELETE_AND_WARN))

    assert platform.calls == [
        ("delete", CHANNEL, MESSAGE),
        ("send", CHANNEL, "stop it", None, USER),
    ]
    assert result.completed == [ActionType.DELETE, ActionType.WARN]


@pytest.mark.asyncio
async def test_delete_and_mute_uses_milliseconds():
    platform = FakePlatform()
    result = await _executor(platform).execute(_message(), GuildPolicy(GUILD, PolicyLevel.DELETE_AND_MUTE, 120))

    assert platform.operations == ["delete", "send", "mute"]
    assert platform.calls[-1] == ("mute", GUILD, USER, 120_000)
    assert result.level is PolicyLevel.DELETE_AND_MUTE
    assert result.ok


@pytest.mark.asyncio
async def test_zero_mute_is_still_requested():
    platform = FakePlatform()
    await _executor(platform).execute(_message(), GuildPolicy(GUILD, PolicyLevel.DELETE_AND_MUTE, 0))

    assert platform.calls[-1] == ("mute", GUILD, USER, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["admin", "owner"])
@pytest.mark.parametrize("level", [PolicyLevel.DELETE_AND_MUTE, PolicyLevel.DELETE_AND_WARN])
async def test_privileged_author_only_gets_warning(role, level):
    platform = FakePlatform()
    result = await _executor(platform).execute(_message({role}), GuildPolicy(GUILD, level, 60))

    assert platform.calls == [("send", CHANNEL, "stop it", None, USER)]
    assert result.completed == [ActionType.WARN]
    assert result.privileged is True


@pytest.mark.asyncio
async def test_unrelated_roles_are_not_privileged():
    platform = FakePlatform()
    await _executor(platform).execute(_message({"moderator"}), GuildPolicy(GUILD, PolicyLevel.DELETE_AND_WARN))

    assert platform.operations == ["delete", "send"]


@pytest.mark.asyncio
async def test_failed_delete_does_not_stop_later_steps():
    platform = FakePlatform(failing={"delete"})
    result = await _executor(platform).execute(_message(), GuildPolicy(GUILD, PolicyLevel.DELETE_AND_MUTE, 60))

    assert platform.operations == ["delete", "send", "mute"]
    assert result.completed == [ActionType.WARN, ActionType.MUTE]
    assert [f.action for f in result.failures] == [ActionType.DELETE]
    assert result.failures[0].kind is ErrorKind.PLATFORM
    assert not result.ok
    assert result.attempted == [ActionType.DELETE, ActionType.WARN, ActionType.MUTE]


@pytest.mark.asyncio
async def test_unexpected_exception_is_recorded_as_platform_failure():
    platform = FakePlatform()

    async def broken_mute(*args, **kwargs):
        raise RuntimeError("boom")

    platform.mute_member = broken_mute
    result = await _executor(platform).execute(_message(), GuildPolicy(GUILD, PolicyLevel.DELETE_AND_MUTE, 60))

    assert result.completed == [ActionType.DELETE, ActionType.WARN]
    assert result.failures[0].action is ActionType.MUTE
    assert result.failures[0].kind is ErrorKind.PLATFORM
    assert "boom" in result.failures[0].detail


def test_plan_lists_steps_without_calling_platform():
    platform = FakePlatform()
    steps = _executor(platform).plan(_message(), GuildPolicy(GUILD, PolicyLevel.DELETE_AND_MUTE, 60))

    assert [action for action, _ in steps] == [ActionType.DELETE, ActionType.WARN, ActionType.MUTE]
    assert platform.calls == []
