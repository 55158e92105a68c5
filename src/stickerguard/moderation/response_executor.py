"""
Graduated response execution.

Level 3 quotes the message with a short reply. Levels 2 and 1 delete the
message and mention the author with a warning; level 1 then mutes them.
Privileged authors only get the mention. Steps run in a fixed order and each
one is attempted even if an earlier one failed; nothing is rolled back.
"""

from __future__ import annotations

from typing import Awaitable, Callable, List, Tuple

from stickerguard.datatypes.action_datatypes import ActionFailure, ActionType, ErrorKind, ResponseResult
from stickerguard.datatypes.moderation_datatypes import StickerMessage
from stickerguard.datatypes.policy_datatypes import GuildPolicy, PolicyLevel
from stickerguard.moderation.platform import ModerationPlatform
from stickerguard.util.errors import PlatformError
from stickerguard.util.logger import get_logger

logger = get_logger("response_executor")

Step = Tuple[ActionType, Callable[[], Awaitable[None]]]


class ResponseExecutor:
    """Run the response selected by a guild policy against a platform.

    Args:
        platform: Adapter performing the actual platform calls.
        reply_text: Text of the level 3 quoted reply.
        warning_text: Text appended to the mention for levels 1 and 2.
    """

    def __init__(self, platform: ModerationPlatform, reply_text: str, warning_text: str) -> None:
        self.platform = platform
        self.reply_text = reply_text
        self.warning_text = warning_text

    def plan(self, message: StickerMessage, policy: GuildPolicy) -> List[Step]:
        """Return the ordered steps for ``policy`` applied to ``message``."""
        platform = self.platform

        def reply() -> Awaitable[None]:
            return platform.send_message(message.channel_id, self.reply_text, quote=message.message_id)

        def warn() -> Awaitable[None]:
            return platform.send_message(message.channel_id, self.warning_text, mention=message.user_id)

        def delete() -> Awaitable[None]:
            return platform.delete_message(message.channel_id, message.message_id)

        def mute() -> Awaitable[None]:
            return platform.mute_member(message.guild_id, message.user_id, policy.mute_millis)

        if policy.level == PolicyLevel.REPLY_ONLY:
            return [(ActionType.REPLY, reply)]
        if message.is_privileged:
            return [(ActionType.WARN, warn)]
        if policy.level == PolicyLevel.DELETE_AND_WARN:
            return [(ActionType.DELETE, delete), (ActionType.WARN, warn)]
        return [(ActionType.DELETE, delete), (ActionType.WARN, warn), (ActionType.MUTE, mute)]

    async def execute(self, message: StickerMessage, policy: GuildPolicy) -> ResponseResult:
        """Execute every planned step, collecting failures instead of raising."""
        result = ResponseResult(
            level=policy.level,
            user_id=message.user_id,
            privileged=message.is_privileged,
        )

        for action, step in self.plan(message, policy):
            try:
                await step()
            except PlatformError as exc:
                logger.warning(f"[RESPONSE] {action} failed for user {message.user_id} in guild {message.guild_id}: {exc}")
                result.failures.append(ActionFailure(action, ErrorKind.PLATFORM, str(exc)))
                continue
            except Exception as exc:
                logger.warning(f"[RESPONSE] Unexpected error during {action} for user {message.user_id}: {exc}", exc_info=True)
                result.failures.append(ActionFailure(action, ErrorKind.PLATFORM, str(exc)))
                continue
            result.completed.append(action)

        return result
