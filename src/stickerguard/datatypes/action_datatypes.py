"""
Action types and result structures for the graduated moderation response.

Each response is recorded as the list of actions that succeeded plus the
failures that were caught along the way, so callers can log or assert on the
outcome without relying on exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from stickerguard.datatypes.discord_datatypes import UserID
from stickerguard.datatypes.policy_datatypes import PolicyLevel


class ActionType(Enum):
    """Platform actions the response executor can perform."""

    REPLY = "reply"
    DELETE = "delete"
    WARN = "warn"
    MUTE = "mute"

    def __str__(self) -> str:
        return self.value


class ErrorKind(Enum):
    """Failure categories reported by detection and response execution."""

    FETCH = "fetch"
    DECODE = "decode"
    TIMEOUT = "timeout"
    PLATFORM = "platform"
    CONFIGURATION_MISSING = "configuration_missing"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class ActionFailure:
    """A single response step that raised.

    Attributes:
        action: The step that failed.
        kind: Error category (``PLATFORM`` for rejected platform calls).
        detail: Human-readable error text for the log.
    """

    action: ActionType
    kind: ErrorKind
    detail: str


@dataclass(slots=True)
class ResponseResult:
    """Outcome of executing the graduated response for one trigger.

    Attributes:
        level: Policy level that selected the steps.
        user_id: The user the response targeted.
        privileged: Whether the author was exempt from delete and mute.
        completed: Actions that succeeded, in execution order.
        failures: Actions that raised, in execution order.
    """

    level: PolicyLevel
    user_id: UserID
    privileged: bool
    completed: List[ActionType] = field(default_factory=list)
    failures: List[ActionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def attempted(self) -> List[ActionType]:
        done = set(self.completed) | {failure.action for failure in self.failures}
        return [action for action in ActionType if action in done]
