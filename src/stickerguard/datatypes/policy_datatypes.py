"""
Per-guild moderation policy values.

A guild is processed only when it appears in the configured guild list; the
same entry carries its severity level and mute duration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from stickerguard.datatypes.discord_datatypes import GuildID


class PolicyLevel(IntEnum):
    """Severity tier of the response, 1 being the strictest."""

    DELETE_AND_MUTE = 1
    DELETE_AND_WARN = 2
    REPLY_ONLY = 3

    @classmethod
    def coerce(cls, value: object, default: "PolicyLevel") -> "PolicyLevel":
        """Convert a raw config value, clamping out-of-range integers into 1..3."""
        try:
            level = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return default
        return cls(min(max(level, cls.DELETE_AND_MUTE), cls.REPLY_ONLY))


@dataclass(frozen=True, slots=True)
class GuildPolicy:
    """Effective moderation policy for one guild."""

    guild_id: GuildID
    level: PolicyLevel = PolicyLevel.REPLY_ONLY
    mute_seconds: int = 60

    def __post_init__(self) -> None:
        if self.mute_seconds < 0:
            raise ValueError("mute_seconds must be >= 0")

    @property
    def mute_millis(self) -> int:
        return self.mute_seconds * 1000
