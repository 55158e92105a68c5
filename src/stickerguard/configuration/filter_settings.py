"""Typed, validated view of the ``sticker_filter`` configuration section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from stickerguard.datatypes.discord_datatypes import GuildID
from stickerguard.datatypes.policy_datatypes import GuildPolicy, PolicyLevel
from stickerguard.util.logger import get_logger

logger = get_logger("filter_settings")

DEFAULT_STICKER_HOSTS: Tuple[str, ...] = ("gchat.qpic.cn", "multimedia.nt.qq.com")
DEFAULT_REPLY_TEXT = "糖"
DEFAULT_WARNING_TEXT = "别发你那个唐诗表情包了"


def _clamp_unit(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return min(max(number, 0.0), 1.0)


def _non_negative_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(number, 0)


def _string_tuple(value: Any, default: Tuple[str, ...] = ()) -> Tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return default
    return tuple(str(item).strip() for item in value if str(item).strip())


@dataclass(frozen=True, slots=True)
class FilterSettings:
    """Immutable snapshot of the sticker filter configuration.

    Attributes:
        base_images: Reference image sources; only the first one is loaded.
        guilds: Explicit guild policies. A guild is enabled iff it is listed here.
        default_level: Level used when resolving a guild without an entry.
        default_mute_seconds: Mute duration used when resolving a guild without an entry.
        similarity: Inclusive match threshold in [0, 1].
        cooldown_seconds: Minimum interval between two responses to the same user.
        probability: Chance in [0, 1] that a qualifying message is inspected at all.
        fetch_timeout: Upper bound in seconds for fetching and decoding one image.
        reply_text: Text of the level 3 quoted reply.
        warning_text: Text of the level 1 and 2 mention.
        sticker_hosts: Host substrings that mark a URL as platform-hosted sticker content.
    """

    base_images: Tuple[str, ...] = ()
    guilds: Tuple[GuildPolicy, ...] = ()
    default_level: PolicyLevel = PolicyLevel.REPLY_ONLY
    default_mute_seconds: int = 60
    similarity: float = 0.8
    cooldown_seconds: int = 300
    probability: float = 0.5
    fetch_timeout: float = 10.0
    reply_text: str = DEFAULT_REPLY_TEXT
    warning_text: str = DEFAULT_WARNING_TEXT
    sticker_hosts: Tuple[str, ...] = field(default=DEFAULT_STICKER_HOSTS)

    @property
    def enabled_guild_ids(self) -> Tuple[GuildID, ...]:
        return tuple(policy.guild_id for policy in self.guilds)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "FilterSettings":
        """Build settings from the raw YAML mapping, coercing every field.

        Malformed values fall back to their defaults; guild entries without a
        usable ``guild_id`` are dropped with a warning.
        """
        if not isinstance(data, Mapping):
            data = {}

        default_level = PolicyLevel.coerce(data.get("default_level", 3), PolicyLevel.REPLY_ONLY)
        default_mute = _non_negative_int(data.get("default_mute_time", 60), 60)

        guilds: list[GuildPolicy] = []
        seen: set[GuildID] = set()
        raw_guilds = data.get("guilds") or []
        if not isinstance(raw_guilds, list):
            logger.warning("[CONFIG] 'guilds' must be a list, got %s; no guild is enabled", type(raw_guilds).__name__)
            raw_guilds = []

        for entry in raw_guilds:
            if not isinstance(entry, Mapping):
                logger.warning("[CONFIG] Skipping guild entry that is not a mapping: %r", entry)
                continue
            try:
                guild_id = GuildID(entry.get("guild_id"))
            except (TypeError, ValueError):
                logger.warning("[CONFIG] Skipping guild entry with invalid guild_id: %r", entry.get("guild_id"))
                continue
            if guild_id in seen:
                logger.warning("[CONFIG] Duplicate guild entry for %s; keeping the first one", guild_id)
                continue
            seen.add(guild_id)
            guilds.append(
                GuildPolicy(
                    guild_id=guild_id,
                    level=PolicyLevel.coerce(entry.get("level", 3), PolicyLevel.REPLY_ONLY),
                    mute_seconds=_non_negative_int(entry.get("mute_time", 60), 60),
                )
            )

        try:
            fetch_timeout = float(data.get("fetch_timeout", 10.0))
        except (TypeError, ValueError):
            fetch_timeout = 10.0
        if fetch_timeout <= 0:
            fetch_timeout = 10.0

        return cls(
            base_images=_string_tuple(data.get("base_images")),
            guilds=tuple(guilds),
            default_level=default_level,
            default_mute_seconds=default_mute,
            similarity=_clamp_unit(data.get("similarity", 0.8), 0.8),
            cooldown_seconds=_non_negative_int(data.get("cooldown_time", 300), 300),
            probability=_clamp_unit(data.get("probability", 0.5), 0.5),
            fetch_timeout=fetch_timeout,
            reply_text=str(data.get("reply_text") or DEFAULT_REPLY_TEXT),
            warning_text=str(data.get("warning_text") or DEFAULT_WARNING_TEXT),
            sticker_hosts=_string_tuple(data.get("sticker_hosts"), DEFAULT_STICKER_HOSTS),
        )

    def as_dict(self) -> Dict[str, Any]:
        """Return the settings in the same shape as the YAML section."""
        return {
            "base_images": list(self.base_images),
            "guilds": [
                {"guild_id": str(p.guild_id), "level": int(p.level), "mute_time": p.mute_seconds}
                for p in self.guilds
            ],
            "default_level": int(self.default_level),
            "default_mute_time": self.default_mute_seconds,
            "similarity": self.similarity,
            "cooldown_time": self.cooldown_seconds,
            "probability": self.probability,
            "fetch_timeout": self.fetch_timeout,
            "reply_text": self.reply_text,
            "warning_text": self.warning_text,
            "sticker_hosts": list(self.sticker_hosts),
        }
