"""Guild enablement and policy lookup."""

from typing import Dict, Iterable

from stickerguard.datatypes.discord_datatypes import GuildID
from stickerguard.datatypes.policy_datatypes import GuildPolicy, PolicyLevel


class GuildPolicyResolver:
    """Resolve the moderation policy of a guild from the configured list.

    A guild is enabled only when it has an explicit entry. The global defaults
    fill in level and mute time for :meth:`resolve` on unlisted guilds, but
    never make such a guild enabled.
    """

    def __init__(
        self,
        policies: Iterable[GuildPolicy],
        default_level: PolicyLevel = PolicyLevel.REPLY_ONLY,
        default_mute_seconds: int = 60,
    ) -> None:
        self._policies: Dict[GuildID, GuildPolicy] = {}
        for policy in policies:
            self._policies.setdefault(policy.guild_id, policy)
        self.default_level = default_level
        self.default_mute_seconds = default_mute_seconds

    def is_enabled(self, guild_id: GuildID) -> bool:
        return guild_id in self._policies

    def resolve(self, guild_id: GuildID) -> GuildPolicy:
        policy = self._policies.get(guild_id)
        if policy is not None:
            return policy
        return GuildPolicy(
            guild_id=guild_id,
            level=self.default_level,
            mute_seconds=self.default_mute_seconds,
        )

    @property
    def enabled_guilds(self) -> list[GuildID]:
        return list(self._policies)
