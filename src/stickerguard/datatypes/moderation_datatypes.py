"""
Message and decision types for the sticker filter.

Key Features:
- `StickerMessage`: platform-neutral view of an inbound chat message with
  exactly the fields the engine reads.
- `DetectionResult`: outcome of matching one image against the reference.
- `ModerationDecision`: what the engine did with a message, including the gate
  that stopped it when nothing was done.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from stickerguard.datatypes.action_datatypes import ErrorKind, ResponseResult
from stickerguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from stickerguard.datatypes.image_datatypes import ImageReference

# Role markers that exempt an author from delete and mute
PRIVILEGED_ROLES: FrozenSet[str] = frozenset({"admin", "owner"})


@dataclass(frozen=True, slots=True)
class StickerMessage:
    """Normalized inbound message.

    Attributes:
        guild_id (GuildID): Guild the message was posted in.
        user_id (UserID): Author of the message.
        message_id (MessageID): The message itself.
        channel_id (ChannelID): Channel the message was posted in.
        content (str): Raw text content.
        author_roles (FrozenSet[str]): Role markers of the author, e.g. ``"admin"``.
        images (Tuple[ImageReference, ...]): Image references in message order.
    """

    guild_id: GuildID
    user_id: UserID
    message_id: MessageID
    channel_id: ChannelID
    content: str = ""
    author_roles: FrozenSet[str] = frozenset()
    images: Tuple[ImageReference, ...] = ()

    @property
    def is_privileged(self) -> bool:
        return bool(self.author_roles & PRIVILEGED_ROLES)


@dataclass(slots=True)
class DetectionResult:
    """Outcome of comparing one image against the reference.

    Attributes:
        matched: True when the similarity reached the threshold.
        similarity: Computed score, or None when no score was produced.
        error: Failure category when detection could not run to completion.
        detail: Error text for the log.
    """

    matched: bool
    similarity: Optional[float] = None
    error: Optional[ErrorKind] = None
    detail: str = ""

    @classmethod
    def failed(cls, kind: ErrorKind, detail: str) -> "DetectionResult":
        return cls(matched=False, error=kind, detail=detail)


class Gate(Enum):
    """Where the engine stopped processing a message."""

    GUILD_DISABLED = "guild_disabled"
    COOLDOWN = "cooldown"
    PROBABILITY = "probability"
    NO_IMAGES = "no_images"
    NO_MATCH = "no_match"
    RESPONDED = "responded"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class ModerationDecision:
    """What the engine did with one message.

    Attributes:
        gate: ``RESPONDED`` when a response ran, otherwise the gate that ignored the message.
        matched_image: The image that triggered the response, if any.
        response: Result of the graduated response, if one ran.
        detections: Detection results for every image that was scored, in order.
    """

    gate: Gate
    matched_image: Optional[ImageReference] = None
    response: Optional[ResponseResult] = None
    detections: list[DetectionResult] = field(default_factory=list)

    @property
    def responded(self) -> bool:
        return self.gate is Gate.RESPONDED
