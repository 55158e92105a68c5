"""
Type-safe wrapper classes for Discord identifiers.

Discord snowflakes are 64-bit integers, but configuration files and logs carry
them as strings. These wrappers normalise both forms so guild lookups, cooldown
keys and platform calls all agree on one representation.
"""

from __future__ import annotations

from typing import Union


class SnowflakeID:
    """
    Base wrapper for a Discord snowflake stored as a canonical decimal string.

    Subclasses only differ in type, so a ``UserID`` never compares equal to a
    ``GuildID`` holding the same number.

    Example:
        >>> gid = GuildID("  123456789012345678 ")
        >>> gid.to_int()
        123456789012345678
        >>> gid == 123456789012345678
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "SnowflakeID"]) -> None:
        """
        Args:
            value: The snowflake as a string, int, or wrapper of the same class.

        Raises:
            ValueError: If the value cannot be converted to a valid snowflake.
        """
        if isinstance(value, SnowflakeID):
            if not isinstance(value, type(self)):
                raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}")
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool: {value}")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int):
        return cls(value)

    @classmethod
    def from_object(cls, obj):
        """Build an ID from any Discord model exposing ``.id``."""
        return cls(obj.id)

    def to_int(self) -> int:
        """Return the snowflake as an integer for Discord API calls."""
        return int(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SnowflakeID):
            return type(self) is type(other) and self._value == other._value
        if isinstance(other, str):
            return self._value == other.strip()
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class UserID(SnowflakeID):
    """Snowflake of a Discord user or guild member."""

    __slots__ = ()


class GuildID(SnowflakeID):
    """Snowflake of a Discord guild."""

    __slots__ = ()


class ChannelID(SnowflakeID):
    """Snowflake of a Discord text channel or thread."""

    __slots__ = ()


class MessageID(SnowflakeID):
    """Snowflake of a Discord message."""

    __slots__ = ()
