"""Per-user cooldown bookkeeping."""

import time
from typing import Callable, Dict, Optional

from stickerguard.datatypes.discord_datatypes import UserID


class CooldownTracker:
    """Remember when each user last triggered a response.

    Entries are never evicted; the table grows with the number of distinct
    users that ever triggered a response.

    Args:
        window_seconds: Length of the cooldown after a trigger.
        clock: Returns the current wall-clock time in seconds.
    """

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.time) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_triggered: Dict[UserID, float] = {}

    def in_cooldown(self, user_id: UserID) -> bool:
        last = self._last_triggered.get(user_id)
        if last is None:
            return False
        return self._clock() - last < self.window_seconds

    def mark_triggered(self, user_id: UserID) -> None:
        self._last_triggered[user_id] = self._clock()

    def last_triggered(self, user_id: UserID) -> Optional[float]:
        return self._last_triggered.get(user_id)

    def __len__(self) -> int:
        return len(self._last_triggered)
