import time
from collections import OrderedDict
from typing import Callable, Optional

from app.cristalix.structures import CacheEntryStats, CacheStats, ResolvedProfile
from app.logger import logger


class ProfileCache:
    """
    Username -> profile map with a read-time TTL.

    Keys are lowercased. Stale entries are never removed, a read simply treats them
    as absent until a newer fetch overwrites them. When ``max_entries`` is set the
    least recently used entry is dropped on insert once the bound is reached.
    """

    def __init__(
            self,
            ttl: float = 3600.0,
            max_entries: Optional[int] = None,
            clock: Callable[[], float] = time.time
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock
        self._entries: OrderedDict[str, ResolvedProfile] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, username: str) -> bool:
        return self.get(username) is not None

    def get(self, username: str) -> Optional[ResolvedProfile]:
        key = username.lower()
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry["resolved_at"] >= self.ttl:
            return None
        if self.max_entries is not None:
            self._entries.move_to_end(key)
        return ResolvedProfile(**entry)

    def put(self, username: str, profile: ResolvedProfile) -> None:
        key = username.lower()
        entries = self._entries
        entries[key] = ResolvedProfile(**profile)
        entries.move_to_end(key)
        if self.max_entries is not None:
            while len(entries) > self.max_entries:
                evicted, _ = entries.popitem(last=False)
                logger.debug("Cache bound reached, evicted %s", evicted)

    def clear(self) -> None:
        self._entries = OrderedDict()

    def stats(self) -> CacheStats:
        now = self.clock()
        snapshot = list(self._entries.items())
        entries = [
            CacheEntryStats(
                username=username,
                player_id=profile["player_id"],
                age_seconds=int(now - profile["resolved_at"]),
            )
            for username, profile in snapshot
        ]
        return CacheStats(size=len(snapshot), entries=entries)
