from dataclasses import dataclass, field
from typing import Any, Literal, TypedDict


class ResolvedProfile(TypedDict):
    """
    A fully populated profile as stored in the cache.
    """
    player_id: str
    texture_url: str
    resolved_at: float  # epoch seconds


class SkinData(TypedDict):
    id: str
    texture_url: str


class CacheEntryStats(TypedDict):
    username: str
    player_id: str
    age_seconds: int


class CacheStats(TypedDict):
    size: int
    entries: list[CacheEntryStats]


@dataclass(frozen=True)
class CristalixRequest:
    method: Literal["GET", "POST"]
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] | None = None


@dataclass(frozen=True)
class FetchResult:
    """
    Tagged outcome of a single fetch strategy.
    ``data`` is only meaningful when ``ok`` is True, ``reason`` only when it is False.
    """
    ok: bool
    strategy: str
    data: Any = None
    reason: str | None = None

    @classmethod
    def success(cls, strategy: str, data: Any) -> "FetchResult":
        return cls(ok=True, strategy=strategy, data=data)

    @classmethod
    def failure(cls, strategy: str, reason: str) -> "FetchResult":
        return cls(ok=False, strategy=strategy, reason=reason)


def skin_data(profile: ResolvedProfile) -> SkinData:
    return SkinData(id=profile["player_id"], texture_url=profile["texture_url"])
