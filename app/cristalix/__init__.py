import asyncio
from typing import Any, Optional, Sequence

from app.cristalix.browser import BrowserSession
from app.cristalix.cache import ProfileCache
from app.cristalix.config import CristalixConfig
from app.cristalix.execution_queue import ExecutionQueue
from app.cristalix.http_session import HttpSession
from app.cristalix.request_builder import RequestBuilder, normalize_token
from app.cristalix.strategies import BrowserStrategy, DirectStrategy, StrategyChain
from app.cristalix.structures import (
    CacheStats, CristalixRequest, FetchResult, ResolvedProfile, SkinData, skin_data
)
from app.logger import logger

__all__ = [
    "SkinResolver", "CristalixConfig", "ProfileCache", "RequestBuilder", "ExecutionQueue",
    "StrategyChain", "BrowserStrategy", "DirectStrategy", "BrowserSession", "HttpSession",
    "ResolvedProfile", "SkinData", "CacheStats", "normalize_token",
]


def _profile_fields(data: Any) -> tuple[Optional[str], Optional[str]]:
    if not isinstance(data, dict):
        return None, None
    textures = data.get("textures")
    skin = textures.get("skin") if isinstance(textures, dict) else None
    return data.get("id") or None, skin or None


class SkinResolver:
    """
    Resolves Cristalix usernames to player ids and skin URLs.

    Lookups hit the cache first. Misses are sent upstream in batches through the
    execution queue and the strategy chain (headless browser, then direct HTTP).
    Nothing raises out of ``resolve_many``/``resolve_one``: names that could not be
    resolved are simply missing from the result.
    """

    def __init__(
            self,
            config: CristalixConfig,
            cache: Optional[ProfileCache] = None,
            chain: Optional[StrategyChain] = None,
            queue: Optional[ExecutionQueue] = None
    ):
        self.config = config
        if cache is None:
            cache = ProfileCache(ttl=config.cache_ttl, max_entries=config.cache_max_entries)
        self.cache = cache
        self.builder = RequestBuilder(config.base_url, config.project_key, config.token, config.batch_size)
        self.queue = queue if queue is not None else ExecutionQueue(limit=config.max_concurrent_pages)
        self.browser: BrowserSession | None = None
        self.http: HttpSession | None = None
        if chain is None:
            self.http = HttpSession(request_timeout=config.request_timeout)
            strategies = []
            if config.use_browser:
                self.browser = BrowserSession(executable_path=config.browser_executable_path)
                strategies.append(BrowserStrategy(self.browser, timeout=config.request_timeout))
            strategies.append(DirectStrategy(self.http))
            chain = StrategyChain(strategies)
        self.chain = chain
        self._counters = {"upstream_requests": 0, "failed_chunks": 0, "failed_lookups": 0}

    async def _execute(self, request: CristalixRequest) -> FetchResult:
        self._counters["upstream_requests"] += 1
        return await self.queue.submit(lambda: self.chain.execute(request))

    async def resolve_many(self, usernames: Sequence[str]) -> dict[str, SkinData]:
        result: dict[str, SkinData] = {}
        # lowercased name -> every spelling the caller used for it
        misses: dict[str, list[str]] = {}

        for username in usernames:
            if not username:
                continue
            cached = self.cache.get(username)
            if cached is not None:
                result[username] = skin_data(cached)
                continue
            spellings = misses.setdefault(username.lower(), [])
            if username not in spellings:
                spellings.append(username)

        if not misses:
            logger.debug(f"All {len(usernames)} players served from cache")
            return result

        keys = list(misses)
        size = self.config.batch_size
        chunks = [keys[i:i + size] for i in range(0, len(keys), size)]
        logger.info(f"Fetching {len(keys)} players in {len(chunks)} batch(es), "
                    f"{len(result)} served from cache")

        outcomes = await asyncio.gather(
            *(self._resolve_chunk(chunk, misses, result) for chunk in chunks),
            return_exceptions=True
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                self._counters["failed_chunks"] += 1
                logger.error(f"Unexpected error while resolving a batch: {outcome}", exc_info=outcome)
        return result

    async def _resolve_chunk(self, chunk: list[str], misses: dict[str, list[str]],
                             result: dict[str, SkinData]) -> None:
        names = [misses[key][0] for key in chunk]
        try:
            request = self.builder.build_batch_request(names)
            fetched = await self._execute(request)
        except Exception as e:
            self._counters["failed_chunks"] += 1
            logger.error(f"Batch of {len(names)} players failed: {e}", exc_info=True)
            return

        if not fetched.ok:
            self._counters["failed_chunks"] += 1
            logger.error(f"Batch of {len(names)} players failed: {fetched.reason}")
            return

        profiles = fetched.data if isinstance(fetched.data, list) else []
        loaded = 0
        for data in profiles:
            username = data.get("username") if isinstance(data, dict) else None
            player_id, texture_url = _profile_fields(data)
            if not username or not player_id or not texture_url:
                continue
            spellings = misses.get(username.lower())
            if spellings is None:
                logger.debug(f"Upstream returned unrequested player {username}")
                continue
            profile = ResolvedProfile(player_id=player_id, texture_url=texture_url, resolved_at=self.cache.clock())
            self.cache.put(username, profile)
            for spelling in spellings:
                result[spelling] = skin_data(profile)
            loaded += 1
        logger.info(f"Loaded {loaded} of {len(names)} players ({fetched.strategy})")

    async def resolve_one(self, username: str) -> Optional[ResolvedProfile]:
        if not username:
            return None
        cached = self.cache.get(username)
        if cached is not None:
            return cached

        try:
            fetched = await self._execute(self.builder.build_single_request(username))
        except Exception as e:
            self._counters["failed_lookups"] += 1
            logger.error(f"Lookup of {username} failed: {e}", exc_info=True)
            return None

        if not fetched.ok:
            self._counters["failed_lookups"] += 1
            logger.error(f"Lookup of {username} failed: {fetched.reason}")
            return None

        player_id, texture_url = _profile_fields(fetched.data)
        if not player_id or not texture_url:
            logger.warning(f"No profile data found for {username}")
            return None

        profile = ResolvedProfile(player_id=player_id, texture_url=texture_url, resolved_at=self.cache.clock())
        self.cache.put(username, profile)
        return ResolvedProfile(**profile)

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Cristalix cache cleared")

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def metrics(self) -> dict[str, int]:
        return {
            **self._counters,
            "fallbacks": getattr(self.chain, "fallbacks", 0),
            "queue_active": self.queue.active,
            "queue_pending": self.queue.pending,
            "queue_peak": self.queue.peak,
        }

    async def close(self) -> None:
        if self.browser is not None:
            await self.browser.close()
        if self.http is not None:
            await self.http.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, tb) -> None:
        await self.close()
