import aiohttp


class HttpSession:
    """Lazily created aiohttp session shared by every direct request of one resolver."""

    def __init__(self, request_timeout: float = 15.0):
        self.request_timeout = request_timeout
        self._session: aiohttp.ClientSession | None = None

    def get(self) -> aiohttp.ClientSession:
        if self._session and not self._session.closed:
            return self._session
        timeout = aiohttp.ClientTimeout(total=self.request_timeout, connect=10, sock_connect=10)
        connector = aiohttp.TCPConnector(limit=100, ttl_dns_cache=300)
        self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
