from typing import Sequence
from urllib.parse import quote, urlencode

from app.cristalix.structures import CristalixRequest

BEARER_PREFIX = "Bearer "
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

PROFILE_BY_NAME_PATH = "/players/v1/getProfileByName"
PROFILES_BY_NAMES_PATH = "/players/v1/getProfilesByNames"


def normalize_token(token: str) -> str:
    """Prefix ``token`` with the bearer scheme unless it already carries it."""
    token = token.strip()
    if token.startswith(BEARER_PREFIX):
        return token
    return BEARER_PREFIX + token


class RequestBuilder:
    def __init__(self, base_url: str, project_key: str, token: str, max_batch_size: int = 50):
        self.base_url = base_url.rstrip("/")
        self.project_key = project_key
        self.authorization = normalize_token(token)
        self.max_batch_size = max_batch_size

    def _headers(self, with_body: bool = False) -> dict[str, str]:
        headers = {
            "Authorization": self.authorization,
            "User-Agent": USER_AGENT,
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def build_single_request(self, username: str) -> CristalixRequest:
        query = urlencode({"playerName": username, "project_key": self.project_key}, quote_via=quote)
        return CristalixRequest(
            method="GET",
            url=f"{self.base_url}{PROFILE_BY_NAME_PATH}?{query}",
            headers=self._headers(),
        )

    def build_batch_request(self, usernames: Sequence[str], max_batch_size: int | None = None) -> CristalixRequest:
        limit = max_batch_size or self.max_batch_size
        if len(usernames) > limit:
            raise ValueError(f"Batch of {len(usernames)} usernames exceeds the limit of {limit}")
        query = urlencode({"project_key": self.project_key}, quote_via=quote)
        return CristalixRequest(
            method="POST",
            url=f"{self.base_url}{PROFILES_BY_NAMES_PATH}?{query}",
            headers=self._headers(with_body=True),
            body={"array": list(usernames)},
        )
