import os
from dataclasses import dataclass

from app.logger import logger

DEFAULT_BASE_URL = "https://api.cristalix.gg"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.error("%s must be an integer, got %r", name, raw)
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class CristalixConfig:
    project_key: str
    token: str
    base_url: str = DEFAULT_BASE_URL
    batch_size: int = 50
    cache_ttl: float = 3600.0
    cache_max_entries: int | None = None
    max_concurrent_pages: int = 3
    request_timeout: float = 15.0
    use_browser: bool = True
    browser_executable_path: str | None = None

    def __post_init__(self):
        if not self.project_key or not self.token:
            raise ValueError("project_key and token are required")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.max_concurrent_pages < 1:
            raise ValueError("max_concurrent_pages must be at least 1")

    @classmethod
    def from_env(cls) -> "CristalixConfig":
        project_key = os.getenv("CRISTALIX_PROJECT_KEY")
        token = os.getenv("CRISTALIX_TOKEN")
        if not project_key or not token:
            logger.error("CRISTALIX_PROJECT_KEY or CRISTALIX_TOKEN not found in environment variables. "
                         "Please set them in your .env file.")
            raise RuntimeError("CRISTALIX_PROJECT_KEY or CRISTALIX_TOKEN not found in environment variables. "
                               "Please set them in your .env file.")

        max_entries = _env_int("CRISTALIX_CACHE_MAX_ENTRIES", 0)
        return cls(
            project_key=project_key,
            token=token,
            base_url=os.getenv("CRISTALIX_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            batch_size=_env_int("CRISTALIX_BATCH_SIZE", 50),
            cache_ttl=float(_env_int("CRISTALIX_CACHE_TTL", 3600)),
            cache_max_entries=max_entries or None,
            max_concurrent_pages=_env_int("CRISTALIX_MAX_CONCURRENT_PAGES", 3),
            request_timeout=float(_env_int("CRISTALIX_REQUEST_TIMEOUT", 15)),
            use_browser=_env_bool("CRISTALIX_USE_BROWSER", True),
            browser_executable_path=os.getenv("BROWSER_EXECUTABLE_PATH") or os.getenv("PUPPETEER_EXECUTABLE_PATH"),
        )
