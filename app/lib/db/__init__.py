import asyncio
import os
from typing import Any

from tortoise import Tortoise, connections, BaseDBAsyncClient

from app.logger import logger

DEFAULT_DB_URL = os.getenv("DATABASE_URL", "sqlite://data/cristalix_skins.db")
MODELS = {"models": ["app.lib.db.schemes"]}


class DatabaseManager:
    _initialized = False

    def __init__(self, db_url: str = DEFAULT_DB_URL, modules: dict | None = None, generate_schemas: bool = True):
        self.db_url = db_url
        self.modules = modules or MODELS
        self.generate_schemas = generate_schemas

    async def connect(self) -> None:
        if not DatabaseManager._initialized:
            await Tortoise.init(
                db_url=self.db_url,
                modules=self.modules
            )
            logger.debug("Database connection initialized with URL: %s", self.db_url)
            if self.generate_schemas:
                await Tortoise.generate_schemas(safe=True)
            DatabaseManager._initialized = True

    @staticmethod
    async def close() -> None:
        await Tortoise.close_connections()
        DatabaseManager._initialized = False

    @property
    def connection(self) -> BaseDBAsyncClient:
        return connections.get("default")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_value: Any, tb: Any) -> None:
        await self.close()


if __name__ == "__main__":
    async def _init_db():
        os.makedirs("data", exist_ok=True)
        async with DatabaseManager():
            logger.info("Database initialized and schemas generated.")

    asyncio.run(_init_db())
