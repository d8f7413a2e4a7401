import asyncio
import os
import sys
import traceback
from pathlib import Path

from discord import Intents, NoEntryPointError, ExtensionFailed, Activity, ActivityType
from discord.ext.commands import Bot

from app.cristalix import CristalixConfig, SkinResolver
from app.lib.db import DatabaseManager
from app.logger import logger

COGS_PATH = Path(__file__).resolve().parent.parent / "cogs"

prefix = "cx&"
OWNER_IDS = [int(x) for x in os.getenv("OWNER_IDS", "").split(",") if x]
COGS = sorted(p.stem for p in COGS_PATH.glob("*.py") if not p.stem.startswith("_"))


class Ready:
    """Keeps track of which cogs have finished loading."""

    def __init__(self):
        if not COGS:
            logger.warning("No cogs found to load")
        for cog in COGS:
            setattr(self, cog, False)

    def ready_up(self, cog: str):
        setattr(self, cog, True)
        logger.info(f"{cog} is ready")

    def all_ready(self) -> bool:
        if not COGS:
            return True
        return all(getattr(self, cog) for cog in COGS)


class CristalixSkinBot(Bot):
    def __init__(self, resolver: SkinResolver | None = None):
        intents = Intents.default()

        super().__init__(
            command_prefix=prefix,
            owner_ids=OWNER_IDS,
            intents=intents
        )
        Path("data").mkdir(parents=True, exist_ok=True)
        self.db = DatabaseManager()
        self.resolver = resolver or SkinResolver(CristalixConfig.from_env())
        self.version = None
        self.token = os.getenv("API_KEY")
        if not self.token:
            raise RuntimeError("API_KEY not found in environment variables. Please set it in your .env file.")
        self.cogs_ready = Ready()
        self.__ready__ = False
        self.auto_sync_commands = True

    def run(self, version: str):
        self.version = version
        logger.info("Starting Cristalix Skin Bot version %s", self.version)
        logger.info("Running setup . . .")
        self.setup_cogs()
        logger.info("Setup complete. Running bot . . .")
        super().run(self.token, reconnect=True)

    def setup_cogs(self):
        if not COGS:
            logger.warning("No cogs found to load, assuming all are ready.")
            self.__ready__ = True
            return
        for cog in COGS:
            try:
                logger.debug("Loading cog: %s", cog)
                self.load_extension(f"app.cogs.{cog}")
            except (NoEntryPointError, ExtensionFailed) as e:
                logger.error("Ignoring %s (load failed): %s", cog, e, exc_info=True)
                traceback.print_exception(type(e), e, e.__traceback__, file=sys.stderr)
            else:
                logger.debug("Cog %s loaded successfully", cog)
            # a broken cog must not keep on_ready waiting forever
            self.cogs_ready.ready_up(cog)

    async def on_connect(self):
        await self.db.connect()
        logger.info("Connected to the database.")
        if self.auto_sync_commands:
            await self.sync_commands()
        logger.info(f"Bot {self.user} connected to Discord.")

    async def on_ready(self):
        if not self.__ready__:
            while not self.cogs_ready.all_ready():
                await asyncio.sleep(0.5)
            self.__ready__ = True
        logger.info("Cristalix Skin Bot is ready!")
        await self.change_presence(activity=Activity(type=ActivityType.watching, name="Cristalix skins"))

    async def close(self):
        logger.info("Shutting down . . .")
        await self.resolver.close()
        await self.db.close()
        await super().close()
