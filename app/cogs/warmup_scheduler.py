import os
import time
from typing import TYPE_CHECKING

from discord import Cog
from discord.ext import commands, tasks

from app.lib.db.queries import get_roster_usernames
from app.logger import logger

WARMUP_INTERVAL = int(os.getenv("WARMUP_INTERVAL", "1800"))

if TYPE_CHECKING:
    from app.bot import CristalixSkinBot


class WarmupScheduler(Cog):
    """
    Periodically resolves the whole roster so that /skins is answered from the cache.
    """

    def __init__(self, bot: "CristalixSkinBot"):
        self.bot = bot
        self.last_run: float | None = None
        self._warmup_loop.start()

    def cog_unload(self):
        self._warmup_loop.cancel()

    async def warm_up(self) -> tuple[int, int]:
        """
        Resolves every published roster player.
        :return: (loaded, total)
        """
        usernames = await get_roster_usernames()
        if not usernames:
            logger.info("Roster is empty, nothing to warm up.")
            return 0, 0
        started = time.monotonic()
        skins = await self.bot.resolver.resolve_many(usernames)
        self.last_run = time.time()
        logger.info(f"Warm-up loaded {len(skins)}/{len(usernames)} players "
                    f"in {time.monotonic() - started:.1f}s")
        return len(skins), len(usernames)

    @tasks.loop(seconds=WARMUP_INTERVAL)
    async def _warmup_loop(self):
        if not self.bot.__ready__:
            return
        try:
            await self.warm_up()
        except Exception as e:
            logger.error(f"Cache warm-up failed: {e}", exc_info=True)

    @_warmup_loop.before_loop
    async def before_warmup_loop(self):
        await self.bot.wait_until_ready()
        logger.info("Warm-up scheduler is ready.")

    @commands.command(name="warmup", hidden=True)
    @commands.is_owner()
    async def run_warmup(self, ctx: commands.Context):
        loaded, total = await self.warm_up()
        await ctx.send(f"Warm-up completed: {loaded}/{total} players loaded.")


def setup(bot: "CristalixSkinBot"):
    bot.add_cog(WarmupScheduler(bot))
    logger.debug("WarmupScheduler cog has been loaded.")
