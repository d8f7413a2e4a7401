import time
from typing import TYPE_CHECKING

from discord import ApplicationContext, Option, SlashCommandGroup
from discord.ext import commands

from app.lib.db.queries import add_player, get_roster_usernames, remove_player, set_published
from app.logger import logger
from app.views import cache_stats_embed, parse_names

if TYPE_CHECKING:
    from app.bot import CristalixSkinBot

STARTED_AT = time.monotonic()

manager_only = commands.check_any(
    commands.has_guild_permissions(administrator=True),
    commands.is_owner()
)


class Manager(commands.Cog):
    def __init__(self, bot: "CristalixSkinBot"):
        self.bot = bot

    roster = SlashCommandGroup(
        name="roster",
        description="Manage the player roster."
    )

    cache = SlashCommandGroup(
        name="cache",
        description="Inspect or reset the skin cache."
    )

    @roster.command(name="add", description="Add players to the roster.")
    @manager_only
    async def roster_add(self, actx: ApplicationContext,
                         usernames: Option(str, "Usernames separated by commas or spaces")):
        added = []
        for name in parse_names(usernames):
            _, created = await add_player(name, published=True)
            if created:
                added.append(name)
        if added:
            await actx.respond(f"✅ Added: {', '.join(f'`{n}`' for n in added)}", ephemeral=True)
        else:
            await actx.respond("ℹ️ No new players added.", ephemeral=True)

    @roster.command(name="remove", description="Remove a player from the roster.")
    @manager_only
    async def roster_remove(self, actx: ApplicationContext, username: Option(str, "Cristalix username")):
        if await remove_player(username):
            await actx.respond(f"✅ `{username}` removed from the roster.", ephemeral=True)
        else:
            await actx.respond(f"❌ `{username}` is not on the roster.", ephemeral=True)

    @roster.command(name="hide", description="Hide or show a player without removing it.")
    @manager_only
    async def roster_hide(self, actx: ApplicationContext, username: Option(str, "Cristalix username"),
                          hidden: Option(bool, "Hide the player", default=True)):
        player = await set_published(username, not hidden)
        if player is None:
            await actx.respond(f"❌ `{username}` is not on the roster.", ephemeral=True)
            return
        state = "hidden" if hidden else "visible"
        await actx.respond(f"✅ `{player.username}` is now {state}.", ephemeral=True)

    @roster.command(name="list", description="List the published roster.")
    @manager_only
    async def roster_list(self, actx: ApplicationContext):
        usernames = await get_roster_usernames()
        if not usernames:
            await actx.respond("ℹ️ The roster is empty.", ephemeral=True)
            return
        listing = ", ".join(f"`{n}`" for n in usernames)
        if len(listing) > 1900:
            listing = listing[:1900] + " …"
        await actx.respond(f"**{len(usernames)} players:** {listing}", ephemeral=True)

    @cache.command(name="stats", description="Show cache statistics.")
    @manager_only
    async def cache_stats(self, actx: ApplicationContext):
        resolver = self.bot.resolver
        await actx.respond(embed=cache_stats_embed(resolver.cache_stats(), resolver.metrics()), ephemeral=True)

    @cache.command(name="clear", description="Drop every cached skin.")
    @manager_only
    async def cache_clear(self, actx: ApplicationContext):
        self.bot.resolver.clear_cache()
        logger.info(f"Cache cleared by {actx.author} ({actx.author.id})")
        await actx.respond("✅ Cache cleared.", ephemeral=True)

    @commands.slash_command(name="health", description="Check that the skin service is running.")
    async def health(self, actx: ApplicationContext):
        stats = self.bot.resolver.cache_stats()
        uptime = int(time.monotonic() - STARTED_AT)
        await actx.respond(f"🟢 ok · cache size {stats['size']} · uptime {uptime}s", ephemeral=True)


def setup(bot: "CristalixSkinBot"):
    bot.add_cog(Manager(bot))
    logger.debug("Manager loaded successfully")
