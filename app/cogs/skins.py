from typing import TYPE_CHECKING

from discord import ApplicationContext, Option
from discord.ext import commands

from app.lib.db.queries import get_roster_usernames
from app.logger import logger
from app.views import parse_names, skin_embed, skins_paginator

if TYPE_CHECKING:
    from app.bot import CristalixSkinBot

MAX_BATCH_NAMES = 50


class SkinsCog(commands.Cog):
    def __init__(self, bot: "CristalixSkinBot"):
        self.bot = bot

    @commands.slash_command(name="skin", description="Show the Cristalix skin of a player.")
    async def skin(self, actx: ApplicationContext, username: Option(str, "Cristalix username")):
        await actx.defer()
        profile = await self.bot.resolver.resolve_one(username.strip())
        if profile is None:
            await actx.respond(f"❌ Player `{username}` not found.")
            return
        await actx.respond(embed=skin_embed(username, profile))

    @commands.slash_command(name="uuid", description="Show the Cristalix UUID of a player.")
    async def uuid(self, actx: ApplicationContext, username: Option(str, "Cristalix username")):
        await actx.defer(ephemeral=True)
        profile = await self.bot.resolver.resolve_one(username.strip())
        if profile is None:
            await actx.respond(f"❌ Player `{username}` not found.", ephemeral=True)
            return
        await actx.respond(f"`{username}` → `{profile['player_id']}`", ephemeral=True)

    @commands.slash_command(name="skins", description="Show the skins of every player on the roster.")
    async def skins(self, actx: ApplicationContext):
        """
        Loads the whole roster with a single batched lookup.
        Errors degrade to an empty listing so the command always answers.
        """
        await actx.defer()
        try:
            usernames = await get_roster_usernames()
            skins = await self.bot.resolver.resolve_many(usernames) if usernames else {}
        except Exception as e:
            logger.error(f"Error in skins command: {e}", exc_info=True)
            paginator = skins_paginator({}, total=0, notice="⚠️ Failed to fetch skins, try again later.")
        else:
            paginator = skins_paginator(skins, total=len(usernames))
        await paginator.respond(actx.interaction)

    @commands.slash_command(name="batch", description="Look up up to 50 players at once.")
    async def batch(self, actx: ApplicationContext,
                    usernames: Option(str, "Usernames separated by commas or spaces")):
        names = parse_names(usernames)
        if not names:
            await actx.respond("❌ Give me at least one username.", ephemeral=True)
            return
        if len(names) > MAX_BATCH_NAMES:
            await actx.respond(f"❌ Maximum {MAX_BATCH_NAMES} usernames per request.", ephemeral=True)
            return
        await actx.defer()
        skins = await self.bot.resolver.resolve_many(names)
        paginator = skins_paginator(skins, total=len(names), title="Players")
        await paginator.respond(actx.interaction)


def setup(bot: "CristalixSkinBot"):
    bot.add_cog(SkinsCog(bot))
    logger.debug("SkinsCog loaded successfully.")
