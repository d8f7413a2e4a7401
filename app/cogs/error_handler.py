from typing import TYPE_CHECKING

from discord import ApplicationContext
from discord.ext import commands

from app.logger import logger

if TYPE_CHECKING:
    from app.bot import CristalixSkinBot


class ErrorHandler(commands.Cog):
    def __init__(self, bot: "CristalixSkinBot"):
        self.bot = bot

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        if hasattr(ctx.command, "on_error"):
            return

        if isinstance(error, commands.CommandNotFound):
            return
        if isinstance(error, commands.NotOwner):
            await ctx.reply("❌ Only the bot owner can run this command.")
        elif isinstance(error, commands.MissingPermissions):
            await ctx.reply("❌ You don't have the permissions required to run this command.")
        else:
            logger.error(f"Unhandled error in command {ctx.command}: {error}", exc_info=error)

    @commands.Cog.listener()
    async def on_application_command_error(self, actx: ApplicationContext, error: Exception):
        if hasattr(actx.command, "on_error"):
            return

        if isinstance(error, (commands.NotOwner, commands.MissingPermissions, commands.CheckAnyFailure)):
            await actx.respond("❌ You don't have the permissions required to run this command.", ephemeral=True)
        else:
            logger.error(f"Unhandled error in application command: {error}", exc_info=error)
            await actx.respond("❌ This command is currently unavailable.", ephemeral=True)


def setup(bot: "CristalixSkinBot"):
    bot.add_cog(ErrorHandler(bot))
    logger.debug("ErrorHandler loaded successfully.")
