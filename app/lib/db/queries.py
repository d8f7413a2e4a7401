from app.lib.db.schemes import PlayerSchema
from app.logger import logger


async def add_player(username: str, published: bool = True) -> tuple[PlayerSchema, bool]:
    username = username.strip()
    existing = await PlayerSchema.filter(username__iexact=username).first()
    if existing:
        if existing.published != published:
            existing.published = published
            await existing.save()
        return existing, False
    player = await PlayerSchema.create(username=username, published=published)
    logger.info(f"Player {username} added to the roster")
    return player, True


async def remove_player(username: str) -> bool:
    player = await PlayerSchema.filter(username__iexact=username.strip()).first()
    if player:
        await player.delete()
        logger.info(f"Player {player.username} removed from the roster")
        return True
    logger.warning(f"No player {username} found in the roster")
    return False


async def set_published(username: str, published: bool) -> PlayerSchema | None:
    player = await PlayerSchema.filter(username__iexact=username.strip()).first()
    if not player:
        logger.error(f"Player {username} not found in the roster")
        return None
    player.published = published
    await player.save()
    return player


async def get_roster_usernames() -> list[str]:
    """
    Returns the usernames of every published player, in insertion order.
    :return:
    """
    players = await PlayerSchema.filter(published=True).order_by("id").values_list("username", flat=True)
    usernames = [name for name in players if name]
    logger.debug(f"Roster contains {len(usernames)} published players")
    return usernames
