import datetime

from discord import Colour, Embed
from discord.ext.pages import Paginator

from app.cristalix.structures import CacheStats, ResolvedProfile, SkinData

PAGE_SIZE = 10
FOOTER = "Data from api.cristalix.gg"


def parse_names(raw: str) -> list[str]:
    """Split a comma or whitespace separated list of usernames, dropping blanks."""
    return [name for name in raw.replace(",", " ").split() if name]


def skin_embed(username: str, profile: ResolvedProfile) -> Embed:
    embed = Embed(
        title=username,
        colour=Colour.blurple(),
        timestamp=datetime.datetime.fromtimestamp(profile["resolved_at"], datetime.UTC)
    )
    embed.add_field(name="UUID", value=f"`{profile['player_id']}`", inline=False)
    embed.add_field(name="Skin", value=profile["texture_url"], inline=False)
    embed.set_thumbnail(url=profile["texture_url"])
    embed.set_footer(text=FOOTER)
    return embed


def skins_embeds(skins: dict[str, SkinData], total: int, title: str = "Roster skins",
                 notice: str | None = None) -> list[Embed]:
    """
    One embed per page of ``PAGE_SIZE`` players.
    The description of every page carries the loaded/total counters.
    An empty listing shows ``notice`` in place of the default message.
    """
    items = sorted(skins.items(), key=lambda item: item[0].lower())
    header = f"Loaded **{len(skins)}** of **{total}** players"
    if not items:
        embed = Embed(title=title, description=f"{header}\n{notice or 'No skins available.'}", colour=Colour.orange())
        embed.set_footer(text=FOOTER)
        return [embed]

    pages = []
    page_count = (len(items) + PAGE_SIZE - 1) // PAGE_SIZE
    for index in range(page_count):
        chunk = items[index * PAGE_SIZE:(index + 1) * PAGE_SIZE]
        embed = Embed(title=title, description=header, colour=Colour.blurple())
        for username, data in chunk:
            embed.add_field(name=username, value=f"`{data['id']}`\n[skin]({data['texture_url']})", inline=False)
        embed.set_footer(text=f"Page {index + 1}/{page_count} · {FOOTER}")
        pages.append(embed)
    return pages


def skins_paginator(skins: dict[str, SkinData], total: int, title: str = "Roster skins",
                    notice: str | None = None) -> Paginator:
    return Paginator(pages=skins_embeds(skins, total, title, notice), timeout=300)


def cache_stats_embed(stats: CacheStats, metrics: dict[str, int], limit: int = 15) -> Embed:
    embed = Embed(
        title="Cache",
        description=f"**{stats['size']}** cached players",
        colour=Colour.dark_teal(),
        timestamp=datetime.datetime.now(datetime.UTC)
    )
    entries = sorted(stats["entries"], key=lambda e: e["age_seconds"])[:limit]
    if entries:
        lines = [f"`{e['username']}` {e['player_id']} ({e['age_seconds']}s)" for e in entries]
        embed.add_field(name="Most recent", value="\n".join(lines), inline=False)
    counters = "\n".join(f"{name}: {value}" for name, value in metrics.items())
    embed.add_field(name="Pipeline", value=counters or "-", inline=False)
    return embed
