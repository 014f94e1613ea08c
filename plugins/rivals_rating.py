from __future__ import annotations

import asyncio
from typing import Any

from controller.persona import PERSONA_PERMISSION_DENIED
from controller.persona import reply_with_persona
from misc.adhoc_modules.rivals_math import RatingsTooFarApart
from misc.adhoc_modules.rivals_math import apply_match
from misc.adhoc_modules.rivals_math import handicap
from misc.discord_gates import user_is_owner
from misc.discord_helpers import display_name_in_guild
from misc.events import Event
from misc.events import EventHandled
from misc.mention_routes import split_args
from plugins.base import bot_command
from plugins.base import command_prefix

# Returned by a subcommand in place of a reply when the author may not act on the player.
PERMISSION_DENIED = object()


def _not_found(player: str) -> str:
    return f"Player `{player}` not found."


def _may_manage(author: Any, player: str, owners_by_player: dict[str, int], bot_owners: list[str]) -> bool:
    """Bot owners may manage any player; everyone else only the players they created."""
    if user_is_owner(author, bot_owners):
        return True
    owner_id = owners_by_player.get(player)
    return owner_id is not None and int(owner_id) == int(author.id)


class RivalsRatingPlugin:
    """
    Ratings for a platform-fighter league, in damage percent.

    The gap between two players' ratings is the head start the stronger one
    gives away, counted in stocks of 150% plus a remainder.
    """

    name = "rivals"

    async def usage(self, ctx) -> str | None:
        prefix = await command_prefix(ctx)
        return (
            f"{prefix}rivals <subcommand> -- manage rivals ratings\n"
            "| Subcommands:\n"
            "| create <initial_rating> [player_name] - create a player\n"
            "| delete <player_name> - delete a player\n"
            "| list - list all players\n"
            "| preview <player1> <player2> - show ratings and starting handicap\n"
            "| report <player1> beat <player2> - report a match result (you must own the loser)"
        )

    async def handle(self, ctx, event: Event) -> EventHandled:
        cmd = await bot_command(ctx, event, self.name)
        if cmd is None:
            return EventHandled.NO
        msg, args_text = cmd
        args = split_args(args_text)

        if not args:
            response = "Please provide a subcommand. See help for usage."
        else:
            sub = args[0].lower()
            rest = args[1:]
            if sub == "create":
                response = await self._create(ctx, msg, rest)
            elif sub == "delete":
                response = await self._delete(ctx, msg, rest)
            elif sub == "list":
                response = await self._list(ctx)
            elif sub == "preview":
                response = await self._preview(ctx, rest)
            elif sub == "report":
                response = await self._report(ctx, msg, rest)
            else:
                response = "Unknown subcommand."

        if response is PERMISSION_DENIED:
            await reply_with_persona(ctx, msg, PERSONA_PERMISSION_DENIED)
        else:
            await msg.reply(response)
        return EventHandled.YES

    async def _create(self, ctx, msg: Any, args: list[str]) -> str:
        if not args:
            return "Usage: create <initial_rating> [player_name]"
        try:
            rating = int(args[0])
        except ValueError:
            return "Invalid initial rating: must be an integer"
        if rating < 0:
            return "Invalid initial rating: must be an integer"
        player = args[1] if len(args) >= 2 else display_name_in_guild(msg.author, getattr(msg, "guild", None))

        async with ctx.pstate.write() as pstate:
            if player in pstate.rivals_ratings:
                return f"Player `{player}` already exists."
            pstate.rivals_ratings[player] = rating
            pstate.rivals_ratings_owners[player] = int(msg.author.id)
            await asyncio.to_thread(pstate.save)
        return f"Player `{player}` created with initial rating {rating}%."

    async def _delete(self, ctx, msg: Any, args: list[str]):
        if not args:
            return "Usage: delete <player_name>"
        player = args[0]

        async with ctx.cfg.read() as cfg:
            bot_owners = list(cfg.general.bot_owners)
        async with ctx.pstate.write() as pstate:
            if player not in pstate.rivals_ratings:
                return _not_found(player)
            if not _may_manage(msg.author, player, pstate.rivals_ratings_owners, bot_owners):
                return PERMISSION_DENIED
            pstate.rivals_ratings.pop(player, None)
            pstate.rivals_ratings_owners.pop(player, None)
            await asyncio.to_thread(pstate.save)
        return f"Player `{player}` has been deleted."

    async def _list(self, ctx) -> str:
        async with ctx.pstate.read() as pstate:
            ratings = dict(pstate.rivals_ratings)
            owners = dict(pstate.rivals_ratings_owners)
        if not ratings:
            return "No players registered yet."

        lines = ["Registered players:"]
        for player, rating in sorted(ratings.items(), key=lambda kv: kv[1], reverse=True):
            owner_id = owners.get(player)
            owner = f"<@{owner_id}>" if owner_id is not None else "unknown"
            lines.append(f"• `{player}`: {rating}% (owner: {owner})")
        return "\n".join(lines) + "\n"

    async def _preview(self, ctx, args: list[str]) -> str:
        if len(args) < 2:
            return "Usage: preview <player1> <player2>"
        player1, player2 = args[0], args[1]

        async with ctx.pstate.read() as pstate:
            rating1 = pstate.rivals_ratings.get(player1)
            rating2 = pstate.rivals_ratings.get(player2)
        if rating1 is None:
            return _not_found(player1)
        if rating2 is None:
            return _not_found(player2)

        if rating1 == rating2:
            return f"Both `{player1}` and `{player2}` have equal ratings ({rating1}%). No handicap."
        higher = player1 if rating1 > rating2 else player2
        stocks, remainder = handicap(rating1, rating2)
        return (
            "Player ratings:\n"
            f"• `{player1}`: {rating1}%\n"
            f"• `{player2}`: {rating2}%\n"
            f"Handicap: `{higher}` should start with {stocks} stock(s) and {remainder}% extra damage."
        )

    async def _report(self, ctx, msg: Any, args: list[str]):
        if len(args) < 3 or args[1].lower() != "beat":
            return "Usage: report <player1> beat <player2>"
        winner, loser = args[0], args[2]
        if winner == loser:
            return "Winner and loser cannot be the same player."

        async with ctx.cfg.read() as cfg:
            bot_owners = list(cfg.general.bot_owners)
        async with ctx.pstate.write() as pstate:
            winner_rating = pstate.rivals_ratings.get(winner)
            if winner_rating is None:
                return _not_found(winner)
            loser_rating = pstate.rivals_ratings.get(loser)
            if loser_rating is None:
                return _not_found(loser)
            if not _may_manage(msg.author, loser, pstate.rivals_ratings_owners, bot_owners):
                return PERMISSION_DENIED

            try:
                result = apply_match(winner_rating, loser_rating)
            except RatingsTooFarApart:
                return "Player ratings are too far apart to update."
            pstate.rivals_ratings[winner] = result.winner_after
            pstate.rivals_ratings[loser] = result.loser_after
            await asyncio.to_thread(pstate.save)

        return (
            "Match reported:\n"
            f"• Winner `{winner}`: {result.winner_before}% → {result.winner_after}%\n"
            f"• Loser `{loser}`: {result.loser_before}% → {result.loser_after}%"
        )
