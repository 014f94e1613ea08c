from __future__ import annotations

from misc.discord_helpers import display_name_in_guild
from misc.events import Event
from misc.events import EventHandled
from misc.events import MessageEvent

EYES = "\N{EYES}"


class ReactPlugin:
    name = "react"

    async def usage(self, ctx) -> str | None:
        return None

    async def handle(self, ctx, event: Event) -> EventHandled:
        if not isinstance(event, MessageEvent):
            return EventHandled.NO
        bot_user = ctx.bot_user
        if bot_user is None:
            return EventHandled.NO
        msg = event.message
        bot_name = display_name_in_guild(bot_user, getattr(msg, "guild", None))
        if not bot_name or bot_name not in (msg.content or ""):
            return EventHandled.NO
        await msg.add_reaction(EYES)
        return EventHandled.YES
