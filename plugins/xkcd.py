from __future__ import annotations

from config.defaults import XKCD_RANDOM_URL
from misc.events import Event
from misc.events import EventHandled
from plugins.base import bot_command
from plugins.base import command_prefix


class XkcdPlugin:
    name = "xkcd"

    async def usage(self, ctx) -> str | None:
        return f"{await command_prefix(ctx)}xkcd - show random xkcd comic"

    async def handle(self, ctx, event: Event) -> EventHandled:
        cmd = await bot_command(ctx, event, self.name)
        if cmd is None:
            return EventHandled.NO
        msg, _args = cmd
        await msg.reply(XKCD_RANDOM_URL)
        return EventHandled.YES
