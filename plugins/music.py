from __future__ import annotations

import random

from misc.events import Event
from misc.events import EventHandled
from plugins.base import bot_command
from plugins.base import command_prefix


class MusicPlugin:
    name = "music"

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def usage(self, ctx) -> str | None:
        return f"{await command_prefix(ctx)}music - fetch random music from YouTube"

    async def handle(self, ctx, event: Event) -> EventHandled:
        cmd = await bot_command(ctx, event, self.name)
        if cmd is None:
            return EventHandled.NO
        msg, _args = cmd
        async with ctx.cfg.read() as cfg:
            urls = list(cfg.music.urls)
        await msg.reply(self._rng.choice(urls) if urls else "No music configured.")
        return EventHandled.YES
