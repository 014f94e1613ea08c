from __future__ import annotations

import asyncio

from config.loader import reload_config
from controller.persona import PERSONA_PERMISSION_DENIED
from controller.persona import reply_with_persona
from misc.discord_gates import user_is_owner
from misc.events import Event
from misc.events import EventHandled
from plugins.base import bot_command
from plugins.base import command_prefix


class ReloadPlugin:
    name = "reload"

    async def usage(self, ctx) -> str | None:
        return f"{await command_prefix(ctx)}{self.name} - reload config (bot owner only)"

    async def handle(self, ctx, event: Event) -> EventHandled:
        cmd = await bot_command(ctx, event, self.name)
        if cmd is None:
            return EventHandled.NO
        msg, _args = cmd

        async with ctx.cfg.read() as cfg:
            owners = list(cfg.general.bot_owners)
            current = cfg
        if not user_is_owner(msg.author, owners):
            await reply_with_persona(ctx, msg, PERSONA_PERMISSION_DENIED)
            return EventHandled.YES

        # A bad file raises here and the running config stays in place.
        fresh = await asyncio.to_thread(reload_config, current)
        await ctx.cfg.replace(fresh)
        print(f"[CFG] Reloaded config from {fresh.source_path}")
        await msg.reply("Configuration reloaded successfully")
        return EventHandled.YES
