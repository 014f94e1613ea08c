from __future__ import annotations

from misc.events import Event
from misc.events import EventHandled
from plugins.base import bot_command
from plugins.base import command_prefix


async def render_help(ctx, plugins) -> str:
    lines = ["```", "Commands:"]
    for plugin in plugins:
        usage = await plugin.usage(ctx)
        if usage:
            lines.append(usage)
    lines.append("```")
    return "\n".join(lines)


class HelpPlugin:
    name = "help"

    def __init__(self, plugins_provider=None) -> None:
        # Resolved lazily so help always lists the chain it is part of.
        self._plugins_provider = plugins_provider

    async def usage(self, ctx) -> str | None:
        return f"{await command_prefix(ctx)}help - you are here"

    def _plugins(self):
        if self._plugins_provider is not None:
            return self._plugins_provider()
        from plugins.registry import plugins

        return plugins()

    async def handle(self, ctx, event: Event) -> EventHandled:
        cmd = await bot_command(ctx, event, self.name)
        if cmd is None:
            return EventHandled.NO
        msg, _args = cmd
        await msg.reply(await render_help(ctx, self._plugins()))
        return EventHandled.YES
