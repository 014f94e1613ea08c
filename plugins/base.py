from __future__ import annotations

from typing import Any, Protocol

from misc.events import Event
from misc.events import EventHandled
from misc.events import MessageEvent
from misc.mention_routes import parse_bot_command


class Plugin(Protocol):
    """
    One link in the event chain.

    `handle` returns EventHandled.YES to stop the chain for this event and
    EventHandled.NO to let later plugins see it. Raising is logged by the
    dispatcher and treated as NO.
    """

    name: str

    async def usage(self, ctx) -> str | None:
        ...

    async def handle(self, ctx, event: Event) -> EventHandled:
        ...


async def command_prefix(ctx) -> str:
    async with ctx.cfg.read() as cfg:
        return cfg.general.command_prefix


async def bot_command(ctx, event: Event, cmd: str) -> tuple[Any, str] | None:
    """(message, args) when the event is the `<prefix><cmd>` command, else None."""
    if not isinstance(event, MessageEvent):
        return None
    prefix = await command_prefix(ctx)
    args = parse_bot_command(getattr(event.message, "content", "") or "", prefix, cmd)
    if args is None:
        return None
    return event.message, args
