from __future__ import annotations

from misc.events import Event
from misc.events import EventHandled
from misc.events import MessageEvent


class IgnoreBotsPlugin:
    # Handled-but-silent, so two bots never answer each other forever.
    name = "ignore_bots"

    async def usage(self, ctx) -> str | None:
        return None

    async def handle(self, ctx, event: Event) -> EventHandled:
        if not isinstance(event, MessageEvent):
            return EventHandled.NO
        if bool(getattr(event.message.author, "bot", False)):
            return EventHandled.YES
        return EventHandled.NO
