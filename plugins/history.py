from __future__ import annotations

from ingestion.service import push_message
from misc.events import Event
from misc.events import EventHandled
from misc.events import MessageEvent


class HistoryPlugin:
    """Records every message, the bot's own included, so later prompts see both sides."""

    name = "history"

    async def usage(self, ctx) -> str | None:
        return None

    async def handle(self, ctx, event: Event) -> EventHandled:
        if isinstance(event, MessageEvent):
            await push_message(ctx, event.message)
        return EventHandled.NO
