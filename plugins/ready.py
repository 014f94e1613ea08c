from __future__ import annotations

from misc.events import Event
from misc.events import EventHandled
from misc.events import ReadyEvent


class ReadyPlugin:
    name = "ready"

    async def usage(self, ctx) -> str | None:
        return None

    async def handle(self, ctx, event: Event) -> EventHandled:
        if not isinstance(event, ReadyEvent):
            return EventHandled.NO
        print(f"[Ready] Logged in as {getattr(event.user, 'name', '<unknown-user>')} in {event.guild_count} guild(s)")
        return EventHandled.YES
