from __future__ import annotations

from controller.persona import PERSONA_REPLY
from controller.persona import reply_with_persona
from misc.discord_gates import message_is_to_me
from misc.events import Event
from misc.events import EventHandled
from misc.events import MessageEvent


class LlmReplyPlugin:
    """Conversational fallback. Keep last in the chain."""

    name = "llm_reply"

    async def usage(self, ctx) -> str | None:
        return None

    async def handle(self, ctx, event: Event) -> EventHandled:
        if not isinstance(event, MessageEvent):
            return EventHandled.NO
        if not await message_is_to_me(event.message, ctx.bot_user):
            return EventHandled.NO
        await reply_with_persona(ctx, event.message, PERSONA_REPLY)
        return EventHandled.YES
