from __future__ import annotations

from typing import Any

from controller.llm_client import LlmChatRequest
from controller.llm_client import llm_settings_for

PERSONA_REPLY = "llm_reply"
PERSONA_PERMISSION_DENIED = "llm_permission_denied"


async def reply_with_persona(ctx, message: Any, persona_key: str) -> str:
    """
    Answer `message` in-channel with an LLM reply voiced by `persona_key`.

    Used for normal conversation and for every "you may not do that" path.
    Must be called without holding any state lock.
    """
    settings = await llm_settings_for(ctx, persona_key)
    async with message.channel.typing():
        request = await LlmChatRequest.from_recent_history(ctx, message.channel, settings)
        response = await request.post(ctx.http, settings.chat_url)
    await message.reply(response)
    return response
