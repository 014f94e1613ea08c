from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from config.defaults import DISCORD_MAX_MESSAGE_LEN
from controller.models import ChatMessage
from controller.models import LlmSettings
from controller.prompt_assembly import build_chat_messages
from ingestion.service import get_history
from misc.discord_helpers import display_name_in_guild

TOO_LONG_REPLY = (
    "I blabbed too long and my message was longer than the discord post limit "
    "and nobody taught me how to cut a post up into multiple messages"
)


class LlmError(RuntimeError):
    pass


async def llm_settings_for(ctx, persona_key: str) -> LlmSettings:
    async with ctx.cfg.read() as cfg:
        persona = cfg.persona(persona_key)
        return LlmSettings(
            chat_url=cfg.llm.chat_url,
            model_name=persona.model_name,
            system_prompt=persona.system_prompt,
            context_size=int(persona.context_size),
            temperature=float(persona.temperature),
        )


@dataclass(slots=True)
class LlmChatRequest:
    model: str
    messages: list[ChatMessage] = field(default_factory=list)
    num_ctx: int = 0
    temperature: float = 0.8
    stream: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "stream": bool(self.stream),
            "messages": [m.to_dict() for m in self.messages],
            "num_ctx": int(self.num_ctx),
            "temperature": float(self.temperature),
        }

    @classmethod
    async def from_recent_history(cls, ctx, channel: Any, settings: LlmSettings) -> "LlmChatRequest":
        """Build a request from the channel's cached history (backfilling it if needed)."""
        history = await get_history(ctx, channel)

        bot_user = ctx.bot_user
        if bot_user is None:
            raise LlmError("bot user is not known yet; not connected to the gateway")
        bot_name = display_name_in_guild(bot_user, getattr(channel, "guild", None))

        messages = build_chat_messages(
            history,
            system_template=settings.system_prompt,
            bot_id=int(bot_user.id),
            bot_name=bot_name,
            context_size=settings.context_size,
        )
        return cls(
            model=settings.model_name,
            messages=messages,
            num_ctx=settings.context_size,
            temperature=settings.temperature,
        )

    async def post(self, http: httpx.AsyncClient, url: str) -> str:
        print(f"[LLM] Sending request to chat endpoint {url}...")
        try:
            resp = await http.post(url, json=self.to_payload())
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise LlmError(f"chat endpoint {url} returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LlmError(f"chat endpoint {url} request failed: {e}") from e
        except ValueError as e:
            raise LlmError(f"chat endpoint {url} returned invalid JSON") from e

        try:
            content = data["message"]["content"]
        except (KeyError, TypeError) as e:
            raise LlmError(f"chat endpoint {url} returned an unexpected payload") from e
        if not isinstance(content, str):
            raise LlmError(f"chat endpoint {url} returned non-text content")
        print(f"[LLM] Sending request to chat endpoint {url}... done")

        # TODO: split long replies into several Discord messages instead of refusing.
        if len(content.encode("utf-8")) >= DISCORD_MAX_MESSAGE_LEN:
            return TOO_LONG_REPLY
        return content
