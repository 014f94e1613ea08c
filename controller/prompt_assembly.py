from __future__ import annotations

from typing import Sequence

from controller.models import ChatMessage
from controller.models import ROLE_ASSISTANT
from controller.models import ROLE_SYSTEM
from controller.models import ROLE_USER
from state.volatile import HistoryEntry


class NoHistoryError(RuntimeError):
    pass


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def resolve_system_prompt(template: str, *, bot_name: str, user_name: str) -> str:
    return (template or "").replace("{{bot}}", bot_name).replace("{{user}}", user_name)


def build_chat_messages(
    history: Sequence[HistoryEntry],
    *,
    system_template: str,
    bot_id: int,
    bot_name: str,
    context_size: int,
) -> list[ChatMessage]:
    """
    Pack channel history into chat messages that fit the context budget.

    Tokens are estimated as UTF-8 bytes // 3. History is walked newest to
    oldest so the most recent messages survive; the result is chronological
    with the system message first.
    """
    if not history:
        raise NoHistoryError("cannot build an LLM request without any channel history")

    system = resolve_system_prompt(
        system_template,
        bot_name=bot_name,
        user_name=history[-1].author_name,
    )

    total_bytes = _byte_len(system)
    packed: list[ChatMessage] = []
    for entry in reversed(history):
        if int(entry.author_id) == int(bot_id):
            msg = ChatMessage(role=ROLE_ASSISTANT, content=entry.human_format_content)
        else:
            msg = ChatMessage(role=ROLE_USER, content=f"{entry.author_name}: {entry.human_format_content}")
        total_bytes += _byte_len(msg.content)
        if total_bytes // 3 > int(context_size):
            break
        packed.append(msg)

    packed.reverse()
    return [ChatMessage(role=ROLE_SYSTEM, content=system), *packed]
