from __future__ import annotations

import re
from typing import Any

MENTION_RE = re.compile(r"<@!?(\d+)>|<@&(\d+)>|<#(\d+)>")


def display_name_in_guild(user: Any, guild: Any | None) -> str:
    """Guild nickname, then global display name, then username."""
    if guild is not None:
        member = None
        try:
            member = guild.get_member(int(user.id))
        except (AttributeError, TypeError, ValueError):
            member = None
        if member is not None:
            name = getattr(member, "display_name", None)
            if name:
                return str(name)
    for attr in ("nick", "display_name", "global_name", "name"):
        value = getattr(user, attr, None)
        if value:
            return str(value)
    return f"unknown-user-{getattr(user, 'id', '?')}"


def _find_user(message: Any, user_id: int) -> Any | None:
    for user in getattr(message, "mentions", None) or []:
        if int(getattr(user, "id", 0) or 0) == user_id:
            return user
    guild = getattr(message, "guild", None)
    if guild is not None:
        return guild.get_member(user_id)
    return None


def build_mention_map(message: Any) -> dict[str, str]:
    """Map each mention token in this message to a human-readable name."""
    guild = getattr(message, "guild", None)
    mapping: dict[str, str] = {}

    for raw_id in getattr(message, "raw_mentions", None) or []:
        uid = int(raw_id)
        user = _find_user(message, uid)
        name = display_name_in_guild(user, guild) if user is not None else f"unknown-user-{uid}"
        mapping[f"<@{uid}>"] = name
        mapping[f"<@!{uid}>"] = name

    if guild is not None:
        for raw_id in getattr(message, "raw_role_mentions", None) or []:
            rid = int(raw_id)
            role = guild.get_role(rid)
            mapping[f"<@&{rid}>"] = f"@{role.name}" if role is not None else "@UnknownRole"

        for raw_id in getattr(message, "raw_channel_mentions", None) or []:
            cid = int(raw_id)
            channel = guild.get_channel(cid)
            mapping[f"<#{cid}>"] = f"#{channel.name}" if channel is not None else "#UnknownChannel"

    return mapping


def human_format_content(message: Any) -> str:
    """
    Discord content with mention markup replaced by names, for logs and the LLM.

    One pass over the original text, so a substituted name is never itself
    re-substituted.
    """
    content = getattr(message, "content", None) or ""
    mapping = build_mention_map(message)
    if not mapping:
        return content
    return MENTION_RE.sub(lambda m: mapping.get(m.group(0), m.group(0)), content)


def channel_label(channel: Any) -> str:
    name = getattr(channel, "name", None)
    if name:
        return f"#{name}"
    if channel is None:
        return "<unknown-channel>"
    return "<direct-message>"


def guild_label(guild: Any | None) -> str:
    if guild is None:
        return "<direct-message>"
    return str(getattr(guild, "name", None) or "<unknown-guild>")


def emoji_label(emoji: Any) -> str:
    if isinstance(emoji, str):
        return emoji
    name = getattr(emoji, "name", None)
    return str(name) if name else "<unknown-emoji>"
