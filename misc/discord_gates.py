from __future__ import annotations

from typing import Any


def user_is_owner(user: Any, bot_owners: list[str] | set[str]) -> bool:
    # Owners are listed by global username, which unlike nicknames is unique.
    name = str(getattr(user, "name", "") or "").strip()
    return bool(name) and name in set(bot_owners or [])


def _mentions_user(message: Any, user_id: int) -> bool:
    if int(user_id) in {int(uid) for uid in (getattr(message, "raw_mentions", None) or [])}:
        return True
    return any(int(getattr(u, "id", 0) or 0) == int(user_id) for u in (getattr(message, "mentions", None) or []))


async def _referenced_author_id(message: Any) -> int | None:
    reference = getattr(message, "reference", None)
    if reference is None or getattr(reference, "message_id", None) is None:
        return None
    resolved = getattr(reference, "resolved", None)
    if resolved is None or not hasattr(resolved, "author"):
        resolved = await message.channel.fetch_message(int(reference.message_id))
    return int(resolved.author.id)


async def message_is_to_me(message: Any, bot_user: Any) -> bool:
    """
    True when the message mentions the bot, replies to one of its messages,
    or mentions a role the bot holds in the guild.
    """
    if bot_user is None:
        return False
    my_id = int(bot_user.id)

    if _mentions_user(message, my_id):
        return True

    if await _referenced_author_id(message) == my_id:
        return True

    role_ids = {int(rid) for rid in (getattr(message, "raw_role_mentions", None) or [])}
    if not role_ids:
        return False
    guild = getattr(message, "guild", None)
    if guild is None:
        return False
    me = guild.get_member(my_id)
    if me is None:
        return False
    return any(int(role.id) in role_ids for role in (getattr(me, "roles", None) or []))
