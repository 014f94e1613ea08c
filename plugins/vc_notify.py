from __future__ import annotations

import asyncio
from typing import Any

from misc.discord_helpers import display_name_in_guild
from misc.events import Event
from misc.events import EventHandled
from misc.events import VoiceStateUpdateEvent
from misc.mention_routes import split_args
from plugins.base import bot_command
from plugins.base import command_prefix

ALREADY_FOLLOWING = "You are already subscribed to voice channel activity notifications"
FOLLOWED = "You have successfully subscribed to voice channel activity notifications"
UNFOLLOWED = "You have successfully unsubscribed from voice channel activity notifications"
NOT_FOLLOWING = "You are not subscribed to voice channel activity notifications"


def _channel_id(voice_state: Any) -> int | None:
    channel = getattr(voice_state, "channel", None) if voice_state is not None else None
    return int(channel.id) if channel is not None else None


def is_newly_available(old_id: int | None, new_id: int | None, afk_id: int | None) -> bool:
    """
    True for a join from nothing into a non-AFK channel, or a move out of the
    AFK channel into a non-AFK one. Moves between regular channels, leaving,
    and mute/deafen updates do not count.
    """
    if new_id is None or new_id == afk_id:
        return False
    if old_id is None:
        return True
    return afk_id is not None and old_id == afk_id


def non_afk_voice_user_count(guild: Any) -> int:
    afk = getattr(guild, "afk_channel", None)
    afk_id = int(afk.id) if afk is not None else None
    total = 0
    for channel in getattr(guild, "voice_channels", None) or []:
        if afk_id is not None and int(channel.id) == afk_id:
            continue
        total += len(getattr(channel, "members", None) or [])
    return total


def notification_text(*, user_name: str, channel_id: int | None, guild_name: str, prefix: str) -> str:
    channel = f"<#{channel_id}>" if channel_id is not None else "a VC channel"
    return (
        f"{user_name} joined VC channel {channel} in {guild_name}\n"
        "\n"
        f"You can opt out of these notifications by replying `{prefix}vc-notify unfollow`\n"
    )


async def _resolve_user(client: Any, user_id: int) -> Any:
    user = client.get_user(int(user_id)) if hasattr(client, "get_user") else None
    if user is None:
        user = await client.fetch_user(int(user_id))
    return user


class VcNotifyPlugin:
    name = "vc-notify"

    async def usage(self, ctx) -> str | None:
        return f"{await command_prefix(ctx)}{self.name} <follow/unfollow> - voice channel activity notifications"

    async def handle(self, ctx, event: Event) -> EventHandled:
        if isinstance(event, VoiceStateUpdateEvent):
            await self._handle_voice_state_update(ctx, event)
            # Others may still want to see voice updates.
            return EventHandled.NO

        cmd = await bot_command(ctx, event, self.name)
        if cmd is None:
            return EventHandled.NO
        msg, args = cmd
        await self._handle_command(ctx, msg, split_args(args))
        return EventHandled.YES

    async def _handle_command(self, ctx, msg: Any, args: list[str]) -> None:
        prefix = await command_prefix(ctx)
        action = args[0] if args else None
        if action not in ("follow", "unfollow"):
            await msg.reply(f"Invalid command.  See `{prefix}help`")
            return

        user_id = int(msg.author.id)
        async with ctx.pstate.write() as pstate:
            following = user_id in pstate.vc_notify_followers
            if action == "follow" and following:
                response = ALREADY_FOLLOWING
            elif action == "follow":
                pstate.vc_notify_followers.add(user_id)
                await asyncio.to_thread(pstate.save)
                response = FOLLOWED
            elif following:
                pstate.vc_notify_followers.discard(user_id)
                await asyncio.to_thread(pstate.save)
                response = UNFOLLOWED
            else:
                response = NOT_FOLLOWING

        await msg.reply(response)

    async def _handle_voice_state_update(self, ctx, event: VoiceStateUpdateEvent) -> None:
        member = event.member
        guild = getattr(member, "guild", None)
        if guild is None:
            return

        afk = getattr(guild, "afk_channel", None)
        afk_id = int(afk.id) if afk is not None else None
        new_id = _channel_id(event.new)
        if not is_newly_available(_channel_id(event.old), new_id, afk_id):
            return
        if non_afk_voice_user_count(guild) > 1:
            return

        async with ctx.cfg.read() as cfg:
            prefix = cfg.general.command_prefix
            limit_seconds = cfg.general.notification_limit_seconds
        async with ctx.pstate.read() as pstate:
            followers = sorted(pstate.vc_notify_followers)

        joined_id = int(member.id)
        recipients: list[int] = []
        async with ctx.vstate.write() as vstate:
            for follower_id in followers:
                if follower_id == joined_id:
                    continue
                if not vstate.notify_timestamp.okay_to_notify(follower_id, limit_seconds):
                    continue
                vstate.notify_timestamp.mark_notified(follower_id)
                recipients.append(follower_id)

        if not recipients:
            return

        text = notification_text(
            user_name=display_name_in_guild(member, guild),
            channel_id=new_id,
            guild_name=str(getattr(guild, "name", "") or "a server"),
            prefix=prefix,
        )
        for follower_id in recipients:
            try:
                user = await _resolve_user(ctx.client, follower_id)
                await user.send(text)
            except Exception as e:
                print(f"[VC] Failed to notify user {follower_id}: {e}")
