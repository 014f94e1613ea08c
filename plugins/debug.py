from __future__ import annotations

from misc.discord_helpers import channel_label
from misc.discord_helpers import display_name_in_guild
from misc.discord_helpers import emoji_label
from misc.discord_helpers import guild_label
from misc.discord_helpers import human_format_content
from misc.events import Event
from misc.events import EventHandled
from misc.events import MessageEvent
from misc.events import ReactionAddEvent
from misc.events import ReactionRemoveEvent
from misc.events import ReadyEvent
from misc.events import VoiceStateUpdateEvent


def _voice_channel_name(voice_state) -> str:
    channel = getattr(voice_state, "channel", None) if voice_state is not None else None
    return str(getattr(channel, "name", None) or "<unknown-channel>")


def _voice_channel_id(voice_state) -> int | None:
    channel = getattr(voice_state, "channel", None) if voice_state is not None else None
    return int(channel.id) if channel is not None else None


def describe_event(event: Event) -> str | None:
    """One console line per event; None for updates not worth logging (mute, deafen)."""
    if isinstance(event, ReadyEvent):
        return f"Connected to {event.guild_count} server(s) as {getattr(event.user, 'name', '<unknown-user>')}"

    if isinstance(event, MessageEvent):
        msg = event.message
        guild = getattr(msg, "guild", None)
        author = display_name_in_guild(msg.author, guild)
        return f"{guild_label(guild)} > {channel_label(msg.channel)} > {author}: {human_format_content(msg)}"

    if isinstance(event, VoiceStateUpdateEvent):
        who = display_name_in_guild(event.member, getattr(event.member, "guild", None))
        old_id = _voice_channel_id(event.old)
        new_id = _voice_channel_id(event.new)
        if old_id is not None and new_id is not None:
            if old_id == new_id:
                return None
            return f'{who} moved VC channel from "{_voice_channel_name(event.old)}" to "{_voice_channel_name(event.new)}"'
        if old_id is not None:
            return f'{who} left VC channel "{_voice_channel_name(event.old)}"'
        if new_id is not None:
            return f'{who} joined VC channel "{_voice_channel_name(event.new)}"'
        return "Unknown voice state update"

    if isinstance(event, ReactionAddEvent):
        message = getattr(event.reaction, "message", None)
        text = human_format_content(message) if message is not None else "<unknown-message>"
        who = getattr(event.user, "name", "<unknown-user>")
        return f'{who} reacted to message "{text}" with "{emoji_label(event.reaction.emoji)}"'

    if isinstance(event, ReactionRemoveEvent):
        message = getattr(event.reaction, "message", None)
        text = getattr(message, "content", None) or "<unknown-message>"
        who = getattr(event.user, "name", "<unknown-user>")
        return f'{who} removed reaction "{emoji_label(event.reaction.emoji)}" from message "{text}"'

    return None


class DebugPlugin:
    name = "debug"

    async def usage(self, ctx) -> str | None:
        return None

    async def handle(self, ctx, event: Event) -> EventHandled:
        line = describe_event(event)
        if line:
            print(f"[Event] {line}")
        return EventHandled.NO
