from __future__ import annotations

from typing import Any, Sequence

import discord
from misc.events import EVENT_TYPES
from misc.events import Event
from misc.events import EventHandled
from misc.events import MessageEvent
from misc.events import ReactionAddEvent
from misc.events import ReactionRemoveEvent
from misc.events import ReadyEvent
from misc.events import VoiceStateUpdateEvent
from misc.runtime_deps import Context
from misc.runtime_deps import RuntimeDeps


async def dispatch(ctx: Context, event: Event, plugins: Sequence[Any]) -> str | None:
    """
    Offer `event` to each plugin in order until one handles it.

    Returns the name of the plugin that handled the event, or None when the
    whole chain passed. A failing plugin is logged and skipped.
    """
    if not isinstance(event, EVENT_TYPES):
        raise TypeError(f"cannot dispatch {type(event).__name__}; expected one of the gateway events")

    for plugin in plugins:
        try:
            handled = await plugin.handle(ctx, event)
        except Exception as e:
            print(f"[Plugin] Error in plugin {plugin.name}: {e}")
            continue
        if handled is EventHandled.YES:
            return plugin.name
    return None


def register_runtime_events(
    client: discord.Client,
    *,
    deps: RuntimeDeps,
) -> None:
    # discord.py runs every listener in its own task, so events overlap while
    # each event walks the chain in order.
    async def _dispatch(event: Event) -> None:
        ctx = deps.shared.context(client=client, http=deps.http)
        await dispatch(ctx, event, deps.plugins)

    @client.event
    async def on_ready():
        await _dispatch(ReadyEvent(user=client.user, guild_count=len(client.guilds)))

    @client.event
    async def on_message(message: discord.Message):
        await _dispatch(MessageEvent(message=message))

    @client.event
    async def on_voice_state_update(
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ):
        old = before if getattr(before, "channel", None) is not None else None
        await _dispatch(VoiceStateUpdateEvent(member=member, old=old, new=after))

    @client.event
    async def on_reaction_add(reaction: discord.Reaction, user: discord.User | discord.Member):
        await _dispatch(ReactionAddEvent(reaction=reaction, user=user))

    @client.event
    async def on_reaction_remove(reaction: discord.Reaction, user: discord.User | discord.Member):
        await _dispatch(ReactionRemoveEvent(reaction=reaction, user=user))
