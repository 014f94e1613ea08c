from __future__ import annotations

from typing import Any

from misc.discord_helpers import channel_label
from misc.discord_helpers import display_name_in_guild
from misc.discord_helpers import human_format_content
from state.volatile import HistoryEntry


def format_history_entry(message: Any) -> HistoryEntry:
    author = message.author
    return HistoryEntry(
        author_id=int(author.id),
        author_name=display_name_in_guild(author, getattr(message, "guild", None)),
        human_format_content=human_format_content(message),
    )


async def _history_limits(ctx) -> tuple[int, int]:
    async with ctx.cfg.read() as cfg:
        return (
            int(cfg.history.channel_backfill_message_count),
            int(cfg.history.channel_max_message_count),
        )


async def fetch_recent_messages(channel: Any, limit: int, before: Any | None = None) -> list[Any]:
    """Newest-first, as the gateway returns them."""
    if limit <= 0:
        return []
    out: list[Any] = []
    async for msg in channel.history(limit=int(limit), before=before):
        out.append(msg)
    return out


async def _ensure_backfilled(
    ctx,
    channel: Any,
    *,
    backfill_count: int,
    max_count: int,
    before: Any | None,
) -> list[HistoryEntry]:
    channel_id = int(channel.id)

    async with ctx.vstate.read() as vstate:
        cached = vstate.history.get(channel_id)
        backfill_lock = vstate.history.backfill_lock(channel_id)
    if cached is not None:
        return cached

    # Only one task per channel talks to the gateway; the rest wait and reuse its result.
    async with backfill_lock:
        async with ctx.vstate.read() as vstate:
            cached = vstate.history.get(channel_id)
        if cached is not None:
            return cached

        label = channel_label(channel)
        print(f"[History] Backfilling the last {backfill_count} messages in {label}...")
        try:
            fetched = await fetch_recent_messages(channel, backfill_count, before=before)
        except Exception as e:
            # A cold cache means "no context", not a stuck bot.
            print(f"[History] Backfill failed in {label}; starting empty: {e}")
            fetched = []

        entries = [format_history_entry(msg) for msg in reversed(fetched)]

        async with ctx.vstate.write() as vstate:
            vstate.history.seed(channel_id, entries, max_count)
            seeded = vstate.history.get(channel_id) or []
        print(f"[History] Backfilled {len(entries)} messages in {label}")
        return seeded


async def get_history(ctx, channel: Any, *, before: Any | None = None) -> list[HistoryEntry]:
    """
    Chronological copy of the channel's cached history.

    The first call for a channel backfills from the gateway; later calls only
    read the cache. Must be called without holding any state lock.
    """
    backfill_count, max_count = await _history_limits(ctx)
    return await _ensure_backfilled(
        ctx,
        channel,
        backfill_count=backfill_count,
        max_count=max_count,
        before=before,
    )


async def push_message(ctx, message: Any) -> HistoryEntry:
    entry = format_history_entry(message)
    backfill_count, max_count = await _history_limits(ctx)

    # Backfill from before this message so it is not recorded twice.
    await _ensure_backfilled(
        ctx,
        message.channel,
        backfill_count=backfill_count,
        max_count=max_count,
        before=message,
    )

    async with ctx.vstate.write() as vstate:
        vstate.history.push(int(message.channel.id), entry, max_count)
    return entry
