from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    author_id: int
    author_name: str
    # Mentions already resolved to display names; safe to show to humans and the LLM.
    human_format_content: str


class History:
    """Per-channel FIFO of recent messages. No LRU, no TTL."""

    def __init__(self) -> None:
        self._channels: dict[int, list[HistoryEntry]] = {}
        self._backfill_locks: dict[int, asyncio.Lock] = {}

    def __contains__(self, channel_id: int) -> bool:
        return int(channel_id) in self._channels

    def get(self, channel_id: int) -> list[HistoryEntry] | None:
        entries = self._channels.get(int(channel_id))
        if entries is None:
            return None
        return list(entries)

    def seed(self, channel_id: int, entries: list[HistoryEntry], max_count: int) -> bool:
        """Install the backfilled entries unless the channel is already cached."""
        cid = int(channel_id)
        if cid in self._channels:
            return False
        self._channels[cid] = list(entries)
        self._trim(cid, max_count)
        return True

    def push(self, channel_id: int, entry: HistoryEntry, max_count: int) -> None:
        cid = int(channel_id)
        self._channels.setdefault(cid, []).append(entry)
        self._trim(cid, max_count)

    def _trim(self, channel_id: int, max_count: int) -> None:
        entries = self._channels[channel_id]
        overflow = len(entries) - max(1, int(max_count))
        if overflow > 0:
            del entries[:overflow]

    def backfill_lock(self, channel_id: int) -> asyncio.Lock:
        cid = int(channel_id)
        lock = self._backfill_locks.get(cid)
        if lock is None:
            lock = asyncio.Lock()
            self._backfill_locks[cid] = lock
        return lock


class NotifyTimestamp:
    """Last time each user was notified. Entries are upserted, never deleted."""

    def __init__(self) -> None:
        self._last: dict[int, float] = {}

    def okay_to_notify(self, user_id: int, limit_seconds: float, now: float | None = None) -> bool:
        last = self._last.get(int(user_id))
        if last is None:
            return True
        now = time.monotonic() if now is None else now
        return (now - last) >= float(limit_seconds)

    def mark_notified(self, user_id: int, now: float | None = None) -> None:
        self._last[int(user_id)] = time.monotonic() if now is None else now

    def last_notified(self, user_id: int) -> float | None:
        return self._last.get(int(user_id))


@dataclass(slots=True)
class VolatileState:
    """Memory-only state; never written to disk."""

    history: History = field(default_factory=History)
    notify_timestamp: NotifyTimestamp = field(default_factory=NotifyTimestamp)
