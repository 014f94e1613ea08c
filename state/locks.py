from __future__ import annotations

import asyncio
import contextvars
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, TypeVar

T = TypeVar("T")

# Acquisition order. A task may only take a container whose rank is strictly
# greater than every container it already holds.
RANK_CONFIG = 0
RANK_PERSISTENT = 1
RANK_VOLATILE = 2

# (name, rank, mode) for every container the current task holds.
_held: contextvars.ContextVar[tuple[tuple[str, int, str], ...]] = contextvars.ContextVar(
    "digmbot_held_locks",
    default=(),
)


class LockOrderError(RuntimeError):
    pass


class RwLock:
    """Asyncio read/write lock. A waiting writer blocks new readers."""

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    async def acquire_read(self) -> None:
        async with self._cond:
            while self._writer or self._writers_waiting:
                await self._cond.wait()
            self._readers += 1

    async def release_read(self) -> None:
        async with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    async def acquire_write(self) -> None:
        async with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    await self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    async def release_write(self) -> None:
        async with self._cond:
            self._writer = False
            self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer(self) -> bool:
        return self._writer


def held_locks() -> tuple[tuple[str, int, str], ...]:
    return _held.get()


def _check_order(name: str, rank: int, mode: str) -> None:
    held = _held.get()
    for held_name, held_rank, held_mode in held:
        if held_rank >= rank:
            raise LockOrderError(
                f"cannot lock `{name}` while holding `{held_name}` "
                "(order is config -> persistent -> volatile)"
            )
        if mode == "write" and held_mode == "write":
            raise LockOrderError(
                f"cannot write-lock `{name}` while holding a write lock on `{held_name}`"
            )


class Guarded(Generic[T]):
    """A shared value behind its own RwLock, with lock-order checking."""

    def __init__(self, name: str, rank: int, value: T) -> None:
        self.name = name
        self.rank = int(rank)
        self._value = value
        self._lock = RwLock()

    @asynccontextmanager
    async def _hold(self, mode: str) -> AsyncIterator[T]:
        _check_order(self.name, self.rank, mode)
        if mode == "write":
            await self._lock.acquire_write()
        else:
            await self._lock.acquire_read()
        token = _held.set(_held.get() + ((self.name, self.rank, mode),))
        try:
            yield self._value
        finally:
            _held.reset(token)
            if mode == "write":
                await self._lock.release_write()
            else:
                await self._lock.release_read()

    def read(self):
        return self._hold("read")

    def write(self):
        return self._hold("write")

    async def replace(self, value: T) -> T:
        async with self._hold("write"):
            old = self._value
            self._value = value
        return old

    @property
    def lock(self) -> RwLock:
        return self._lock
