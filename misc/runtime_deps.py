from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from config.loader import Config
from state.locks import Guarded
from state.locks import RANK_CONFIG
from state.locks import RANK_PERSISTENT
from state.locks import RANK_VOLATILE
from state.persistent import PersistentState
from state.volatile import VolatileState


@dataclass(frozen=True)
class Context:
    """
    Everything a plugin may touch while handling one event.

    Lock order is cfg -> pstate -> vstate, and a task never write-locks two of
    them at once (enforced by state.locks).
    """

    cfg: Guarded[Config]
    pstate: Guarded[PersistentState]
    vstate: Guarded[VolatileState]
    # gateway client (discord.Client) and the shared httpx.AsyncClient
    client: Any
    http: Any

    @property
    def bot_user(self) -> Any:
        return getattr(self.client, "user", None)


class SharedState:
    """Owns the three guarded containers for the lifetime of the process."""

    def __init__(self, cfg: Config, pstate: PersistentState, vstate: VolatileState | None = None) -> None:
        self.cfg: Guarded[Config] = Guarded("config", RANK_CONFIG, cfg)
        self.pstate: Guarded[PersistentState] = Guarded("persistent", RANK_PERSISTENT, pstate)
        self.vstate: Guarded[VolatileState] = Guarded("volatile", RANK_VOLATILE, vstate or VolatileState())

    def context(self, *, client: Any, http: Any) -> Context:
        return Context(
            cfg=self.cfg,
            pstate=self.pstate,
            vstate=self.vstate,
            client=client,
            http=http,
        )


@dataclass(frozen=True)
class RuntimeDeps:
    shared: SharedState
    # shared httpx.AsyncClient for LLM calls
    http: Any
    plugins: list[Any]
