from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Union


class EventHandled(enum.Enum):
    YES = "yes"
    NO = "no"


@dataclass(frozen=True, slots=True)
class ReadyEvent:
    user: Any
    guild_count: int


@dataclass(frozen=True, slots=True)
class MessageEvent:
    message: Any


@dataclass(frozen=True, slots=True)
class VoiceStateUpdateEvent:
    member: Any
    # None when the member was not in voice before this update.
    old: Any | None
    new: Any


@dataclass(frozen=True, slots=True)
class ReactionAddEvent:
    reaction: Any
    user: Any


@dataclass(frozen=True, slots=True)
class ReactionRemoveEvent:
    reaction: Any
    user: Any


Event = Union[ReadyEvent, MessageEvent, VoiceStateUpdateEvent, ReactionAddEvent, ReactionRemoveEvent]

# Adding a variant here means every plugin has to decide what to do with it.
EVENT_TYPES: tuple[type, ...] = (
    ReadyEvent,
    MessageEvent,
    VoiceStateUpdateEvent,
    ReactionAddEvent,
    ReactionRemoveEvent,
)
