from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from config.defaults import DEFAULT_BACKFILL_MESSAGE_COUNT
from config.defaults import DEFAULT_CHAT_URL
from config.defaults import DEFAULT_COMMAND_PREFIX
from config.defaults import DEFAULT_CONFIG_PATH
from config.defaults import DEFAULT_CONTEXT_SIZE
from config.defaults import DEFAULT_MAX_MESSAGE_COUNT
from config.defaults import DEFAULT_MODEL_NAME
from config.defaults import DEFAULT_MUSIC_URLS
from config.defaults import DEFAULT_NOTIFICATION_LIMIT_SECONDS
from config.defaults import DEFAULT_PERMISSION_DENIED_SYSTEM_PROMPT
from config.defaults import DEFAULT_REPLY_SYSTEM_PROMPT
from config.defaults import DEFAULT_TEMPERATURE


class ConfigError(RuntimeError):
    pass


@dataclass(slots=True)
class GeneralConfig:
    discord_token: str = ""
    bot_owners: list[str] = field(default_factory=list)
    command_prefix: str = DEFAULT_COMMAND_PREFIX
    notification_limit_seconds: int = DEFAULT_NOTIFICATION_LIMIT_SECONDS


@dataclass(slots=True)
class HistoryConfig:
    channel_backfill_message_count: int = DEFAULT_BACKFILL_MESSAGE_COUNT
    channel_max_message_count: int = DEFAULT_MAX_MESSAGE_COUNT


@dataclass(slots=True)
class LlmConfig:
    chat_url: str = DEFAULT_CHAT_URL


@dataclass(slots=True)
class LlmPersona:
    model_name: str = DEFAULT_MODEL_NAME
    system_prompt: str = DEFAULT_REPLY_SYSTEM_PROMPT
    context_size: int = DEFAULT_CONTEXT_SIZE
    temperature: float = DEFAULT_TEMPERATURE


@dataclass(slots=True)
class MusicConfig:
    urls: list[str] = field(default_factory=lambda: list(DEFAULT_MUSIC_URLS))


@dataclass(slots=True)
class Config:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    llm: LlmConfig = field(default_factory=LlmConfig)
    llm_reply: LlmPersona = field(default_factory=LlmPersona)
    llm_permission_denied: LlmPersona = field(
        default_factory=lambda: LlmPersona(system_prompt=DEFAULT_PERMISSION_DENIED_SYSTEM_PROMPT)
    )
    music: MusicConfig = field(default_factory=MusicConfig)
    source_path: str | None = None

    def persona(self, key: str) -> LlmPersona:
        if key == "llm_reply":
            return self.llm_reply
        if key == "llm_permission_denied":
            return self.llm_permission_denied
        raise KeyError(f"unknown LLM persona: {key}")


def resolve_config_path() -> str:
    return os.getenv("DIGMBOT_CONFIG_PATH", DEFAULT_CONFIG_PATH)


def _section(payload: dict, key: str) -> dict:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"config section `{key}` must be a mapping")
    return value


def _as_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    out: list[str] = []
    for item in value:
        text = str(item or "").strip()
        if text:
            out.append(text)
    return out


def _as_int(section: str, key: str, value: Any, default: int, minimum: int = 0) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"`{section}.{key}` must be an integer, got {value!r}") from exc
    if parsed < minimum:
        raise ConfigError(f"`{section}.{key}` must be >= {minimum}, got {parsed}")
    return parsed


def _as_float(section: str, key: str, value: Any, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"`{section}.{key}` must be a number, got {value!r}") from exc


def _parse_persona(payload: dict, key: str, default_prompt: str) -> LlmPersona:
    raw = _section(payload, key)
    return LlmPersona(
        model_name=str(raw.get("model_name") or DEFAULT_MODEL_NAME),
        system_prompt=str(raw.get("system_prompt") or default_prompt),
        context_size=_as_int(key, "context_size", raw.get("context_size"), DEFAULT_CONTEXT_SIZE, minimum=1),
        temperature=_as_float(key, "temperature", raw.get("temperature"), DEFAULT_TEMPERATURE),
    )


def parse_config(payload: Any, *, source_path: str | None = None) -> Config:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigError("config file must contain a top-level mapping")

    general = _section(payload, "general")
    history = _section(payload, "history")
    llm = _section(payload, "llm")
    music = _section(payload, "music")

    prefix = general.get("command_prefix")
    if prefix is None:
        prefix = DEFAULT_COMMAND_PREFIX
    prefix = str(prefix)
    if not prefix or prefix != prefix.strip():
        raise ConfigError("`general.command_prefix` must be non-empty and contain no surrounding whitespace")

    return Config(
        general=GeneralConfig(
            discord_token=str(general.get("discord_token") or "").strip(),
            bot_owners=_as_list(general.get("bot_owners")),
            command_prefix=prefix,
            notification_limit_seconds=_as_int(
                "general",
                "notification_limit_seconds",
                general.get("notification_limit_seconds"),
                DEFAULT_NOTIFICATION_LIMIT_SECONDS,
            ),
        ),
        history=HistoryConfig(
            channel_backfill_message_count=_as_int(
                "history",
                "channel_backfill_message_count",
                history.get("channel_backfill_message_count"),
                DEFAULT_BACKFILL_MESSAGE_COUNT,
            ),
            channel_max_message_count=_as_int(
                "history",
                "channel_max_message_count",
                history.get("channel_max_message_count"),
                DEFAULT_MAX_MESSAGE_COUNT,
                minimum=1,
            ),
        ),
        llm=LlmConfig(chat_url=str(llm.get("chat_url") or DEFAULT_CHAT_URL)),
        llm_reply=_parse_persona(payload, "llm_reply", DEFAULT_REPLY_SYSTEM_PROMPT),
        llm_permission_denied=_parse_persona(payload, "llm_permission_denied", DEFAULT_PERMISSION_DENIED_SYSTEM_PROMPT),
        music=MusicConfig(urls=_as_list(music.get("urls")) or list(DEFAULT_MUSIC_URLS)),
        source_path=source_path,
    )


def load_config(path: str | Path | None = None) -> Config:
    """
    Read and validate the YAML config file.

    Raises ConfigError when the file is missing or malformed; callers decide
    whether that is fatal (startup) or recoverable (reload).
    """
    p = Path(path or resolve_config_path())
    if not p.exists():
        raise ConfigError(f"config file not found at {p}")

    try:
        payload = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read config from {p}: {exc}") from exc

    return parse_config(payload, source_path=str(p))


def reload_config(current: Config) -> Config:
    return load_config(current.source_path or resolve_config_path())
