from __future__ import annotations

import os

DEFAULT_CONFIG_PATH = os.path.join(os.path.expanduser("~"), ".config", "digmbot", "config.yml")
DEFAULT_STATE_PATH = os.path.join(os.path.expanduser("~"), ".config", "digmbot", "state.yml")

DEFAULT_COMMAND_PREFIX = ";"
DEFAULT_NOTIFICATION_LIMIT_SECONDS = 3600

DEFAULT_BACKFILL_MESSAGE_COUNT = 50
DEFAULT_MAX_MESSAGE_COUNT = 50

DEFAULT_CHAT_URL = "http://localhost:11434/api/chat"
DEFAULT_MODEL_NAME = "llama3.1"
DEFAULT_CONTEXT_SIZE = 4096
DEFAULT_TEMPERATURE = 0.8

DEFAULT_REPLY_SYSTEM_PROMPT = (
    "You are {{bot}}, a friendly regular in this Discord server. "
    "Keep replies short and conversational. You are talking with {{user}}."
)
DEFAULT_PERMISSION_DENIED_SYSTEM_PROMPT = (
    "You are {{bot}}. {{user}} just asked you to do something they are not allowed to do. "
    "Refuse in one or two playful sentences, in character."
)

DEFAULT_MUSIC_URLS = ["https://www.youtube.com/watch?v=dQw4w9WgXcQ"]

XKCD_RANDOM_URL = "https://c.xkcd.com/random/comic/"

DISCORD_MAX_MESSAGE_LEN = 1900
