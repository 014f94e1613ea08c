from __future__ import annotations

import re


def parse_bot_command(content: str, prefix: str, cmd: str) -> str | None:
    """
    Return the argument string when `content` is `<prefix><cmd>` followed by
    end of text or whitespace, otherwise None. Matching is case-sensitive.
    """
    text = content or ""
    if not prefix or not cmd:
        return None
    if not text.startswith(prefix):
        return None
    rest = text[len(prefix):]
    if not rest.startswith(cmd):
        return None
    remainder = rest[len(cmd):]
    if remainder and not remainder[0].isspace():
        return None
    return remainder.strip()


def split_args(args: str) -> list[str]:
    return [tok for tok in re.split(r"\s+", (args or "").strip()) if tok]
