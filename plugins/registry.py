from __future__ import annotations

from plugins.base import Plugin
from plugins.debug import DebugPlugin
from plugins.help import HelpPlugin
from plugins.history import HistoryPlugin
from plugins.ignore_bots import IgnoreBotsPlugin
from plugins.llm_reply import LlmReplyPlugin
from plugins.music import MusicPlugin
from plugins.react import ReactPlugin
from plugins.ready import ReadyPlugin
from plugins.reload import ReloadPlugin
from plugins.rivals_rating import RivalsRatingPlugin
from plugins.vc_notify import VcNotifyPlugin
from plugins.xkcd import XkcdPlugin


def plugins() -> list[Plugin]:
    """
    The chain, in order. Order matters: logging and history run first and
    never stop the chain, bot messages are swallowed before any command sees
    them, and the LLM fallback only runs when nothing more specific matched.
    """
    chain: list[Plugin] = []
    chain.extend([
        DebugPlugin(),
        HistoryPlugin(),
        IgnoreBotsPlugin(),
        ReadyPlugin(),
        HelpPlugin(plugins_provider=lambda: chain),
        ReloadPlugin(),
        VcNotifyPlugin(),
        RivalsRatingPlugin(),
        XkcdPlugin(),
        MusicPlugin(),
        ReactPlugin(),
        LlmReplyPlugin(),
    ])
    return chain
