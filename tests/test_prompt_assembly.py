from __future__ import annotations

import unittest

from controller.models import ChatMessage
from controller.prompt_assembly import NoHistoryError
from controller.prompt_assembly import build_chat_messages
from state.volatile import HistoryEntry

BOT_ID = 900


def _entry(author_id: int, name: str, text: str) -> HistoryEntry:
    return HistoryEntry(author_id=author_id, author_name=name, human_format_content=text)


class BuildChatMessagesTests(unittest.TestCase):
    def test_system_first_then_chronological_with_roles(self):
        history = [
            _entry(1, "alice", "hi bot"),
            _entry(BOT_ID, "Digm", "hello alice"),
            _entry(2, "bob", "what's up"),
        ]
        msgs = build_chat_messages(
            history,
            system_template="You are {{bot}} talking to {{user}}.",
            bot_id=BOT_ID,
            bot_name="Digm",
            context_size=4096,
        )
        self.assertEqual(
            msgs,
            [
                ChatMessage("system", "You are Digm talking to bob."),
                ChatMessage("user", "alice: hi bot"),
                ChatMessage("assistant", "hello alice"),
                ChatMessage("user", "bob: what's up"),
            ],
        )

    def test_exactly_one_system_message_at_index_zero(self):
        history = [_entry(1, "alice", f"line {i}") for i in range(20)]
        msgs = build_chat_messages(history, system_template="sys", bot_id=BOT_ID, bot_name="Digm", context_size=10)
        self.assertEqual(msgs[0].role, "system")
        self.assertEqual(sum(1 for m in msgs if m.role == "system"), 1)

    def test_budget_drops_oldest_entries_first(self):
        # Each user message is "u: " + 27 chars = 30 bytes, i.e. 10 estimated tokens.
        history = [_entry(1, "u", f"{i:02d}" + "x" * 25) for i in range(31)]
        context_size = 100
        total = sum(len(f"u: {e.human_format_content}") for e in history)
        self.assertGreater(total // 3, 3 * context_size)

        msgs = build_chat_messages(history, system_template="", bot_id=BOT_ID, bot_name="Digm", context_size=context_size)

        kept = msgs[1:]
        # 10 messages reach exactly 100 tokens; the 11th would exceed it.
        self.assertEqual(len(kept), 10)
        self.assertEqual([m.content[3:5] for m in kept], [f"{i:02d}" for i in range(21, 31)])

    def test_system_prompt_counts_against_the_budget(self):
        history = [_entry(1, "u", "x" * 27) for _ in range(5)]
        msgs = build_chat_messages(
            history,
            system_template="s" * 60,
            bot_id=BOT_ID,
            bot_name="Digm",
            context_size=40,
        )
        # 60 bytes of system leaves room for two 30-byte messages (120 bytes -> 40 tokens).
        self.assertEqual(len(msgs), 3)

    def test_multibyte_content_is_measured_in_bytes(self):
        history = [_entry(BOT_ID, "Digm", "é" * 30), _entry(BOT_ID, "Digm", "é" * 30)]
        msgs = build_chat_messages(history, system_template="", bot_id=BOT_ID, bot_name="Digm", context_size=20)
        # 60 bytes per message is 20 tokens, so only the newest fits.
        self.assertEqual(len(msgs), 2)

    def test_empty_history_raises(self):
        with self.assertRaises(NoHistoryError):
            build_chat_messages([], system_template="sys", bot_id=BOT_ID, bot_name="Digm", context_size=100)

    def test_chat_message_rejects_unknown_role(self):
        with self.assertRaises(ValueError):
            ChatMessage("tool", "nope")


if __name__ == "__main__":
    unittest.main()
