from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

import yaml

from config.defaults import DEFAULT_COMMAND_PREFIX
from config.defaults import DEFAULT_MAX_MESSAGE_COUNT
from config.loader import ConfigError
from config.loader import load_config
from config.loader import parse_config
from config.loader import reload_config

EXAMPLE_PATH = Path(__file__).resolve().parent.parent / "config" / "digmbot.example.yml"


class ParseConfigTests(unittest.TestCase):
    def test_empty_document_uses_defaults(self):
        cfg = parse_config(None)
        self.assertEqual(cfg.general.command_prefix, DEFAULT_COMMAND_PREFIX)
        self.assertEqual(cfg.history.channel_max_message_count, DEFAULT_MAX_MESSAGE_COUNT)
        self.assertNotEqual(cfg.llm_reply.system_prompt, cfg.llm_permission_denied.system_prompt)

    def test_values_are_read(self):
        cfg = parse_config(
            {
                "general": {"bot_owners": ["admin", " "], "command_prefix": "!", "notification_limit_seconds": 60},
                "history": {"channel_backfill_message_count": 10, "channel_max_message_count": 20},
                "llm": {"chat_url": "http://llm.local/api/chat"},
                "llm_reply": {"model_name": "m1", "system_prompt": "hi {{user}}", "context_size": 512, "temperature": 0.2},
                "music": {"urls": ["https://example.invalid/song"]},
            }
        )
        self.assertEqual(cfg.general.bot_owners, ["admin"])
        self.assertEqual(cfg.general.command_prefix, "!")
        self.assertEqual(cfg.general.notification_limit_seconds, 60)
        self.assertEqual(cfg.history.channel_backfill_message_count, 10)
        self.assertEqual(cfg.llm.chat_url, "http://llm.local/api/chat")
        self.assertEqual(cfg.persona("llm_reply").context_size, 512)
        self.assertEqual(cfg.persona("llm_reply").temperature, 0.2)
        self.assertEqual(cfg.music.urls, ["https://example.invalid/song"])

    def test_invalid_values_are_rejected(self):
        for payload in (
            ["not", "a", "mapping"],
            {"general": "nope"},
            {"general": {"command_prefix": ""}},
            {"general": {"command_prefix": " ;"}},
            {"history": {"channel_max_message_count": 0}},
            {"history": {"channel_backfill_message_count": "many"}},
            {"llm_reply": {"temperature": "warm"}},
        ):
            with self.assertRaises(ConfigError, msg=repr(payload)):
                parse_config(payload)

    def test_unknown_persona(self):
        with self.assertRaises(KeyError):
            parse_config({}).persona("llm_other")


class LoadConfigTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "config.yml")

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_is_an_error(self):
        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_bad_yaml_is_an_error(self):
        Path(self.path).write_text("general: [oops", encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_reload_rereads_the_same_file(self):
        Path(self.path).write_text(yaml.safe_dump({"general": {"command_prefix": ";"}}), encoding="utf-8")
        cfg = load_config(self.path)
        Path(self.path).write_text(yaml.safe_dump({"general": {"command_prefix": "!"}}), encoding="utf-8")

        fresh = reload_config(cfg)
        self.assertEqual(fresh.general.command_prefix, "!")
        self.assertEqual(fresh.source_path, self.path)

    def test_example_config_parses(self):
        cfg = load_config(EXAMPLE_PATH)
        self.assertEqual(cfg.general.command_prefix, ";")


if __name__ == "__main__":
    unittest.main()
