from __future__ import annotations

import os
import tempfile
import unittest
from contextlib import asynccontextmanager
from pathlib import Path
from types import SimpleNamespace

import httpx
import yaml

from config.loader import ConfigError
from config.loader import load_config
from misc.events import EventHandled
from misc.events import MessageEvent
from misc.runtime_deps import SharedState
from plugins.reload import ReloadPlugin
from state.persistent import PersistentState


class FakeChannel:
    id = 3
    name = "ops"
    guild = None

    def __init__(self):
        self.backlog = []

    def history(self, *, limit, before=None):
        async def _iter():
            for msg in reversed(self.backlog):
                yield msg

        return _iter()

    @asynccontextmanager
    async def typing(self):
        yield


class FakeMessage:
    def __init__(self, channel, author_name: str, content: str):
        self.channel = channel
        self.guild = None
        self.author = SimpleNamespace(id=hash(author_name) % 1000, name=author_name, display_name=author_name)
        self.content = content
        self.mentions = []
        self.raw_mentions = []
        self.raw_role_mentions = []
        self.raw_channel_mentions = []
        self.replies: list[str] = []
        channel.backlog.append(self)

    async def reply(self, text):
        self.replies.append(text)


class ReloadPluginTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.config_path = os.path.join(self.tmp.name, "config.yml")
        self._write({"general": {"bot_owners": ["admin"], "command_prefix": ";"}})
        self.llm_calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            self.llm_calls += 1
            return httpx.Response(200, json={"message": {"role": "assistant", "content": "No can do."}})

        self.http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        self.shared = SharedState(load_config(self.config_path), PersistentState(path="unused-state.yml"))
        bot = SimpleNamespace(id=900, name="digm", display_name="Digm")
        self.ctx = self.shared.context(client=SimpleNamespace(user=bot), http=self.http)
        self.channel = FakeChannel()

    async def asyncTearDown(self):
        await self.http.aclose()
        self.tmp.cleanup()

    def _write(self, payload):
        Path(self.config_path).write_text(yaml.safe_dump(payload), encoding="utf-8")

    async def _prefix(self) -> str:
        async with self.shared.cfg.read() as cfg:
            return cfg.general.command_prefix

    async def test_owner_reloads_config(self):
        self._write({"general": {"bot_owners": ["admin"], "command_prefix": "!"}})
        msg = FakeMessage(self.channel, "admin", ";reload")

        self.assertIs(await ReloadPlugin().handle(self.ctx, MessageEvent(message=msg)), EventHandled.YES)
        self.assertEqual(msg.replies, ["Configuration reloaded successfully"])
        self.assertEqual(await self._prefix(), "!")

    async def test_non_owner_gets_persona_refusal(self):
        self._write({"general": {"bot_owners": ["admin"], "command_prefix": "!"}})
        msg = FakeMessage(self.channel, "mallory", ";reload")

        self.assertIs(await ReloadPlugin().handle(self.ctx, MessageEvent(message=msg)), EventHandled.YES)
        self.assertEqual(msg.replies, ["No can do."])
        self.assertEqual(self.llm_calls, 1)
        self.assertEqual(await self._prefix(), ";")

    async def test_broken_file_keeps_running_config(self):
        Path(self.config_path).write_text("general: [broken", encoding="utf-8")
        msg = FakeMessage(self.channel, "admin", ";reload")

        with self.assertRaises(ConfigError):
            await ReloadPlugin().handle(self.ctx, MessageEvent(message=msg))
        self.assertEqual(await self._prefix(), ";")
        self.assertEqual(msg.replies, [])


if __name__ == "__main__":
    unittest.main()
