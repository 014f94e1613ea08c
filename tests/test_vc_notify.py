from __future__ import annotations

import os
import tempfile
import unittest
from types import SimpleNamespace

from config.loader import Config
from config.loader import GeneralConfig
from misc.events import EventHandled
from misc.events import MessageEvent
from misc.events import VoiceStateUpdateEvent
from misc.runtime_deps import SharedState
from plugins.vc_notify import FOLLOWED
from plugins.vc_notify import NOT_FOLLOWING
from plugins.vc_notify import UNFOLLOWED
from plugins.vc_notify import VcNotifyPlugin
from plugins.vc_notify import is_newly_available
from state.persistent import PersistentState
from state.persistent import load_persistent_state
from state.volatile import NotifyTimestamp

AFK = 100
LOUNGE = 200
GAMING = 300


class FakeUser:
    def __init__(self, user_id: int):
        self.id = user_id
        self.sent: list[str] = []

    async def send(self, text):
        self.sent.append(text)


class FakeClient:
    def __init__(self, users):
        self.user = SimpleNamespace(id=900, name="digm")
        self._users = {u.id: u for u in users}

    def get_user(self, user_id):
        return self._users.get(user_id)

    async def fetch_user(self, user_id):
        raise LookupError(user_id)


def _voice(channel_id: int | None):
    return SimpleNamespace(channel=SimpleNamespace(id=channel_id, name=f"vc-{channel_id}") if channel_id else None)


def _guild(occupants: dict[int, int]):
    channels = [SimpleNamespace(id=cid, members=[object()] * count) for cid, count in occupants.items()]
    return SimpleNamespace(
        name="Home",
        afk_channel=SimpleNamespace(id=AFK),
        voice_channels=channels,
        get_member=lambda uid: None,
    )


class NotifyTimestampTests(unittest.TestCase):
    def test_first_notification_is_always_allowed(self):
        self.assertTrue(NotifyTimestamp().okay_to_notify(1, 3600, now=0.0))

    def test_cooldown_boundary(self):
        ts = NotifyTimestamp()
        ts.mark_notified(1, now=1000.0)
        self.assertFalse(ts.okay_to_notify(1, 60, now=1059.9))
        self.assertTrue(ts.okay_to_notify(1, 60, now=1060.0))
        self.assertTrue(ts.okay_to_notify(2, 60, now=1000.0))
        self.assertEqual(ts.last_notified(1), 1000.0)


class TransitionTests(unittest.TestCase):
    def test_newly_available_transitions(self):
        self.assertTrue(is_newly_available(None, LOUNGE, AFK))
        self.assertTrue(is_newly_available(None, LOUNGE, None))
        self.assertTrue(is_newly_available(AFK, LOUNGE, AFK))
        self.assertFalse(is_newly_available(None, AFK, AFK))
        self.assertFalse(is_newly_available(LOUNGE, GAMING, AFK))
        self.assertFalse(is_newly_available(LOUNGE, AFK, AFK))
        self.assertFalse(is_newly_available(LOUNGE, None, AFK))
        self.assertFalse(is_newly_available(LOUNGE, LOUNGE, AFK))


class VcNotifyPluginTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.state_path = os.path.join(self.tmp.name, "state.yml")
        self.followers = [FakeUser(1), FakeUser(2), FakeUser(3)]
        self.shared = SharedState(
            Config(general=GeneralConfig(command_prefix=";", notification_limit_seconds=3600)),
            PersistentState(path=self.state_path, vc_notify_followers={1, 2, 3}),
        )
        self.ctx = self.shared.context(client=FakeClient(self.followers), http=None)
        self.plugin = VcNotifyPlugin()

    async def asyncTearDown(self):
        self.tmp.cleanup()

    def _join(self, member_id: int, guild, old=None, new=LOUNGE):
        member = SimpleNamespace(id=member_id, name=f"user{member_id}", display_name=f"User{member_id}", guild=guild)
        return VoiceStateUpdateEvent(member=member, old=_voice(old) if old else None, new=_voice(new))

    async def test_lone_join_notifies_other_followers_once(self):
        guild = _guild({AFK: 2, LOUNGE: 1})

        result = await self.plugin.handle(self.ctx, self._join(1, guild))

        self.assertIs(result, EventHandled.NO)
        self.assertEqual(self.followers[0].sent, [])
        for follower in self.followers[1:]:
            self.assertEqual(len(follower.sent), 1)
            self.assertIn(f"User1 joined VC channel <#{LOUNGE}> in Home", follower.sent[0])
            self.assertIn("`;vc-notify unfollow`", follower.sent[0])

        # Within the cooldown nobody is notified again.
        await self.plugin.handle(self.ctx, self._join(1, guild))
        self.assertEqual([len(f.sent) for f in self.followers], [0, 1, 1])

    async def test_no_notification_when_others_are_already_in_voice(self):
        guild = _guild({LOUNGE: 1, GAMING: 1})
        await self.plugin.handle(self.ctx, self._join(1, guild))
        self.assertEqual([len(f.sent) for f in self.followers], [0, 0, 0])

    async def test_moving_between_channels_is_ignored(self):
        guild = _guild({LOUNGE: 1})
        await self.plugin.handle(self.ctx, self._join(1, guild, old=GAMING, new=LOUNGE))
        self.assertEqual([len(f.sent) for f in self.followers], [0, 0, 0])

    async def test_leaving_afk_counts_as_joining(self):
        guild = _guild({LOUNGE: 1})
        await self.plugin.handle(self.ctx, self._join(9, guild, old=AFK, new=LOUNGE))
        self.assertEqual([len(f.sent) for f in self.followers], [1, 1, 1])

    async def test_follow_and_unfollow_commands(self):
        author = SimpleNamespace(id=50, name="newbie", bot=False)
        replies: list[str] = []

        async def reply(text):
            replies.append(text)

        for content in (";vc-notify follow", ";vc-notify unfollow", ";vc-notify unfollow", ";vc-notify dance"):
            msg = SimpleNamespace(content=content, author=author, reply=reply)
            self.assertIs(await self.plugin.handle(self.ctx, MessageEvent(message=msg)), EventHandled.YES)

        self.assertEqual(replies, [FOLLOWED, UNFOLLOWED, NOT_FOLLOWING, "Invalid command.  See `;help`"])
        self.assertEqual(load_persistent_state(self.state_path).vc_notify_followers, {1, 2, 3})


if __name__ == "__main__":
    unittest.main()
