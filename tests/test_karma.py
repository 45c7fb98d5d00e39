"""Test karma counting and persistence."""

import json

import pytest

from issuebot.events import chat_message, names_reply
from issuebot.gateway import Bus
from issuebot.karma import KARMA_VOTE_RE, KarmaHandler, KarmaStore
from issuebot.session import ChatSession
from tests.mocks import MockAdapter


def make_handler(store: KarmaStore | None = None, nicks=("alice", "bob", "foo-bar")):
    bus = Bus()
    session = ChatSession(bus)
    adapter = MockAdapter()
    store = store or KarmaStore()
    bus.register(session)
    bus.register(KarmaHandler(bus, session, store))
    bus.register(adapter)
    bus.publish("irc", names_reply("#bolt", list(nicks))[1])
    return bus, adapter, store


def say(bus, text, author="alice"):
    bus.publish("irc", chat_message("#bolt", author, text)[1])


class TestKarmaRegex:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("bob++", [("bob", "++")]),
            ("bob--", [("bob", "--")]),
            ("thanks bob++ and alice--", [("bob", "++"), ("alice", "--")]),
            ("foo-bar++", [("foo-bar", "++")]),
            ("c++ is hard", [("c", "++")]),
            ("x+++", []),
            ("a+b++", []),
        ],
    )
    def test_votes(self, text, expected):
        assert [m.groups() for m in KARMA_VOTE_RE.finditer(text)] == expected


class TestKarmaHandler:
    def test_increment(self):
        bus, adapter, store = make_handler()
        say(bus, "bob++")
        assert adapter.texts == ["gives karma to bob (1)"]
        assert store.get("BOB") == 1

    def test_decrement(self):
        bus, adapter, store = make_handler()
        say(bus, "bob--")
        say(bus, "bob--")
        assert adapter.texts[-1] == "takes karma from bob (-2)"

    def test_nick_not_in_channel_is_ignored(self):
        bus, adapter, store = make_handler()
        say(bus, "c++ rocks")
        assert adapter.sent == []
        assert store.get("c") == 0

    def test_self_vote_is_refused(self):
        bus, adapter, store = make_handler()
        say(bus, "alice++", author="alice")
        assert adapter.texts == ["thinks alice shouldn't be voting for themselves"]
        assert store.get("alice") == 0

    def test_query(self):
        bus, adapter, _ = make_handler()
        say(bus, "bob++")
        say(bus, "#karma bob", author="carol")
        assert adapter.texts[-1] == "reports that bob has 1 karma"


class TestKarmaStore:
    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "karma.json"
        store = KarmaStore(path)
        store.adjust("Bob", 1)
        store.adjust("bob", 1)

        assert json.loads(path.read_text()) == {"bob": 2}
        assert KarmaStore(path).get("bob") == 2

    def test_missing_file_starts_empty(self, tmp_path):
        assert KarmaStore(tmp_path / "none.json").get("bob") == 0

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "karma.json"
        path.write_text("{not json")
        assert KarmaStore(path).get("bob") == 0

    def test_non_integer_values_dropped(self, tmp_path):
        path = tmp_path / "karma.json"
        path.write_text(json.dumps({"bob": 3, "alice": "x", "carol": True}))
        store = KarmaStore(path)
        assert store.get("bob") == 3
        assert store.get("alice") == 0
        assert store.get("carol") == 0
