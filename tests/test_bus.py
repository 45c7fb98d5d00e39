"""Test event bus and dispatcher."""

from hypothesis import given
from hypothesis import strategies as st

from issuebot.events import ChatMessage, Dispatcher, NoticeOut, chat_message, notice_out
from issuebot.gateway.bus import Bus
from tests.mocks import MockTarget


class TestEventFactories:
    def test_factory_returns_type_and_event(self):
        type_name, evt = chat_message("#bolt", "alice", "hi #1")
        assert type_name == "chat_message"
        assert evt == ChatMessage(channel="#bolt", author="alice", content="hi #1")
        assert chat_message.TYPE == "chat_message"

    def test_raw_not_part_of_equality(self):
        _, a = chat_message("#bolt", "alice", "x", raw={"tags": {}})
        _, b = chat_message("#bolt", "alice", "x")
        assert a == b

    def test_notice_out(self):
        assert notice_out("#bolt", "text") == ("notice_out", NoticeOut("#bolt", "text"))


class TestDispatcher:
    def test_unregister_nonexistent_target_is_safe(self):
        Dispatcher().unregister(MockTarget())

    def test_dispatch_to_accepting_target(self):
        dispatcher = Dispatcher()
        target = MockTarget()
        dispatcher.register(target)
        _, evt = chat_message("#bolt", "alice", "hello")
        dispatcher.dispatch("irc", evt)
        assert target.received_events == [("irc", evt)]

    def test_dispatch_skips_rejecting_target(self):
        dispatcher = Dispatcher()
        target = MockTarget(accept_filter=lambda s, e: False)
        dispatcher.register(target)
        dispatcher.dispatch("irc", object())
        assert target.received_events == []

    def test_failing_target_does_not_block_others(self):
        class Exploding:
            def accept_event(self, source, evt):
                return True

            def push_event(self, source, evt):
                raise RuntimeError("boom")

        dispatcher = Dispatcher()
        after = MockTarget()
        dispatcher.register(Exploding())
        dispatcher.register(after)
        dispatcher.dispatch("irc", "evt")
        assert after.received_events == [("irc", "evt")]


class TestBus:
    def test_register_and_unregister(self):
        bus = Bus()
        target = MockTarget()
        bus.register(target)
        assert bus.targets == [target]
        bus.unregister(target)
        assert bus.targets == []

    def test_nested_publish(self):
        bus = Bus()
        seen = MockTarget(accept_filter=lambda s, e: isinstance(e, NoticeOut))

        class Echo:
            def accept_event(self, source, evt):
                return isinstance(evt, ChatMessage)

            def push_event(self, source, evt):
                bus.publish("echo", NoticeOut(evt.channel, evt.content))

        bus.register(Echo())
        bus.register(seen)
        bus.publish("irc", chat_message("#bolt", "alice", "hi")[1])
        assert seen.received_events == [("echo", NoticeOut("#bolt", "hi"))]

    @given(st.lists(st.text(min_size=1), min_size=1, max_size=100))
    def test_dispatch_order(self, messages):
        """Property: events are dispatched in publish order."""
        bus = Bus()
        received = []
        bus.register(
            MockTarget(accept_filter=lambda s, e: received.append(e.content) or False)
        )
        for m in messages:
            bus.publish("irc", chat_message("#bolt", "alice", m)[1])
        assert received == messages
