"""
Tests for the message router sitting in front of the command tree.
"""

import logging

import pytest

from cmdtree import CommandRouter, DispatcherNode, EventBus, EventType, tokenize


@pytest.fixture
def events():
    bus = EventBus()
    seen = []
    for event_type in EventType:
        bus.subscribe(event_type, seen.append)
    bus.seen = seen
    return bus


@pytest.fixture
def router(events):
    root = DispatcherNode("bot")
    root.register_child("ping", "pong", aliases=["p"])
    root.register_child("echo", lambda ctx, args: " ".join(args) or None)
    root.register_child("purge", "purged", delete_command=True,
                        requirements={"permissions": {"manageMessages": True}})
    root.register_child("server", "server stuff", guild_only=True)

    def broken(ctx, args):
        raise ValueError("bad input")

    root.register_child("broken", broken)
    return CommandRouter(root, ["!", "bot:"], event_bus=events)


def types_of(events):
    return [event.type for event in events.seen]


class TestTokenize:

    def test_whitespace(self):
        assert tokenize("  ban   user123\tnow \n") == ["ban", "user123", "now"]

    def test_empty(self):
        assert tokenize("   ") == []


class TestParse:

    def test_no_prefix(self, router, make_ctx):
        assert router.dispatch(make_ctx(text="ping")) is None

    def test_prefix_only(self, router, make_ctx):
        assert router.dispatch(make_ctx(text="!   ")) is None

    def test_longer_prefix(self, router):
        assert router.parse("bot: ping now") == ["ping", "now"]

    def test_leading_whitespace(self, router):
        assert router.parse("   !ping") == ["ping"]

    def test_prefix_case(self, events):
        root = DispatcherNode("bot")
        strict = CommandRouter(root, "Bot:", event_bus=events)
        loose = CommandRouter(root, "Bot:", event_bus=events, case_insensitive_prefix=True)
        assert strict.parse("bot: x") is None
        assert loose.parse("bot: x") == ["x"]

    def test_requires_prefix(self):
        with pytest.raises(ValueError):
            CommandRouter(DispatcherNode("bot"), [])


class TestDispatch:

    def test_response(self, router, make_ctx, events):
        result = router.dispatch(make_ctx(text="!ping"))
        assert result.response == "pong"
        assert result.allowed is True
        assert result.node.label == "ping"
        assert types_of(events) == [EventType.COMMAND_MATCHED, EventType.COMMAND_EXECUTED]

    def test_alias(self, router, make_ctx):
        assert router.dispatch(make_ctx(text="!p")).response == "pong"

    def test_args(self, router, make_ctx):
        result = router.dispatch(make_ctx(text="!echo hello  world"))
        assert result.args == ["hello", "world"]
        assert result.response == "hello world"

    def test_empty_response_normalised(self, router, make_ctx, events):
        result = router.dispatch(make_ctx(text="!echo"))
        assert result.response is None
        assert result.has_response is False
        assert events.seen[-1].data["responded"] is False

    def test_unknown_command_runs_root(self, router, make_ctx):
        result = router.dispatch(make_ctx(text="!kick someone"))
        assert result.node is router.root
        assert result.args == ["kick", "someone"]
        assert result.response is None

    def test_permission_denied(self, router, make_ctx, events):
        result = router.dispatch(make_ctx(text="!purge", permissions={"manageMessages": False}))
        assert result.allowed is False
        assert result.response is None
        assert result.delete_command is False
        assert EventType.PERMISSION_DENIED in types_of(events)
        assert EventType.COMMAND_EXECUTED not in types_of(events)

    def test_delete_command_flag(self, router, make_ctx):
        result = router.dispatch(make_ctx(text="!purge", permissions={"manageMessages": True}))
        assert result.response == "purged"
        assert result.delete_command is True

    def test_guild_only_in_direct(self, router, make_ctx, events):
        result = router.dispatch(make_ctx(text="!server", is_group=False))
        assert result.allowed is False
        assert events.seen[-1].type is EventType.PERMISSION_DENIED

    def test_guild_only_in_group(self, router, make_ctx):
        assert router.dispatch(make_ctx(text="!server")).response == "server stuff"

    def test_generator_error_is_caught(self, router, make_ctx, events, caplog):
        with caplog.at_level(logging.ERROR, logger="cmdtree.router"):
            result = router.dispatch(make_ctx(text="!broken"))
        assert isinstance(result.error, ValueError)
        assert result.response is None
        assert result.delete_command is False
        assert events.seen[-1].type is EventType.ERROR_OCCURRED
        assert events.seen[-1].data["command"] == "broken"
        assert "bad input" in caplog.text

    def test_default_event_bus(self, make_ctx):
        root = DispatcherNode("bot")
        root.register_child("ping", "pong")
        router = CommandRouter(root)
        assert isinstance(router.event_bus, EventBus)
        assert router.dispatch(make_ctx(text="!ping")).response == "pong"
