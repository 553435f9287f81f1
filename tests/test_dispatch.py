"""
Tests for recursive dispatch through the command tree.
"""

import pytest

from cmdtree import DispatcherNode


def recorder(name, calls):
    def generator(ctx, args):
        calls.append((name, list(args)))
        return f"{name}:{' '.join(args)}"
    return generator


@pytest.fixture
def calls():
    return []


@pytest.fixture
def root(calls):
    root = DispatcherNode("root", recorder("root", calls))
    root.register_child("ban", recorder("ban", calls), aliases=["b"])
    return root


# ============================================================
# Matching
# ============================================================

class TestMatching:

    def test_label_with_args(self, root, calls, ctx):
        assert root.process(["ban", "user123"], ctx.actor, ctx) == "ban:user123"
        assert calls == [("ban", ["user123"])]

    def test_alias_gives_identical_result(self, root, ctx):
        assert root.process(["b", "user123"], ctx.actor, ctx) == root.process(["ban", "user123"], ctx.actor, ctx)

    def test_empty_args_runs_current_node(self, root, calls, ctx):
        assert root.process([], ctx.actor, ctx) == "root:"
        assert calls == [("root", [])]

    def test_exact_child_without_args(self, root, calls, ctx):
        root.process(["ban"], ctx.actor, ctx)
        assert calls == [("ban", [])]

    def test_unmatched_token_goes_to_parent(self, root, calls, ctx):
        assert root.process(["kick"], ctx.actor, ctx) == "root:kick"
        assert calls == [("root", ["kick"])]

    def test_unmatched_subcommand_keeps_all_remaining_args(self, root, calls, ctx):
        root.process(["ban", "user123", "spam"], ctx.actor, ctx)
        assert calls == [("ban", ["user123", "spam"])]

    def test_nested(self, calls, ctx):
        root = DispatcherNode("root")
        role = root.register_child("role", recorder("role", calls))
        role.register_child("add", recorder("add", calls), aliases=["+"])
        assert root.process(["role", "+", "Admin"], ctx.actor, ctx) == "add:Admin"
        assert root.process(["role", "list"], ctx.actor, ctx) == "role:list"
        assert calls == [("add", ["Admin"]), ("role", ["list"])]

    def test_args_tuple_accepted(self, root, calls, ctx):
        root.process(("ban", "x"), ctx.actor, ctx)
        assert calls == [("ban", ["x"])]


# ============================================================
# Case sensitivity
# ============================================================

class TestCaseSensitivity:

    def test_case_insensitive_child(self, calls, ctx):
        root = DispatcherNode("root", recorder("root", calls))
        role = root.register_child("role", recorder("role", calls), case_insensitive=True)
        assert root.find_child("ROLE") is role
        assert root.process(["ROLE"], ctx.actor, ctx) == root.process(["role"], ctx.actor, ctx)
        assert calls == [("role", []), ("role", [])]

    def test_case_insensitive_mixed_case_label(self, ctx):
        root = DispatcherNode("root")
        child = root.register_child("Queue", "queued", case_insensitive=True)
        assert root.find_child("QUEUE") is child
        assert root.find_child("queue") is child

    def test_case_sensitive_child(self, calls, ctx):
        root = DispatcherNode("root", recorder("root", calls))
        root.register_child("role", recorder("role", calls))
        assert root.process(["ROLE"], ctx.actor, ctx) == "root:ROLE"

    def test_aliases_are_case_sensitive(self, calls, ctx):
        root = DispatcherNode("root", recorder("root", calls))
        root.register_child("role", recorder("role", calls), aliases=["r"], case_insensitive=True)
        assert root.find_child("R") is None


# ============================================================
# Generator results
# ============================================================

class TestGeneratorResults:

    def test_fixed_text(self, ctx):
        root = DispatcherNode("root")
        root.register_child("ping", "pong")
        assert root.process(["ping", "extra"], ctx.actor, ctx) == "pong"

    def test_none_generator(self, ctx):
        root = DispatcherNode("root")
        assert root.process([], ctx.actor, ctx) is None
        assert root.process(["anything"], ctx.actor, ctx) is None

    def test_computed_may_return_nothing(self, ctx):
        node = DispatcherNode("quiet", lambda ctx, args: None)
        assert node.process([], ctx.actor, ctx) is None

    def test_generator_receives_context(self, make_ctx):
        ctx = make_ctx(actor_id="99")
        node = DispatcherNode("me", lambda c, args: c.actor.id)
        assert node.process([], ctx.actor, ctx) == "99"

    def test_generator_error_propagates_and_tree_unchanged(self, ctx):
        def broken(ctx, args):
            raise RuntimeError("boom")

        root = DispatcherNode("root")
        child = root.register_child("broken", broken, aliases=["x"])
        with pytest.raises(RuntimeError):
            root.process(["x"], ctx.actor, ctx)
        assert root.children["broken"] is child
        assert dict(root.child_aliases) == {"x": "broken"}
