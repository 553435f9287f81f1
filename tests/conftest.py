import pytest

from cmdtree import Actor, MessageContext


def make_ctx(actor_id="u1", text="", is_group=True, role_ids=(), permissions=None, roles=None, **kwargs):
    actor = Actor(id=actor_id, name=f"user-{actor_id}", role_ids=list(role_ids))
    return MessageContext(
        actor=actor,
        text=text,
        is_group=is_group,
        permissions=dict(permissions or {}),
        roles=dict(roles or {}),
        **kwargs
    )


@pytest.fixture
def ctx():
    return make_ctx()


@pytest.fixture
def dm_ctx():
    return make_ctx(is_group=False)


@pytest.fixture(name="make_ctx")
def make_ctx_fixture():
    return make_ctx
