from __future__ import annotations

import pytest

from dm_service.application.exceptions import InvalidArgumentError, NotFoundError
from dm_service.services import user_service
from tests.conftest import T0, make_user


@pytest.mark.asyncio
async def test_sync_user_trims_and_sets_last_seen(uow, clock):
    user_id = await user_service.sync_user(
        "  user_1 ", " a@x.io ", "  Alice ", "", uow, clock=clock,
    )

    assert user_id == "user_1"
    stored = uow.users._store["user_1"]
    assert stored.email == "a@x.io"
    assert stored.name == "Alice"
    assert stored.avatar is None
    assert stored.last_seen_at == clock.now()
    assert uow._committed is True


@pytest.mark.asyncio
async def test_sync_user_is_idempotent_and_updates_profile(uow, clock):
    await user_service.sync_user("user_1", "a@x.io", "Alice", None, uow, clock=clock)
    clock.advance(30)
    await user_service.sync_user("user_1", "a@x.io", "Alice B", "http://img", uow, clock=clock)

    assert len(uow.users._store) == 1
    stored = uow.users._store["user_1"]
    assert stored.name == "Alice B"
    assert stored.avatar == "http://img"
    assert stored.last_seen_at == clock.now()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "user_id,email,name",
    [("", "a@x.io", "A"), ("u", "  ", "A"), ("u", "a@x.io", "")],
)
async def test_sync_user_rejects_empty_fields(uow, clock, user_id, email, name):
    with pytest.raises(InvalidArgumentError):
        await user_service.sync_user(user_id, email, name, None, uow, clock=clock)
    assert uow._committed is False


@pytest.mark.asyncio
async def test_search_blank_query_returns_nothing(uow, clock):
    uow.add_users(make_user("alice"), make_user("bob"))

    assert await user_service.search_users("alice", "   ", uow, clock=clock) == []


@pytest.mark.asyncio
async def test_search_matches_name_or_email_case_insensitive(uow, clock):
    uow.add_users(
        make_user("u1", name="Alice Smith", email="alice@corp.io"),
        make_user("u2", name="Bob", email="bob.smith@mail.io"),
        make_user("u3", name="Carol", email="carol@corp.io"),
    )

    result = await user_service.search_users("u3", "SMITH", uow, clock=clock)

    assert [p.id for p in result] == ["u1", "u2"]


@pytest.mark.asyncio
async def test_search_excludes_requester_and_caps_results(uow, clock):
    uow.add_users(*(make_user(f"user{i:02d}", name=f"Sam {i:02d}") for i in range(15)))

    result = await user_service.search_users("user00", "sam", uow, clock=clock)

    assert len(result) == 10
    assert "user00" not in [p.id for p in result]


@pytest.mark.asyncio
async def test_search_no_match_is_empty(uow, clock):
    uow.add_users(make_user("alice"))

    assert await user_service.search_users("bob", "zed", uow, clock=clock) == []


@pytest.mark.asyncio
async def test_online_flag_uses_sixty_second_window(uow, clock):
    uow.add_users(make_user("fresh", name="Fresh"), make_user("stale", name="Stale"))
    clock.advance(59)
    uow.users._store["stale"] = make_user("stale", name="Stale", last_seen_at=T0.replace(hour=11))

    result = {p.id: p.is_online for p in await user_service.search_users("me", "s", uow, clock=clock)}

    assert result == {"fresh": True, "stale": False}


@pytest.mark.asyncio
async def test_touch_last_seen_unknown_user(uow, clock):
    with pytest.raises(NotFoundError):
        await user_service.touch_last_seen("ghost", uow, clock=clock)


@pytest.mark.asyncio
async def test_touch_last_seen_updates_timestamp(uow, clock):
    uow.add_users(make_user("alice"))
    clock.advance(120)

    await user_service.touch_last_seen("alice", uow, clock=clock)

    assert uow.users._store["alice"].last_seen_at == clock.now()


@pytest.mark.asyncio
async def test_get_user_missing_returns_none(uow, clock):
    assert await user_service.get_user("nobody", uow, clock=clock) is None
