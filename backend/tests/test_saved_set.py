import json

import pytest

from mushi.core.exceptions import FetchError
from mushi.db.store import TEMPLATES, USERS
from mushi.models.session import Session
from mushi.services.saved_set import (
    ReconcilerState,
    SavedSetReconciler,
    adjust_saved_count,
    cache_key,
    flip_membership,
)
from mushi.services.session import SessionContext
from mushi.utils.local_cache import MemoryCache

USER_KEY = cache_key("user-1")


def _reconciler(store, cache, session_context):
    return SavedSetReconciler(store, cache, session_context)


async def test_local_cache_wins_over_remote(store, session_context):
    store.collections[USERS]["user-1"] = {"_id": "user-1", "savedTemplates": ["t2"]}
    cache = MemoryCache({USER_KEY: json.dumps(["t1", "t3"])})

    reconciler = _reconciler(store, cache, session_context)
    await reconciler.initialize()

    assert reconciler.saved_ids == ("t1", "t3")
    assert reconciler.state is ReconcilerState.LOCAL_LOADED
    assert "select_one" not in store.calls


async def test_empty_cache_is_seeded_from_remote(store, cache, session_context):
    store.collections[USERS]["user-1"] = {"_id": "user-1", "savedTemplates": ["t2", "t5"]}

    reconciler = _reconciler(store, cache, session_context)
    await reconciler.initialize()

    assert reconciler.saved_ids == ("t2", "t5")
    assert reconciler.state is ReconcilerState.RECONCILED
    assert json.loads(cache.get(USER_KEY)) == ["t2", "t5"]


async def test_missing_user_row_is_created(store, cache, session_context):
    reconciler = _reconciler(store, cache, session_context)
    await reconciler.initialize()

    assert reconciler.saved_ids == ()
    assert store.collections[USERS]["user-1"]["savedTemplates"] == []


async def test_remote_read_failure_raises_fetch_error(store, cache, session_context):
    store.failing.add("select_one")
    reconciler = _reconciler(store, cache, session_context)
    with pytest.raises(FetchError):
        await reconciler.initialize()
    assert reconciler.state is ReconcilerState.LOCAL_LOADED


async def test_corrupt_cache_falls_back_to_remote(store, session_context):
    store.collections[USERS]["user-1"] = {"_id": "user-1", "savedTemplates": ["t9"]}
    cache = MemoryCache({USER_KEY: "{not json"})
    reconciler = _reconciler(store, cache, session_context)
    await reconciler.initialize()
    assert reconciler.saved_ids == ("t9",)


async def test_remote_seed_waits_for_session(store, cache):
    store.collections[USERS]["user-7"] = {"_id": "user-7", "savedTemplates": ["t3"]}
    context = SessionContext()

    reconciler = _reconciler(store, cache, context)
    await reconciler.initialize()
    assert reconciler.saved_ids == ()

    context.set_session(Session(user_id="user-7"))
    await reconciler.wait_idle()
    assert reconciler.saved_ids == ("t3",)


def test_toggle_twice_restores_membership_and_count(store, cache, session_context):
    reconciler = _reconciler(store, cache, session_context)

    first = reconciler.toggle("t5", saved_count=2)
    assert first.saved is True
    assert first.saved_count == 3
    assert reconciler.is_saved("t5")
    assert json.loads(cache.get(USER_KEY)) == ["t5"]

    second = reconciler.toggle("t5", saved_count=first.saved_count)
    assert second.saved is False
    assert second.saved_count == 2
    assert not reconciler.is_saved("t5")
    assert json.loads(cache.get(USER_KEY)) == []


def test_unsave_clamps_count_at_zero():
    assert adjust_saved_count(0, now_saved=False) == 0
    assert adjust_saved_count(None, now_saved=True) == 1


def test_flip_membership_appends_in_save_order():
    ids, saved = flip_membership(["a", "b"], "c")
    assert ids == ["a", "b", "c"] and saved
    ids, saved = flip_membership(ids, "a")
    assert ids == ["b", "c"] and not saved


async def test_persist_writes_user_row_and_count(store, cache, session_context):
    store.collections[TEMPLATES]["t5"] = {"_id": "t5", "savedCount": 2}
    reconciler = _reconciler(store, cache, session_context)

    outcome = reconciler.toggle("t5", saved_count=2)
    result = await reconciler.persist(outcome)

    assert result.ok
    assert store.collections[USERS]["user-1"]["savedTemplates"] == ["t5"]
    assert store.collections[TEMPLATES]["t5"]["savedCount"] == 3


async def test_persist_failure_keeps_local_state(store, cache, session_context):
    store.failing.add("upsert")
    reconciler = _reconciler(store, cache, session_context)

    outcome = reconciler.toggle("t5", saved_count=2)
    result = await reconciler.persist(outcome)

    assert not result.ok
    assert "simulated upsert failure" in result.error
    assert reconciler.is_saved("t5")
    assert json.loads(cache.get(USER_KEY)) == ["t5"]


async def test_persist_without_session_is_a_soft_failure(store, cache):
    reconciler = _reconciler(store, cache, SessionContext())
    result = await reconciler.persist(reconciler.toggle("t1"))
    assert not result.ok
    assert reconciler.is_saved("t1")


async def test_closed_reconciler_drops_remote_result(store, cache, session_context):
    store.collections[USERS]["user-1"] = {"_id": "user-1", "savedTemplates": ["t2"]}
    reconciler = _reconciler(store, cache, session_context)
    reconciler.close()
    await reconciler.sync_from_remote()
    assert reconciler.saved_ids == ()
    assert cache.get(USER_KEY) is None


async def test_successful_persist_marks_set_reconciled(store, session_context):
    store.collections[TEMPLATES]["t5"] = {"_id": "t5", "savedCount": 0}
    cache = MemoryCache({USER_KEY: json.dumps(["t1"])})
    reconciler = _reconciler(store, cache, session_context)
    await reconciler.initialize()
    assert reconciler.state is ReconcilerState.LOCAL_LOADED

    assert (await reconciler.persist(reconciler.toggle("t5"))).ok
    assert reconciler.state is ReconcilerState.RECONCILED
    assert store.collections[USERS]["user-1"]["savedTemplates"] == ["t1", "t5"]


async def test_switching_users_swaps_the_saved_set(store, cache):
    store.collections[USERS]["user-b"] = {"_id": "user-b", "savedTemplates": ["b1"]}
    store.collections[TEMPLATES]["b2"] = {"_id": "b2", "savedCount": 0}
    context = SessionContext(session=Session(user_id="user-a"))
    reconciler = _reconciler(store, cache, context)
    await reconciler.initialize()
    reconciler.toggle("a1")

    context.set_session(Session(user_id="user-b"))
    await reconciler.wait_idle()
    assert reconciler.saved_ids == ("b1",)

    assert (await reconciler.persist(reconciler.toggle("b2"))).ok
    assert store.collections[USERS]["user-b"]["savedTemplates"] == ["b1", "b2"]
    assert json.loads(cache.get(cache_key("user-a"))) == ["a1"]
    assert json.loads(cache.get(cache_key("user-b"))) == ["b1", "b2"]

    context.set_session(Session(user_id="user-a"))
    assert reconciler.saved_ids == ("a1",)


async def test_sign_out_clears_the_working_set(store, cache, session_context):
    reconciler = _reconciler(store, cache, session_context)
    await reconciler.initialize()
    reconciler.toggle("t1")

    session_context.sign_out()
    assert reconciler.saved_ids == ()
    assert reconciler.user_id is None
    assert json.loads(cache.get(USER_KEY)) == ["t1"]


async def test_toggle_from_previous_user_is_not_written_to_new_user(store, cache):
    store.collections[USERS]["user-b"] = {"_id": "user-b", "savedTemplates": ["b1"]}
    context = SessionContext(session=Session(user_id="user-a"))
    reconciler = _reconciler(store, cache, context)
    await reconciler.initialize()

    outcome = reconciler.toggle("a1")
    context.set_session(Session(user_id="user-b"))
    await reconciler.wait_idle()
    result = await reconciler.persist(outcome)

    assert not result.ok
    assert store.collections[USERS]["user-b"]["savedTemplates"] == ["b1"]
    assert store.collections[USERS]["user-a"]["savedTemplates"] == []
