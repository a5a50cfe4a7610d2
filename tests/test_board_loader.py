"""Tests for loading a board into detached trees."""

import pytest

from optiban.errors import AccessDenied, LoadFailure, NotFound
from optiban.loader import load_board
from optiban.profiles import ProfileResolver


@pytest.mark.asyncio
async def test_load_board(store):
    profiles = ProfileResolver(store)
    loaded = await load_board(store, "b1", "alice", profiles)

    assert loaded.board.name == "Project"
    assert loaded.board.columns.keys() == ["todo", "doing", "done"]
    assert loaded.board.columns["todo"].task_ids == ("1", "2")
    assert loaded.tasks.keys() == ["1", "2", "3"]
    assert loaded.tasks["1"].is_completed is False
    assert loaded.tasks["3"].is_completed is True


@pytest.mark.asyncio
async def test_load_board_batches_creator_profiles(store):
    store.tasks["4"] = {"id": "4", "board_id": "b1", "column_id": "done", "title": "x", "creator_id": "carol"}
    profiles = ProfileResolver(store)
    await load_board(store, "b1", "alice", profiles)

    assert store.count("fetch_users_by_ids") == 1
    assert profiles.get("bob").display_name == "Bob"
    assert "carol" in profiles and profiles.get("carol") is None


@pytest.mark.asyncio
async def test_missing_board(store):
    with pytest.raises(NotFound):
        await load_board(store, "nope", "alice", ProfileResolver(store))
    assert store.count("fetch_tasks_for_board") == 0


@pytest.mark.asyncio
async def test_foreign_board(store):
    with pytest.raises(AccessDenied):
        await load_board(store, "b2", "alice", ProfileResolver(store))
    assert store.count("fetch_tasks_for_board") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("op", ["fetch_board", "fetch_tasks_for_board"])
async def test_store_failure(store, op):
    store.fail.add(op)
    with pytest.raises(LoadFailure):
        await load_board(store, "b1", "alice", ProfileResolver(store))


@pytest.mark.asyncio
async def test_profile_failure_does_not_block_load(store):
    store.fail.add("fetch_users_by_ids")
    profiles = ProfileResolver(store)
    loaded = await load_board(store, "b1", "alice", profiles)
    assert len(loaded.tasks) == 3
    assert profiles.is_absent("alice")
