"""
Service-level tests for the owner-scoped todo querysets: predicate order,
sorting, pagination windows and the bulk/sparse writes.
"""
import datetime as dt

import pytest

from app.core.errors import NotFound
from app.core.security import Identity
from app.models.todo import Priority, Todo
from app.models.user import User
from app.services import todo_service
from app.services.todo_service import ListParams, build_list_query, filter_todos


pytestmark = pytest.mark.asyncio

FUTURE = dt.datetime(2099, 1, 1, tzinfo=dt.timezone.utc)


async def make_user(name: str) -> Identity:
    user = await User.create(username=name, email=f"{name}@example.com", password_hash="not-a-real-hash")
    return Identity(user_id=user.id)


async def make_todo(identity: Identity, title: str, **fields) -> Todo:
    return await Todo.create(user_id=identity.user_id, title=title, **fields)


async def titles(identity: Identity, **params) -> list[str]:
    return [t.title for t in await build_list_query(identity.user_id, ListParams(**params))]


async def test_filters_apply_owner_then_completed_then_priority(db):
    sql = filter_todos(1, ListParams(completed=False, priority=Priority.high)).sql()
    where = sql[sql.index("WHERE"):]
    assert where.index("user_id") < where.index("completed") < where.index("priority")


async def test_count_and_page_share_filters(db):
    alice = await make_user("alice")
    bob = await make_user("bob")
    for i in range(5):
        await make_todo(alice, f"high {i}", priority=Priority.high)
    await make_todo(alice, "low", priority=Priority.low)
    await make_todo(bob, "bob high", priority=Priority.high)

    params = ListParams(priority=Priority.high, limit=2, page=3)
    assert await filter_todos(alice.user_id, params).count() == 5
    page = await build_list_query(alice.user_id, params)
    assert len(page) == 1
    assert all(t.priority == Priority.high and t.user_id == alice.user_id for t in page)


async def test_priority_sorts_by_rank(db):
    alice = await make_user("alice")
    for priority in (Priority.medium, Priority.high, Priority.low):
        await make_todo(alice, priority.value, priority=priority)

    assert await titles(alice, sort="priority", order="asc") == ["low", "medium", "high"]
    assert await titles(alice, sort="priority", order="desc") == ["high", "medium", "low"]


async def test_missing_due_dates_sort_last_both_ways(db):
    alice = await make_user("alice")
    await make_todo(alice, "none")
    await make_todo(alice, "late", due_date=dt.datetime(2031, 1, 1, tzinfo=dt.timezone.utc))
    await make_todo(alice, "early", due_date=dt.datetime(2030, 1, 1, tzinfo=dt.timezone.utc))

    assert await titles(alice, sort="due_date", order="asc") == ["early", "late", "none"]
    assert await titles(alice, sort="due_date", order="desc") == ["late", "early", "none"]


async def test_id_breaks_ties_in_sort_direction(db):
    alice = await make_user("alice")
    first = await make_todo(alice, "first")
    second = await make_todo(alice, "second")
    await Todo.filter(user_id=alice.user_id).update(created_at=FUTURE)

    assert await titles(alice, sort="created_at", order="desc") == ["second", "first"]
    assert await titles(alice, sort="created_at", order="asc") == ["first", "second"]
    assert first.id < second.id


async def test_update_writes_only_supplied_fields(db):
    alice = await make_user("alice")
    todo = await make_todo(alice, "keep", description="original", priority=Priority.low)

    updated = await todo_service.update_todo(db, alice, todo.id, {"completed": True})
    assert updated.completed is True
    assert updated.title == "keep"
    assert updated.description == "original"
    assert updated.priority == Priority.low
    assert updated.updated_at > todo.updated_at


async def test_update_moves_past_a_future_updated_at(db):
    alice = await make_user("alice")
    todo = await make_todo(alice, "skewed")
    await Todo.filter(id=todo.id).update(updated_at=FUTURE)

    updated = await todo_service.update_todo(db, alice, todo.id, {"title": "fixed"})
    assert updated.updated_at > FUTURE


async def test_writes_on_foreign_todo_are_not_found(db):
    alice = await make_user("alice")
    bob = await make_user("bob")
    todo = await make_todo(alice, "private")

    with pytest.raises(NotFound):
        await todo_service.update_todo(db, bob, todo.id, {"title": "stolen"})
    with pytest.raises(NotFound):
        await todo_service.delete_todo(db, bob, todo.id)

    unchanged = await Todo.get(id=todo.id)
    assert unchanged.title == "private"


async def test_complete_all_counts_and_refreshes_updated_at(db):
    alice = await make_user("alice")
    bob = await make_user("bob")
    open_a = await make_todo(alice, "a")
    open_b = await make_todo(alice, "b")
    done = await make_todo(alice, "done", completed=True)
    foreign = await make_todo(bob, "bob")
    # One row already carries a timestamp ahead of the server clock
    await Todo.filter(id=open_b.id).update(updated_at=FUTURE)

    assert await todo_service.complete_all(db, alice) == 2

    refreshed_a = await Todo.get(id=open_a.id)
    refreshed_b = await Todo.get(id=open_b.id)
    assert refreshed_a.completed and refreshed_b.completed
    assert refreshed_a.updated_at > open_a.updated_at
    assert refreshed_b.updated_at > FUTURE

    assert (await Todo.get(id=done.id)).updated_at == done.updated_at
    assert (await Todo.get(id=foreign.id)).completed is False
    assert await todo_service.complete_all(db, alice) == 0
