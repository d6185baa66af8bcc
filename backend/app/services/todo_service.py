# app/services/todo_service.py
"""
Todo operations scoped to the authenticated owner.

Every query that touches a specific todo filters on both ``id`` and
``user_id``, so a todo owned by someone else is indistinguishable from one
that does not exist (both are NotFound).

The query-shaping parts (list parameter parsing, list queryset construction,
pagination metadata, sparse update compilation) are plain functions so they
can be tested on their own.
"""
import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.expressions import Case, When
from tortoise.queryset import QuerySet

from app.core.db import Database
from app.core.errors import NotFound, ValidationError
from app.core.security import Identity
from app.core.timestamps import as_utc, utc_now
from app.models.todo import Priority, Todo
from app.schemas.todo import PaginationOut, TodoCreateIn, TodoOut

logger = logging.getLogger("uvicorn.error")

SORT_FIELDS = ("created_at", "updated_at", "due_date", "priority")
SORT_ORDERS = ("asc", "desc")

# Assignment order of a sparse update
UPDATABLE_FIELDS = ("title", "description", "completed", "priority", "due_date")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Enumerated query values match exactly (no case folding)
_BOOLEANS = {"true": True, "1": True, "false": False, "0": False}


@dataclass(frozen=True)
class ListParams:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    sort: str = "created_at"
    order: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_list_params(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    completed: Optional[str] = None,
    priority: Optional[str] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> ListParams:
    """
    Validate raw query-string values.

    ``None`` means the parameter was absent and takes its default. Anything
    supplied must be valid (an empty string included); there is no silent
    fallback to the default.

    Raises:
        ValidationError: with one entry per offending parameter
    """
    problems: list[dict[str, str]] = []
    values: dict[str, Any] = {}

    def _int(name: str, raw: Optional[str], low: int, high: Optional[int], message: str) -> None:
        if raw is None:
            return
        try:
            number = int(raw.strip())
        except ValueError:
            number = None
        if number is None or number < low or (high is not None and number > high):
            problems.append({"field": name, "message": message})
        else:
            values[name] = number

    _int("page", page, 1, None, "Page must be a positive integer")
    _int("limit", limit, 1, MAX_LIMIT, f"Limit must be between 1 and {MAX_LIMIT}")

    if completed is not None:
        if completed in _BOOLEANS:
            values["completed"] = _BOOLEANS[completed]
        else:
            problems.append({"field": "completed", "message": "Completed must be a boolean"})

    if priority is not None:
        try:
            values["priority"] = Priority(priority)
        except ValueError:
            problems.append({"field": "priority", "message": "Priority must be low, medium, or high"})

    if sort is not None:
        if sort in SORT_FIELDS:
            values["sort"] = sort
        else:
            problems.append({"field": "sort", "message": "Invalid sort field"})

    if order is not None:
        if order in SORT_ORDERS:
            values["order"] = order
        else:
            problems.append({"field": "order", "message": "Order must be asc or desc"})

    if problems:
        raise ValidationError(details=problems)
    return ListParams(**values)


def filter_todos(user_id: int, params: ListParams) -> QuerySet[Todo]:
    """
    Owner predicate first, then completed, then priority. Both the count and
    the page are taken from this queryset.
    """
    qs = Todo.filter(user_id=user_id)
    if params.completed is not None:
        qs = qs.filter(completed=params.completed)
    if params.priority is not None:
        qs = qs.filter(priority=params.priority)
    return qs


def build_list_query(user_id: int, params: ListParams) -> QuerySet[Todo]:
    """
    Sorted, windowed page of ``filter_todos``.

    Priority sorts by rank (low < medium < high), todos without a due date
    come last in either direction, and ``id`` breaks ties.
    """
    qs = filter_todos(user_id, params)
    prefix = "-" if params.order == "desc" else ""

    if params.sort == "priority":
        qs = qs.annotate(priority_rank=Case(
            When(priority=Priority.low.value, then=1),
            When(priority=Priority.medium.value, then=2),
            When(priority=Priority.high.value, then=3),
            default=0,
        ))
        ordering = [f"{prefix}priority_rank"]
    elif params.sort == "due_date":
        qs = qs.annotate(due_date_missing=Case(When(due_date__isnull=True, then=1), default=0))
        ordering = ["due_date_missing", f"{prefix}due_date"]
    else:
        ordering = [f"{prefix}{params.sort}"]

    return qs.order_by(*ordering, f"{prefix}id").offset(params.offset).limit(params.limit)


def build_pagination(page: int, limit: int, total_count: int) -> PaginationOut:
    total_pages = math.ceil(total_count / limit)
    return PaginationOut(
        page=page,
        limit=limit,
        totalCount=total_count,
        totalPages=total_pages,
        hasNext=page < total_pages,
        hasPrev=page > 1,
    )


def next_updated_at(previous: Optional[dt.datetime], now: Optional[dt.datetime] = None) -> dt.datetime:
    """Server clock, nudged forward if needed so updated_at never stands still."""
    now = as_utc(now or utc_now())
    if previous is not None and now <= as_utc(previous):
        now = as_utc(previous) + dt.timedelta(microseconds=1)
    return now


def compile_update(fields: dict[str, Any], updated_at: dt.datetime) -> dict[str, Any]:
    """
    Turn the supplied fields into the assignments of a sparse update.

    Inclusion is decided by key membership, so an explicit None is applied
    as NULL while an absent key is left alone. Unknown keys are dropped and
    ``updated_at`` is always assigned last.

    Raises:
        ValidationError: nothing to update
    """
    changes = {name: fields[name] for name in UPDATABLE_FIELDS if name in fields}
    if not changes:
        raise ValidationError("No fields to update", "At least one field must be provided for update")
    changes["updated_at"] = updated_at
    return changes


def _owned(conn: BaseDBAsyncClient, identity: Identity, todo_id: int) -> QuerySet[Todo]:
    return Todo.filter(id=todo_id, user_id=identity.user_id).using_db(conn)


def _not_found(action: str) -> NotFound:
    return NotFound("Todo not found", f"The requested todo does not exist or you do not have permission to {action} it")


async def _guard(conn: BaseDBAsyncClient, identity: Identity, todo_id: int, op: str) -> Todo:
    todo = await _owned(conn, identity, todo_id).first()
    if todo is None:
        logger.debug("[todos] %s: todo %s not found for user %s", op, todo_id, identity.user_id)
        raise _not_found("access")
    return todo


async def guard(db: Database, identity: Identity, todo_id: int, op: str = "read") -> TodoOut:
    """
    Return the todo only if it exists AND belongs to ``identity``.

    Raises:
        NotFound: missing or owned by another user (not distinguished)
    """
    async with db.acquire() as conn:
        return TodoOut.from_model(await _guard(conn, identity, todo_id, op))


async def list_todos(db: Database, identity: Identity, params: ListParams) -> tuple[list[TodoOut], PaginationOut]:
    async with db.acquire() as conn:
        total = await filter_todos(identity.user_id, params).using_db(conn).count()
        rows = await build_list_query(identity.user_id, params).using_db(conn)

    return [TodoOut.from_model(t) for t in rows], build_pagination(params.page, params.limit, total)


async def create_todo(db: Database, identity: Identity, body: TodoCreateIn) -> TodoOut:
    async with db.acquire() as conn:
        todo = await Todo.create(
            user_id=identity.user_id,
            title=body.title,
            description=body.description,
            priority=body.priority,
            due_date=body.due_date,
            using_db=conn,
        )
    logger.info("[todos] user %s created todo %s", identity.user_id, todo.id)
    return TodoOut.from_model(todo)


async def update_todo(db: Database, identity: Identity, todo_id: int, fields: dict[str, Any]) -> TodoOut:
    """
    Apply a sparse update. Ownership is checked first, then the UPDATE itself
    is scoped to (id, user_id) so a concurrent delete cannot slip between the
    check and the write.
    """
    if not any(name in fields for name in UPDATABLE_FIELDS):
        raise ValidationError("No fields to update", "At least one field must be provided for update")

    async with db.acquire() as conn:
        current = await _guard(conn, identity, todo_id, "update")
        changes = compile_update(fields, next_updated_at(current.updated_at))
        todo = None
        if await _owned(conn, identity, todo_id).update(**changes):
            todo = await _owned(conn, identity, todo_id).first()

    if todo is None:
        raise _not_found("modify")
    logger.info("[todos] user %s updated todo %s (%s)", identity.user_id, todo_id, ", ".join(sorted(fields)))
    return TodoOut.from_model(todo)


async def delete_todo(db: Database, identity: Identity, todo_id: int) -> None:
    async with db.acquire() as conn:
        await _guard(conn, identity, todo_id, "delete")
        deleted = await _owned(conn, identity, todo_id).delete()

    if not deleted:
        raise _not_found("delete")
    logger.info("[todos] user %s deleted todo %s", identity.user_id, todo_id)


async def complete_all(db: Database, identity: Identity) -> int:
    """
    Mark every incomplete todo of the user as completed in one UPDATE.

    The new updated_at is later than the newest updated_at among the rows
    being completed. Returns the number of rows changed; 0 is a normal
    outcome.
    """
    async with db.acquire() as conn:
        pending = Todo.filter(user_id=identity.user_id, completed=False).using_db(conn)
        latest = await pending.order_by("-updated_at").first()
        if latest is None:
            updated = 0
        else:
            updated = await pending.update(completed=True, updated_at=next_updated_at(latest.updated_at))

    logger.info("[todos] user %s completed %d todos", identity.user_id, updated)
    return updated
