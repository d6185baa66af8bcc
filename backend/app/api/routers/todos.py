# app/api/routers/todos.py
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from app.api.deps import get_db, get_identity
from app.core.db import Database
from app.core.security import Identity
from app.schemas.todo import TodoCreateIn, TodoUpdateIn
from app.services import todo_service

# Every route requires a valid bearer token
router = APIRouter(prefix="/todos", tags=["todos"], dependencies=[Depends(get_identity)])

# Todo ids are positive 32-bit integers in storage
TodoId = Annotated[int, Path(ge=1, le=2_147_483_647)]

@router.get("")
async def list_todos(
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    completed: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    order: str | None = Query(default=None),
):
    """
    Get a filtered, sorted page of the authenticated user's todos.

    Query parameters (all optional):
        page: >= 1 (default 1)
        limit: 1-100 (default 10)
        completed: true/false
        priority: low/medium/high
        sort: created_at (default), updated_at, due_date, priority
        order: asc/desc (default desc)

    Values are taken as raw strings and validated by the service, so an
    explicitly supplied bad value is a 400 rather than a silent default.

    Returns:
        dict: {todos: [...], pagination: {page, limit, totalCount, totalPages, hasNext, hasPrev}}
    """
    params = todo_service.parse_list_params(
        page=page, limit=limit, completed=completed, priority=priority, sort=sort, order=order
    )
    todos, pagination = await todo_service.list_todos(db, identity, params)
    return {
        "todos": [t.model_dump(mode="json") for t in todos],
        "pagination": pagination.model_dump(),
    }

@router.patch("/complete-all")
async def complete_all(identity: Identity = Depends(get_identity), db: Database = Depends(get_db)):
    """
    Mark all of the user's incomplete todos as completed.

    Returns:
        dict: {message, updatedCount} (updatedCount may be 0)
    """
    updated = await todo_service.complete_all(db, identity)
    return {"message": "All todos marked as completed", "updatedCount": updated}

@router.get("/{todo_id}")
async def get_todo(todo_id: TodoId, identity: Identity = Depends(get_identity), db: Database = Depends(get_db)):
    """
    Get a single todo.

    Raises:
        404: Todo does not exist or belongs to another user
    """
    todo = await todo_service.guard(db, identity, todo_id, op="read")
    return {"todo": todo.model_dump(mode="json")}

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_todo(body: TodoCreateIn, identity: Identity = Depends(get_identity), db: Database = Depends(get_db)):
    """
    Create a todo owned by the authenticated user.

    Body:
        title: 1-255 chars (trimmed), required
        description: <= 1000 chars
        priority: low/medium/high (default medium)
        due_date: ISO-8601 timestamp
    """
    todo = await todo_service.create_todo(db, identity, body)
    return {"message": "Todo created successfully", "todo": todo.model_dump(mode="json")}

@router.put("/{todo_id}")
async def update_todo(
    todo_id: TodoId,
    body: TodoUpdateIn,
    identity: Identity = Depends(get_identity),
    db: Database = Depends(get_db),
):
    """
    Update any subset of title, description, completed, priority, due_date.

    Only fields present in the body are written; updated_at is always
    refreshed.

    Raises:
        400: Invalid value, or no updatable field supplied
        404: Todo does not exist or belongs to another user
    """
    todo = await todo_service.update_todo(db, identity, todo_id, body.supplied())
    return {"message": "Todo updated successfully", "todo": todo.model_dump(mode="json")}

@router.delete("/{todo_id}")
async def delete_todo(todo_id: TodoId, identity: Identity = Depends(get_identity), db: Database = Depends(get_db)):
    """
    Delete a todo.

    Raises:
        404: Todo does not exist or belongs to another user
    """
    await todo_service.delete_todo(db, identity, todo_id)
    return {"message": "Todo deleted successfully"}
