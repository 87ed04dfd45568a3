"""
Todo service.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import case
from sqlalchemy.orm import Session

from ...db.todo import Todo, TodoAdministrator, TodoMember
from ..authorization import Role
from ..errors import ResourceNotFoundError
from ..pagination import Page, between, conjunction, contains, equals, paginate, resolve_order
from ..schemas import todo as schemas
from .accounts import AccountService

logger = logging.getLogger(__name__)

members = AccountService(TodoMember, Role.TODO_MEMBER)
administrators = AccountService(TodoAdministrator, Role.TODO_ADMINISTRATOR)

# High sorts above Medium above Low when descending
PRIORITY_RANK = case({"Low": 0, "Medium": 1, "High": 2}, value=Todo.priority, else_=1)


def _apply_completed(todo: Todo, completed: bool) -> None:
    if completed and not todo.completed:
        todo.completed_at = datetime.utcnow()
    elif not completed:
        todo.completed_at = None
    todo.completed = completed


def create_todo(db: Session, member: TodoMember, request: schemas.TodoCreate) -> Todo:
    todo = Todo(member_id=member.id, completed=False, **request.model_dump())
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return todo


def get_todo(db: Session, member: TodoMember, todo_id: UUID) -> Todo:
    """Fetch one of the member's todos; other members' todos look missing."""
    todo = (
        db.query(Todo)
        .filter(Todo.id == todo_id, Todo.member_id == member.id, Todo.deleted_at.is_(None))
        .first()
    )
    if todo is None:
        raise ResourceNotFoundError("Todo", todo_id)
    return todo


def update_todo(db: Session, member: TodoMember, todo_id: UUID, request: schemas.TodoUpdate) -> Todo:
    todo = get_todo(db, member, todo_id)

    changes = request.model_dump(exclude_unset=True)
    completed = changes.pop("completed", None)
    for field, value in changes.items():
        if value is None and field in ("title", "priority"):
            continue
        setattr(todo, field, value)
    if completed is not None:
        _apply_completed(todo, completed)

    db.commit()
    db.refresh(todo)
    return todo


def delete_todo(db: Session, member: TodoMember, todo_id: UUID) -> None:
    todo = get_todo(db, member, todo_id)
    todo.deleted_at = datetime.utcnow()
    db.commit()


def _search(db: Session, request: schemas.TodoRequest, member_id=None) -> Page[schemas.Todo]:
    query = db.query(Todo).filter(
        Todo.deleted_at.is_(None),
        *conjunction(
            equals(Todo.member_id, member_id),
            contains([Todo.title], request.search),
            equals(Todo.priority, request.priority),
            equals(Todo.completed, request.completed),
            between(Todo.due_date, request.due_from, request.due_to),
        ),
    )
    order_by = resolve_order(
        {
            "created_at": Todo.created_at,
            "due_date": Todo.due_date,
            "priority": [PRIORITY_RANK, Todo.created_at],
            "title": Todo.title,
        },
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Todo.id,
    )
    return paginate(query, request, schemas.Todo, order_by)


def search_member_todos(db: Session, member: TodoMember, request: schemas.TodoRequest) -> Page[schemas.Todo]:
    return _search(db, request, member_id=member.id)


def search_all_todos(db: Session, request: schemas.AdminTodoRequest) -> Page[schemas.Todo]:
    return _search(db, request, member_id=request.member_id)


def search_members(db: Session, request: schemas.MemberRequest) -> Page[schemas.Member]:
    query = db.query(TodoMember).filter(
        TodoMember.deleted_at.is_(None),
        *conjunction(contains([TodoMember.email, TodoMember.username], request.search)),
    )
    order_by = resolve_order(
        {"created_at": TodoMember.created_at, "email": TodoMember.email},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=TodoMember.id,
    )
    return paginate(query, request, schemas.Member, order_by)
