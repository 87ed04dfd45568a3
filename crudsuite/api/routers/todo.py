"""
Todo Endpoints
POST   /todo/member/todos            - Create a todo
PATCH  /todo/member/todos            - Search own todos
GET    /todo/member/todos/{todoId}   - Get own todo
PUT    /todo/member/todos/{todoId}   - Update own todo
DELETE /todo/member/todos/{todoId}   - Delete own todo
PATCH  /todo/administrator/todos     - Search every member's todos
PATCH  /todo/administrator/members   - Search members
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...db.todo import TodoAdministrator, TodoMember
from ..authorization import todo_administrator, todo_member
from ..dependencies import get_db
from ..pagination import Page
from ..schemas import todo as schemas
from ..services import todo as service

router = APIRouter(prefix="/todo", tags=["todo"])


@router.post("/member/todos", response_model=schemas.Todo, status_code=status.HTTP_201_CREATED)
async def create_todo(
    request: schemas.TodoCreate,
    member: TodoMember = Depends(todo_member),
    db: Session = Depends(get_db),
):
    return service.create_todo(db, member, request)


@router.patch("/member/todos", response_model=Page[schemas.Todo])
async def search_todos(
    request: schemas.TodoRequest,
    member: TodoMember = Depends(todo_member),
    db: Session = Depends(get_db),
):
    return service.search_member_todos(db, member, request)


@router.get("/member/todos/{todo_id}", response_model=schemas.Todo)
async def get_todo(
    todo_id: UUID,
    member: TodoMember = Depends(todo_member),
    db: Session = Depends(get_db),
):
    return service.get_todo(db, member, todo_id)


@router.put("/member/todos/{todo_id}", response_model=schemas.Todo)
async def update_todo(
    todo_id: UUID,
    request: schemas.TodoUpdate,
    member: TodoMember = Depends(todo_member),
    db: Session = Depends(get_db),
):
    return service.update_todo(db, member, todo_id, request)


@router.delete("/member/todos/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_todo(
    todo_id: UUID,
    member: TodoMember = Depends(todo_member),
    db: Session = Depends(get_db),
):
    service.delete_todo(db, member, todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/administrator/todos", response_model=Page[schemas.Todo])
async def search_all_todos(
    request: schemas.AdminTodoRequest,
    administrator: TodoAdministrator = Depends(todo_administrator),
    db: Session = Depends(get_db),
):
    return service.search_all_todos(db, request)


@router.patch("/administrator/members", response_model=Page[schemas.Member])
async def search_members(
    request: schemas.MemberRequest,
    administrator: TodoAdministrator = Depends(todo_administrator),
    db: Session = Depends(get_db),
):
    return service.search_members(db, request)
