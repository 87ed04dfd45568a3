"""
Todo request/response schemas.
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..pagination import PageRequest, SortDirection, UTCDateTime

Priority = Literal["Low", "Medium", "High"]


class TodoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    priority: Priority = "Medium"
    due_date: Optional[UTCDateTime] = None


class TodoUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    due_date: Optional[UTCDateTime] = None


class Todo(BaseModel):
    id: UUID
    member_id: UUID
    title: str
    description: Optional[str]
    priority: Priority
    completed: bool
    completed_at: Optional[datetime]
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TodoRequest(PageRequest):
    search: Optional[str] = Field(None, description="Substring of title")
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    due_from: Optional[UTCDateTime] = None
    due_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at", "due_date", "priority", "title"]] = None
    sort_direction: Optional[SortDirection] = None


class AdminTodoRequest(TodoRequest):
    member_id: Optional[UUID] = None


class Member(BaseModel):
    id: UUID
    email: str
    username: Optional[str]
    created_at: datetime
    last_login_at: Optional[datetime]

    model_config = {"from_attributes": True}


class MemberRequest(PageRequest):
    search: Optional[str] = Field(None, description="Substring of email or username")
    sort_by: Optional[Literal["created_at", "email"]] = None
    sort_direction: Optional[SortDirection] = None
