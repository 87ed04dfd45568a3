"""
Discussion board request/response schemas.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..pagination import PageRequest, SortDirection, UTCDateTime
from .auth import JoinRequest, StrongJoinRequest, USERNAME_PATTERN

MemberStatus = Literal["active", "suspended", "banned"]
ViolationCategory = Literal[
    "personal_attack",
    "hate_speech",
    "misinformation",
    "spam",
    "offensive_language",
    "off_topic",
    "threats",
    "doxxing",
    "trolling",
    "other",
]
Severity = Literal["critical", "high", "medium", "low"]
ReportStatus = Literal["pending", "under_review", "resolved", "dismissed"]
ActionType = Literal["warning", "hide_content", "delete_content", "suspend_user", "ban_user"]
AppealStatus = Literal["pending_review", "upheld", "overturned"]


# Accounts

class MemberJoin(JoinRequest):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    display_name: Optional[str] = Field(None, max_length=64)


class ModeratorJoin(JoinRequest):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    appointed_by_admin_id: UUID = Field(..., description="Administrator appointing this moderator")


class AdministratorJoin(StrongJoinRequest):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)


class MemberSummary(BaseModel):
    """Administrator view of a member (includes email)."""

    id: UUID
    username: Optional[str]
    display_name: Optional[str]
    email: str
    status: MemberStatus
    suspended_until: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class MemberRequest(PageRequest):
    status: Optional[MemberStatus] = None
    search: Optional[str] = Field(None, description="Substring of username or display name")
    sort_by: Optional[Literal["created_at", "username"]] = None
    sort_direction: Optional[SortDirection] = None


# Categories

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    display_order: int = Field(default=0, ge=0)
    is_active: bool = True


class Category(BaseModel):
    id: UUID
    name: str
    slug: str
    description: Optional[str]
    display_order: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CategoryRequest(PageRequest):
    is_active: Optional[bool] = None
    search: Optional[str] = None
    sort_by: Optional[Literal["display_order", "name", "created_at"]] = None
    sort_direction: Optional[SortDirection] = None


# Topics

class TopicCreate(BaseModel):
    category_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1)


class TopicUpdate(BaseModel):
    category_id: Optional[UUID] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    body: Optional[str] = Field(None, min_length=1)


class TopicSummary(BaseModel):
    id: UUID
    category_id: UUID
    author_id: UUID
    title: str
    reply_count: int
    view_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class Topic(TopicSummary):
    body: str


class TopicRequest(PageRequest):
    category_id: Optional[UUID] = None
    author_id: Optional[UUID] = None
    search: Optional[str] = Field(None, description="Substring of title or body")
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at", "updated_at", "title", "reply_count"]] = None
    sort_direction: Optional[SortDirection] = None


# Replies

class ReplyCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    parent_reply_id: Optional[UUID] = None


class ReplyUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)


class Reply(BaseModel):
    id: UUID
    topic_id: UUID
    author_id: UUID
    parent_reply_id: Optional[UUID]
    depth: int
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReplyRequest(PageRequest):
    author_id: Optional[UUID] = None
    parent_reply_id: Optional[UUID] = None
    search: Optional[str] = None
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at"]] = None
    sort_direction: Optional[SortDirection] = None


# Edit history

class EditHistory(BaseModel):
    id: UUID
    entity_type: Literal["topic", "reply"]
    entity_id: UUID
    member_id: UUID = Field(..., description="Member who made the edit")
    revision: int
    previous_title: Optional[str]
    new_title: Optional[str]
    previous_content: str
    new_content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class EditHistoryRequest(PageRequest):
    member_id: Optional[UUID] = Field(None, description="Only edits by this member")
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at"]] = None
    sort_direction: Optional[SortDirection] = None


# Reports

class ReportCreate(BaseModel):
    reported_topic_id: Optional[UUID] = None
    reported_reply_id: Optional[UUID] = None
    violation_category: ViolationCategory
    reporter_explanation: Optional[str] = Field(None, max_length=2000)


class ReportUpdate(BaseModel):
    status: Optional[ReportStatus] = None
    assign_to_self: bool = Field(default=False, description="Assign the report to the caller")
    resolution_notes: Optional[str] = Field(None, max_length=2000)


class Report(BaseModel):
    id: UUID
    reporter_member_id: UUID
    reported_topic_id: Optional[UUID]
    reported_reply_id: Optional[UUID]
    reported_member_id: UUID
    violation_category: ViolationCategory
    severity: Severity
    reporter_explanation: Optional[str]
    status: ReportStatus
    assigned_moderator_id: Optional[UUID]
    resolution_notes: Optional[str]
    resolved_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReportRequest(PageRequest):
    status: Optional[ReportStatus] = None
    violation_category: Optional[ViolationCategory] = None
    severity: Optional[Severity] = None
    assigned_moderator_id: Optional[UUID] = None
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["priority", "created_at", "severity"]] = None
    sort_direction: Optional[SortDirection] = None


# Moderation actions

class ModerationActionCreate(BaseModel):
    action_type: ActionType
    target_member_id: UUID
    reason: str = Field(..., min_length=1, max_length=2000)
    related_report_id: Optional[UUID] = None
    content_topic_id: Optional[UUID] = None
    content_reply_id: Optional[UUID] = None
    duration_days: Optional[int] = Field(None, ge=1, le=365)


class ModerationAction(BaseModel):
    id: UUID
    moderator_id: UUID
    target_member_id: UUID
    related_report_id: Optional[UUID]
    content_topic_id: Optional[UUID]
    content_reply_id: Optional[UUID]
    action_type: ActionType
    reason: str
    duration_days: Optional[int]
    expires_at: Optional[datetime]
    is_reversed: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ModerationActionRequest(PageRequest):
    action_type: Optional[ActionType] = None
    target_member_id: Optional[UUID] = None
    moderator_id: Optional[UUID] = None
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at"]] = None
    sort_direction: Optional[SortDirection] = None


# Appeals

class AppealCreate(BaseModel):
    moderation_action_id: UUID
    appeal_explanation: str = Field(..., min_length=10, max_length=5000)
    additional_evidence: Optional[str] = Field(None, max_length=5000)


class AppealDecision(BaseModel):
    decision: Literal["upheld", "overturned"]
    decision_reasoning: str = Field(..., min_length=1, max_length=5000)


class Appeal(BaseModel):
    id: UUID
    member_id: UUID
    moderation_action_id: UUID
    appeal_explanation: str
    additional_evidence: Optional[str]
    status: AppealStatus
    reviewing_administrator_id: Optional[UUID]
    decision_reasoning: Optional[str]
    reviewed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AppealRequest(PageRequest):
    statuses: Optional[List[AppealStatus]] = Field(None, description="Match any of these statuses")
    member_id: Optional[UUID] = None
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at", "updated_at"]] = None
    sort_direction: Optional[SortDirection] = None
