"""
Community platform request/response schemas.
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..pagination import PageRequest, SortDirection, UTCDateTime

COMMUNITY_NAME_PATTERN = r"^[A-Za-z0-9_]{3,21}$"

ReportCategory = Literal["spam", "harassment", "hate_speech", "misinformation", "rule_violation", "other"]
ReportStatus = Literal["pending", "reviewed", "dismissed", "action_taken"]


class Member(BaseModel):
    id: UUID
    username: Optional[str]
    karma: int
    created_at: datetime

    model_config = {"from_attributes": True}


# Communities

class CommunityCreate(BaseModel):
    name: str = Field(..., pattern=COMMUNITY_NAME_PATTERN, description="Unique community name")
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)


class Community(BaseModel):
    id: UUID
    name: str
    title: str
    description: Optional[str]
    creator_member_id: UUID
    subscriber_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class CommunityRequest(PageRequest):
    search: Optional[str] = Field(None, description="Substring of name or title")
    sort_by: Optional[Literal["created_at", "name", "subscriber_count"]] = None
    sort_direction: Optional[SortDirection] = None


class ModeratorAssignmentCreate(BaseModel):
    moderator_id: UUID


class ModeratorAssignment(BaseModel):
    id: UUID
    community_id: UUID
    moderator_id: UUID
    assigned_by_admin_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


# Subscriptions

class Subscription(BaseModel):
    id: UUID
    member_id: UUID
    community_id: UUID
    community_name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class SubscriptionRequest(PageRequest):
    search: Optional[str] = Field(None, description="Substring of community name")
    sort_by: Optional[Literal["created_at", "community_name"]] = None
    sort_direction: Optional[SortDirection] = None


# Posts

class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    body: Optional[str] = Field(None, max_length=40000)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    body: Optional[str] = Field(None, max_length=40000)


class Post(BaseModel):
    id: UUID
    community_id: UUID
    author_id: UUID
    title: str
    body: Optional[str]
    score: int
    comment_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostRequest(PageRequest):
    community_id: Optional[UUID] = None
    author_id: Optional[UUID] = None
    search: Optional[str] = Field(None, description="Substring of title or body")
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["new", "top", "comments"]] = None
    sort_direction: Optional[SortDirection] = None


# Comments

class CommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=10000)
    parent_comment_id: Optional[UUID] = None


class Comment(BaseModel):
    id: UUID
    post_id: UUID
    author_id: UUID
    parent_comment_id: Optional[UUID]
    body: str
    score: int
    created_at: datetime

    model_config = {"from_attributes": True}


class CommentRequest(PageRequest):
    author_id: Optional[UUID] = None
    parent_comment_id: Optional[UUID] = None
    sort_by: Optional[Literal["new", "old", "top"]] = None


# Votes

class VoteCast(BaseModel):
    value: Literal[-1, 0, 1] = Field(..., description="1 upvote, -1 downvote, 0 clears the vote")


class VoteResult(BaseModel):
    post_id: UUID
    value: int
    score: int


# Reports

class ReportCreate(BaseModel):
    post_id: Optional[UUID] = None
    comment_id: Optional[UUID] = None
    category: ReportCategory
    description: Optional[str] = Field(None, max_length=2000)


class ReportReview(BaseModel):
    status: Literal["reviewed", "dismissed", "action_taken"]
    resolution: Optional[Literal["remove_content", "warn_author", "no_action"]] = None


class Report(BaseModel):
    id: UUID
    reporter_member_id: UUID
    community_id: UUID
    post_id: Optional[UUID]
    comment_id: Optional[UUID]
    category: ReportCategory
    description: Optional[str]
    status: ReportStatus
    resolution: Optional[str]
    reviewed_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class ReportRequest(PageRequest):
    status: Optional[ReportStatus] = None
    category: Optional[ReportCategory] = None
    community_id: Optional[UUID] = None
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at"]] = None
    sort_direction: Optional[SortDirection] = None
