"""
Discussion board ORM models.
Members post topics and threaded replies; moderators work the report queue
and record moderation actions; administrators review appeals.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid,
)
from sqlalchemy.orm import relationship

from .base import AccountMixin, Base, SoftDeleteMixin, TimestampMixin


class BoardMember(AccountMixin, Base):
    __tablename__ = "discussion_board_members"

    display_name = Column(String(64), nullable=True)
    status = Column(String(16), nullable=False, default="active",
                    comment="active, suspended or banned")
    suspended_until = Column(DateTime, nullable=True)

    topics = relationship("Topic", back_populates="author")


class BoardAdministrator(AccountMixin, Base):
    __tablename__ = "discussion_board_administrators"


class BoardModerator(AccountMixin, Base):
    __tablename__ = "discussion_board_moderators"

    appointed_by_admin_id = Column(
        Uuid, ForeignKey("discussion_board_administrators.id"), nullable=False
    )
    is_active = Column(Boolean, nullable=False, default=True)


class BoardCategory(TimestampMixin, Base):
    __tablename__ = "discussion_board_categories"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class Topic(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "discussion_board_topics"

    id = Column(Uuid, primary_key=True, default=uuid4)
    category_id = Column(Uuid, ForeignKey("discussion_board_categories.id"), nullable=False, index=True)
    author_id = Column(Uuid, ForeignKey("discussion_board_members.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)
    reply_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)

    author = relationship("BoardMember", back_populates="topics")
    category = relationship("BoardCategory")
    replies = relationship("Reply", back_populates="topic")


class Reply(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "discussion_board_replies"

    id = Column(Uuid, primary_key=True, default=uuid4)
    topic_id = Column(Uuid, ForeignKey("discussion_board_topics.id"), nullable=False, index=True)
    author_id = Column(Uuid, ForeignKey("discussion_board_members.id"), nullable=False, index=True)
    parent_reply_id = Column(Uuid, ForeignKey("discussion_board_replies.id"), nullable=True, index=True)
    depth = Column(Integer, nullable=False, default=0)
    content = Column(Text, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)

    topic = relationship("Topic", back_populates="replies")


class EditHistory(Base):
    """One row per author edit of a topic or reply, oldest revision 1."""

    __tablename__ = "discussion_board_edit_histories"

    id = Column(Uuid, primary_key=True, default=uuid4)
    entity_type = Column(String(8), nullable=False, comment="topic or reply")
    entity_id = Column(Uuid, nullable=False)
    member_id = Column(Uuid, ForeignKey("discussion_board_members.id"), nullable=False, index=True)
    revision = Column(Integer, nullable=False)
    previous_title = Column(String(200), nullable=True, comment="Topics only")
    new_title = Column(String(200), nullable=True, comment="Topics only")
    previous_content = Column(Text, nullable=False)
    new_content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("idx_discussion_board_edit_histories_entity", "entity_type", "entity_id", "revision", unique=True),
    )


class BoardReport(TimestampMixin, Base):
    __tablename__ = "discussion_board_reports"

    id = Column(Uuid, primary_key=True, default=uuid4)
    reporter_member_id = Column(Uuid, ForeignKey("discussion_board_members.id"), nullable=False, index=True)
    reported_topic_id = Column(Uuid, ForeignKey("discussion_board_topics.id"), nullable=True, index=True)
    reported_reply_id = Column(Uuid, ForeignKey("discussion_board_replies.id"), nullable=True, index=True)
    reported_member_id = Column(Uuid, ForeignKey("discussion_board_members.id"), nullable=False, index=True,
                                comment="Author of the reported content")
    violation_category = Column(String(32), nullable=False, index=True)
    severity = Column(String(16), nullable=False, index=True)
    reporter_explanation = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    assigned_moderator_id = Column(Uuid, ForeignKey("discussion_board_moderators.id"), nullable=True, index=True)
    resolution_notes = Column(Text, nullable=True)
    resolved_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_discussion_board_reports_status_created", "status", "created_at"),
    )


class ModerationAction(TimestampMixin, Base):
    __tablename__ = "discussion_board_moderation_actions"

    id = Column(Uuid, primary_key=True, default=uuid4)
    moderator_id = Column(Uuid, ForeignKey("discussion_board_moderators.id"), nullable=False, index=True)
    target_member_id = Column(Uuid, ForeignKey("discussion_board_members.id"), nullable=False, index=True)
    related_report_id = Column(Uuid, ForeignKey("discussion_board_reports.id"), nullable=True)
    content_topic_id = Column(Uuid, ForeignKey("discussion_board_topics.id"), nullable=True)
    content_reply_id = Column(Uuid, ForeignKey("discussion_board_replies.id"), nullable=True)
    action_type = Column(String(32), nullable=False, index=True)
    reason = Column(Text, nullable=False)
    duration_days = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    is_reversed = Column(Boolean, nullable=False, default=False)


class Appeal(TimestampMixin, Base):
    __tablename__ = "discussion_board_appeals"

    id = Column(Uuid, primary_key=True, default=uuid4)
    member_id = Column(Uuid, ForeignKey("discussion_board_members.id"), nullable=False, index=True)
    moderation_action_id = Column(
        Uuid, ForeignKey("discussion_board_moderation_actions.id"), nullable=False, unique=True
    )
    appeal_explanation = Column(Text, nullable=False)
    additional_evidence = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending_review", index=True)
    reviewing_administrator_id = Column(Uuid, ForeignKey("discussion_board_administrators.id"), nullable=True)
    decision_reasoning = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
