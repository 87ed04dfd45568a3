"""
Community platform ORM models.
Reddit-style communities with subscriptions, posts, threaded comments,
post votes and content reports handled by community moderators.
"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid

from .base import AccountMixin, Base, SoftDeleteMixin, TimestampMixin


class CommunityMember(AccountMixin, Base):
    __tablename__ = "community_platform_members"

    karma = Column(Integer, nullable=False, default=0)


class CommunityModerator(AccountMixin, Base):
    __tablename__ = "community_platform_moderators"


class CommunityAdmin(AccountMixin, Base):
    __tablename__ = "community_platform_admins"


class Community(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "community_platform_communities"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(21), unique=True, nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    creator_member_id = Column(Uuid, ForeignKey("community_platform_members.id"), nullable=False)
    subscriber_count = Column(Integer, nullable=False, default=0)


class ModeratorAssignment(TimestampMixin, Base):
    __tablename__ = "community_platform_moderator_assignments"

    id = Column(Uuid, primary_key=True, default=uuid4)
    community_id = Column(Uuid, ForeignKey("community_platform_communities.id"), nullable=False)
    moderator_id = Column(Uuid, ForeignKey("community_platform_moderators.id"), nullable=False)
    assigned_by_admin_id = Column(Uuid, ForeignKey("community_platform_admins.id"), nullable=False)

    __table_args__ = (
        Index("idx_community_moderator_assignment", "community_id", "moderator_id", unique=True),
    )


class Subscription(TimestampMixin, Base):
    __tablename__ = "community_platform_subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid4)
    member_id = Column(Uuid, ForeignKey("community_platform_members.id"), nullable=False, index=True)
    community_id = Column(Uuid, ForeignKey("community_platform_communities.id"), nullable=False, index=True)

    __table_args__ = (
        Index("idx_community_subscription_member_community", "member_id", "community_id", unique=True),
    )


class Post(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "community_platform_posts"

    id = Column(Uuid, primary_key=True, default=uuid4)
    community_id = Column(Uuid, ForeignKey("community_platform_communities.id"), nullable=False, index=True)
    author_id = Column(Uuid, ForeignKey("community_platform_members.id"), nullable=False, index=True)
    title = Column(String(300), nullable=False)
    body = Column(Text, nullable=True)
    score = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)


class Comment(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "community_platform_comments"

    id = Column(Uuid, primary_key=True, default=uuid4)
    post_id = Column(Uuid, ForeignKey("community_platform_posts.id"), nullable=False, index=True)
    author_id = Column(Uuid, ForeignKey("community_platform_members.id"), nullable=False, index=True)
    parent_comment_id = Column(Uuid, ForeignKey("community_platform_comments.id"), nullable=True)
    body = Column(Text, nullable=False)
    score = Column(Integer, nullable=False, default=0)


class PostVote(TimestampMixin, Base):
    __tablename__ = "community_platform_post_votes"

    id = Column(Uuid, primary_key=True, default=uuid4)
    member_id = Column(Uuid, ForeignKey("community_platform_members.id"), nullable=False)
    post_id = Column(Uuid, ForeignKey("community_platform_posts.id"), nullable=False, index=True)
    value = Column(Integer, nullable=False, comment="-1 or 1")

    __table_args__ = (
        Index("idx_community_post_vote_member_post", "member_id", "post_id", unique=True),
    )


class ContentReport(TimestampMixin, Base):
    __tablename__ = "community_platform_content_reports"

    id = Column(Uuid, primary_key=True, default=uuid4)
    reporter_member_id = Column(Uuid, ForeignKey("community_platform_members.id"), nullable=False, index=True)
    community_id = Column(Uuid, ForeignKey("community_platform_communities.id"), nullable=False, index=True)
    post_id = Column(Uuid, ForeignKey("community_platform_posts.id"), nullable=True)
    comment_id = Column(Uuid, ForeignKey("community_platform_comments.id"), nullable=True)
    category = Column(String(32), nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    resolution = Column(String(32), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
