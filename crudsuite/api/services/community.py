"""
Community platform service.
Communities, subscriptions, posts, comments, votes and content reports.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from ...db.community import (
    Comment,
    Community,
    CommunityAdmin,
    CommunityMember,
    CommunityModerator,
    ContentReport,
    ModeratorAssignment,
    Post,
    PostVote,
    Subscription,
)
from ..authorization import Role
from ..errors import ConflictError, ForbiddenError, InvalidRequestError, ResourceNotFoundError
from ..pagination import Page, between, conjunction, contains, equals, paginate, resolve_order
from ..schemas import community as schemas
from .accounts import AccountService

logger = logging.getLogger(__name__)

members = AccountService(CommunityMember, Role.COMMUNITY_MEMBER)
moderators = AccountService(CommunityModerator, Role.COMMUNITY_MODERATOR)
admins = AccountService(CommunityAdmin, Role.COMMUNITY_ADMIN)


def get_community(db: Session, community_id: UUID) -> Community:
    community = (
        db.query(Community)
        .filter(Community.id == community_id, Community.deleted_at.is_(None))
        .first()
    )
    if community is None:
        raise ResourceNotFoundError("Community", community_id)
    return community


def get_post(db: Session, post_id: UUID) -> Post:
    post = db.query(Post).filter(Post.id == post_id, Post.deleted_at.is_(None)).first()
    if post is None:
        raise ResourceNotFoundError("Post", post_id)
    return post


# Communities

def create_community(db: Session, member: CommunityMember, request: schemas.CommunityCreate) -> Community:
    """Create a community and subscribe its creator."""
    if db.query(Community).filter(Community.name == request.name).first():
        raise ConflictError("Community name already taken", {"name": request.name})

    community = Community(
        name=request.name,
        title=request.title,
        description=request.description,
        creator_member_id=member.id,
        subscriber_count=1,
    )
    db.add(community)
    db.flush()
    db.add(Subscription(member_id=member.id, community_id=community.id))
    db.commit()
    db.refresh(community)

    logger.info(f"Community created: name={community.name} creator={member.id}")
    return community


def search_communities(db: Session, request: schemas.CommunityRequest) -> Page[schemas.Community]:
    query = db.query(Community).filter(
        Community.deleted_at.is_(None),
        *conjunction(contains([Community.name, Community.title], request.search)),
    )
    order_by = resolve_order(
        {
            "created_at": Community.created_at,
            "name": Community.name,
            "subscriber_count": Community.subscriber_count,
        },
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Community.id,
    )
    return paginate(query, request, schemas.Community, order_by)


def assign_moderator(db: Session, admin: CommunityAdmin, community_id: UUID,
                     request: schemas.ModeratorAssignmentCreate) -> ModeratorAssignment:
    community = get_community(db, community_id)
    moderator = (
        db.query(CommunityModerator)
        .filter(CommunityModerator.id == request.moderator_id, CommunityModerator.deleted_at.is_(None))
        .first()
    )
    if moderator is None:
        raise ResourceNotFoundError("Moderator", request.moderator_id)

    existing = (
        db.query(ModeratorAssignment)
        .filter(
            ModeratorAssignment.community_id == community.id,
            ModeratorAssignment.moderator_id == moderator.id,
        )
        .first()
    )
    if existing:
        raise ConflictError("Moderator already assigned to this community")

    assignment = ModeratorAssignment(
        community_id=community.id,
        moderator_id=moderator.id,
        assigned_by_admin_id=admin.id,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


# Subscriptions

def subscribe(db: Session, member: CommunityMember, community_id: UUID) -> schemas.Subscription:
    community = get_community(db, community_id)
    existing = (
        db.query(Subscription)
        .filter(Subscription.member_id == member.id, Subscription.community_id == community.id)
        .first()
    )
    if existing:
        raise ConflictError("Already subscribed")

    subscription = Subscription(member_id=member.id, community_id=community.id)
    db.add(subscription)
    community.subscriber_count = Community.subscriber_count + 1
    db.commit()
    db.refresh(subscription)

    return schemas.Subscription(
        id=subscription.id,
        member_id=subscription.member_id,
        community_id=community.id,
        community_name=community.name,
        created_at=subscription.created_at,
    )


def unsubscribe(db: Session, member: CommunityMember, community_id: UUID) -> None:
    community = get_community(db, community_id)
    subscription = (
        db.query(Subscription)
        .filter(Subscription.member_id == member.id, Subscription.community_id == community.id)
        .first()
    )
    if subscription is None:
        raise ResourceNotFoundError("Subscription", community_id)

    db.delete(subscription)
    if community.subscriber_count > 0:
        community.subscriber_count = Community.subscriber_count - 1
    db.commit()


def search_subscriptions(db: Session, member: CommunityMember,
                         request: schemas.SubscriptionRequest) -> Page[schemas.Subscription]:
    query = (
        db.query(
            Subscription.id,
            Subscription.member_id,
            Subscription.community_id,
            Community.name.label("community_name"),
            Subscription.created_at,
        )
        .join(Community, Community.id == Subscription.community_id)
        .filter(
            Subscription.member_id == member.id,
            Community.deleted_at.is_(None),
            *conjunction(contains([Community.name], request.search)),
        )
    )
    order_by = resolve_order(
        {"created_at": Subscription.created_at, "community_name": Community.name},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Subscription.id,
    )
    return paginate(query, request, schemas.Subscription, order_by)


# Posts

def create_post(db: Session, member: CommunityMember, community_id: UUID, request: schemas.PostCreate) -> Post:
    community = get_community(db, community_id)
    post = Post(community_id=community.id, author_id=member.id, title=request.title, body=request.body)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def _get_own_post(db: Session, member: CommunityMember, post_id: UUID) -> Post:
    post = get_post(db, post_id)
    if post.author_id != member.id:
        raise ForbiddenError("Only the author can modify this post")
    return post


def update_post(db: Session, member: CommunityMember, post_id: UUID, request: schemas.PostUpdate) -> Post:
    post = _get_own_post(db, member, post_id)
    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(post, field, value)
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, member: CommunityMember, post_id: UUID) -> None:
    post = _get_own_post(db, member, post_id)
    post.deleted_at = datetime.utcnow()
    db.commit()


def search_posts(db: Session, request: schemas.PostRequest) -> Page[schemas.Post]:
    query = db.query(Post).filter(
        Post.deleted_at.is_(None),
        *conjunction(
            equals(Post.community_id, request.community_id),
            equals(Post.author_id, request.author_id),
            contains([Post.title, Post.body], request.search),
            between(Post.created_at, request.created_from, request.created_to),
        ),
    )
    order_by = resolve_order(
        {
            "new": Post.created_at,
            "top": [Post.score, Post.created_at],
            "comments": [Post.comment_count, Post.created_at],
        },
        request.sort_by,
        request.sort_direction,
        default="new",
        tie_breaker=Post.id,
    )
    return paginate(query, request, schemas.Post, order_by)


# Comments

def create_comment(db: Session, member: CommunityMember, post_id: UUID, request: schemas.CommentCreate) -> Comment:
    post = get_post(db, post_id)

    if request.parent_comment_id is not None:
        parent = (
            db.query(Comment)
            .filter(Comment.id == request.parent_comment_id, Comment.deleted_at.is_(None))
            .first()
        )
        if parent is None or parent.post_id != post.id:
            raise InvalidRequestError("Parent comment does not belong to this post")

    comment = Comment(
        post_id=post.id,
        author_id=member.id,
        parent_comment_id=request.parent_comment_id,
        body=request.body,
    )
    db.add(comment)
    post.comment_count = Post.comment_count + 1
    db.commit()
    db.refresh(comment)
    return comment


def search_comments(db: Session, post_id: UUID, request: schemas.CommentRequest) -> Page[schemas.Comment]:
    get_post(db, post_id)
    query = db.query(Comment).filter(
        Comment.post_id == post_id,
        Comment.deleted_at.is_(None),
        *conjunction(
            equals(Comment.author_id, request.author_id),
            equals(Comment.parent_comment_id, request.parent_comment_id),
        ),
    )

    sort_by = request.sort_by or "new"
    if sort_by == "old":
        order_by = [Comment.created_at.asc(), Comment.id.asc()]
    elif sort_by == "top":
        order_by = [Comment.score.desc(), Comment.created_at.desc(), Comment.id.desc()]
    else:
        order_by = [Comment.created_at.desc(), Comment.id.desc()]
    return paginate(query, request, schemas.Comment, order_by)


# Votes

def vote(db: Session, member: CommunityMember, post_id: UUID, request: schemas.VoteCast) -> schemas.VoteResult:
    """
    Cast, change or clear a vote.

    The difference between the new and the previous value moves both the
    post score and the author's karma.
    """
    post = get_post(db, post_id)
    if post.author_id == member.id:
        raise InvalidRequestError("You cannot vote on your own post")

    existing = (
        db.query(PostVote)
        .filter(PostVote.member_id == member.id, PostVote.post_id == post.id)
        .first()
    )
    previous = existing.value if existing else 0
    delta = request.value - previous

    if request.value == 0:
        if existing:
            db.delete(existing)
    elif existing:
        existing.value = request.value
    else:
        db.add(PostVote(member_id=member.id, post_id=post.id, value=request.value))

    if delta:
        post.score = Post.score + delta
        author = db.query(CommunityMember).filter(CommunityMember.id == post.author_id).first()
        if author is not None:
            author.karma = CommunityMember.karma + delta

    db.commit()
    db.refresh(post)
    return schemas.VoteResult(post_id=post.id, value=request.value, score=post.score)


# Reports

def create_report(db: Session, member: CommunityMember, request: schemas.ReportCreate) -> ContentReport:
    if (request.post_id is None) == (request.comment_id is None):
        raise InvalidRequestError("Exactly one of post_id or comment_id is required")

    if request.post_id is not None:
        post = get_post(db, request.post_id)
        duplicate = ContentReport.post_id == post.id
    else:
        comment = (
            db.query(Comment)
            .filter(Comment.id == request.comment_id, Comment.deleted_at.is_(None))
            .first()
        )
        if comment is None:
            raise ResourceNotFoundError("Comment", request.comment_id)
        post = get_post(db, comment.post_id)
        duplicate = ContentReport.comment_id == comment.id

    if db.query(ContentReport).filter(ContentReport.reporter_member_id == member.id, duplicate).first():
        raise ConflictError("You have already reported this content")

    report = ContentReport(
        reporter_member_id=member.id,
        community_id=post.community_id,
        post_id=request.post_id,
        comment_id=request.comment_id,
        category=request.category,
        description=request.description,
        status="pending",
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    return report


def _assigned_communities(db: Session, moderator: CommunityModerator):
    return db.query(ModeratorAssignment.community_id).filter(ModeratorAssignment.moderator_id == moderator.id)


def search_reports(db: Session, request: schemas.ReportRequest,
                   moderator: CommunityModerator = None) -> Page[schemas.Report]:
    """Search reports; moderators only see communities they are assigned to."""
    scope = []
    if moderator is not None:
        scope.append(ContentReport.community_id.in_(_assigned_communities(db, moderator)))

    query = db.query(ContentReport).filter(
        *scope,
        *conjunction(
            equals(ContentReport.status, request.status),
            equals(ContentReport.category, request.category),
            equals(ContentReport.community_id, request.community_id),
            between(ContentReport.created_at, request.created_from, request.created_to),
        ),
    )
    order_by = resolve_order(
        {"created_at": ContentReport.created_at},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=ContentReport.id,
    )
    return paginate(query, request, schemas.Report, order_by)


def review_report(db: Session, report_id: UUID, request: schemas.ReportReview,
                  moderator: CommunityModerator = None) -> ContentReport:
    report = db.query(ContentReport).filter(ContentReport.id == report_id).first()
    if report is None:
        raise ResourceNotFoundError("Report", report_id)

    if moderator is not None:
        assigned = (
            db.query(ModeratorAssignment)
            .filter(
                ModeratorAssignment.moderator_id == moderator.id,
                ModeratorAssignment.community_id == report.community_id,
            )
            .first()
        )
        if assigned is None:
            raise ForbiddenError("Not a moderator of this community")

    if request.status == "action_taken" and request.resolution is None:
        raise InvalidRequestError("A resolution is required when taking action")

    now = datetime.utcnow()
    report.status = request.status
    report.resolution = request.resolution
    report.reviewed_at = now

    if request.status == "action_taken" and request.resolution == "remove_content":
        if report.comment_id is not None:
            target = db.query(Comment).filter(Comment.id == report.comment_id).first()
        else:
            target = db.query(Post).filter(Post.id == report.post_id).first()
        if target is not None and target.deleted_at is None:
            target.deleted_at = now
            if report.comment_id is not None:
                post = db.query(Post).filter(Post.id == target.post_id).first()
                if post is not None and post.comment_count > 0:
                    post.comment_count = Post.comment_count - 1

    db.commit()
    db.refresh(report)
    logger.info(f"Community report reviewed: id={report.id} status={report.status}")
    return report
