"""
Discussion board service.
One function per operation: lookup, authorize, mutate or query, shape.
"""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ...db.discussion_board import (
    Appeal,
    BoardAdministrator,
    BoardCategory,
    BoardMember,
    BoardModerator,
    BoardReport,
    EditHistory,
    ModerationAction,
    Reply,
    Topic,
)
from ..authorization import Role
from ..errors import ConflictError, ForbiddenError, InvalidRequestError, ResourceNotFoundError
from ..pagination import (
    Page,
    between,
    conjunction,
    contains,
    equals,
    one_of,
    paginate,
    resolve_order,
)
from ..schemas import discussion_board as schemas
from .accounts import AccountService

logger = logging.getLogger(__name__)

MAX_REPLY_DEPTH = 10
APPEAL_WINDOW = timedelta(days=30)
MAX_PENDING_APPEALS = 5

SEVERITY_BY_CATEGORY = {
    "threats": "critical",
    "doxxing": "critical",
    "hate_speech": "critical",
    "personal_attack": "high",
    "misinformation": "high",
    "spam": "medium",
    "offensive_language": "medium",
    "trolling": "medium",
    "off_topic": "low",
    "other": "low",
}

# Lower rank sorts first in the moderation queue
SEVERITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3}

MODERATOR_VISIBLE_STATUSES = ("pending", "under_review")
CLOSED_REPORT_STATUSES = ("resolved", "dismissed")
REPORT_TRANSITIONS = {
    "pending": {"under_review", "resolved", "dismissed"},
    "under_review": {"resolved", "dismissed"},
}

members = AccountService(BoardMember, Role.BOARD_MEMBER)
moderators = AccountService(BoardModerator, Role.BOARD_MODERATOR)
administrators = AccountService(BoardAdministrator, Role.BOARD_ADMINISTRATOR)


def join_moderator(db: Session, request: schemas.ModeratorJoin):
    """Register a moderator appointed by an existing administrator."""
    admin = (
        db.query(BoardAdministrator)
        .filter(
            BoardAdministrator.id == request.appointed_by_admin_id,
            BoardAdministrator.deleted_at.is_(None),
        )
        .first()
    )
    if admin is None:
        raise ResourceNotFoundError("Administrator", request.appointed_by_admin_id)
    return moderators.join(db, request.model_dump())


# Helpers

def _get_live_topic(db: Session, topic_id: UUID) -> Topic:
    topic = (
        db.query(Topic)
        .filter(Topic.id == topic_id, Topic.deleted_at.is_(None), Topic.is_hidden.is_(False))
        .first()
    )
    if topic is None:
        raise ResourceNotFoundError("Topic", topic_id)
    return topic


def _get_live_reply(db: Session, reply_id: UUID, topic_id: UUID = None) -> Reply:
    query = db.query(Reply).filter(
        Reply.id == reply_id, Reply.deleted_at.is_(None), Reply.is_hidden.is_(False)
    )
    if topic_id is not None:
        query = query.filter(Reply.topic_id == topic_id)
    reply = query.first()
    if reply is None:
        raise ResourceNotFoundError("Reply", reply_id)
    return reply


def _ensure_can_post(member: BoardMember) -> None:
    if member.status == "suspended" and member.suspended_until is not None \
            and member.suspended_until <= datetime.utcnow():
        # Suspension elapsed
        member.status = "active"
        member.suspended_until = None
    if member.status != "active":
        raise ForbiddenError(f"Member is {member.status} and cannot post")


def _get_active_category(db: Session, category_id: UUID) -> BoardCategory:
    category = db.query(BoardCategory).filter(BoardCategory.id == category_id).first()
    if category is None or not category.is_active:
        raise ResourceNotFoundError("Category", category_id)
    return category


# Categories

def create_category(db: Session, request: schemas.CategoryCreate) -> BoardCategory:
    if db.query(BoardCategory).filter(BoardCategory.slug == request.slug).first():
        raise ConflictError("Category slug already exists", {"slug": request.slug})

    category = BoardCategory(**request.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def search_categories(db: Session, request: schemas.CategoryRequest) -> Page[schemas.Category]:
    query = db.query(BoardCategory).filter(
        *conjunction(
            equals(BoardCategory.is_active, request.is_active),
            contains([BoardCategory.name, BoardCategory.description], request.search),
        )
    )
    order_by = resolve_order(
        {
            "display_order": BoardCategory.display_order,
            "name": BoardCategory.name,
            "created_at": BoardCategory.created_at,
        },
        request.sort_by,
        request.sort_direction,
        default="display_order",
        default_direction="asc",
        tie_breaker=BoardCategory.id,
    )
    return paginate(query, request, schemas.Category, order_by)


# Topics

def create_topic(db: Session, member: BoardMember, request: schemas.TopicCreate) -> Topic:
    _ensure_can_post(member)
    _get_active_category(db, request.category_id)

    topic = Topic(
        category_id=request.category_id,
        author_id=member.id,
        title=request.title,
        body=request.body,
    )
    db.add(topic)
    db.commit()
    db.refresh(topic)
    logger.info(f"Topic created: id={topic.id} author={member.id}")
    return topic


def _get_own_topic(db: Session, member: BoardMember, topic_id: UUID) -> Topic:
    topic = db.query(Topic).filter(Topic.id == topic_id, Topic.deleted_at.is_(None)).first()
    if topic is None:
        raise ResourceNotFoundError("Topic", topic_id)
    if topic.author_id != member.id:
        raise ForbiddenError("Only the author can modify this topic")
    return topic


def update_topic(db: Session, member: BoardMember, topic_id: UUID, request: schemas.TopicUpdate) -> Topic:
    topic = _get_own_topic(db, member, topic_id)

    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        _get_active_category(db, changes["category_id"])

    previous_title, previous_body = topic.title, topic.body
    for field, value in changes.items():
        setattr(topic, field, value)
    if (topic.title, topic.body) != (previous_title, previous_body):
        _record_edit(
            db, "topic", topic.id, member,
            previous_content=previous_body, new_content=topic.body,
            previous_title=previous_title, new_title=topic.title,
        )

    db.commit()
    db.refresh(topic)
    return topic


def delete_topic(db: Session, member: BoardMember, topic_id: UUID) -> None:
    topic = _get_own_topic(db, member, topic_id)
    topic.deleted_at = datetime.utcnow()
    db.commit()


def get_topic(db: Session, topic_id: UUID) -> Topic:
    topic = _get_live_topic(db, topic_id)
    topic.view_count = Topic.view_count + 1
    db.commit()
    db.refresh(topic)
    return topic


def search_topics(db: Session, request: schemas.TopicRequest) -> Page[schemas.TopicSummary]:
    query = db.query(Topic).filter(
        Topic.deleted_at.is_(None),
        Topic.is_hidden.is_(False),
        *conjunction(
            equals(Topic.category_id, request.category_id),
            equals(Topic.author_id, request.author_id),
            contains([Topic.title, Topic.body], request.search),
            between(Topic.created_at, request.created_from, request.created_to),
        ),
    )
    order_by = resolve_order(
        {
            "created_at": Topic.created_at,
            "updated_at": Topic.updated_at,
            "title": Topic.title,
            "reply_count": Topic.reply_count,
        },
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Topic.id,
    )
    return paginate(query, request, schemas.TopicSummary, order_by)


# Replies

def create_reply(db: Session, member: BoardMember, topic_id: UUID, request: schemas.ReplyCreate) -> Reply:
    _ensure_can_post(member)
    topic = _get_live_topic(db, topic_id)

    depth = 0
    if request.parent_reply_id is not None:
        parent = (
            db.query(Reply)
            .filter(Reply.id == request.parent_reply_id, Reply.deleted_at.is_(None))
            .first()
        )
        if parent is None or parent.topic_id != topic.id:
            raise InvalidRequestError("Parent reply does not belong to this topic")
        depth = parent.depth + 1
        if depth > MAX_REPLY_DEPTH:
            raise InvalidRequestError(
                f"Replies cannot be nested deeper than {MAX_REPLY_DEPTH} levels",
                {"max_depth": MAX_REPLY_DEPTH},
            )

    reply = Reply(
        topic_id=topic.id,
        author_id=member.id,
        parent_reply_id=request.parent_reply_id,
        depth=depth,
        content=request.content,
    )
    db.add(reply)
    topic.reply_count = Topic.reply_count + 1
    db.commit()
    db.refresh(reply)
    return reply


def _discount_reply(db: Session, reply: Reply) -> None:
    topic = db.query(Topic).filter(Topic.id == reply.topic_id).first()
    if topic is not None and topic.reply_count > 0:
        topic.reply_count = Topic.reply_count - 1


def _get_own_reply(db: Session, member: BoardMember, topic_id: UUID, reply_id: UUID) -> Reply:
    reply = (
        db.query(Reply)
        .filter(Reply.id == reply_id, Reply.topic_id == topic_id, Reply.deleted_at.is_(None))
        .first()
    )
    if reply is None:
        raise ResourceNotFoundError("Reply", reply_id)
    if reply.author_id != member.id:
        raise ForbiddenError("Only the author can modify this reply")
    return reply


def update_reply(db: Session, member: BoardMember, topic_id: UUID, reply_id: UUID,
                 request: schemas.ReplyUpdate) -> Reply:
    reply = _get_own_reply(db, member, topic_id, reply_id)
    if request.content != reply.content:
        _record_edit(db, "reply", reply.id, member, previous_content=reply.content, new_content=request.content)
        reply.content = request.content
    db.commit()
    db.refresh(reply)
    return reply


def delete_reply(db: Session, member: BoardMember, topic_id: UUID, reply_id: UUID) -> None:
    reply = _get_own_reply(db, member, topic_id, reply_id)
    reply.deleted_at = datetime.utcnow()
    _discount_reply(db, reply)
    db.commit()


def get_reply(db: Session, topic_id: UUID, reply_id: UUID) -> Reply:
    _get_live_topic(db, topic_id)
    return _get_live_reply(db, reply_id, topic_id)


def search_replies(db: Session, topic_id: UUID, request: schemas.ReplyRequest) -> Page[schemas.Reply]:
    _get_live_topic(db, topic_id)
    query = db.query(Reply).filter(
        Reply.topic_id == topic_id,
        Reply.deleted_at.is_(None),
        Reply.is_hidden.is_(False),
        *conjunction(
            equals(Reply.author_id, request.author_id),
            equals(Reply.parent_reply_id, request.parent_reply_id),
            contains([Reply.content], request.search),
            between(Reply.created_at, request.created_from, request.created_to),
        ),
    )
    order_by = resolve_order(
        {"created_at": Reply.created_at},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        default_direction="asc",
        tie_breaker=Reply.id,
    )
    return paginate(query, request, schemas.Reply, order_by)


# Edit history

def _record_edit(db: Session, entity_type: str, entity_id: UUID, member: BoardMember,
                 previous_content: str, new_content: str,
                 previous_title: str = None, new_title: str = None) -> EditHistory:
    latest = (
        db.query(func.max(EditHistory.revision))
        .filter(EditHistory.entity_type == entity_type, EditHistory.entity_id == entity_id)
        .scalar()
    )
    entry = EditHistory(
        entity_type=entity_type,
        entity_id=entity_id,
        member_id=member.id,
        revision=(latest or 0) + 1,
        previous_title=previous_title,
        new_title=new_title,
        previous_content=previous_content,
        new_content=new_content,
    )
    db.add(entry)
    return entry


def _search_edits(db: Session, entity_type: str, entity_id: UUID,
                  request: schemas.EditHistoryRequest) -> Page[schemas.EditHistory]:
    query = db.query(EditHistory).filter(
        EditHistory.entity_type == entity_type,
        EditHistory.entity_id == entity_id,
        *conjunction(
            equals(EditHistory.member_id, request.member_id),
            between(EditHistory.created_at, request.created_from, request.created_to),
        ),
    )
    order_by = resolve_order(
        {"created_at": [EditHistory.created_at, EditHistory.revision]},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=EditHistory.id,
    )
    return paginate(query, request, schemas.EditHistory, order_by)


def search_topic_edits(db: Session, topic_id: UUID,
                       request: schemas.EditHistoryRequest) -> Page[schemas.EditHistory]:
    topic = _get_live_topic(db, topic_id)
    return _search_edits(db, "topic", topic.id, request)


def search_reply_edits(db: Session, topic_id: UUID, reply_id: UUID,
                       request: schemas.EditHistoryRequest) -> Page[schemas.EditHistory]:
    _get_live_topic(db, topic_id)
    reply = _get_live_reply(db, reply_id, topic_id)
    return _search_edits(db, "reply", reply.id, request)


# Reports

def create_report(db: Session, member: BoardMember, request: schemas.ReportCreate) -> BoardReport:
    targets = [t for t in (request.reported_topic_id, request.reported_reply_id) if t is not None]
    if len(targets) != 1:
        raise InvalidRequestError("Exactly one of reported_topic_id or reported_reply_id is required")

    if request.violation_category == "other" and not (request.reporter_explanation or "").strip():
        raise InvalidRequestError("An explanation is required for violation category 'other'")

    if request.reported_topic_id is not None:
        content = _get_live_topic(db, request.reported_topic_id)
        duplicate = BoardReport.reported_topic_id == content.id
    else:
        content = _get_live_reply(db, request.reported_reply_id)
        duplicate = BoardReport.reported_reply_id == content.id

    if content.author_id == member.id:
        raise InvalidRequestError("You cannot report your own content")

    if db.query(BoardReport).filter(BoardReport.reporter_member_id == member.id, duplicate).first():
        raise ConflictError("You have already reported this content")

    report = BoardReport(
        reporter_member_id=member.id,
        reported_topic_id=request.reported_topic_id,
        reported_reply_id=request.reported_reply_id,
        reported_member_id=content.author_id,
        violation_category=request.violation_category,
        severity=SEVERITY_BY_CATEGORY[request.violation_category],
        reporter_explanation=request.reporter_explanation,
        status="pending",
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(f"Report filed: id={report.id} severity={report.severity}")
    return report


def _severity_rank():
    return case(SEVERITY_RANK, value=BoardReport.severity, else_=len(SEVERITY_RANK))


def search_reports(db: Session, request: schemas.ReportRequest, include_closed: bool) -> Page[schemas.Report]:
    """
    Moderation queue.

    Moderators only see open reports; administrators (include_closed=True)
    also see resolved and dismissed ones.
    """
    base = [] if include_closed else [one_of(BoardReport.status, MODERATOR_VISIBLE_STATUSES)]
    query = db.query(BoardReport).filter(
        *conjunction(
            *base,
            equals(BoardReport.status, request.status),
            equals(BoardReport.violation_category, request.violation_category),
            equals(BoardReport.severity, request.severity),
            equals(BoardReport.assigned_moderator_id, request.assigned_moderator_id),
            between(BoardReport.created_at, request.created_from, request.created_to),
        )
    )

    if (request.sort_by or "priority") == "priority":
        # Most severe first, then oldest first within a severity
        order_by = [_severity_rank().asc(), BoardReport.created_at.asc(), BoardReport.id.asc()]
    else:
        order_by = resolve_order(
            {"created_at": BoardReport.created_at, "severity": _severity_rank()},
            request.sort_by,
            request.sort_direction,
            default="created_at",
            default_direction="asc" if request.sort_by == "severity" else "desc",
            tie_breaker=BoardReport.id,
        )
    return paginate(query, request, schemas.Report, order_by)


def get_report(db: Session, report_id: UUID) -> BoardReport:
    report = db.query(BoardReport).filter(BoardReport.id == report_id).first()
    if report is None:
        raise ResourceNotFoundError("Report", report_id)
    return report


def _close_report(report: BoardReport, status: str, notes: str = None) -> None:
    report.status = status
    report.resolved_at = datetime.utcnow()
    if notes:
        report.resolution_notes = notes


def update_report(db: Session, moderator: BoardModerator, report_id: UUID,
                  request: schemas.ReportUpdate) -> BoardReport:
    report = get_report(db, report_id)
    if report.status in CLOSED_REPORT_STATUSES:
        raise ConflictError(f"Report is already {report.status}")

    if request.assign_to_self:
        report.assigned_moderator_id = moderator.id

    if request.status is not None and request.status != report.status:
        if request.status not in REPORT_TRANSITIONS.get(report.status, set()):
            raise InvalidRequestError(f"Cannot move report from {report.status} to {request.status}")
        if request.status in CLOSED_REPORT_STATUSES:
            if not (request.resolution_notes or "").strip():
                raise InvalidRequestError("resolution_notes are required to close a report")
            _close_report(report, request.status, request.resolution_notes)
            if report.assigned_moderator_id is None:
                report.assigned_moderator_id = moderator.id
        else:
            report.status = request.status
    elif request.resolution_notes is not None:
        report.resolution_notes = request.resolution_notes

    db.commit()
    db.refresh(report)
    return report


# Moderation actions

def create_moderation_action(db: Session, moderator: BoardModerator,
                             request: schemas.ModerationActionCreate) -> ModerationAction:
    target = (
        db.query(BoardMember)
        .filter(BoardMember.id == request.target_member_id, BoardMember.deleted_at.is_(None))
        .first()
    )
    if target is None:
        raise ResourceNotFoundError("Member", request.target_member_id)

    topic = reply = None
    if request.action_type in ("hide_content", "delete_content"):
        if (request.content_topic_id is None) == (request.content_reply_id is None):
            raise InvalidRequestError("Content actions need exactly one of content_topic_id or content_reply_id")
        if request.content_topic_id is not None:
            topic = db.query(Topic).filter(Topic.id == request.content_topic_id, Topic.deleted_at.is_(None)).first()
            if topic is None:
                raise ResourceNotFoundError("Topic", request.content_topic_id)
            owner_id = topic.author_id
        else:
            reply = db.query(Reply).filter(Reply.id == request.content_reply_id, Reply.deleted_at.is_(None)).first()
            if reply is None:
                raise ResourceNotFoundError("Reply", request.content_reply_id)
            owner_id = reply.author_id
        if owner_id != target.id:
            raise InvalidRequestError("Content does not belong to the target member")

    if request.action_type == "suspend_user" and request.duration_days is None:
        raise InvalidRequestError("duration_days is required for suspend_user")

    report = None
    if request.related_report_id is not None:
        report = get_report(db, request.related_report_id)
        if report.reported_member_id != target.id:
            raise InvalidRequestError("Report does not concern the target member")

    now = datetime.utcnow()
    expires_at = None
    if request.action_type == "suspend_user":
        expires_at = now + timedelta(days=request.duration_days)
        target.status = "suspended"
        target.suspended_until = expires_at
    elif request.action_type == "ban_user":
        target.status = "banned"
        target.suspended_until = None
    elif request.action_type == "hide_content":
        (topic or reply).is_hidden = True
    elif request.action_type == "delete_content":
        (topic or reply).deleted_at = now
        if reply is not None:
            _discount_reply(db, reply)

    action = ModerationAction(
        moderator_id=moderator.id,
        target_member_id=target.id,
        related_report_id=request.related_report_id,
        content_topic_id=request.content_topic_id,
        content_reply_id=request.content_reply_id,
        action_type=request.action_type,
        reason=request.reason,
        duration_days=request.duration_days if request.action_type == "suspend_user" else None,
        expires_at=expires_at,
    )
    db.add(action)

    if report is not None and report.status not in CLOSED_REPORT_STATUSES:
        _close_report(report, "resolved", f"{request.action_type}: {request.reason}")
        report.assigned_moderator_id = report.assigned_moderator_id or moderator.id

    db.commit()
    db.refresh(action)
    logger.info(f"Moderation action: type={action.action_type} target={target.id} by={moderator.id}")
    return action


def get_moderation_action(db: Session, action_id: UUID) -> ModerationAction:
    action = db.query(ModerationAction).filter(ModerationAction.id == action_id).first()
    if action is None:
        raise ResourceNotFoundError("ModerationAction", action_id)
    return action


def search_moderation_actions(db: Session, request: schemas.ModerationActionRequest) -> Page[schemas.ModerationAction]:
    query = db.query(ModerationAction).filter(
        *conjunction(
            equals(ModerationAction.action_type, request.action_type),
            equals(ModerationAction.target_member_id, request.target_member_id),
            equals(ModerationAction.moderator_id, request.moderator_id),
            between(ModerationAction.created_at, request.created_from, request.created_to),
        )
    )
    order_by = resolve_order(
        {"created_at": ModerationAction.created_at},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=ModerationAction.id,
    )
    return paginate(query, request, schemas.ModerationAction, order_by)


# Appeals

def create_appeal(db: Session, member: BoardMember, request: schemas.AppealCreate) -> Appeal:
    action = get_moderation_action(db, request.moderation_action_id)
    if action.target_member_id != member.id:
        raise ForbiddenError("You can only appeal moderation actions against your own account")

    if datetime.utcnow() - action.created_at > APPEAL_WINDOW:
        raise InvalidRequestError("Appeal window has closed (30 days from moderation action)")

    if db.query(Appeal).filter(Appeal.moderation_action_id == action.id).first():
        raise ConflictError("You have already submitted an appeal for this decision")

    pending = (
        db.query(func.count(Appeal.id))
        .filter(Appeal.member_id == member.id, Appeal.status == "pending_review")
        .scalar()
    )
    if pending >= MAX_PENDING_APPEALS:
        raise InvalidRequestError(
            f"Maximum of {MAX_PENDING_APPEALS} active appeals reached",
            {"pending": pending},
        )

    appeal = Appeal(
        member_id=member.id,
        moderation_action_id=action.id,
        appeal_explanation=request.appeal_explanation,
        additional_evidence=request.additional_evidence,
        status="pending_review",
    )
    db.add(appeal)
    db.commit()
    db.refresh(appeal)
    return appeal


def get_appeal(db: Session, appeal_id: UUID, member: BoardMember = None) -> Appeal:
    appeal = db.query(Appeal).filter(Appeal.id == appeal_id).first()
    if appeal is None or (member is not None and appeal.member_id != member.id):
        raise ResourceNotFoundError("Appeal", appeal_id)
    return appeal


def search_appeals(db: Session, request: schemas.AppealRequest, member: BoardMember = None) -> Page[schemas.Appeal]:
    """Search appeals; members are scoped to their own."""
    member_id = member.id if member is not None else request.member_id
    query = db.query(Appeal).filter(
        *conjunction(
            equals(Appeal.member_id, member_id),
            one_of(Appeal.status, request.statuses),
            between(Appeal.created_at, request.created_from, request.created_to),
        )
    )
    order_by = resolve_order(
        {"created_at": Appeal.created_at, "updated_at": Appeal.updated_at},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Appeal.id,
    )
    return paginate(query, request, schemas.Appeal, order_by)


def decide_appeal(db: Session, administrator: BoardAdministrator, appeal_id: UUID,
                  request: schemas.AppealDecision) -> Appeal:
    appeal = get_appeal(db, appeal_id)
    if appeal.status != "pending_review":
        raise ConflictError(f"Appeal already decided: {appeal.status}")

    appeal.status = request.decision
    appeal.decision_reasoning = request.decision_reasoning
    appeal.reviewing_administrator_id = administrator.id
    appeal.reviewed_at = datetime.utcnow()

    if request.decision == "overturned":
        action = get_moderation_action(db, appeal.moderation_action_id)
        action.is_reversed = True
        if action.action_type in ("suspend_user", "ban_user"):
            member = db.query(BoardMember).filter(BoardMember.id == action.target_member_id).first()
            if member is not None:
                member.status = "active"
                member.suspended_until = None
        elif action.action_type == "hide_content":
            content = (
                db.query(Topic).filter(Topic.id == action.content_topic_id).first()
                if action.content_topic_id
                else db.query(Reply).filter(Reply.id == action.content_reply_id).first()
            )
            if content is not None:
                content.is_hidden = False

    db.commit()
    db.refresh(appeal)
    logger.info(f"Appeal decided: id={appeal.id} decision={appeal.status}")
    return appeal


# Members

def search_members(db: Session, request: schemas.MemberRequest) -> Page[schemas.MemberSummary]:
    query = db.query(BoardMember).filter(
        BoardMember.deleted_at.is_(None),
        *conjunction(
            equals(BoardMember.status, request.status),
            contains([BoardMember.username, BoardMember.display_name], request.search),
        ),
    )
    order_by = resolve_order(
        {"created_at": BoardMember.created_at, "username": BoardMember.username},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=BoardMember.id,
    )
    return paginate(query, request, schemas.MemberSummary, order_by)
