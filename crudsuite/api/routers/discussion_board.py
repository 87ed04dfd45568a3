"""
Discussion Board Endpoints
Categories, topics, replies, the moderation queue and appeals.

Search endpoints use PATCH with the filter body.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...db.discussion_board import BoardAdministrator, BoardMember, BoardModerator
from ..authorization import board_administrator, board_member, board_moderator
from ..dependencies import get_db
from ..pagination import Page
from ..schemas import discussion_board as schemas
from ..schemas.auth import ErrorResponse
from ..services import discussion_board as service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discussionBoard", tags=["discussion-board"])

FORBIDDEN = {403: {"model": ErrorResponse, "description": "Not authorized for this role"}}
NOT_FOUND = {404: {"model": ErrorResponse, "description": "Resource not found"}}


# Categories

@router.post(
    "/administrator/categories",
    response_model=schemas.Category,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, 409: {"model": ErrorResponse, "description": "Slug taken"}},
)
async def create_category(
    request: schemas.CategoryCreate,
    administrator: BoardAdministrator = Depends(board_administrator),
    db: Session = Depends(get_db),
):
    return service.create_category(db, request)


@router.patch("/categories", response_model=Page[schemas.Category])
async def search_categories(request: schemas.CategoryRequest, db: Session = Depends(get_db)):
    """Search categories (public)."""
    return service.search_categories(db, request)


# Topics

@router.post(
    "/member/topics",
    response_model=schemas.Topic,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def create_topic(
    request: schemas.TopicCreate,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    """
    Start a new topic.

    Suspended or banned members get 403; the category must exist and be active.
    """
    return service.create_topic(db, member, request)


@router.put("/member/topics/{topic_id}", response_model=schemas.Topic, responses={**FORBIDDEN, **NOT_FOUND})
async def update_topic(
    topic_id: UUID,
    request: schemas.TopicUpdate,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    return service.update_topic(db, member, topic_id, request)


@router.delete(
    "/member/topics/{topic_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def delete_topic(
    topic_id: UUID,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    service.delete_topic(db, member, topic_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/topics", response_model=Page[schemas.TopicSummary])
async def search_topics(request: schemas.TopicRequest, db: Session = Depends(get_db)):
    """Search visible topics (public)."""
    return service.search_topics(db, request)


@router.get("/topics/{topic_id}", response_model=schemas.Topic, responses=NOT_FOUND)
async def get_topic(topic_id: UUID, db: Session = Depends(get_db)):
    return service.get_topic(db, topic_id)


# Replies

@router.post(
    "/member/topics/{topic_id}/replies",
    response_model=schemas.Reply,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def create_reply(
    topic_id: UUID,
    request: schemas.ReplyCreate,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    return service.create_reply(db, member, topic_id, request)


@router.put(
    "/member/topics/{topic_id}/replies/{reply_id}",
    response_model=schemas.Reply,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def update_reply(
    topic_id: UUID,
    reply_id: UUID,
    request: schemas.ReplyUpdate,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    return service.update_reply(db, member, topic_id, reply_id, request)


@router.delete(
    "/member/topics/{topic_id}/replies/{reply_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def delete_reply(
    topic_id: UUID,
    reply_id: UUID,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    service.delete_reply(db, member, topic_id, reply_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/topics/{topic_id}/replies", response_model=Page[schemas.Reply], responses=NOT_FOUND)
async def search_replies(topic_id: UUID, request: schemas.ReplyRequest, db: Session = Depends(get_db)):
    return service.search_replies(db, topic_id, request)


@router.get("/topics/{topic_id}/replies/{reply_id}", response_model=schemas.Reply, responses=NOT_FOUND)
async def get_reply(topic_id: UUID, reply_id: UUID, db: Session = Depends(get_db)):
    return service.get_reply(db, topic_id, reply_id)


# Edit history

@router.patch("/topics/{topic_id}/editHistory", response_model=Page[schemas.EditHistory], responses=NOT_FOUND)
async def search_topic_edits(topic_id: UUID, request: schemas.EditHistoryRequest, db: Session = Depends(get_db)):
    """Past versions of a topic's title and body (public)."""
    return service.search_topic_edits(db, topic_id, request)


@router.patch(
    "/topics/{topic_id}/replies/{reply_id}/editHistory",
    response_model=Page[schemas.EditHistory],
    responses=NOT_FOUND,
)
async def search_reply_edits(
    topic_id: UUID,
    reply_id: UUID,
    request: schemas.EditHistoryRequest,
    db: Session = Depends(get_db),
):
    return service.search_reply_edits(db, topic_id, reply_id, request)


# Reports

@router.post(
    "/member/reports",
    response_model=schemas.Report,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, 409: {"model": ErrorResponse, "description": "Already reported"}},
)
async def create_report(
    request: schemas.ReportCreate,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    """
    Report a topic or a reply.

    Severity is derived from the violation category, so reports for threats
    or doxxing land at the top of the moderation queue.
    """
    return service.create_report(db, member, request)


@router.patch("/moderator/reports", response_model=Page[schemas.Report], responses=FORBIDDEN)
async def search_moderation_queue(
    request: schemas.ReportRequest,
    moderator: BoardModerator = Depends(board_moderator),
    db: Session = Depends(get_db),
):
    """Open reports (pending or under review), highest priority first by default."""
    return service.search_reports(db, request, include_closed=False)


@router.patch("/administrator/reports", response_model=Page[schemas.Report], responses=FORBIDDEN)
async def search_all_reports(
    request: schemas.ReportRequest,
    administrator: BoardAdministrator = Depends(board_administrator),
    db: Session = Depends(get_db),
):
    return service.search_reports(db, request, include_closed=True)


@router.get("/moderator/reports/{report_id}", response_model=schemas.Report, responses={**FORBIDDEN, **NOT_FOUND})
async def get_report(
    report_id: UUID,
    moderator: BoardModerator = Depends(board_moderator),
    db: Session = Depends(get_db),
):
    return service.get_report(db, report_id)


@router.put(
    "/moderator/reports/{report_id}",
    response_model=schemas.Report,
    responses={**FORBIDDEN, **NOT_FOUND, 409: {"model": ErrorResponse, "description": "Report closed"}},
)
async def update_report(
    report_id: UUID,
    request: schemas.ReportUpdate,
    moderator: BoardModerator = Depends(board_moderator),
    db: Session = Depends(get_db),
):
    return service.update_report(db, moderator, report_id, request)


# Moderation actions

@router.post(
    "/moderator/moderationActions",
    response_model=schemas.ModerationAction,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def create_moderation_action(
    request: schemas.ModerationActionCreate,
    moderator: BoardModerator = Depends(board_moderator),
    db: Session = Depends(get_db),
):
    return service.create_moderation_action(db, moderator, request)


@router.patch("/moderator/moderationActions", response_model=Page[schemas.ModerationAction], responses=FORBIDDEN)
async def search_moderation_actions(
    request: schemas.ModerationActionRequest,
    moderator: BoardModerator = Depends(board_moderator),
    db: Session = Depends(get_db),
):
    return service.search_moderation_actions(db, request)


@router.get(
    "/moderator/moderationActions/{action_id}",
    response_model=schemas.ModerationAction,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def get_moderation_action(
    action_id: UUID,
    moderator: BoardModerator = Depends(board_moderator),
    db: Session = Depends(get_db),
):
    return service.get_moderation_action(db, action_id)


# Appeals

@router.post(
    "/member/appeals",
    response_model=schemas.Appeal,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, 409: {"model": ErrorResponse, "description": "Already appealed"}},
)
async def create_appeal(
    request: schemas.AppealCreate,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    """
    Appeal a moderation action taken against the caller.

    Appeals must be filed within 30 days, once per action, and a member may
    have at most five appeals awaiting review.
    """
    return service.create_appeal(db, member, request)


@router.patch("/member/appeals", response_model=Page[schemas.Appeal], responses=FORBIDDEN)
async def search_own_appeals(
    request: schemas.AppealRequest,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    return service.search_appeals(db, request, member=member)


@router.get("/member/appeals/{appeal_id}", response_model=schemas.Appeal, responses={**FORBIDDEN, **NOT_FOUND})
async def get_own_appeal(
    appeal_id: UUID,
    member: BoardMember = Depends(board_member),
    db: Session = Depends(get_db),
):
    return service.get_appeal(db, appeal_id, member=member)


@router.patch("/administrator/appeals", response_model=Page[schemas.Appeal], responses=FORBIDDEN)
async def search_appeals(
    request: schemas.AppealRequest,
    administrator: BoardAdministrator = Depends(board_administrator),
    db: Session = Depends(get_db),
):
    return service.search_appeals(db, request)


@router.put(
    "/administrator/appeals/{appeal_id}",
    response_model=schemas.Appeal,
    responses={**FORBIDDEN, **NOT_FOUND, 409: {"model": ErrorResponse, "description": "Already decided"}},
)
async def decide_appeal(
    appeal_id: UUID,
    request: schemas.AppealDecision,
    administrator: BoardAdministrator = Depends(board_administrator),
    db: Session = Depends(get_db),
):
    return service.decide_appeal(db, administrator, appeal_id, request)


# Members

@router.patch("/administrator/members", response_model=Page[schemas.MemberSummary], responses=FORBIDDEN)
async def search_members(
    request: schemas.MemberRequest,
    administrator: BoardAdministrator = Depends(board_administrator),
    db: Session = Depends(get_db),
):
    return service.search_members(db, request)
