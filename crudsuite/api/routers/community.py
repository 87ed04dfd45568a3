"""
Community Platform Endpoints
Communities, subscriptions, posts, comments, votes and content reports.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...db.community import CommunityAdmin, CommunityMember, CommunityModerator
from ..authorization import community_admin, community_member, community_moderator
from ..dependencies import get_db
from ..pagination import Page
from ..schemas import community as schemas
from ..schemas.auth import ErrorResponse
from ..services import community as service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/communityPlatform", tags=["community-platform"])

FORBIDDEN = {403: {"model": ErrorResponse, "description": "Not authorized for this role"}}
NOT_FOUND = {404: {"model": ErrorResponse, "description": "Resource not found"}}
CONFLICT = {409: {"model": ErrorResponse, "description": "Duplicate"}}


# Communities

@router.post(
    "/member/communities",
    response_model=schemas.Community,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **CONFLICT},
)
async def create_community(
    request: schemas.CommunityCreate,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    """Create a community; the creator becomes its first subscriber."""
    return service.create_community(db, member, request)


@router.patch("/communities", response_model=Page[schemas.Community])
async def search_communities(request: schemas.CommunityRequest, db: Session = Depends(get_db)):
    return service.search_communities(db, request)


@router.get("/communities/{community_id}", response_model=schemas.Community, responses=NOT_FOUND)
async def get_community(community_id: UUID, db: Session = Depends(get_db)):
    return service.get_community(db, community_id)


@router.post(
    "/admin/communities/{community_id}/moderators",
    response_model=schemas.ModeratorAssignment,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, **CONFLICT},
)
async def assign_moderator(
    community_id: UUID,
    request: schemas.ModeratorAssignmentCreate,
    admin: CommunityAdmin = Depends(community_admin),
    db: Session = Depends(get_db),
):
    return service.assign_moderator(db, admin, community_id, request)


# Subscriptions

@router.post(
    "/member/communities/{community_id}/subscriptions",
    response_model=schemas.Subscription,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, **CONFLICT},
)
async def subscribe(
    community_id: UUID,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    return service.subscribe(db, member, community_id)


@router.delete(
    "/member/communities/{community_id}/subscriptions",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def unsubscribe(
    community_id: UUID,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    service.unsubscribe(db, member, community_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/member/subscriptions", response_model=Page[schemas.Subscription], responses=FORBIDDEN)
async def search_subscriptions(
    request: schemas.SubscriptionRequest,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    return service.search_subscriptions(db, member, request)


# Posts

@router.post(
    "/member/communities/{community_id}/posts",
    response_model=schemas.Post,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def create_post(
    community_id: UUID,
    request: schemas.PostCreate,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    return service.create_post(db, member, community_id, request)


@router.put("/member/posts/{post_id}", response_model=schemas.Post, responses={**FORBIDDEN, **NOT_FOUND})
async def update_post(
    post_id: UUID,
    request: schemas.PostUpdate,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    return service.update_post(db, member, post_id, request)


@router.delete(
    "/member/posts/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def delete_post(
    post_id: UUID,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    service.delete_post(db, member, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/posts", response_model=Page[schemas.Post])
async def search_posts(request: schemas.PostRequest, db: Session = Depends(get_db)):
    """
    Search posts across communities.

    Sort keys: ``new`` (creation time), ``top`` (score) and ``comments``
    (comment count), all descending unless a direction is given.
    """
    return service.search_posts(db, request)


@router.get("/posts/{post_id}", response_model=schemas.Post, responses=NOT_FOUND)
async def get_post(post_id: UUID, db: Session = Depends(get_db)):
    return service.get_post(db, post_id)


# Comments

@router.post(
    "/member/posts/{post_id}/comments",
    response_model=schemas.Comment,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def create_comment(
    post_id: UUID,
    request: schemas.CommentCreate,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    return service.create_comment(db, member, post_id, request)


@router.patch("/posts/{post_id}/comments", response_model=Page[schemas.Comment], responses=NOT_FOUND)
async def search_comments(post_id: UUID, request: schemas.CommentRequest, db: Session = Depends(get_db)):
    return service.search_comments(db, post_id, request)


# Votes

@router.put("/member/posts/{post_id}/votes", response_model=schemas.VoteResult, responses={**FORBIDDEN, **NOT_FOUND})
async def vote(
    post_id: UUID,
    request: schemas.VoteCast,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    return service.vote(db, member, post_id, request)


# Reports

@router.post(
    "/member/reports",
    response_model=schemas.Report,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, **CONFLICT},
)
async def create_report(
    request: schemas.ReportCreate,
    member: CommunityMember = Depends(community_member),
    db: Session = Depends(get_db),
):
    return service.create_report(db, member, request)


@router.patch("/moderator/reports", response_model=Page[schemas.Report], responses=FORBIDDEN)
async def search_moderator_reports(
    request: schemas.ReportRequest,
    moderator: CommunityModerator = Depends(community_moderator),
    db: Session = Depends(get_db),
):
    """Reports from the communities the caller moderates."""
    return service.search_reports(db, request, moderator=moderator)


@router.put("/moderator/reports/{report_id}", response_model=schemas.Report, responses={**FORBIDDEN, **NOT_FOUND})
async def review_report_as_moderator(
    report_id: UUID,
    request: schemas.ReportReview,
    moderator: CommunityModerator = Depends(community_moderator),
    db: Session = Depends(get_db),
):
    return service.review_report(db, report_id, request, moderator=moderator)


@router.patch("/admin/reports", response_model=Page[schemas.Report], responses=FORBIDDEN)
async def search_all_reports(
    request: schemas.ReportRequest,
    admin: CommunityAdmin = Depends(community_admin),
    db: Session = Depends(get_db),
):
    return service.search_reports(db, request)


@router.put("/admin/reports/{report_id}", response_model=schemas.Report, responses={**FORBIDDEN, **NOT_FOUND})
async def review_report_as_admin(
    report_id: UUID,
    request: schemas.ReportReview,
    admin: CommunityAdmin = Depends(community_admin),
    db: Session = Depends(get_db),
):
    return service.review_report(db, report_id, request)
