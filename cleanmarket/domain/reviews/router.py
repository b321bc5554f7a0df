"""Review router - FastAPI endpoints for review operations"""

import logging

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    CancellationPenaltySummary,
    LegacyReviewCreate,
    PendingReview,
    ReviewResponse,
    ReviewStats,
    ReviewStatus,
    ReviewSubmission,
    SubmitReviewResponse,
    UserReviewsResponse,
)
from .service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reviews", tags=["Reviews"])

STAFF_ACCOUNT_TYPES = ("owner", "hr", "it")


def get_review_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> ReviewService:
    """Dependency injection for ReviewService"""
    return ReviewService(db, schedule=background_tasks.add_task)


# ============================================================================
# SUBMISSION
# ============================================================================


@router.post("/submit", response_model=SubmitReviewResponse, status_code=201)
async def submit_review(
    data: ReviewSubmission = Body(...),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Submit a review; it stays private until the other side reviews too"""
    result = service.submit_review(current_user, data)
    return SubmitReviewResponse(
        review=ReviewResponse.from_review(result.review, include_private=True),
        status=result.status,
        employeeCopiesCreated=len(result.copies),
        preferredStatusSet=result.preferred_status_set,
    )


@router.post("", response_model=ReviewResponse, status_code=201)
async def add_legacy_review(
    data: LegacyReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Single-rating review used by older app versions"""
    review = service.add_review_to_db(current_user, data)
    return ReviewResponse.from_review(review, include_private=True)


# ============================================================================
# READS
# ============================================================================


@router.get("/status/{appointment_id}", response_model=ReviewStatus)
async def get_review_status(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Get which sides have reviewed an appointment"""
    return service.get_review_status(appointment_id, current_user.id)


@router.get("/user/{user_id}", response_model=UserReviewsResponse)
async def get_user_reviews(
    user_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Get published reviews about a user with aggregate stats"""
    include_private = current_user.account_type in STAFF_ACCOUNT_TYPES
    reviews = service.get_published_reviews_for_user(user_id)
    return UserReviewsResponse(
        reviews=[ReviewResponse.from_review(r, include_private=include_private) for r in reviews],
        stats=service.get_review_stats(user_id),
    )


@router.get("/stats/{user_id}", response_model=ReviewStats)
async def get_review_stats(
    user_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Get aggregate stats over a user's published reviews"""
    return service.get_review_stats(user_id)


@router.get("/written", response_model=list[ReviewResponse])
async def get_reviews_written(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Get reviews the current user has written"""
    reviews = service.get_reviews_written_by_user(current_user.id)
    return [ReviewResponse.from_review(r, include_private=True) for r in reviews]


@router.get("/pending", response_model=list[PendingReview])
async def get_pending_reviews(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Get completed appointments the current user still needs to review"""
    return service.get_pending_reviews_for_user(current_user.id, current_user.account_type)


@router.get("/preferred-homes")
async def get_preferred_homes(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Get home IDs where the current cleaner has preferred status"""
    return {"preferredHomeIds": service.get_preferred_home_ids(current_user.id)}


@router.get("/cancellation-penalties/summary", response_model=CancellationPenaltySummary)
async def get_cancellation_penalty_summary(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Churn counts of cleaner cancellation penalties, staff only"""
    if current_user.account_type not in STAFF_ACCOUNT_TYPES:
        logger.warning(f"⚠️ User {current_user.id} denied cancellation penalty summary")
        raise HTTPException(status_code=403, detail="Not authorized")
    return service.cancellation_penalty_summary()


# ============================================================================
# DELETION
# ============================================================================


@router.delete("/{review_id}")
async def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """Delete an unpublished review written by the current user"""
    return service.delete_review(review_id, current_user)