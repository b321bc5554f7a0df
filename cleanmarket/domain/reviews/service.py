"""Review service - Business logic for review submission and reads"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import User, UserReview
from .fanout import EmployeeReviewFanOut
from .pending import PendingReviewResolver
from .preferred import PreferredCleanerCoordinator
from .publication import ReciprocityPublisher
from .repository import ReviewRepository
from .schemas import (
    CancellationPenaltySummary,
    CleanerReviewSubmission,
    HomeownerReviewSubmission,
    LegacyReviewCreate,
    PendingReview,
    ReviewStats,
    ReviewStatus,
    ReviewType,
)
from .stats import ReviewStatsAggregator

logger = logging.getLogger(__name__)


class DuplicateReviewError(HTTPException):
    """Raised when a reviewer already reviewed this subject on this appointment"""

    def __init__(self):
        super().__init__(status_code=400, detail="You have already reviewed this appointment")


@dataclass
class SubmittedReview:
    """Primary review plus the outcome of its side effects"""

    review: UserReview
    status: ReviewStatus
    copies: list[UserReview]
    preferred_status_set: bool


class ReviewService:
    """Service layer for review business logic"""

    def __init__(self, db: Session, schedule: Optional[Callable] = None):
        self.db = db
        self.repo = ReviewRepository()
        self.publisher = ReciprocityPublisher(db, self.repo)
        self.fanout = EmployeeReviewFanOut(db, self.repo)
        self.preferred = PreferredCleanerCoordinator(db, self.repo, schedule=schedule)
        self.pending = PendingReviewResolver(db, self.repo)
        self.aggregator = ReviewStatsAggregator(db, self.repo)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_review(
        self,
        reviewer: User,
        data: Union[HomeownerReviewSubmission, CleanerReviewSubmission],
    ) -> SubmittedReview:
        """Validate, persist, publish when reciprocal, then run side effects"""
        logger.info(
            f"📥 Review submission: reviewer={reviewer.id} subject={data.userId} "
            f"appointment={data.appointmentId} type={data.reviewType}"
        )

        review = self._create_original(
            reviewer,
            appointment_id=data.appointmentId,
            user_id=data.userId,
            review_type=data.reviewType,
            is_published=False,
            review=data.review,
            review_comment=data.reviewComment,
            private_comment=data.privateComment,
            **data.aspect_columns(),
        )

        self.publisher.evaluate(data.appointmentId)

        copies = []
        preferred_status_set = False
        # Team copies and preferred status only follow homeowner reviews tied to a home
        if isinstance(data, HomeownerReviewSubmission) and data.homeId:
            copies = self.fanout.propagate(review, data.appointmentId)
            preferred_status_set = self.preferred.reconcile(
                home_id=self._appointment_home_id(data.appointmentId, data.homeId),
                cleaner_id=data.userId,
                requested_preferred=data.setAsPreferred,
                homeowner_id=reviewer.id,
            )
        elif isinstance(data, HomeownerReviewSubmission):
            logger.info(f"No homeId on review {review.id}, skipping team copies and preferred status")

        self.db.refresh(review)
        return SubmittedReview(
            review=review,
            status=self.get_review_status(data.appointmentId, reviewer.id),
            copies=copies,
            preferred_status_set=preferred_status_set,
        )

    def _appointment_home_id(self, appointment_id: int, requested_home_id: int) -> int:
        """The appointment's own home wins over the homeId sent with the review"""
        appointment = self.repo.get_appointment(self.db, appointment_id)
        home_id = appointment.home_id if appointment else None
        if home_id and home_id != requested_home_id:
            logger.warning(
                f"⚠️ homeId {requested_home_id} does not match appointment {appointment_id} "
                f"home {home_id}, using the appointment home"
            )
            return home_id
        return requested_home_id

    def add_review_to_db(self, reviewer: User, data: LegacyReviewCreate) -> UserReview:
        """Legacy single-rating path; created published, no reciprocity or fan-out"""
        return self._create_original(
            reviewer,
            appointment_id=data.appointmentId,
            user_id=data.userId,
            review_type=ReviewType.HOMEOWNER_TO_CLEANER.value,
            is_published=True,
            review=data.rating,
            review_comment=data.comment,
        )

    def _create_original(
        self, reviewer: User, appointment_id: int, user_id: int, **review_data
    ) -> UserReview:
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")

        # Friendly pre-check; the unique index below is the real guard
        if self.repo.get_original_review(self.db, reviewer.id, appointment_id, user_id):
            logger.warning(
                f"⚠️ Duplicate review: reviewer={reviewer.id} appointment={appointment_id} subject={user_id}"
            )
            raise DuplicateReviewError()

        try:
            review = self.repo.create_review(
                self.db,
                appointment_id=appointment_id,
                reviewer_id=reviewer.id,
                user_id=user_id,
                reviewer_name=reviewer.display_name,
                **review_data,
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent duplicate review rejected by the database: {e.orig}")
            raise DuplicateReviewError() from e

        logger.info(f"✅ Review {review.id} created for appointment {appointment_id}")
        return review

    def record_cancellation_penalty(
        self, appointment_id: int, cleaner_id: int, comment: str = "Last minute cancellation"
    ) -> UserReview:
        """System-generated churn record; never published or counted in stats"""
        review = self.repo.create_review(
            self.db,
            appointment_id=appointment_id,
            reviewer_id=None,
            user_id=cleaner_id,
            review_type=ReviewType.SYSTEM_CANCELLATION_PENALTY.value,
            review=1,
            review_comment=comment,
            reviewer_name="System",
            is_published=False,
        )
        logger.info(f"Recorded cancellation penalty for cleaner {cleaner_id} on appointment {appointment_id}")
        return review

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def check_and_publish_reviews(self, appointment_id: int) -> bool:
        return self.publisher.evaluate(appointment_id)

    def get_review_status(self, appointment_id: int, user_id: int) -> ReviewStatus:
        return self.publisher.status(appointment_id, user_id)

    def get_published_reviews_for_user(self, user_id: int) -> list[UserReview]:
        return self.repo.get_published_reviews_for_user(self.db, user_id)

    def get_reviews_written_by_user(self, user_id: int) -> list[UserReview]:
        return self.repo.get_reviews_written_by_user(self.db, user_id)

    def get_pending_reviews_for_user(self, user_id: int, role: str) -> list[PendingReview]:
        return self.pending.pending_for(user_id, role)

    def get_review_stats(self, user_id: int) -> ReviewStats:
        return self.aggregator.stats(user_id)

    def get_preferred_home_ids(self, cleaner_id: int) -> list[int]:
        return self.repo.get_preferred_home_ids(self.db, cleaner_id)

    def cancellation_penalty_summary(self) -> CancellationPenaltySummary:
        now = datetime.utcnow()
        return CancellationPenaltySummary(
            total=self.repo.count_cancellation_penalties(self.db),
            last30Days=self.repo.count_cancellation_penalties(self.db, since=now - timedelta(days=30)),
            last90Days=self.repo.count_cancellation_penalties(self.db, since=now - timedelta(days=90)),
        )

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_review(self, review_id: int, user: User) -> dict:
        """Reviewers may withdraw a review until it is published"""
        review = self.repo.get_review_by_id(self.db, review_id)
        if not review:
            raise HTTPException(status_code=404, detail="Review not found")
        if review.reviewer_id != user.id:
            raise HTTPException(status_code=403, detail="You can only delete your own reviews")
        if review.is_published:
            raise HTTPException(status_code=400, detail="Published reviews cannot be deleted")

        self.repo.delete_review(self.db, review)
        logger.info(f"Review {review_id} deleted by user {user.id}")
        return {"message": "Review deleted"}
