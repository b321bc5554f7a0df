"""Reciprocity publisher - Reviews stay private until both sides have responded"""

import logging

from sqlalchemy.orm import Session

from .repository import ReviewRepository
from .schemas import ReviewStatus, ReviewType

logger = logging.getLogger(__name__)

RECIPROCAL_TYPES = frozenset(
    {ReviewType.HOMEOWNER_TO_CLEANER.value, ReviewType.CLEANER_TO_HOMEOWNER.value}
)


def both_sides_reviewed(review_types) -> bool:
    """True when the appointment has a review from each side"""
    return RECIPROCAL_TYPES.issubset(set(review_types))


class ReciprocityPublisher:
    """Decides when an appointment's reviews become visible"""

    def __init__(self, db: Session, repo: ReviewRepository = None):
        self.db = db
        self.repo = repo or ReviewRepository()

    def evaluate(self, appointment_id: int) -> bool:
        """Publish the appointment's reviews once both sides have reviewed"""
        reviews = self.repo.get_participant_reviews(self.db, appointment_id)
        if not both_sides_reviewed(r.review_type for r in reviews):
            return False

        updated = self.repo.publish_appointment_reviews(self.db, appointment_id)
        logger.info(f"✅ Published {updated} review(s) for appointment {appointment_id}")
        return True

    def status(self, appointment_id: int, requesting_user_id: int) -> ReviewStatus:
        reviews = self.repo.get_participant_reviews(self.db, appointment_id)
        review_types = {r.review_type for r in reviews}
        both_reviewed = both_sides_reviewed(review_types)

        return ReviewStatus(
            hasHomeownerReviewed=ReviewType.HOMEOWNER_TO_CLEANER.value in review_types,
            hasCleanerReviewed=ReviewType.CLEANER_TO_HOMEOWNER.value in review_types,
            userHasReviewed=any(r.reviewer_id == requesting_user_id for r in reviews),
            bothReviewed=both_reviewed,
            isPublished=both_reviewed,
        )
