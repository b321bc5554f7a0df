"""Pending review resolver - Completed jobs the caller has not reviewed yet"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment
from .fanout import parse_worker_id
from .repository import ReviewRepository
from .schemas import PendingReview, ReviewType

logger = logging.getLogger(__name__)

CLEANER_ROLES = ("cleaner", "employee", "business_owner")


class PendingReviewResolver:
    def __init__(self, db: Session, repo: ReviewRepository = None):
        self.db = db
        self.repo = repo or ReviewRepository()

    def pending_for(self, user_id: int, role: str) -> list[PendingReview]:
        """List completed appointments still awaiting this user's review"""
        if role in CLEANER_ROLES:
            return self._pending_for_cleaner(user_id)
        return self._pending_for_homeowner(user_id)

    def _pending_for_homeowner(self, user_id: int) -> list[PendingReview]:
        review_type = ReviewType.HOMEOWNER_TO_CLEANER.value
        appointments = self.repo.get_unreviewed_appointments_for_homeowner(self.db, user_id, review_type)

        pending = []
        for appointment in appointments:
            cleaner_id = self._first_cleaner_id(appointment)
            cleaner = self.repo.get_user(self.db, cleaner_id) if cleaner_id else None
            home = appointment.home

            pending.append(
                PendingReview(
                    appointmentId=appointment.id,
                    date=appointment.date,
                    homeId=appointment.home_id,
                    homeName=home.label if home else None,
                    revieweeId=cleaner_id,
                    revieweeName=cleaner.display_name if cleaner else None,
                    reviewType=review_type,
                    isCleanerPreferred=self._is_cleaner_preferred(appointment, cleaner_id),
                )
            )
        return pending

    def _pending_for_cleaner(self, user_id: int) -> list[PendingReview]:
        review_type = ReviewType.CLEANER_TO_HOMEOWNER.value
        appointments = self.repo.get_unreviewed_appointments_for_worker(self.db, user_id, review_type)

        pending = []
        for appointment in appointments:
            homeowner = appointment.homeowner
            home = appointment.home

            pending.append(
                PendingReview(
                    appointmentId=appointment.id,
                    date=appointment.date,
                    homeId=appointment.home_id,
                    homeName=home.label if home else None,
                    revieweeId=appointment.user_id,
                    revieweeName=homeowner.display_name if homeowner else None,
                    reviewType=review_type,
                )
            )
        return pending

    @staticmethod
    def _first_cleaner_id(appointment: Appointment) -> Optional[int]:
        workers = appointment.employees_assigned or []
        return parse_worker_id(workers[0]) if workers else None

    def _is_cleaner_preferred(self, appointment: Appointment, cleaner_id: Optional[int]) -> bool:
        if not cleaner_id or not appointment.home_id or appointment.home is None:
            return False
        try:
            return self.repo.get_preferred_cleaner(self.db, appointment.home_id, cleaner_id) is not None
        except Exception as e:
            logger.warning(f"⚠️ Preferred lookup failed for appointment {appointment.id}: {e}")
            return False
