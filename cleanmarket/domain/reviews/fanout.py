"""
Multi-employee fan-out.

A homeowner writes one review for a team job; every other worker on the job
gets a copy of it. Single-worker jobs done by an employee give the business
owner a copy instead. Copy creation is best-effort: each target is attempted
on its own and failures are recorded, logged, and dropped.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, UserReview
from .repository import ReviewRepository
from .schemas import HOMEOWNER_TO_CLEANER_ASPECTS, ReviewType

logger = logging.getLogger(__name__)

# Payload columns replicated verbatim onto every copy
COPIED_COLUMNS = (
    ("review", "review_comment", "private_comment", "reviewer_name", "would_recommend")
    + tuple(HOMEOWNER_TO_CLEANER_ASPECTS.values())
)


@dataclass
class CopyOutcome:
    """Result of one copy attempt"""

    target_user_id: Optional[int]
    review: Optional[UserReview] = None
    error: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.review is not None


def parse_worker_id(raw) -> Optional[int]:
    """employeesAssigned holds ids as strings; anything non-numeric is unresolvable"""
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


class EmployeeReviewFanOut:
    """Replicates an accepted homeowner review across the job's team"""

    def __init__(self, db: Session, repo: ReviewRepository = None):
        self.db = db
        self.repo = repo or ReviewRepository()

    def propagate(self, original: UserReview, appointment_id: int) -> list[UserReview]:
        """Create copies of a homeowner review; never raises"""
        if original.review_type != ReviewType.HOMEOWNER_TO_CLEANER.value:
            return []

        try:
            outcomes = self._create_copies(original, appointment_id)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Review fan-out aborted for review {original.id}: {e}")
            return []

        failed = [o for o in outcomes if not o.created]
        for outcome in failed:
            logger.warning(
                f"⚠️ Review copy for user {outcome.target_user_id} not created "
                f"(source review {original.id}): {outcome.error}"
            )

        created = [o.review for o in outcomes if o.created]
        if created:
            logger.info(
                f"✅ Created {len(created)} review copy(ies) from review {original.id} "
                f"on appointment {appointment_id}"
            )
        return created

    def _create_copies(self, original: UserReview, appointment_id: int) -> list[CopyOutcome]:
        team = self._resolve_team(appointment_id)

        if team is None:
            return self._business_owner_copy(original)

        outcomes = []
        for worker_user_id in team:
            if worker_user_id is None:
                logger.debug(f"Skipping unresolvable worker on appointment {appointment_id}")
                continue
            if worker_user_id == original.user_id:
                continue
            outcomes.append(self._attempt_copy(original, worker_user_id, is_business_review=False))
        return outcomes

    def _resolve_team(self, appointment_id: int) -> Optional[list[Optional[int]]]:
        """
        Worker user ids for the job, or None when the job has no team.

        Explicit assignment records win; otherwise a multi-entry
        employeesAssigned list is the team.
        """
        assignments = self.repo.get_job_assignments(self.db, appointment_id)
        if assignments:
            return _unique([a.employee.user_id if a.employee else None for a in assignments])

        appointment: Optional[Appointment] = self.repo.get_appointment(self.db, appointment_id)
        workers = (appointment.employees_assigned or []) if appointment else []
        if len(workers) > 1:
            return _unique([self._resolve_worker(raw) for raw in workers])

        return None

    def _resolve_worker(self, raw) -> Optional[int]:
        worker_id = parse_worker_id(raw)
        if worker_id is None:
            return None
        return worker_id if self.repo.get_user(self.db, worker_id) else None

    def _business_owner_copy(self, original: UserReview) -> list[CopyOutcome]:
        business_owner_id = self.repo.get_business_owner_id_for_worker(self.db, original.user_id)
        if not business_owner_id or business_owner_id == original.user_id:
            logger.debug(f"No business owner for user {original.user_id}, no copy needed")
            return []
        return [self._attempt_copy(original, business_owner_id, is_business_review=True)]

    def _attempt_copy(
        self, original: UserReview, target_user_id: int, is_business_review: bool
    ) -> CopyOutcome:
        try:
            copy = self.repo.create_review(
                self.db,
                appointment_id=original.appointment_id,
                reviewer_id=original.reviewer_id,
                user_id=target_user_id,
                review_type=original.review_type,
                is_published=original.is_published,
                is_employee_review_copy=not is_business_review,
                is_business_review=is_business_review,
                source_review_id=original.id,
                **{column: getattr(original, column) for column in COPIED_COLUMNS},
            )
            return CopyOutcome(target_user_id=target_user_id, review=copy)
        except Exception as e:
            self.db.rollback()
            return CopyOutcome(target_user_id=target_user_id, error=str(e))


def _unique(worker_ids: list) -> list:
    seen = set()
    result = []
    for worker_id in worker_ids:
        if worker_id is not None and worker_id in seen:
            continue
        seen.add(worker_id)
        result.append(worker_id)
    return result
