"""Review repository - Database operations for reviews and preferred cleaners"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, cast, exists, func
from sqlalchemy.orm import Session, joinedload

from ...models import (
    Appointment,
    BusinessEmployee,
    EmployeeJobAssignment,
    HomePreferredCleaner,
    User,
    UserHome,
    UserReview,
)
from .schemas import ReviewType

INACTIVE_ASSIGNMENT_STATUSES = ("cancelled", "no_show")


def _not_reviewed_by(reviewer_id: int, review_type: str):
    """Correlated filter: the appointment has no original review of this type by the reviewer"""
    return ~exists().where(
        UserReview.appointment_id == Appointment.id,
        UserReview.reviewer_id == reviewer_id,
        UserReview.review_type == review_type,
        UserReview.is_employee_review_copy.is_(False),
        UserReview.is_business_review.is_(False),
    )


class ReviewRepository:
    """Repository for review database operations"""

    @staticmethod
    def get_review_by_id(db: Session, review_id: int) -> Optional[UserReview]:
        return db.query(UserReview).filter(UserReview.id == review_id).first()

    @staticmethod
    def get_original_review(
        db: Session, reviewer_id: int, appointment_id: int, user_id: int
    ) -> Optional[UserReview]:
        """Get the original (non-copy) review for a reviewer/appointment/subject triple"""
        return (
            db.query(UserReview)
            .filter(
                UserReview.reviewer_id == reviewer_id,
                UserReview.appointment_id == appointment_id,
                UserReview.user_id == user_id,
                UserReview.is_employee_review_copy.is_(False),
                UserReview.is_business_review.is_(False),
            )
            .first()
        )

    @staticmethod
    def create_review(db: Session, **review_data) -> UserReview:
        """Create a new review"""
        review = UserReview(**review_data)
        db.add(review)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def delete_review(db: Session, review: UserReview) -> None:
        """Delete a review along with any copies derived from it"""
        db.query(UserReview).filter(UserReview.source_review_id == review.id).delete(
            synchronize_session=False
        )
        db.delete(review)
        db.commit()

    @staticmethod
    def get_participant_reviews(db: Session, appointment_id: int) -> list[UserReview]:
        """Get all reviews on an appointment except system-generated rows"""
        return (
            db.query(UserReview)
            .filter(
                UserReview.appointment_id == appointment_id,
                UserReview.review_type != ReviewType.SYSTEM_CANCELLATION_PENALTY.value,
            )
            .all()
        )

    @staticmethod
    def publish_appointment_reviews(db: Session, appointment_id: int) -> int:
        """Mark every participant review on an appointment as published"""
        updated = (
            db.query(UserReview)
            .filter(
                UserReview.appointment_id == appointment_id,
                UserReview.review_type != ReviewType.SYSTEM_CANCELLATION_PENALTY.value,
            )
            .update({UserReview.is_published: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def get_published_reviews_for_user(db: Session, user_id: int) -> list[UserReview]:
        """Get published reviews about a user, newest first"""
        return (
            db.query(UserReview)
            .filter(
                UserReview.user_id == user_id,
                UserReview.is_published.is_(True),
                UserReview.review_type != ReviewType.SYSTEM_CANCELLATION_PENALTY.value,
            )
            .order_by(UserReview.created_at.desc(), UserReview.id.desc())
            .all()
        )

    @staticmethod
    def get_reviews_written_by_user(db: Session, reviewer_id: int) -> list[UserReview]:
        """Get original reviews authored by a user, newest first"""
        return (
            db.query(UserReview)
            .filter(
                UserReview.reviewer_id == reviewer_id,
                UserReview.is_employee_review_copy.is_(False),
                UserReview.is_business_review.is_(False),
            )
            .order_by(UserReview.created_at.desc(), UserReview.id.desc())
            .all()
        )

    @staticmethod
    def count_cancellation_penalties(db: Session, since: Optional[datetime] = None) -> int:
        query = db.query(func.count(UserReview.id)).filter(
            UserReview.review_type == ReviewType.SYSTEM_CANCELLATION_PENALTY.value
        )
        if since:
            query = query.filter(UserReview.created_at >= since)
        return query.scalar() or 0

    # Preferred Cleaner Methods
    @staticmethod
    def get_preferred_cleaner(
        db: Session, home_id: int, cleaner_id: int
    ) -> Optional[HomePreferredCleaner]:
        return (
            db.query(HomePreferredCleaner)
            .filter(
                HomePreferredCleaner.home_id == home_id,
                HomePreferredCleaner.cleaner_id == cleaner_id,
            )
            .first()
        )

    @staticmethod
    def create_preferred_cleaner(
        db: Session, home_id: int, cleaner_id: int, set_by: str = "review"
    ) -> HomePreferredCleaner:
        preferred = HomePreferredCleaner(
            home_id=home_id,
            cleaner_id=cleaner_id,
            set_at=datetime.utcnow(),
            set_by=set_by,
        )
        db.add(preferred)
        db.commit()
        db.refresh(preferred)
        return preferred

    @staticmethod
    def delete_preferred_cleaner(db: Session, preferred: HomePreferredCleaner) -> None:
        db.delete(preferred)
        db.commit()

    @staticmethod
    def get_preferred_home_ids(db: Session, cleaner_id: int) -> list[int]:
        rows = (
            db.query(HomePreferredCleaner.home_id)
            .filter(HomePreferredCleaner.cleaner_id == cleaner_id)
            .order_by(HomePreferredCleaner.home_id)
            .all()
        )
        return [row.home_id for row in rows]

    # Lookups owned by the appointment, account and employee services
    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def get_user(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_home(db: Session, home_id: int) -> Optional[UserHome]:
        return db.query(UserHome).filter(UserHome.id == home_id).first()

    @staticmethod
    def get_unreviewed_appointments_for_homeowner(
        db: Session, user_id: int, review_type: str
    ) -> list[Appointment]:
        """Completed appointments a homeowner booked and has not reviewed yet"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.home))
            .filter(
                Appointment.user_id == user_id,
                Appointment.completed.is_(True),
                Appointment.cancelled.is_(False),
                _not_reviewed_by(user_id, review_type),
            )
            .order_by(Appointment.date.desc(), Appointment.id.desc())
            .all()
        )

    @staticmethod
    def get_unreviewed_appointments_for_worker(
        db: Session, worker_id: int, review_type: str
    ) -> list[Appointment]:
        """Completed appointments listing the worker that the worker has not reviewed yet"""
        # employeesAssigned stores ids as JSON strings, so the quoted id matches one entry exactly
        worker_entry = f'%"{int(worker_id)}"%'
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.home), joinedload(Appointment.homeowner))
            .filter(
                cast(Appointment.employees_assigned, String).like(worker_entry),
                Appointment.completed.is_(True),
                Appointment.cancelled.is_(False),
                _not_reviewed_by(worker_id, review_type),
            )
            .order_by(Appointment.date.desc(), Appointment.id.desc())
            .all()
        )

    @staticmethod
    def get_job_assignments(db: Session, appointment_id: int) -> list[EmployeeJobAssignment]:
        """Get active team assignments for an appointment"""
        return (
            db.query(EmployeeJobAssignment)
            .options(joinedload(EmployeeJobAssignment.employee))
            .filter(
                EmployeeJobAssignment.appointment_id == appointment_id,
                EmployeeJobAssignment.status.notin_(INACTIVE_ASSIGNMENT_STATUSES),
            )
            .order_by(EmployeeJobAssignment.id)
            .all()
        )

    @staticmethod
    def get_business_owner_id_for_worker(db: Session, worker_user_id: int) -> Optional[int]:
        """Get the business owner employing a worker, if any"""
        employee = (
            db.query(BusinessEmployee)
            .filter(
                BusinessEmployee.user_id == worker_user_id,
                BusinessEmployee.status == "active",
            )
            .first()
        )
        return employee.business_owner_id if employee else None
