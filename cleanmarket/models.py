from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=True)
    first_name = Column(String(255), nullable=True)  # Encrypted at rest by the accounts service
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # homeowner, cleaner, business_owner, employee; staff: owner, hr, it
    account_type = Column(String(50), default="homeowner", nullable=False)
    expo_push_token = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    homes = relationship("UserHome", back_populates="owner")

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.username or "Anonymous"


class UserHome(Base):
    __tablename__ = "user_homes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    nick_name = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(255), nullable=True)

    owner = relationship("User", back_populates="homes")

    @property
    def label(self) -> str:
        return self.nick_name or self.address or "a property"


class Appointment(Base):
    """Booked cleaning job. Lifecycle and billing live in the scheduling service."""

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # Homeowner who booked
    home_id = Column(Integer, ForeignKey("user_homes.id"), nullable=True)
    date = Column(DateTime, nullable=True)
    # Worker user ids as strings, in assignment order
    employees_assigned = Column(JSON, default=list, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    cancelled = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    home = relationship("UserHome")
    homeowner = relationship("User", foreign_keys=[user_id])


class BusinessEmployee(Base):
    """Cleaner employed by a business owner"""

    __tablename__ = "business_employees"

    id = Column(Integer, primary_key=True, index=True)
    business_owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Null until the employee accepts the invitation and links an account
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String(50), default="active", nullable=False)  # pending_invite, active, inactive

    user = relationship("User", foreign_keys=[user_id])
    business_owner = relationship("User", foreign_keys=[business_owner_id])


class EmployeeJobAssignment(Base):
    """Team assignment of a business employee to an appointment"""

    __tablename__ = "employee_job_assignments"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    business_employee_id = Column(Integer, ForeignKey("business_employees.id"), nullable=False)
    business_owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(50), default="assigned", nullable=False)  # assigned, started, completed, cancelled, no_show
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("BusinessEmployee")


class UserReview(Base):
    """One authored opinion about a participant of an appointment"""

    __tablename__ = "user_reviews"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)  # Null for system rows
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)  # Subject
    # homeowner_to_cleaner, cleaner_to_homeowner, system_cancellation_penalty
    review_type = Column(String(50), nullable=False, index=True)

    review = Column(Float, nullable=False)
    review_comment = Column(Text, nullable=True)
    private_comment = Column(Text, nullable=True)  # Staff only
    reviewer_name = Column(String(255), nullable=True)  # Snapshot, survives reviewer deletion

    # homeowner_to_cleaner aspects
    cleaning_quality = Column(Float, nullable=True)
    punctuality = Column(Float, nullable=True)
    professionalism = Column(Float, nullable=True)
    attention_to_detail = Column(Float, nullable=True)
    thoroughness = Column(Float, nullable=True)
    respect_of_property = Column(Float, nullable=True)
    followed_instructions = Column(Float, nullable=True)
    would_recommend = Column(Boolean, nullable=True)

    # cleaner_to_homeowner aspects
    accuracy_of_description = Column(Float, nullable=True)
    home_readiness = Column(Float, nullable=True)
    ease_of_access = Column(Float, nullable=True)
    home_condition = Column(Float, nullable=True)
    respectfulness = Column(Float, nullable=True)
    safety_conditions = Column(Float, nullable=True)
    would_work_for_again = Column(Boolean, nullable=True)

    # Shared aspect
    communication = Column(Float, nullable=True)

    is_published = Column(Boolean, default=False, nullable=False, index=True)

    # Derived copies for multi-employee jobs and business owners
    is_employee_review_copy = Column(Boolean, default=False, nullable=False)
    is_business_review = Column(Boolean, default=False, nullable=False)
    source_review_id = Column(Integer, ForeignKey("user_reviews.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_copy(self) -> bool:
        return bool(self.is_employee_review_copy or self.is_business_review)


# One original review per (reviewer, appointment, subject); copies are exempt
_original_only = UserReview.is_employee_review_copy.is_(False) & UserReview.is_business_review.is_(False)
Index(
    "uq_user_reviews_original",
    UserReview.reviewer_id,
    UserReview.appointment_id,
    UserReview.user_id,
    unique=True,
    postgresql_where=_original_only,
    sqlite_where=_original_only,
)


class HomePreferredCleaner(Base):
    """Cleaner allowed to book a home without per-job approval"""

    __tablename__ = "home_preferred_cleaners"
    __table_args__ = (UniqueConstraint("home_id", "cleaner_id", name="uq_home_preferred_cleaner"),)

    id = Column(Integer, primary_key=True, index=True)
    home_id = Column(Integer, ForeignKey("user_homes.id", ondelete="CASCADE"), nullable=False, index=True)
    cleaner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    set_at = Column(DateTime(timezone=True), server_default=func.now())
    set_by = Column(String(20), default="review", nullable=False)  # review, settings, invitation
