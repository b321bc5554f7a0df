"""Review domain schemas - Pydantic models for validation"""

from datetime import datetime
from enum import Enum
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from ...shared.rounding import round_half_up


class ReviewType(str, Enum):
    HOMEOWNER_TO_CLEANER = "homeowner_to_cleaner"
    CLEANER_TO_HOMEOWNER = "cleaner_to_homeowner"
    SYSTEM_CANCELLATION_PENALTY = "system_cancellation_penalty"


# API field name -> UserReview column, per review type
HOMEOWNER_TO_CLEANER_ASPECTS = {
    "cleaningQuality": "cleaning_quality",
    "punctuality": "punctuality",
    "professionalism": "professionalism",
    "communication": "communication",
    "attentionToDetail": "attention_to_detail",
    "thoroughness": "thoroughness",
    "respectOfProperty": "respect_of_property",
    "followedInstructions": "followed_instructions",
}

CLEANER_TO_HOMEOWNER_ASPECTS = {
    "accuracyOfDescription": "accuracy_of_description",
    "homeReadiness": "home_readiness",
    "easeOfAccess": "ease_of_access",
    "homeCondition": "home_condition",
    "respectfulness": "respectfulness",
    "safetyConditions": "safety_conditions",
    "communication": "communication",
}

ASPECTS_BY_TYPE = {
    ReviewType.HOMEOWNER_TO_CLEANER.value: HOMEOWNER_TO_CLEANER_ASPECTS,
    ReviewType.CLEANER_TO_HOMEOWNER.value: CLEANER_TO_HOMEOWNER_ASPECTS,
}

# Boolean "would do it again" flag, per review type
RECOMMEND_FIELD_BY_TYPE = {
    ReviewType.HOMEOWNER_TO_CLEANER.value: ("wouldRecommend", "would_recommend"),
    ReviewType.CLEANER_TO_HOMEOWNER.value: ("wouldWorkForAgain", "would_work_for_again"),
}

Rating = Annotated[float, Field(ge=0, le=5)]


class _ReviewSubmissionBase(BaseModel):
    """Fields shared by every participant review"""

    ASPECTS: ClassVar[dict[str, str]] = {}
    RECOMMEND_FIELD: ClassVar[tuple[str, str]] = ("", "")

    userId: int
    appointmentId: int
    review: Optional[Rating] = None
    reviewComment: Optional[str] = None
    privateComment: Optional[str] = None

    @model_validator(mode="after")
    def derive_overall_rating(self):
        """Average the supplied aspects when no overall rating is given"""
        if self.review is not None:
            return self

        scores = [getattr(self, name) for name in self.ASPECTS if getattr(self, name) is not None]
        if not scores:
            raise ValueError("Provide an overall rating or at least one aspect rating")

        self.review = round_half_up(sum(scores) / len(scores), 1)
        return self

    def aspect_columns(self) -> dict:
        """Aspect and recommendation values keyed by UserReview column"""
        columns = {column: getattr(self, name) for name, column in self.ASPECTS.items()}
        api_name, column = self.RECOMMEND_FIELD
        columns[column] = getattr(self, api_name)
        return columns


class HomeownerReviewSubmission(_ReviewSubmissionBase):
    """Homeowner reviewing the cleaner who worked the job"""

    ASPECTS: ClassVar[dict[str, str]] = HOMEOWNER_TO_CLEANER_ASPECTS
    RECOMMEND_FIELD: ClassVar[tuple[str, str]] = RECOMMEND_FIELD_BY_TYPE[
        ReviewType.HOMEOWNER_TO_CLEANER.value
    ]

    reviewType: Literal["homeowner_to_cleaner"]
    cleaningQuality: Optional[Rating] = None
    punctuality: Optional[Rating] = None
    professionalism: Optional[Rating] = None
    communication: Optional[Rating] = None
    attentionToDetail: Optional[Rating] = None
    thoroughness: Optional[Rating] = None
    respectOfProperty: Optional[Rating] = None
    followedInstructions: Optional[Rating] = None
    wouldRecommend: Optional[bool] = None

    # Preferred cleaner side channel
    setAsPreferred: bool = False
    homeId: Optional[int] = None


class CleanerReviewSubmission(_ReviewSubmissionBase):
    """Cleaner reviewing the homeowner and home"""

    ASPECTS: ClassVar[dict[str, str]] = CLEANER_TO_HOMEOWNER_ASPECTS
    RECOMMEND_FIELD: ClassVar[tuple[str, str]] = RECOMMEND_FIELD_BY_TYPE[
        ReviewType.CLEANER_TO_HOMEOWNER.value
    ]

    reviewType: Literal["cleaner_to_homeowner"]
    accuracyOfDescription: Optional[Rating] = None
    homeReadiness: Optional[Rating] = None
    easeOfAccess: Optional[Rating] = None
    homeCondition: Optional[Rating] = None
    respectfulness: Optional[Rating] = None
    safetyConditions: Optional[Rating] = None
    communication: Optional[Rating] = None
    wouldWorkForAgain: Optional[bool] = None


ReviewSubmission = Annotated[
    Union[HomeownerReviewSubmission, CleanerReviewSubmission],
    Field(discriminator="reviewType"),
]


class LegacyReviewCreate(BaseModel):
    """Single-rating review from older app versions"""

    userId: int
    appointmentId: int
    rating: Rating
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    """Schema for review response"""

    id: int
    appointmentId: int
    reviewerId: Optional[int]
    userId: int
    reviewType: str
    review: float
    reviewComment: Optional[str]
    privateComment: Optional[str] = None
    reviewerName: Optional[str]
    aspects: dict[str, Optional[float]] = {}
    wouldRecommend: Optional[bool] = None
    wouldWorkForAgain: Optional[bool] = None
    isPublished: bool
    isEmployeeReviewCopy: bool = False
    isBusinessReview: bool = False
    sourceReviewId: Optional[int] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_review(cls, review, include_private: bool = False) -> "ReviewResponse":
        """Build the response from a UserReview row"""
        aspects = ASPECTS_BY_TYPE.get(review.review_type, {})
        return cls(
            id=review.id,
            appointmentId=review.appointment_id,
            reviewerId=review.reviewer_id,
            userId=review.user_id,
            reviewType=review.review_type,
            review=review.review,
            reviewComment=review.review_comment,
            privateComment=review.private_comment if include_private else None,
            reviewerName=review.reviewer_name,
            aspects={name: getattr(review, column) for name, column in aspects.items()},
            wouldRecommend=review.would_recommend,
            wouldWorkForAgain=review.would_work_for_again,
            isPublished=review.is_published,
            isEmployeeReviewCopy=review.is_employee_review_copy,
            isBusinessReview=review.is_business_review,
            sourceReviewId=review.source_review_id,
            createdAt=review.created_at,
        )


class ReviewStatus(BaseModel):
    hasHomeownerReviewed: bool
    hasCleanerReviewed: bool
    userHasReviewed: bool
    bothReviewed: bool
    isPublished: bool


class SubmitReviewResponse(BaseModel):
    message: str = "Review submitted successfully"
    review: ReviewResponse
    status: ReviewStatus
    employeeCopiesCreated: int = 0
    preferredStatusSet: bool = False


class ReviewStats(BaseModel):
    averageRating: float = 0
    totalReviews: int = 0
    recommendationRate: int = 0
    aspectAverages: dict[str, Optional[float]] = {}


class UserReviewsResponse(BaseModel):
    reviews: list[ReviewResponse]
    stats: ReviewStats


class PendingReview(BaseModel):
    """Completed appointment still awaiting the caller's review"""

    appointmentId: int
    date: Optional[datetime] = None
    homeId: Optional[int] = None
    homeName: Optional[str] = None
    revieweeId: Optional[int] = None
    revieweeName: Optional[str] = None
    reviewType: str
    isCleanerPreferred: bool = False


class CancellationPenaltySummary(BaseModel):
    total: int
    last30Days: int
    last90Days: int
