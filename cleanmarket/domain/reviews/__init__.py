"""Reviews domain - submission, reciprocity, team fan-out and preferred cleaners"""

from .router import router
from .service import DuplicateReviewError, ReviewService

__all__ = ["router", "DuplicateReviewError", "ReviewService"]
