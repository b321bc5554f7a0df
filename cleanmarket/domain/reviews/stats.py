"""Review statistics over published reviews"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...shared.rounding import round_half_up
from .repository import ReviewRepository
from .schemas import ASPECTS_BY_TYPE, RECOMMEND_FIELD_BY_TYPE, ReviewStats


def calculate_aspect_average(reviews: Iterable, column: str) -> Optional[float]:
    """Mean of the non-null values of a column, rounded to one decimal"""
    values = [getattr(r, column, None) for r in reviews]
    values = [v for v in values if v is not None]
    if not values:
        return None
    return round_half_up(sum(values) / len(values), 1)


def is_recommended(review) -> bool:
    """Whether the review's own type-specific "would do again" flag is set"""
    _, column = RECOMMEND_FIELD_BY_TYPE.get(review.review_type, (None, None))
    return bool(column and getattr(review, column, None))


def summarize_reviews(reviews: list) -> ReviewStats:
    if not reviews:
        return ReviewStats()

    total = len(reviews)
    average = round_half_up(sum(r.review for r in reviews) / total, 1)
    recommendation_rate = round_half_up(sum(1 for r in reviews if is_recommended(r)) / total * 100)

    aspect_averages = {}
    for review_type in dict.fromkeys(r.review_type for r in reviews):
        for name, column in ASPECTS_BY_TYPE.get(review_type, {}).items():
            if name not in aspect_averages:
                aspect_averages[name] = calculate_aspect_average(reviews, column)

    return ReviewStats(
        averageRating=average,
        totalReviews=total,
        recommendationRate=recommendation_rate,
        aspectAverages=aspect_averages,
    )


class ReviewStatsAggregator:
    def __init__(self, db: Session, repo: ReviewRepository = None):
        self.db = db
        self.repo = repo or ReviewRepository()

    def stats(self, user_id: int) -> ReviewStats:
        return summarize_reviews(self.repo.get_published_reviews_for_user(self.db, user_id))
