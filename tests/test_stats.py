from types import SimpleNamespace

from cleanmarket.domain.reviews.repository import ReviewRepository
from cleanmarket.domain.reviews.service import ReviewService
from cleanmarket.domain.reviews.stats import calculate_aspect_average, is_recommended, summarize_reviews


def h2c(review, **aspects):
    return SimpleNamespace(review_type="homeowner_to_cleaner", review=review, **aspects)


def test_aspect_average_ignores_missing_values():
    reviews = [h2c(5, punctuality=5), h2c(4, punctuality=None), h2c(4, punctuality=4), h2c(3)]

    assert calculate_aspect_average(reviews, "punctuality") == 4.5
    assert calculate_aspect_average(reviews, "thoroughness") is None
    assert calculate_aspect_average([], "punctuality") is None


def test_recommendation_uses_the_type_specific_flag():
    assert is_recommended(h2c(5, would_recommend=True)) is True
    assert is_recommended(h2c(5, would_recommend=None, would_work_for_again=True)) is False
    c2h = SimpleNamespace(review_type="cleaner_to_homeowner", would_work_for_again=True)
    assert is_recommended(c2h) is True


def test_empty_summary():
    stats = summarize_reviews([])

    assert stats.averageRating == 0
    assert stats.totalReviews == 0
    assert stats.recommendationRate == 0
    assert stats.aspectAverages == {}


def test_two_reviews_average():
    stats = summarize_reviews([h2c(5, would_recommend=True), h2c(4, would_recommend=False)])

    assert stats.averageRating == 4.5
    assert stats.recommendationRate == 50


def test_ties_round_up():
    reviews = [h2c(4.5, would_recommend=True, punctuality=4.5), h2c(4.0, punctuality=4.0)]
    reviews += [h2c(4.25, would_recommend=False) for _ in range(6)]

    stats = summarize_reviews(reviews)

    assert summarize_reviews(reviews[:2]).averageRating == 4.3
    assert stats.recommendationRate == 13
    assert stats.aspectAverages["punctuality"] == 4.3


def test_summary_rounds():
    reviews = [
        h2c(5, would_recommend=True, cleaning_quality=5),
        h2c(4, would_recommend=False, cleaning_quality=4),
        h2c(4, would_recommend=True, cleaning_quality=4),
    ]

    stats = summarize_reviews(reviews)

    assert stats.averageRating == 4.3
    assert stats.totalReviews == 3
    assert stats.recommendationRate == 67
    assert stats.aspectAverages["cleaningQuality"] == 4.3
    assert stats.aspectAverages["punctuality"] is None


def test_stats_only_count_published(db, make_user, make_appointment):
    homeowner = make_user("homeowner")
    cleaner = make_user("cleaner")
    appointment = make_appointment(homeowner, workers=[cleaner])
    other = make_appointment(homeowner, workers=[cleaner])
    for appt, rating, published in ((appointment, 5, True), (other, 1, False)):
        ReviewRepository.create_review(
            db,
            appointment_id=appt.id,
            reviewer_id=homeowner.id,
            user_id=cleaner.id,
            review_type="homeowner_to_cleaner",
            review=rating,
            would_recommend=True,
            is_published=published,
        )
    ReviewService(db).record_cancellation_penalty(appointment.id, cleaner.id)

    stats = ReviewService(db).get_review_stats(cleaner.id)

    assert stats.totalReviews == 1
    assert stats.averageRating == 5
    assert stats.recommendationRate == 100
