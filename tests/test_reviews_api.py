from datetime import timedelta
from unittest.mock import patch

import pytest

from cleanmarket.auth import create_access_token
from cleanmarket.domain.reviews.repository import ReviewRepository
from cleanmarket.models import HomePreferredCleaner, UserReview

BASE = "/api/v1/reviews"


@pytest.fixture(autouse=True)
def no_notifications():
    with patch("cleanmarket.domain.reviews.preferred.send_preferred_cleaner_notification") as mock:
        yield mock


@pytest.fixture
def job(make_user, make_home, make_appointment):
    homeowner = make_user("homeowner", first_name="John", last_name="Doe")
    cleaner = make_user("cleaner", first_name="Jane")
    home = make_home(homeowner, nick_name="Main House")
    appointment = make_appointment(homeowner, home, workers=[cleaner])
    return homeowner, cleaner, home, appointment


def homeowner_payload(cleaner, appointment, **overrides):
    payload = {
        "userId": cleaner.id,
        "appointmentId": appointment.id,
        "homeId": appointment.home_id,
        "reviewType": "homeowner_to_cleaner",
        "review": 5,
        "reviewComment": "Spotless",
        "privateComment": "Parked on the lawn",
        "cleaningQuality": 5,
        "wouldRecommend": True,
    }
    payload.update(overrides)
    return payload


def cleaner_payload(homeowner, appointment, **overrides):
    payload = {
        "userId": homeowner.id,
        "appointmentId": appointment.id,
        "reviewType": "cleaner_to_homeowner",
        "review": 4,
        "homeReadiness": 4,
        "wouldWorkForAgain": True,
    }
    payload.update(overrides)
    return payload


class TestAuth:
    def test_invalid_token(self, client):
        response = client.get(f"{BASE}/pending", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_expired_token(self, client, job):
        homeowner = job[0]
        token = create_access_token(homeowner.id, expires_delta=timedelta(minutes=-5))

        response = client.get(f"{BASE}/pending", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_unknown_user(self, client):
        token = create_access_token(4242)

        response = client.get(f"{BASE}/pending", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


class TestSubmit:
    def test_first_side_stays_hidden(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job

        response = client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Review submitted successfully"
        assert body["review"]["isPublished"] is False
        assert body["review"]["privateComment"] == "Parked on the lawn"
        assert body["review"]["aspects"]["cleaningQuality"] == 5
        assert body["status"]["hasHomeownerReviewed"] is True
        assert body["status"]["bothReviewed"] is False
        assert body["employeeCopiesCreated"] == 0

        public = client.get(f"{BASE}/user/{cleaner.id}", headers=auth_headers(homeowner)).json()
        assert public["reviews"] == []
        assert public["stats"]["totalReviews"] == 0

    def test_full_exchange_publishes(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job
        client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        )

        response = client.post(
            f"{BASE}/submit", json=cleaner_payload(homeowner, appointment), headers=auth_headers(cleaner)
        )

        assert response.status_code == 201
        assert response.json()["status"]["isPublished"] is True

        public = client.get(f"{BASE}/user/{cleaner.id}", headers=auth_headers(homeowner)).json()
        assert len(public["reviews"]) == 1
        assert public["reviews"][0]["reviewerName"] == "John Doe"
        assert public["reviews"][0]["privateComment"] is None
        assert public["stats"]["averageRating"] == 5
        assert public["stats"]["recommendationRate"] == 100

    def test_staff_see_private_comment(self, client, job, auth_headers, make_user):
        homeowner, cleaner, _, appointment = job
        client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        )
        client.post(
            f"{BASE}/submit", json=cleaner_payload(homeowner, appointment), headers=auth_headers(cleaner)
        )
        staff = make_user("hr")

        public = client.get(f"{BASE}/user/{cleaner.id}", headers=auth_headers(staff)).json()

        assert public["reviews"][0]["privateComment"] == "Parked on the lawn"

    def test_duplicate_is_400(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job
        payload = homeowner_payload(cleaner, appointment)
        client.post(f"{BASE}/submit", json=payload, headers=auth_headers(homeowner))

        response = client.post(f"{BASE}/submit", json=payload, headers=auth_headers(homeowner))

        assert response.status_code == 400
        assert response.json()["detail"] == "You have already reviewed this appointment"

    def test_missing_appointment_is_404(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job

        response = client.post(
            f"{BASE}/submit",
            json=homeowner_payload(cleaner, appointment, appointmentId=777),
            headers=auth_headers(homeowner),
        )

        assert response.status_code == 404

    @pytest.mark.parametrize(
        "overrides",
        [
            {"reviewType": "system_cancellation_penalty"},
            {"review": 6},
            {"review": None, "cleaningQuality": None},
        ],
    )
    def test_invalid_payload_is_422(self, client, job, auth_headers, overrides):
        homeowner, cleaner, _, appointment = job

        response = client.post(
            f"{BASE}/submit",
            json=homeowner_payload(cleaner, appointment, **overrides),
            headers=auth_headers(homeowner),
        )

        assert response.status_code == 422

    def test_set_as_preferred(self, client, db, job, auth_headers, no_notifications):
        homeowner, cleaner, home, appointment = job

        response = client.post(
            f"{BASE}/submit",
            json=homeowner_payload(cleaner, appointment, setAsPreferred=True, homeId=home.id),
            headers=auth_headers(homeowner),
        )

        assert response.status_code == 201
        assert response.json()["preferredStatusSet"] is True
        assert db.query(HomePreferredCleaner).count() == 1
        no_notifications.assert_called_once()
        assert no_notifications.call_args.kwargs["home_label"] == "Main House"

        homes = client.get(f"{BASE}/preferred-homes", headers=auth_headers(cleaner)).json()
        assert homes == {"preferredHomeIds": [home.id]}

    def test_team_copies_counted(self, client, job, auth_headers, make_user, make_appointment):
        homeowner, cleaner, home, _ = job
        teammate = make_user("cleaner")
        appointment = make_appointment(homeowner, home, workers=[cleaner, teammate])

        response = client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        )

        assert response.json()["employeeCopiesCreated"] == 1


class TestLegacy:
    def test_created_published(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job

        response = client.post(
            BASE,
            json={"userId": cleaner.id, "appointmentId": appointment.id, "rating": 4, "comment": "Nice"},
            headers=auth_headers(homeowner),
        )

        assert response.status_code == 201
        assert response.json()["isPublished"] is True
        assert response.json()["review"] == 4


class TestReads:
    def test_status(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job
        client.post(
            f"{BASE}/submit", json=cleaner_payload(homeowner, appointment), headers=auth_headers(cleaner)
        )

        status = client.get(f"{BASE}/status/{appointment.id}", headers=auth_headers(homeowner)).json()

        assert status == {
            "hasHomeownerReviewed": False,
            "hasCleanerReviewed": True,
            "userHasReviewed": False,
            "bothReviewed": False,
            "isPublished": False,
        }

    def test_written_excludes_copies(self, client, job, auth_headers, make_user, make_appointment):
        homeowner, cleaner, home, _ = job
        appointment = make_appointment(homeowner, home, workers=[cleaner, make_user("cleaner")])
        client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        )

        written = client.get(f"{BASE}/written", headers=auth_headers(homeowner)).json()

        assert len(written) == 1
        assert written[0]["userId"] == cleaner.id

    def test_pending(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job

        before = client.get(f"{BASE}/pending", headers=auth_headers(cleaner)).json()
        client.post(
            f"{BASE}/submit", json=cleaner_payload(homeowner, appointment), headers=auth_headers(cleaner)
        )
        after = client.get(f"{BASE}/pending", headers=auth_headers(cleaner)).json()

        assert [p["appointmentId"] for p in before] == [appointment.id]
        assert after == []

    def test_stats_empty(self, client, job, auth_headers):
        homeowner, cleaner, _, _ = job

        response = client.get(f"{BASE}/stats/{cleaner.id}", headers=auth_headers(homeowner))

        assert response.json() == {
            "averageRating": 0,
            "totalReviews": 0,
            "recommendationRate": 0,
            "aspectAverages": {},
        }

    def test_penalty_summary_is_staff_only(self, client, db, job, auth_headers, make_user):
        homeowner, cleaner, _, appointment = job
        ReviewRepository.create_review(
            db,
            appointment_id=appointment.id,
            reviewer_id=None,
            user_id=cleaner.id,
            review_type="system_cancellation_penalty",
            review=1,
        )

        denied = client.get(f"{BASE}/cancellation-penalties/summary", headers=auth_headers(homeowner))
        allowed = client.get(f"{BASE}/cancellation-penalties/summary", headers=auth_headers(make_user("owner")))

        assert denied.status_code == 403
        assert allowed.json() == {"total": 1, "last30Days": 1, "last90Days": 1}


class TestDelete:
    def test_delete_unpublished_review(self, client, db, job, auth_headers):
        homeowner, cleaner, _, appointment = job
        review_id = client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        ).json()["review"]["id"]

        response = client.delete(f"{BASE}/{review_id}", headers=auth_headers(homeowner))

        assert response.status_code == 200
        assert db.query(UserReview).count() == 0

    def test_cannot_delete_someone_elses(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job
        review_id = client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        ).json()["review"]["id"]

        assert client.delete(f"{BASE}/{review_id}", headers=auth_headers(cleaner)).status_code == 403

    def test_cannot_delete_published(self, client, job, auth_headers):
        homeowner, cleaner, _, appointment = job
        review_id = client.post(
            f"{BASE}/submit", json=homeowner_payload(cleaner, appointment), headers=auth_headers(homeowner)
        ).json()["review"]["id"]
        client.post(
            f"{BASE}/submit", json=cleaner_payload(homeowner, appointment), headers=auth_headers(cleaner)
        )

        assert client.delete(f"{BASE}/{review_id}", headers=auth_headers(homeowner)).status_code == 400

    def test_missing_review(self, client, job, auth_headers):
        assert client.delete(f"{BASE}/999", headers=auth_headers(job[0])).status_code == 404
