"""Tests for booking ratings, aggregates and moderation."""

from decimal import Decimal
from uuid import uuid4

from app.models import ProfessionalProfile
from tests.factories import auth_headers_for, create_booking

API = "/api/v1/ratings"


def rating_payload(booking_id, **overrides) -> dict:
    payload = {
        "booking_id": str(booking_id),
        "score": 5,
        "comment": "Fixed the leak in under an hour, very tidy.",
        "category_ratings": [
            {"category": "quality", "score": 5},
            {"category": "punctuality", "score": 4},
        ],
    }
    payload.update(overrides)
    return payload


class TestCreateRating:
    async def test_rate_completed_booking(
        self, session_factory, client, completed_booking, consumer_headers, professional
    ):
        response = await client.post(API, json=rating_payload(completed_booking.id), headers=consumer_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["score"] == 5
        assert data["moderation_status"] == "approved"
        assert data["is_verified"] is True
        assert data["category_ratings"][1] == {"category": "punctuality", "score": 4}

        async with session_factory() as session:
            profile = await session.get(ProfessionalProfile, professional.id)
        assert profile.rating == Decimal("5.00")
        assert profile.total_ratings == 1

    async def test_second_rating_is_rejected(self, client, completed_booking, consumer_headers):
        first = await client.post(API, json=rating_payload(completed_booking.id), headers=consumer_headers)
        assert first.status_code == 201

        second = await client.post(
            API, json=rating_payload(completed_booking.id, score=1), headers=consumer_headers
        )

        assert second.status_code == 409
        assert second.json()["code"] == "AlreadyRated"

    async def test_pending_booking_cannot_be_rated(self, client, booking, consumer_headers):
        response = await client.post(API, json=rating_payload(booking.id), headers=consumer_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "BookingNotCompleted"

    async def test_only_the_consumer_can_rate(self, client, completed_booking, other_consumer):
        response = await client.post(
            API, json=rating_payload(completed_booking.id), headers=auth_headers_for(other_consumer)
        )

        assert response.status_code == 403

    async def test_score_out_of_range(self, client, completed_booking, consumer_headers):
        response = await client.post(
            API, json=rating_payload(completed_booking.id, score=6), headers=consumer_headers
        )

        assert response.status_code == 422

    async def test_inappropriate_comment_is_flagged(
        self, session_factory, client, completed_booking, consumer_headers, professional
    ):
        response = await client.post(
            API,
            json=rating_payload(completed_booking.id, comment="This is shit work", score=1),
            headers=consumer_headers,
        )

        assert response.status_code == 201
        assert response.json()["moderation_status"] == "flagged"

        # Flagged ratings do not count towards the average
        async with session_factory() as session:
            profile = await session.get(ProfessionalProfile, professional.id)
        assert profile.total_ratings == 0


class TestProfessionalRatings:
    async def test_average_and_category_averages(
        self, db, client, consumer, professional, consumer_headers
    ):
        for score in (5, 4, 4):
            booking = await create_booking(db, consumer, professional, status="completed")
            response = await client.post(
                API,
                json=rating_payload(
                    booking.id,
                    score=score,
                    category_ratings=[{"category": "quality", "score": score}],
                ),
                headers=consumer_headers,
            )
            assert response.status_code == 201

        response = await client.get(f"{API}/professionals/{professional.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert Decimal(data["average_rating"]) == Decimal("4.33")
        assert Decimal(data["category_averages"]["quality"]) == Decimal("4.33")

    async def test_get_booking_rating(self, client, completed_booking, consumer_headers):
        await client.post(API, json=rating_payload(completed_booking.id), headers=consumer_headers)

        response = await client.get(f"{API}/bookings/{completed_booking.id}")

        assert response.status_code == 200
        assert response.json()["booking_id"] == str(completed_booking.id)

    async def test_booking_without_rating(self, client, booking):
        response = await client.get(f"{API}/bookings/{booking.id}")

        assert response.status_code == 404

    async def test_get_rating_by_id(self, client, completed_booking, consumer_headers):
        created = await client.post(API, json=rating_payload(completed_booking.id), headers=consumer_headers)
        rating_id = created.json()["id"]

        response = await client.get(f"{API}/{rating_id}")

        assert response.status_code == 200
        assert response.json()["id"] == rating_id
        assert response.json()["booking_id"] == str(completed_booking.id)

    async def test_unknown_rating(self, client):
        response = await client.get(f"{API}/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "NotFound"


class TestModeration:
    async def test_report_flags_rating_and_updates_average(
        self, session_factory, client, completed_booking, consumer_headers, professional_headers, professional
    ):
        created = await client.post(API, json=rating_payload(completed_booking.id), headers=consumer_headers)
        rating_id = created.json()["id"]

        response = await client.post(
            f"{API}/{rating_id}/report",
            json={"reason": "Not a real customer"},
            headers=professional_headers,
        )

        assert response.status_code == 200
        assert response.json()["moderation_status"] == "flagged"

        async with session_factory() as session:
            profile = await session.get(ProfessionalProfile, professional.id)
        assert profile.total_ratings == 0
        assert profile.rating == Decimal("0.00")

    async def test_admin_approves_flagged_rating(
        self, session_factory, client, completed_booking, consumer_headers, admin_headers, professional
    ):
        created = await client.post(
            API,
            json=rating_payload(completed_booking.id, comment="WORST SERVICE I HAVE EVER HAD", score=2),
            headers=consumer_headers,
        )
        assert created.json()["moderation_status"] == "flagged"

        response = await client.post(
            f"/api/v1/admin/ratings/{created.json()['id']}/moderate",
            json={"action": "approved"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["moderation_status"] == "approved"

        async with session_factory() as session:
            profile = await session.get(ProfessionalProfile, professional.id)
        assert profile.total_ratings == 1
        assert profile.rating == Decimal("2.00")

    async def test_moderation_requires_admin(self, client, completed_booking, consumer_headers):
        created = await client.post(API, json=rating_payload(completed_booking.id), headers=consumer_headers)

        response = await client.post(
            f"/api/v1/admin/ratings/{created.json()['id']}/moderate",
            json={"action": "rejected"},
            headers=consumer_headers,
        )

        assert response.status_code == 403

    async def test_unknown_moderation_action(self, client, completed_booking, consumer_headers, admin_headers):
        created = await client.post(API, json=rating_payload(completed_booking.id), headers=consumer_headers)

        response = await client.post(
            f"/api/v1/admin/ratings/{created.json()['id']}/moderate",
            json={"action": "deleted"},
            headers=admin_headers,
        )

        assert response.status_code == 422
