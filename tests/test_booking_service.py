"""Service-level tests for booking transitions and persistence."""

import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.core.exceptions import ConflictError, TransitionRejected, UnauthorizedError
from app.domain.booking_state import ActorRole, BookingStatus
from app.models import AuditLog, Booking
from app.services.booking_service import BookingService, booking_service
from tests.factories import create_booking, create_user


async def test_accept_stamps_confirmed_at_and_writes_audit_log(
    session_factory, booking, professional_user
):
    async with session_factory() as session:
        updated = await booking_service.accept(session, booking.id, professional_user)
        await session.commit()

    assert updated.status == "confirmed"
    assert updated.confirmed_at is not None

    async with session_factory() as session:
        result = await session.execute(select(AuditLog).where(AuditLog.resource_id == booking.id))
        logs = result.scalars().all()

    assert len(logs) == 1
    assert logs[0].action == "booking_confirmed"
    assert logs[0].old_values == {"status": "pending"}
    assert logs[0].new_values["actor_role"] == "professional"
    assert logs[0].user_id == professional_user.id


async def test_stale_transition_raises_conflict(session_factory, booking, professional_user):
    async with session_factory() as first, session_factory() as second:
        stale = await booking_service.get_booking(first, booking.id)

        fresh = await booking_service.get_booking(second, booking.id)
        await booking_service.apply_transition(second, fresh, BookingStatus.CONFIRMED, professional_user)
        await second.commit()

        with pytest.raises(ConflictError):
            await booking_service.apply_transition(
                first, stale, BookingStatus.REJECTED, professional_user
            )
        await first.rollback()

    async with session_factory() as session:
        stored = await session.get(Booking, booking.id)
        assert stored.status == "confirmed"
        assert stored.rejection_reason is None


async def test_concurrent_transitions_only_one_wins(session_factory, booking, professional_user):
    async with session_factory() as first, session_factory() as second:
        first_copy = await booking_service.get_booking(first, booking.id)
        second_copy = await booking_service.get_booking(second, booking.id)

        async def attempt(session, loaded, target):
            try:
                await booking_service.apply_transition(session, loaded, target, professional_user)
                await session.commit()
                return "ok"
            except ConflictError:
                await session.rollback()
                return "ConflictError"

        results = await asyncio.gather(
            attempt(first, first_copy, BookingStatus.CONFIRMED),
            attempt(second, second_copy, BookingStatus.REJECTED),
        )

    assert sorted(results) == ["ConflictError", "ok"]

    async with session_factory() as session:
        stored = await session.get(Booking, booking.id)
        assert stored.status in ("confirmed", "rejected")
        audit = await session.execute(select(AuditLog).where(AuditLog.resource_id == booking.id))
        assert len(audit.scalars().all()) == 1


async def test_rejected_transition_leaves_booking_untouched(session_factory, booking, consumer):
    async with session_factory() as session:
        with pytest.raises(TransitionRejected) as exc_info:
            await booking_service.start(session, booking.id, consumer)
        await session.rollback()

    assert exc_info.value.code == "InvalidTransition"

    async with session_factory() as session:
        stored = await session.get(Booking, booking.id)
        assert stored.status == "pending"
        assert stored.started_at is None


async def test_cancel_stores_reason(db, session_factory, consumer, professional):
    confirmed = await create_booking(db, consumer, professional, status="confirmed")

    async with session_factory() as session:
        updated = await booking_service.cancel(session, confirmed.id, consumer, "Found someone closer")
        await session.commit()

    assert updated.status == "cancelled"
    assert updated.cancellation_reason == "Found someone closer"
    assert updated.cancelled_at is not None


async def test_complete_records_actual_price(db, session_factory, consumer, professional, professional_user):
    started = await create_booking(db, consumer, professional, status="in_progress")

    async with session_factory() as session:
        updated = await booking_service.complete(
            session, started.id, professional_user, Decimal("175.50")
        )
        await session.commit()

    assert updated.status == "completed"
    assert updated.actual_price == Decimal("175.50")
    assert updated.completed_at is not None


async def test_dispute_window_uses_configured_length(db, session_factory, consumer, professional):
    completed = await create_booking(
        db,
        consumer,
        professional,
        status="completed",
        completed_at=datetime.now(UTC) - timedelta(days=3),
    )
    short_window = BookingService(dispute_window=timedelta(days=2))

    async with session_factory() as session:
        loaded = await short_window.get_booking(session, completed.id)
        with pytest.raises(TransitionRejected) as exc_info:
            await short_window.apply_transition(session, loaded, BookingStatus.DISPUTED, consumer)

    assert exc_info.value.code == "InvalidTransition"


class TestActorResolution:
    async def test_roles(self, db, booking, consumer, professional_user, admin):
        loaded = await booking_service.get_booking(db, booking.id)

        assert booking_service.resolve_actor_role(loaded, consumer) == ActorRole.CONSUMER
        assert booking_service.resolve_actor_role(loaded, professional_user) == ActorRole.PROFESSIONAL
        assert booking_service.resolve_actor_role(loaded, admin) == ActorRole.ADMIN

    async def test_outsider_is_rejected(self, db, booking, other_consumer):
        loaded = await booking_service.get_booking(db, booking.id)

        with pytest.raises(UnauthorizedError):
            booking_service.resolve_actor_role(loaded, other_consumer)

    async def test_provider_acts_for_managed_professional(
        self, db, session_factory, consumer, provider, managed_professional
    ):
        managed_booking = await create_booking(db, consumer, managed_professional)

        async with session_factory() as session:
            updated = await booking_service.accept(session, managed_booking.id, provider)
            await session.commit()

        assert updated.status == "confirmed"

    async def test_other_provider_cannot_act(self, db, session_factory, booking):
        stranger = await create_user(db, "other-agency@example.com", role="provider")

        async with session_factory() as session:
            with pytest.raises(UnauthorizedError):
                await booking_service.accept(session, booking.id, stranger)


class TestListBookings:
    async def test_active_and_past_filters(self, db, consumer, professional):
        await create_booking(db, consumer, professional, status="pending")
        await create_booking(
            db,
            consumer,
            professional,
            status="completed",
            scheduled_date=datetime.now(UTC) - timedelta(days=10),
        )

        active, active_total = await booking_service.list_bookings(db, consumer, status_filter="active")
        past, past_total = await booking_service.list_bookings(db, consumer, status_filter="past")
        everything, total = await booking_service.list_bookings(db, consumer)

        assert active_total == 1 and active[0].status == "pending"
        assert past_total == 1 and past[0].status == "completed"
        assert total == 2

    async def test_provider_sees_managed_bookings(self, db, consumer, provider, managed_professional):
        await create_booking(db, consumer, managed_professional)

        bookings, total = await booking_service.list_bookings(db, provider, role="professional")

        assert total == 1
        assert bookings[0].professional_id == managed_professional.id
