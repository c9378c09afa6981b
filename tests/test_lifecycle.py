from datetime import date
from decimal import Decimal

import pytest

from apps.bookings import lifecycle
from apps.bookings.exceptions import (
    AssignmentNotFoundError,
    BookingAuthorizationError,
    BookingNotFoundError,
    BookingValidationError,
    DuplicateBookingError,
    InvalidTransitionError,
    WorkerNotFoundError,
)
from apps.bookings.models import Assignment, Booking, BookingStatusLog, ServiceType
from apps.bookings.statuses import BookingStatus, PaymentStatus, WorkerStatus

pytestmark = pytest.mark.django_db


def _reload(obj):
    obj.refresh_from_db()
    return obj


# ── Creation and the one-active-booking-per-day guard ─────────────────────────

def test_create_booking_starts_pending_with_audit_row(booking, customer):
    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.customer_name == 'Jane Mokoena'
    assert booking.final_price == Decimal('0')
    assert not booking.is_price_set
    log = BookingStatusLog.objects.get(booking=booking)
    assert log.to_status == 'pending'
    assert log.changed_by == f'customer:{customer.pk}'


def test_create_booking_accepts_iso_date_string(customer):
    booking = lifecycle.create_booking(
        customer, booking_date='2025-03-01', address='1 Main Rd',
        service_type=ServiceType.WASTE_REMOVAL,
    )
    assert _reload(booking).booking_date == date(2025, 3, 1)


@pytest.mark.parametrize('kwargs, message', [
    ({'address': '   '}, 'address'),
    ({'service_type': 'window_washing'}, 'service type'),
    ({'estimated_price': '-5'}, 'negative'),
    ({'estimated_price': 'abc'}, 'number'),
    ({'booking_date': '2025-02-30'}, 'date'),
    ({'booking_date': 'tomorrow'}, 'date'),
])
def test_create_booking_rejects_bad_input(customer, kwargs, message):
    params = {
        'booking_date': '2025-03-01',
        'address': '1 Main Rd',
        'service_type': ServiceType.GENERAL_CLEANING,
    }
    params.update(kwargs)
    with pytest.raises(BookingValidationError, match=message):
        lifecycle.create_booking(customer, **params)
    assert not Booking.objects.exists()


@pytest.mark.parametrize('existing_status', ['pending', 'approved', 'assigned'])
def test_duplicate_active_booking_on_same_day_is_rejected(make_booking, existing_status):
    first = make_booking()
    Booking.objects.filter(pk=first.pk).update(status=existing_status)
    with pytest.raises(DuplicateBookingError):
        make_booking()
    assert Booking.objects.count() == 1


@pytest.mark.parametrize('legacy', ['Approved', 'PENDING'])
def test_legacy_status_spellings_count_as_active(make_booking, customer, tomorrow, legacy):
    first = make_booking()
    Booking.objects.filter(pk=first.pk).update(status=legacy)
    assert lifecycle.has_active_booking_for_date(customer.pk, tomorrow)


@pytest.mark.parametrize('closed_status', ['cancelled', 'rejected', 'completed', 'in-progress'])
def test_closed_booking_frees_the_day(make_booking, closed_status):
    first = make_booking()
    Booking.objects.filter(pk=first.pk).update(status=closed_status)
    second = make_booking()
    assert second.pk != first.pk


def test_guard_is_per_customer_and_per_day(make_booking, other_customer, customer, tomorrow):
    make_booking()
    make_booking(owner=other_customer)
    assert lifecycle.has_active_booking_for_date(customer.pk, tomorrow)
    assert not lifecycle.has_active_booking_for_date(customer.pk, date(2030, 1, 1))


def test_unique_constraint_backs_up_the_precheck(make_booking, monkeypatch):
    make_booking()
    # Simulate a concurrent request that passed the pre-check.
    monkeypatch.setattr(lifecycle, 'has_active_booking_for_date', lambda *args: False)
    with pytest.raises(DuplicateBookingError):
        make_booking()
    assert Booking.objects.count() == 1


# ── Admin status and price ────────────────────────────────────────────────────

def test_set_status_approves_and_logs(booking):
    updated = lifecycle.set_booking_status(booking.pk, 'approved', 'admin:boss')
    assert updated.status == BookingStatus.APPROVED
    log = BookingStatusLog.objects.filter(booking=booking).last()
    assert (log.from_status, log.to_status, log.changed_by) == ('pending', 'approved', 'admin:boss')


def test_set_status_accepts_legacy_source(booking):
    Booking.objects.filter(pk=booking.pk).update(status='Pending')
    assert lifecycle.set_booking_status(booking.pk, 'Approved').status == 'approved'


@pytest.mark.parametrize('target', ['assigned', 'completed', 'pending', 'nonsense'])
def test_set_status_refuses_targets_owned_by_other_operations(booking, target):
    with pytest.raises(BookingValidationError):
        lifecycle.set_booking_status(booking.pk, target)
    assert _reload(booking).status == 'pending'


@pytest.mark.parametrize('source', ['assigned', 'completed', 'cancelled', 'rejected', 'on hold'])
def test_set_status_refuses_from_other_states(booking, source):
    Booking.objects.filter(pk=booking.pk).update(status=source)
    with pytest.raises(InvalidTransitionError):
        lifecycle.set_booking_status(booking.pk, 'approved')


def test_set_status_unknown_booking():
    with pytest.raises(BookingNotFoundError):
        lifecycle.set_booking_status('not-a-uuid', 'approved')


def test_set_price_quantizes_and_flags(approved_booking):
    booking = lifecycle.set_booking_price(approved_booking.pk, '380.5')
    assert booking.final_price == Decimal('380.50')
    assert booking.is_price_set


@pytest.mark.parametrize('price', ['0', '-10', 'abc', 'NaN', ''])
def test_set_price_rejects_non_positive_or_garbage(approved_booking, price):
    with pytest.raises(BookingValidationError):
        lifecycle.set_booking_price(approved_booking.pk, price)


def test_set_price_refused_once_paid_or_closed(approved_booking):
    Booking.objects.filter(pk=approved_booking.pk).update(payment_status=PaymentStatus.PAID)
    with pytest.raises(BookingValidationError, match='paid'):
        lifecycle.set_booking_price(approved_booking.pk, '100')

    Booking.objects.filter(pk=approved_booking.pk).update(
        payment_status=PaymentStatus.PENDING, status='cancelled',
    )
    with pytest.raises(InvalidTransitionError):
        lifecycle.set_booking_price(approved_booking.pk, '100')


# ── Assignment and the Booking mirror ─────────────────────────────────────────

def test_assign_worker_creates_assignment_and_mirrors(assigned, worker):
    booking, assignment = assigned
    assert booking.status == BookingStatus.ASSIGNED
    assert booking.assigned_worker_id == worker.pk
    assert booking.worker_status == WorkerStatus.PENDING
    assert assignment.worker_status == WorkerStatus.PENDING
    assert assignment.status == 'assigned'
    assert not assignment.is_fully_completed


def test_assign_worker_straight_from_pending(booking, worker):
    lifecycle.assign_worker(booking.pk, worker.pk)
    assert _reload(booking).status == 'assigned'


def test_reassign_reuses_the_active_assignment(assigned, other_worker):
    booking, assignment = assigned
    again = lifecycle.assign_worker(booking.pk, other_worker.pk)
    assert again.pk == assignment.pk
    assert Assignment.objects.filter(booking=booking).count() == 1
    booking = _reload(booking)
    assert booking.assigned_worker_id == other_worker.pk
    assert BookingStatusLog.objects.filter(booking=booking).last().reason == f'Reassigned to {other_worker.name}'


def test_assign_refuses_inactive_or_missing_worker(approved_booking, worker):
    worker.is_active = False
    worker.save()
    with pytest.raises(WorkerNotFoundError):
        lifecycle.assign_worker(approved_booking.pk, worker.pk)
    with pytest.raises(WorkerNotFoundError):
        lifecycle.assign_worker(approved_booking.pk, 'nope')
    assert not Assignment.objects.exists()


@pytest.mark.parametrize('source', ['completed', 'cancelled', 'rejected'])
def test_assign_refused_on_closed_booking(approved_booking, worker, source):
    Booking.objects.filter(pk=approved_booking.pk).update(status=source)
    with pytest.raises(InvalidTransitionError):
        lifecycle.assign_worker(approved_booking.pk, worker.pk)


def test_worker_status_update_mirrors_onto_booking(assigned, worker):
    booking, assignment = assigned
    lifecycle.update_worker_status(assignment.pk, 'on my way', 'worker', worker_id=worker.pk)
    assert _reload(assignment).worker_status == 'on my way'
    assert _reload(booking).worker_status == 'on my way'
    assert _reload(booking).status == 'assigned'


def test_worker_status_known_values_get_canonical_spelling(assigned):
    _, assignment = assigned
    lifecycle.update_worker_status(assignment.pk, 'in progress', 'admin')
    assert _reload(assignment).worker_status == 'In Progress'


def test_worker_status_rules(assigned, other_worker):
    _, assignment = assigned
    with pytest.raises(BookingValidationError):
        lifecycle.update_worker_status(assignment.pk, '   ', 'admin')
    with pytest.raises(BookingValidationError):
        lifecycle.update_worker_status(assignment.pk, 'x' * 101, 'admin')
    with pytest.raises(BookingAuthorizationError):
        lifecycle.update_worker_status(assignment.pk, 'Attending', 'w', worker_id=other_worker.pk)
    with pytest.raises(AssignmentNotFoundError):
        lifecycle.update_worker_status('missing', 'Attending', 'admin')


def test_find_or_create_assignment_ignores_completed_rows(assigned, other_worker):
    booking, assignment = assigned
    Assignment.objects.filter(pk=assignment.pk).update(is_fully_completed=True)
    fresh = lifecycle.find_or_create_assignment(booking, other_worker)
    assert fresh.pk != assignment.pk
    assert Assignment.objects.filter(booking=booking, is_fully_completed=False).count() == 1


# ── Completion and removal ────────────────────────────────────────────────────

def test_complete_assignment(assigned):
    booking, assignment = assigned
    done = lifecycle.complete_assignment(assignment.pk, booking.pk)
    assert done.is_fully_completed
    assert done.completed_at is not None
    assert done.worker_status == WorkerStatus.COMPLETED
    booking = _reload(booking)
    assert booking.status == BookingStatus.COMPLETED
    assert booking.worker_status == WorkerStatus.COMPLETED


def test_complete_assignment_checks_booking_and_state(assigned, make_booking, other_customer):
    booking, assignment = assigned
    stranger = make_booking(owner=other_customer)
    with pytest.raises(BookingValidationError):
        lifecycle.complete_assignment(assignment.pk, stranger.pk)

    lifecycle.complete_assignment(assignment.pk)
    with pytest.raises(InvalidTransitionError):
        lifecycle.complete_assignment(assignment.pk)


def test_completed_assignment_refuses_status_updates(assigned):
    _, assignment = assigned
    lifecycle.complete_assignment(assignment.pk)
    with pytest.raises(BookingValidationError, match='completed'):
        lifecycle.update_worker_status(assignment.pk, 'Attending', 'admin')


def test_delete_assignment_returns_booking_to_approved(assigned):
    booking, assignment = assigned
    result = lifecycle.delete_assignment(assignment.pk)
    assert result.status == BookingStatus.APPROVED
    assert result.assigned_worker_id is None
    assert result.worker_status is None
    assert not Assignment.objects.filter(pk=assignment.pk).exists()


def test_delete_assignment_on_cancelled_booking_keeps_status(assigned, customer):
    booking, assignment = assigned
    lifecycle.cancel_booking(booking.pk, customer.pk)
    result = lifecycle.delete_assignment(assignment.pk)
    assert result.status == BookingStatus.CANCELLED
    assert result.assigned_worker_id is None


def test_completed_work_cannot_be_unassigned(assigned):
    booking, assignment = assigned
    lifecycle.complete_assignment(assignment.pk)
    with pytest.raises(InvalidTransitionError):
        lifecycle.delete_assignment(assignment.pk)
    assert Assignment.objects.filter(pk=assignment.pk).exists()


# ── Cancellation ──────────────────────────────────────────────────────────────

def test_customer_cancels_own_booking(booking, customer):
    cancelled = lifecycle.cancel_booking(booking.pk, customer.pk, reason='Plans changed')
    assert cancelled.status == BookingStatus.CANCELLED
    log = BookingStatusLog.objects.filter(booking=booking).last()
    assert log.reason == 'Plans changed'


def test_cancel_checks_ownership_before_state(booking, other_customer):
    Booking.objects.filter(pk=booking.pk).update(status='completed')
    with pytest.raises(BookingAuthorizationError):
        lifecycle.cancel_booking(booking.pk, other_customer.pk)


@pytest.mark.parametrize('source', ['completed', 'cancelled', 'rejected'])
def test_cancel_refused_on_closed_booking(booking, customer, source):
    Booking.objects.filter(pk=booking.pk).update(status=source)
    with pytest.raises(InvalidTransitionError):
        lifecycle.cancel_booking(booking.pk, customer.pk)


def test_cancel_flags_the_active_assignment(assigned, customer):
    booking, assignment = assigned
    lifecycle.cancel_booking(booking.pk, customer.pk)
    assert _reload(assignment).worker_status == WorkerStatus.CANCELLED
    assert _reload(booking).worker_status == WorkerStatus.CANCELLED


def test_admin_reject_flags_the_active_assignment(booking, worker):
    assignment = lifecycle.assign_worker(booking.pk, worker.pk)
    Booking.objects.filter(pk=booking.pk).update(status='approved')
    lifecycle.set_booking_status(booking.pk, 'rejected')
    assert _reload(assignment).worker_status == WorkerStatus.CANCELLED
    assert _reload(booking).status == BookingStatus.REJECTED


# ── Feedback, payment flag, deletion ──────────────────────────────────────────

def test_submit_feedback_requires_active_assignment(assigned, worker, other_worker):
    booking, _ = assigned
    with pytest.raises(BookingAuthorizationError):
        lifecycle.submit_feedback(booking.pk, other_worker.pk, 'Gate locked')
    with pytest.raises(BookingValidationError):
        lifecycle.submit_feedback(booking.pk, worker.pk, '  ')

    lifecycle.submit_feedback(booking.pk, worker.pk, 'Gate locked, used side entrance')
    booking = _reload(booking)
    assert booking.worker_feedback == 'Gate locked, used side entrance'
    assert booking.feedback_timestamp is not None


def test_mark_booking_paid(approved_booking):
    lifecycle.mark_booking_paid(approved_booking)
    assert _reload(approved_booking).payment_status == PaymentStatus.PAID


def test_delete_booking_cascades(assigned):
    booking, assignment = assigned
    lifecycle.delete_booking(booking.pk)
    assert not Booking.objects.filter(pk=booking.pk).exists()
    assert not Assignment.objects.filter(pk=assignment.pk).exists()
    assert not BookingStatusLog.objects.filter(booking_id=booking.pk).exists()


# ── Reconciliation ────────────────────────────────────────────────────────────

def test_in_sync_bookings_are_not_reported(assigned):
    assert lifecycle.find_divergent_bookings() == []


def test_reconcile_restores_mirror_from_assignment(assigned, other_worker):
    booking, assignment = assigned
    # A half-applied write from before both rows were updated together.
    Assignment.objects.filter(pk=assignment.pk).update(assigned_worker=other_worker, worker_status='Attending')

    divergent = lifecycle.find_divergent_bookings()
    assert [d.booking.pk for d in divergent] == [booking.pk]
    assert set(divergent[0].fields) == {'assigned_worker_id', 'worker_status'}

    changed = lifecycle.reconcile_booking(booking.pk)
    assert set(changed) == {'assigned_worker', 'worker_status'}
    booking = _reload(booking)
    assert booking.assigned_worker_id == other_worker.pk
    assert booking.worker_status == 'Attending'
    assert lifecycle.find_divergent_bookings() == []


def test_reconcile_fixes_status_after_lost_completion(assigned):
    booking, assignment = assigned
    Assignment.objects.filter(pk=assignment.pk).update(is_fully_completed=True, worker_status='Completed')
    changed = lifecycle.reconcile_booking(booking.pk)
    assert 'status' in changed
    assert _reload(booking).status == BookingStatus.COMPLETED


def test_reconcile_drops_dangling_assigned_status(approved_booking, worker):
    Booking.objects.filter(pk=approved_booking.pk).update(status='assigned', assigned_worker=worker)
    lifecycle.reconcile_booking(approved_booking.pk)
    booking = _reload(approved_booking)
    assert booking.status == BookingStatus.APPROVED
    assert booking.assigned_worker_id is None


# ── End to end ────────────────────────────────────────────────────────────────

def test_full_booking_walkthrough(customer, worker):
    day = date(2025, 3, 1)
    booking = lifecycle.create_booking(
        customer, booking_date=day, address='4 Kloof St', service_type=ServiceType.GENERAL_CLEANING,
    )
    assert booking.status == 'pending'

    lifecycle.set_booking_status(booking.pk, 'approved')
    assert _reload(booking).status == 'approved'
    with pytest.raises(DuplicateBookingError):
        lifecycle.create_booking(
            customer, booking_date=day, address='4 Kloof St', service_type=ServiceType.GENERAL_CLEANING,
        )

    assignment = lifecycle.assign_worker(booking.pk, worker.pk)
    assert _reload(booking).status == 'assigned'
    assert assignment.worker_status == 'Pending'

    lifecycle.update_worker_status(assignment.pk, 'Completed', 'worker', worker_id=worker.pk)
    lifecycle.complete_assignment(assignment.pk, booking.pk)

    booking = _reload(booking)
    assert booking.status == 'completed'
    assert _reload(assignment).is_fully_completed
    transitions = list(booking.status_logs.values_list('to_status', flat=True))
    assert transitions == ['pending', 'approved', 'assigned', 'completed']
