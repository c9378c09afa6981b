"""
Booking lifecycle: business logic only, no HTTP/request awareness.

Public API:
  has_active_booking_for_date(customer_id, booking_date)
  create_booking(customer, booking_date=..., address=..., service_type=..., ...)
  set_booking_status(booking_id, new_status, changed_by)
  set_booking_price(booking_id, final_price, changed_by)
  assign_worker(booking_id, worker_id, changed_by)
  find_or_create_assignment(booking, worker)
  update_worker_status(assignment_id, worker_status, changed_by, worker_id=None)
  submit_feedback(booking_id, worker_id, feedback)
  complete_assignment(assignment_id, booking_id=None, changed_by)
  delete_assignment(assignment_id, changed_by)
  cancel_booking(booking_id, customer_id, reason='')
  delete_booking(booking_id)
  mark_booking_paid(booking)
  lock_booking(booking_id)
  find_divergent_bookings()
  reconcile_booking(booking_id)

Every write that touches both a Booking and its Assignment happens inside one
transaction. The Assignment is authoritative for AssignedWorker/WorkerStatus;
_apply_mirror() is the only place those copies are written onto the Booking.
Rows are always locked booking first, then assignment.
"""
import logging
from collections import namedtuple
from datetime import date as date_type, datetime
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from apps.accounts.identity import get_customer_name
from apps.workers.models import Worker

from .exceptions import (
    AssignmentNotFoundError,
    BookingAuthorizationError,
    BookingNotFoundError,
    BookingValidationError,
    DuplicateBookingError,
    InvalidTransitionError,
    WorkerNotFoundError,
)
from .models import Assignment, Booking, BookingStatusLog, ServiceType
from .statuses import (
    ACTIVE_STATUSES,
    DEFAULT_ASSIGNMENT_STATUS,
    TERMINAL_STATUSES,
    BookingStatus,
    PaymentStatus,
    WorkerStatus,
    is_active_status,
    parse_status,
    parse_worker_status,
)

logger = logging.getLogger(__name__)


# ── Transition table ──────────────────────────────────────────────────────────

SET_STATUS = 'a status change'
SET_PRICE = 'a price change'
ASSIGN_WORKER = 'assigning a worker'
COMPLETE_ASSIGNMENT = 'completion'
DELETE_ASSIGNMENT = 'removing the assignment'
CANCEL_BOOKING = 'cancellation'

_NON_TERMINAL = frozenset(BookingStatus) - TERMINAL_STATUSES

ALLOWED_SOURCES = {
    SET_STATUS:          frozenset({BookingStatus.PENDING, BookingStatus.APPROVED}),
    SET_PRICE:           _NON_TERMINAL,
    ASSIGN_WORKER:       frozenset({BookingStatus.PENDING, BookingStatus.APPROVED, BookingStatus.ASSIGNED}),
    COMPLETE_ASSIGNMENT: frozenset({BookingStatus.ASSIGNED}),
    DELETE_ASSIGNMENT:   _NON_TERMINAL | {BookingStatus.CANCELLED, BookingStatus.REJECTED},
    CANCEL_BOOKING:      ACTIVE_STATUSES,
}

# Targets an admin may pick directly from the bookings table.
ADMIN_STATUS_TARGETS = frozenset({
    BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED,
})

WORKER_STATUS_MAX_LENGTH = Assignment._meta.get_field('worker_status').max_length


def _require_source(booking: Booking, event: str):
    current = parse_status(booking.status)
    if current not in ALLOWED_SOURCES[event]:
        raise InvalidTransitionError(event, str(current))
    return current


# ── Row loading ───────────────────────────────────────────────────────────────

def lock_booking(booking_id) -> Booking:
    try:
        booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
    except (ValueError, DjangoValidationError):
        booking = None
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} was not found.")
    return booking


def _lock_pair(assignment_id):
    """Lock an assignment and its booking (booking first). Returns (booking, assignment)."""
    try:
        booking_id = (
            Assignment.objects
            .filter(pk=assignment_id)
            .values_list('booking_id', flat=True)
            .first()
        )
    except (ValueError, DjangoValidationError):
        booking_id = None
    if booking_id is None:
        raise AssignmentNotFoundError(f"Assignment {assignment_id} was not found.")

    booking = lock_booking(booking_id)
    assignment = Assignment.objects.select_for_update().filter(pk=assignment_id).first()
    if assignment is None:
        raise AssignmentNotFoundError(f"Assignment {assignment_id} was not found.")
    return booking, assignment


def _get_worker(worker_id) -> Worker:
    try:
        worker = Worker.objects.filter(pk=worker_id, is_active=True).first()
    except (ValueError, DjangoValidationError):
        worker = None
    if worker is None:
        raise WorkerNotFoundError(f"Worker {worker_id} was not found or is inactive.")
    return worker


def _active_assignment(booking: Booking, lock: bool = True):
    qs = booking.assignments.filter(is_fully_completed=False).order_by('created_at')
    if lock:
        qs = qs.select_for_update()
    return qs.first()


# ── Booking ↔ Assignment mirror ───────────────────────────────────────────────

_MIRROR_FIELDS = {
    'assigned_worker_id': 'assigned_worker',
    'worker_status': 'worker_status',
    'status': 'status',
}


def _mirror_values(assignment) -> dict:
    if assignment is None:
        return {'assigned_worker_id': None, 'worker_status': None}
    return {
        'assigned_worker_id': assignment.assigned_worker_id,
        'worker_status': assignment.worker_status,
    }


def _apply_mirror(booking: Booking, values: dict) -> list:
    """Write expected values onto the booking; returns the model field names that changed."""
    changed = []
    for attr, value in values.items():
        if getattr(booking, attr) != value:
            setattr(booking, attr, value)
            changed.append(_MIRROR_FIELDS[attr])
    return changed


def _save(instance, fields) -> None:
    instance.save(update_fields=sorted(set(fields) | {'updated_at'}))


def _cancel_active_assignment(booking: Booking) -> list:
    """Flag the active assignment (if any) as Cancelled and mirror it; returns changed booking fields."""
    assignment = _active_assignment(booking)
    if assignment is None:
        return []
    assignment.worker_status = WorkerStatus.CANCELLED
    _save(assignment, ['worker_status'])
    return _apply_mirror(booking, _mirror_values(assignment))


# ── Queries ───────────────────────────────────────────────────────────────────

def _as_day(value):
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date_type):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_date(value.strip())
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise BookingValidationError("A valid booking date is required.")


def has_active_booking_for_date(customer_id, booking_date) -> bool:
    """
    True when the customer has a pending, approved or assigned booking on the
    same calendar day. Legacy spellings of those statuses count too.
    """
    day = _as_day(booking_date)
    statuses = (
        Booking.objects
        .filter(customer_id=customer_id, booking_date=day)
        .values_list('status', flat=True)
    )
    return any(is_active_status(s) for s in statuses)


# ── Customer operations ───────────────────────────────────────────────────────

def create_booking(customer, *, booking_date, address, service_type,
                   preferred_time: str = '', estimated_price=Decimal('0'),
                   special_request: str = '', bin_size: str = '',
                   carpet_size: str = '', customer_name: str = None) -> Booking:
    """
    Create a pending booking for ``customer``.

    Raises DuplicateBookingError when the customer already holds an active
    booking for that day, including when a concurrent request wins the race.
    """
    day = _as_day(booking_date)
    address = (address or '').strip()
    if not address:
        raise BookingValidationError("A service address is required.")
    if service_type not in ServiceType.values:
        raise BookingValidationError(f"Unknown service type '{service_type}'.")
    try:
        estimated_price = Decimal(str(estimated_price or 0))
    except InvalidOperation:
        raise BookingValidationError("Estimated price must be a number.")
    if not estimated_price.is_finite() or estimated_price < 0:
        raise BookingValidationError("Estimated price cannot be negative.")

    if has_active_booking_for_date(customer.pk, day):
        raise DuplicateBookingError(
            "You already have an active booking for this date. "
            "Please choose another day or cancel the existing booking."
        )

    with transaction.atomic():
        try:
            # Savepoint so the unique-constraint failure leaves the outer transaction usable.
            with transaction.atomic():
                booking = Booking.objects.create(
                    customer=customer,
                    customer_name=customer_name or get_customer_name(customer),
                    booking_address=address,
                    booking_date=day,
                    preferred_time=(preferred_time or '').strip(),
                    service_type=service_type,
                    bin_size=bin_size or '',
                    carpet_size=carpet_size or '',
                    special_request=(special_request or '').strip(),
                    estimated_price=estimated_price,
                    status=BookingStatus.PENDING,
                    payment_status=PaymentStatus.PENDING,
                )
        except IntegrityError:
            raise DuplicateBookingError(
                "You already have an active booking for this date. "
                "Please choose another day or cancel the existing booking."
            )
        BookingStatusLog.objects.create(
            booking=booking,
            from_status='',
            to_status=BookingStatus.PENDING,
            changed_by=f'customer:{customer.pk}',
            reason='Booking requested',
        )

    logger.info("Booking %s created for customer %s on %s", booking.pk, customer.pk, day)
    return booking


@transaction.atomic
def cancel_booking(booking_id, customer_id, reason: str = '') -> Booking:
    """Customer-initiated cancellation of their own active booking."""
    booking = lock_booking(booking_id)
    if str(booking.customer_id) != str(customer_id):
        raise BookingAuthorizationError("You can only cancel your own bookings.")
    _require_source(booking, CANCEL_BOOKING)

    changed = _cancel_active_assignment(booking)
    booking.transition(BookingStatus.CANCELLED, f'customer:{customer_id}',
                       reason=reason or 'Cancelled by customer')
    _save(booking, changed + ['status'])

    logger.info("Booking %s cancelled by customer %s", booking.pk, customer_id)
    return booking


# ── Admin operations ──────────────────────────────────────────────────────────

@transaction.atomic
def set_booking_status(booking_id, new_status, changed_by: str = 'admin') -> Booking:
    """Approve, reject or cancel a pending/approved booking."""
    target = parse_status(new_status)
    if target not in ADMIN_STATUS_TARGETS:
        raise BookingValidationError(f"'{new_status}' cannot be set directly.")

    booking = lock_booking(booking_id)
    current = _require_source(booking, SET_STATUS)

    changed = ['status']
    if target in (BookingStatus.CANCELLED, BookingStatus.REJECTED):
        changed += _cancel_active_assignment(booking)
    booking.transition(target, changed_by, reason=f'{current} → {target}')
    _save(booking, changed)

    logger.info("Booking %s status %s → %s by %s", booking.pk, current, target, changed_by)
    return booking


@transaction.atomic
def set_booking_price(booking_id, final_price, changed_by: str = 'admin') -> Booking:
    try:
        price = Decimal(str(final_price).strip())
    except (InvalidOperation, TypeError):
        raise BookingValidationError("Price must be a number.")
    if not price.is_finite() or price <= 0:
        raise BookingValidationError("Price must be greater than zero.")

    booking = lock_booking(booking_id)
    _require_source(booking, SET_PRICE)
    if booking.payment_status == PaymentStatus.PAID:
        raise BookingValidationError("This booking has already been paid.")

    booking.final_price = price.quantize(Decimal('0.01'))
    booking.is_price_set = True
    _save(booking, ['final_price', 'is_price_set'])

    logger.info("Booking %s priced at %s by %s", booking.pk, booking.final_price, changed_by)
    return booking


def find_or_create_assignment(booking: Booking, worker: Worker) -> Assignment:
    """
    Point the booking's active assignment at ``worker``, creating one when the
    booking has none. Must run inside the caller's transaction.
    """
    assignment = _active_assignment(booking)
    if assignment is not None:
        assignment.assigned_worker = worker
        assignment.status = DEFAULT_ASSIGNMENT_STATUS
        _save(assignment, ['assigned_worker', 'status'])
        return assignment

    return Assignment.objects.create(
        booking=booking,
        assigned_worker=worker,
        status=DEFAULT_ASSIGNMENT_STATUS,
        worker_status=WorkerStatus.PENDING,
        is_fully_completed=False,
    )


@transaction.atomic
def assign_worker(booking_id, worker_id, changed_by: str = 'admin') -> Assignment:
    """
    Assign (or reassign) an active worker. The booking becomes 'assigned' and
    mirrors the assignment's worker fields.
    """
    booking = lock_booking(booking_id)
    current = _require_source(booking, ASSIGN_WORKER)
    worker = _get_worker(worker_id)

    previous_worker_id = booking.assigned_worker_id
    assignment = find_or_create_assignment(booking, worker)

    if current == BookingStatus.ASSIGNED and previous_worker_id:
        reason = f'Reassigned to {worker.name}'
    else:
        reason = f'Assigned to {worker.name}'
    booking.transition(BookingStatus.ASSIGNED, changed_by, reason=reason)
    changed = _apply_mirror(booking, _mirror_values(assignment))
    _save(booking, changed + ['status'])

    logger.info("Booking %s assigned to worker %s by %s", booking.pk, worker.pk, changed_by)
    return assignment


@transaction.atomic
def complete_assignment(assignment_id, booking_id=None, changed_by: str = 'admin') -> Assignment:
    """Close out an assignment; the booking moves to 'completed'."""
    booking, assignment = _lock_pair(assignment_id)
    if booking_id is not None and str(booking.pk) != str(booking_id):
        raise BookingValidationError("That assignment does not belong to this booking.")
    _require_source(booking, COMPLETE_ASSIGNMENT)

    assignment.is_fully_completed = True
    assignment.completed_at = timezone.now()
    assignment.worker_status = WorkerStatus.COMPLETED
    _save(assignment, ['is_fully_completed', 'completed_at', 'worker_status'])

    booking.transition(BookingStatus.COMPLETED, changed_by, reason='Assignment completed')
    changed = _apply_mirror(booking, _mirror_values(assignment))
    _save(booking, changed + ['status'])

    logger.info("Assignment %s completed; booking %s marked completed", assignment.pk, booking.pk)
    return assignment


@transaction.atomic
def delete_assignment(assignment_id, changed_by: str = 'admin') -> Booking:
    """
    Remove an assignment. An open booking falls back to 'approved'; a
    cancelled or rejected one keeps its status. Completed work cannot be
    unassigned.
    """
    booking, assignment = _lock_pair(assignment_id)
    current = _require_source(booking, DELETE_ASSIGNMENT)

    assignment_pk = assignment.pk
    assignment.delete()

    changed = _apply_mirror(booking, _mirror_values(None))
    if current not in TERMINAL_STATUSES:
        booking.transition(BookingStatus.APPROVED, changed_by, reason='Assignment removed')
        changed.append('status')
    _save(booking, changed)

    logger.info("Assignment %s deleted by %s; booking %s is %s",
                assignment_pk, changed_by, booking.pk, booking.status)
    return booking


@transaction.atomic
def delete_booking(booking_id) -> None:
    """Hard delete. Assignments and status logs go with it; payments keep a null BookingId."""
    booking = lock_booking(booking_id)
    booking_pk = booking.pk
    booking.delete()
    logger.info("Booking %s deleted", booking_pk)


def mark_booking_paid(booking: Booking) -> Booking:
    """Flag a booking as paid. Called from the payment transaction."""
    booking.payment_status = PaymentStatus.PAID
    _save(booking, ['payment_status'])
    return booking


# ── Worker operations ─────────────────────────────────────────────────────────

@transaction.atomic
def update_worker_status(assignment_id, worker_status, changed_by: str,
                         worker_id=None) -> Assignment:
    """
    Record a free-text progress status on the assignment and mirror it onto
    the booking. When ``worker_id`` is given the assignment must belong to
    that worker.
    """
    text = (worker_status or '').strip()
    if not text:
        raise BookingValidationError("Worker status is required.")
    if len(text) > WORKER_STATUS_MAX_LENGTH:
        raise BookingValidationError(
            f"Worker status must be at most {WORKER_STATUS_MAX_LENGTH} characters."
        )

    booking, assignment = _lock_pair(assignment_id)
    if worker_id is not None and str(assignment.assigned_worker_id) != str(worker_id):
        raise BookingAuthorizationError("This assignment belongs to another worker.")
    if assignment.is_fully_completed:
        raise BookingValidationError("This assignment has already been completed.")

    assignment.worker_status = str(parse_worker_status(text))
    _save(assignment, ['worker_status'])

    changed = _apply_mirror(booking, _mirror_values(assignment))
    if changed:
        _save(booking, changed)

    logger.info("Assignment %s worker status → %r by %s", assignment.pk, assignment.worker_status, changed_by)
    return assignment


@transaction.atomic
def submit_feedback(booking_id, worker_id, feedback: str) -> Booking:
    """Store a worker's note against a booking they are assigned to."""
    text = (feedback or '').strip()
    if not text:
        raise BookingValidationError("Feedback cannot be empty.")

    booking = lock_booking(booking_id)
    owns = booking.assignments.filter(assigned_worker_id=worker_id, is_fully_completed=False).exists()
    if not owns:
        raise BookingAuthorizationError("You are not assigned to this booking.")

    booking.worker_feedback = text
    booking.feedback_timestamp = timezone.now()
    _save(booking, ['worker_feedback', 'feedback_timestamp'])

    logger.info("Feedback recorded on booking %s by worker %s", booking.pk, worker_id)
    return booking


# ── Reconciliation ────────────────────────────────────────────────────────────

Divergence = namedtuple('Divergence', ['booking', 'expected', 'fields'])


def _expected_state(booking: Booking, assignments) -> dict:
    """
    What the booking's mirrored fields should read given its assignments.
    Status is only corrected where the assignments imply it unambiguously.
    """
    active = [a for a in assignments if not a.is_fully_completed]
    done = [a for a in assignments if a.is_fully_completed]
    current = parse_status(booking.status)

    if active:
        active.sort(key=lambda a: a.created_at)
        expected = _mirror_values(active[0])
        if current in (BookingStatus.PENDING, BookingStatus.APPROVED):
            expected['status'] = BookingStatus.ASSIGNED.value
        return expected

    if done:
        done.sort(key=lambda a: a.completed_at or a.created_at)
        expected = _mirror_values(done[-1])
        if current in ACTIVE_STATUSES:
            expected['status'] = BookingStatus.COMPLETED.value
        return expected

    expected = _mirror_values(None)
    if current == BookingStatus.ASSIGNED:
        expected['status'] = BookingStatus.APPROVED.value
    return expected


def _differences(booking: Booking, expected: dict) -> list:
    return [attr for attr, value in expected.items() if getattr(booking, attr) != value]


def find_divergent_bookings() -> list:
    """Bookings whose mirrored worker fields or status disagree with their assignments."""
    divergent = []
    for booking in Booking.objects.prefetch_related('assignments').order_by('created_at'):
        expected = _expected_state(booking, list(booking.assignments.all()))
        fields = _differences(booking, expected)
        if fields:
            divergent.append(Divergence(booking, expected, fields))
    return divergent


@transaction.atomic
def reconcile_booking(booking_id, changed_by: str = 'system:reconcile') -> list:
    """Bring one booking back in line with its assignments; returns the fields rewritten."""
    booking = lock_booking(booking_id)
    assignments = list(booking.assignments.select_for_update())
    expected = _expected_state(booking, assignments)

    new_status = expected.pop('status', None)
    changed = _apply_mirror(booking, expected)
    if new_status is not None and booking.status != new_status:
        booking.transition(new_status, changed_by, reason='Reconciled with assignments')
        changed.append('status')
    if changed:
        _save(booking, changed)
        logger.warning("Booking %s reconciled: %s", booking.pk, ', '.join(changed))
    return changed
