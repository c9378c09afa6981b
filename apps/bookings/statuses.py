"""
Booking and worker status vocabulary.

Canonical booking statuses are stored lower-case and hyphenated
('in-progress', 'reading-bps'). Legacy rows carry several spellings of the
same status ('In Progress', 'InProgress', 'canceled', 'done', ...);
parse_status() folds them onto the canonical value and returns an
UnknownStatus for anything it does not recognise, so callers can branch on
the tag instead of comparing raw strings.

WorkerStatus is deliberately open: workers may report any text. The known
values only drive badge styling.
"""
import re
from dataclasses import dataclass
from typing import Union

from django.db import models


class BookingStatus(models.TextChoices):
    PENDING     = 'pending',     'Pending'
    APPROVED    = 'approved',    'Approved'
    ASSIGNED    = 'assigned',    'Assigned'
    COMPLETED   = 'completed',   'Completed'
    CANCELLED   = 'cancelled',   'Cancelled'
    REJECTED    = 'rejected',    'Rejected'
    # Reporting-only markers; no lifecycle operation transitions into these.
    IN_PROGRESS = 'in-progress', 'In Progress'
    READING_BPS = 'reading-bps', 'Reading BPS'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID    = 'paid',    'Paid'
    FAILED  = 'failed',  'Failed'


class WorkerStatus(models.TextChoices):
    PENDING     = 'Pending',     'Pending'
    IN_PROGRESS = 'In Progress', 'In Progress'
    ATTENDING   = 'Attending',   'Attending'
    COMPLETED   = 'Completed',   'Completed'
    CANCELLED   = 'Cancelled',   'Cancelled'


ACTIVE_STATUSES = frozenset({
    BookingStatus.PENDING, BookingStatus.APPROVED, BookingStatus.ASSIGNED,
})
TERMINAL_STATUSES = frozenset({
    BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.REJECTED,
})

DEFAULT_ASSIGNMENT_STATUS = 'assigned'


@dataclass(frozen=True)
class UnknownStatus:
    """A status string that matches no canonical BookingStatus."""
    raw: str

    def __str__(self):
        return self.raw


# Keys are lower-cased with spaces, dashes and underscores removed.
_STATUS_ALIASES = {
    'pending':    BookingStatus.PENDING,
    'approved':   BookingStatus.APPROVED,
    'assigned':   BookingStatus.ASSIGNED,
    'completed':  BookingStatus.COMPLETED,
    'done':       BookingStatus.COMPLETED,
    'cancelled':  BookingStatus.CANCELLED,
    'canceled':   BookingStatus.CANCELLED,
    'rejected':   BookingStatus.REJECTED,
    'inprogress': BookingStatus.IN_PROGRESS,
    'readingbps': BookingStatus.READING_BPS,
}

_SEPARATORS = re.compile(r'[\s_\-]+')


def _status_key(raw: str) -> str:
    return _SEPARATORS.sub('', raw).lower()


def parse_status(raw) -> Union[BookingStatus, UnknownStatus]:
    """
    Map a stored booking status onto its canonical value.

    Matching ignores case and separators, so 'In Progress', 'in-progress'
    and 'InProgress' all resolve to BookingStatus.IN_PROGRESS.
    """
    if isinstance(raw, BookingStatus):
        return raw
    text = '' if raw is None else str(raw).strip()
    status = _STATUS_ALIASES.get(_status_key(text))
    if status is None:
        return UnknownStatus(text)
    return status


def normalize_status(raw) -> str:
    """Canonical storage form of ``raw``; unknown values are returned stripped."""
    return str(parse_status(raw))


def is_active_status(raw) -> bool:
    return parse_status(raw) in ACTIVE_STATUSES


def is_terminal_status(raw) -> bool:
    return parse_status(raw) in TERMINAL_STATUSES


def parse_worker_status(raw):
    """Return the matching WorkerStatus, or the stripped text when it is not a known value."""
    text = '' if raw is None else str(raw).strip()
    key = _status_key(text)
    for status in WorkerStatus:
        if _status_key(status.value) == key:
            return status
    return text


# ── Badge styling ─────────────────────────────────────────────────────────────

_WORKER_STATUS_BADGES = {
    WorkerStatus.PENDING:     'bg-warning text-dark',
    WorkerStatus.IN_PROGRESS: 'bg-info text-dark',
    WorkerStatus.ATTENDING:   'bg-primary text-white',
    WorkerStatus.COMPLETED:   'bg-success text-white',
    WorkerStatus.CANCELLED:   'bg-danger text-white',
}

_BOOKING_STATUS_BADGES = {
    BookingStatus.PENDING:     'bg-warning text-dark',
    BookingStatus.APPROVED:    'bg-primary text-white',
    BookingStatus.ASSIGNED:    'bg-info text-white',
    BookingStatus.IN_PROGRESS: 'bg-primary text-white',
    BookingStatus.COMPLETED:   'bg-success text-white',
    BookingStatus.CANCELLED:   'bg-danger text-white',
    BookingStatus.REJECTED:    'bg-danger text-white',
}

DEFAULT_BADGE = 'bg-secondary text-white'


def worker_status_badge_class(raw) -> str:
    return _WORKER_STATUS_BADGES.get(parse_worker_status(raw), DEFAULT_BADGE)


def booking_status_badge_class(raw) -> str:
    return _BOOKING_STATUS_BADGES.get(parse_status(raw), DEFAULT_BADGE)
