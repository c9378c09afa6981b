import pytest

from apps.bookings.statuses import (
    BookingStatus,
    UnknownStatus,
    WorkerStatus,
    booking_status_badge_class,
    is_active_status,
    is_terminal_status,
    normalize_status,
    parse_status,
    parse_worker_status,
    worker_status_badge_class,
)


@pytest.mark.parametrize('raw, expected', [
    ('pending', BookingStatus.PENDING),
    ('Approved', BookingStatus.APPROVED),
    (' ASSIGNED ', BookingStatus.ASSIGNED),
    ('In Progress', BookingStatus.IN_PROGRESS),
    ('InProgress', BookingStatus.IN_PROGRESS),
    ('in-progress', BookingStatus.IN_PROGRESS),
    ('in_progress', BookingStatus.IN_PROGRESS),
    ('Reading BPS', BookingStatus.READING_BPS),
    ('canceled', BookingStatus.CANCELLED),
    ('Cancelled', BookingStatus.CANCELLED),
    ('done', BookingStatus.COMPLETED),
    ('Completed', BookingStatus.COMPLETED),
    ('rejected', BookingStatus.REJECTED),
])
def test_parse_status_folds_legacy_spellings(raw, expected):
    assert parse_status(raw) == expected


def test_parse_status_returns_unknown_for_unrecognised_text():
    status = parse_status('on hold')
    assert isinstance(status, UnknownStatus)
    assert str(status) == 'on hold'
    assert isinstance(parse_status(None), UnknownStatus)


def test_normalize_status_returns_storage_form():
    assert normalize_status('In Progress') == 'in-progress'
    assert normalize_status('Approved') == 'approved'
    assert normalize_status('  mystery ') == 'mystery'


def test_active_and_terminal_sets():
    for raw in ('pending', 'Approved', 'assigned'):
        assert is_active_status(raw)
        assert not is_terminal_status(raw)
    for raw in ('completed', 'canceled', 'Rejected'):
        assert is_terminal_status(raw)
        assert not is_active_status(raw)
    assert not is_active_status('in-progress')
    assert not is_terminal_status('in-progress')
    assert not is_active_status('garbage')


def test_worker_status_is_open_text():
    assert parse_worker_status('in progress') == WorkerStatus.IN_PROGRESS
    assert parse_worker_status('Stuck in traffic') == 'Stuck in traffic'
    assert parse_worker_status(None) == ''


def test_badges_fall_back_to_default():
    assert worker_status_badge_class('Completed') == 'bg-success text-white'
    assert worker_status_badge_class('Waiting for gate code') == 'bg-secondary text-white'
    assert booking_status_badge_class('canceled') == 'bg-danger text-white'
    assert booking_status_badge_class('???') == 'bg-secondary text-white'
