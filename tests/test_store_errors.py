import logging

import pytest
from django.contrib.messages import get_messages
from django.core import mail
from django.db import DatabaseError
from django.urls import reverse

from apps.bookings import lifecycle
from apps.bookings.models import Booking
from apps.payments.models import Payment

pytestmark = pytest.mark.django_db


@pytest.fixture
def db_down(monkeypatch, caplog):
    """Make the named callable raise DatabaseError; log records from apps.* reach caplog."""
    monkeypatch.setattr(logging.getLogger('apps'), 'propagate', True)

    def _break(target):
        def broken(*args, **kwargs):
            raise DatabaseError('connection lost')
        monkeypatch.setattr(target, broken)
    return _break


def _flashed(response):
    return [str(m) for m in get_messages(response.wsgi_request)]


def _logged_errors(caplog):
    return [r for r in caplog.records if r.levelno == logging.ERROR and r.exc_info]


def test_admin_status_change_reports_store_failure(staff_client, booking, db_down, caplog):
    db_down('apps.bookings.lifecycle.set_booking_status')

    response = staff_client.post(reverse('dashboard:booking_set_status', args=[booking.pk]), {'status': 'approved'})

    assert response.status_code == 302
    assert response.url == reverse('dashboard:booking_list')
    assert _flashed(response) == ['The change could not be saved. Please try again.']
    assert 'set_booking_status failed' in caplog.text
    assert _logged_errors(caplog)
    assert mail.outbox == []
    booking.refresh_from_db()
    assert booking.status == 'pending'


def test_admin_assign_reports_store_failure(staff_client, approved_booking, worker, db_down, caplog):
    db_down('apps.bookings.lifecycle.assign_worker')

    response = staff_client.post(
        reverse('dashboard:assign_worker', args=[approved_booking.pk]), {'worker_id': str(worker.pk)},
    )

    assert response.status_code == 302
    assert 'The change could not be saved. Please try again.' in _flashed(response)
    assert _logged_errors(caplog)


def test_booking_form_reports_store_failure(customer_client, customer, tomorrow, db_down, caplog):
    db_down('apps.bookings.lifecycle.create_booking')

    response = customer_client.post(reverse('bookings:book'), {
        'booking_date': tomorrow.isoformat(), 'preferred_time': '08:00 - 10:00', 'address': '12 Long Street, Cape Town',
        'service_type': 'general_cleaning', 'estimated_price': '450.00',
    })

    assert response.status_code == 200
    assert 'We could not save your booking. Please try again.' in response.content.decode()
    assert f'Booking creation failed for customer {customer.pk}' in caplog.text
    assert not Booking.objects.exists()
    assert mail.outbox == []


def test_cancel_reports_store_failure(customer_client, booking, db_down, caplog):
    db_down('apps.bookings.lifecycle.cancel_booking')

    response = customer_client.post(reverse('bookings:cancel', args=[booking.pk]))

    assert response.status_code == 302
    assert response.url == reverse('bookings:history')
    assert _flashed(response) == ['Could not cancel the booking. Please try again.']
    assert f'Cancellation failed for booking {booking.pk}' in caplog.text
    assert mail.outbox == []


def test_payment_reports_store_failure(customer_client, approved_booking, db_down, caplog):
    lifecycle.set_booking_price(approved_booking.pk, '380')
    db_down('apps.payments.views.record_payment')

    response = customer_client.post(reverse('payments:make_payment'), {
        'booking_id': str(approved_booking.pk), 'amount': '380.00', 'payment_method': 'card',
    })

    assert response.status_code == 200
    assert 'Payment could not be recorded. Please try again.' in response.content.decode()
    assert 'Payment failed for customer' in caplog.text
    assert not Payment.objects.exists()


def test_worker_status_update_reports_store_failure(worker_client, assigned, db_down, caplog):
    _, assignment = assigned
    db_down('apps.bookings.lifecycle.update_worker_status')

    response = worker_client.post(
        reverse('workers:update_status', args=[assignment.pk]), {'worker_status': 'Attending'},
    )

    assert response.status_code == 302
    assert response.url == reverse('workers:dashboard')
    assert _flashed(response) == ['Could not update the status. Please try again.']
    assert f'Worker status update failed for assignment {assignment.pk}' in caplog.text


def test_worker_feedback_reports_store_failure(worker_client, assigned, db_down, caplog):
    booking, _ = assigned
    db_down('apps.bookings.lifecycle.submit_feedback')

    response = worker_client.post(reverse('workers:feedback', args=[booking.pk]), {'feedback': 'Gate was locked'})

    assert response.status_code == 302
    assert _flashed(response) == ['Could not save your feedback. Please try again.']
    assert f'Feedback failed for booking {booking.pk}' in caplog.text
