from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.bookings import lifecycle
from apps.bookings.models import ServiceType
from apps.workers.models import Worker

PASSWORD = 'Str0ng-Passw0rd!'


@pytest.fixture
def tomorrow():
    return timezone.localdate() + timedelta(days=1)


@pytest.fixture
def customer(db):
    return get_user_model().objects.create_user(
        username='jane@example.com', email='jane@example.com', password=PASSWORD,
        first_name='Jane', last_name='Mokoena',
    )


@pytest.fixture
def other_customer(db):
    return get_user_model().objects.create_user(
        username='pieter@example.com', email='pieter@example.com', password=PASSWORD,
        first_name='Pieter',
    )


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_user(
        username='admin@example.com', email='admin@example.com', password=PASSWORD,
        is_staff=True,
    )


@pytest.fixture
def worker(db):
    return Worker.objects.create(name='Sipho Dlamini', email='sipho@example.com', phone='+27821110001')


@pytest.fixture
def other_worker(db):
    return Worker.objects.create(name='Thandi Nkosi', email='thandi@example.com', phone='+27821110002')


@pytest.fixture
def make_booking(customer, tomorrow):
    def _make(owner=None, day=None, service=ServiceType.GENERAL_CLEANING, **extra):
        return lifecycle.create_booking(
            owner or customer,
            booking_date=day or tomorrow,
            address='12 Long Street, Cape Town',
            service_type=service,
            preferred_time='08:00 - 10:00',
            estimated_price=Decimal('450.00'),
            **extra,
        )
    return _make


@pytest.fixture
def booking(make_booking):
    return make_booking()


@pytest.fixture
def approved_booking(booking):
    return lifecycle.set_booking_status(booking.pk, 'approved')


@pytest.fixture
def assigned(approved_booking, worker):
    """(booking, assignment) with ``worker`` assigned."""
    assignment = lifecycle.assign_worker(approved_booking.pk, worker.pk)
    approved_booking.refresh_from_db()
    return approved_booking, assignment


@pytest.fixture
def customer_client(client, customer):
    client.force_login(customer)
    return client


@pytest.fixture
def staff_client(client, admin_user):
    client.force_login(admin_user)
    return client


@pytest.fixture
def worker_client(client, worker):
    session = client.session
    session['WorkerId'] = str(worker.pk)
    session['WorkerEmail'] = worker.email
    session['WorkerName'] = worker.name
    session.save()
    return client
