from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse

from apps.bookings import lifecycle
from apps.bookings.exceptions import BookingAuthorizationError, BookingNotFoundError
from apps.bookings.models import Booking
from apps.bookings.statuses import PaymentStatus
from apps.payments.exceptions import PaymentError
from apps.payments.models import Payment, PaymentMethod
from apps.payments.receipts import get_receipt_context
from apps.payments.services import payable_bookings, record_payment

pytestmark = pytest.mark.django_db


@pytest.fixture
def priced_booking(approved_booking):
    return lifecycle.set_booking_price(approved_booking.pk, '380.00')


def test_payable_bookings_lists_priced_unpaid_open_work(priced_booking, make_booking, customer, tomorrow):
    unpriced = make_booking(day=tomorrow + timedelta(days=7))
    lifecycle.set_booking_status(unpriced.pk, 'approved')
    assert list(payable_bookings(customer)) == [priced_booking]


def test_record_payment_marks_booking_paid(priced_booking, customer):
    payment = record_payment(
        customer, booking_id=priced_booking.pk, amount='380', payment_method=PaymentMethod.EFT,
        reference=' EFT-991 ',
    )
    assert payment.amount == Decimal('380.00')
    assert payment.customer_name == 'Jane Mokoena'
    assert payment.reference == 'EFT-991'
    assert payment.description == 'Payment for General Cleaning'
    assert payment.status == 'completed'
    priced_booking.refresh_from_db()
    assert priced_booking.payment_status == PaymentStatus.PAID
    assert list(payable_bookings(customer)) == []


def test_record_payment_reads_current_customer_name(priced_booking, customer):
    customer.first_name = 'Janet'
    customer.save()
    payment = record_payment(customer, booking_id=priced_booking.pk, amount='380.00', payment_method='card')
    assert payment.customer_name == 'Janet Mokoena'


def test_record_payment_without_booking(customer):
    payment = record_payment(customer, amount='50', payment_method='cash')
    assert payment.booking is None
    assert payment.description == 'Payment'


@pytest.mark.parametrize('amount, method, message', [
    ('0', 'card', 'greater than zero'),
    ('-1', 'card', 'greater than zero'),
    ('ten', 'card', 'number'),
    ('380', 'bitcoin', 'payment method'),
    ('100', 'card', 'amount due'),
])
def test_record_payment_validation(priced_booking, customer, amount, method, message):
    with pytest.raises(PaymentError, match=message):
        record_payment(customer, booking_id=priced_booking.pk, amount=amount, payment_method=method)
    assert not Payment.objects.exists()
    priced_booking.refresh_from_db()
    assert priced_booking.payment_status == PaymentStatus.PENDING


def test_record_payment_refuses_foreign_paid_or_missing(priced_booking, customer, other_customer):
    with pytest.raises(BookingAuthorizationError):
        record_payment(other_customer, booking_id=priced_booking.pk, amount='380', payment_method='card')

    record_payment(customer, booking_id=priced_booking.pk, amount='380', payment_method='card')
    with pytest.raises(PaymentError, match='already been paid'):
        record_payment(customer, booking_id=priced_booking.pk, amount='380', payment_method='card')

    with pytest.raises(BookingNotFoundError):
        record_payment(customer, booking_id='nope', amount='380', payment_method='card')


def test_pending_booking_is_not_payable(booking, customer):
    Booking.objects.filter(pk=booking.pk).update(final_price=Decimal('200'), is_price_set=True)
    with pytest.raises(PaymentError, match='not ready'):
        record_payment(customer, booking_id=booking.pk, amount='200', payment_method='card')


def test_receipt_context(priced_booking, customer):
    payment = record_payment(customer, booking_id=priced_booking.pk, amount='380', payment_method='eft')
    ctx = get_receipt_context(payment)
    assert ctx['customer']['email'] == 'jane@example.com'
    assert ctx['transaction']['method'] == 'EFT / Bank Transfer'
    assert ctx['transaction']['reference'] == 'N/A'
    assert ctx['service']['booking_ref'] == priced_booking.id_short
    assert ctx['financials']['paid'] == Decimal('380.00')


def test_make_payment_view_records_payment(customer_client, priced_booking):
    response = customer_client.post(reverse('payments:make_payment'), {
        'booking_id': str(priced_booking.pk), 'amount': '380.00', 'payment_method': 'card',
    })
    assert response.status_code == 302
    assert Payment.objects.filter(booking=priced_booking).count() == 1


def test_make_payment_view_forbids_foreign_booking(client, other_customer, priced_booking):
    client.force_login(other_customer)
    response = client.post(reverse('payments:make_payment'), {
        'booking_id': str(priced_booking.pk), 'amount': '380.00', 'payment_method': 'card',
    })
    assert response.status_code == 403
    assert not Payment.objects.exists()


def test_receipt_pdf_is_private(customer_client, client, priced_booking, customer, other_customer):
    payment = record_payment(customer, booking_id=priced_booking.pk, amount='380', payment_method='card')
    url = reverse('payments:receipt', args=[payment.pk])

    response = customer_client.get(url)
    assert response.status_code == 200
    assert response['Content-Type'] == 'application/pdf'

    client.force_login(other_customer)
    assert client.get(url).status_code == 404
