"""
Payment recording.

Public API:
  payable_bookings(customer)
  record_payment(customer, amount=..., payment_method=..., booking_id=None, ...)
"""
import logging
from decimal import Decimal, InvalidOperation

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.accounts.identity import get_customer_name
from apps.bookings.exceptions import BookingAuthorizationError
from apps.bookings.lifecycle import lock_booking, mark_booking_paid
from apps.bookings.models import Booking
from apps.bookings.statuses import BookingStatus, PaymentStatus, parse_status

from .exceptions import PaymentError
from .models import Payment, PaymentMethod

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = (BookingStatus.APPROVED, BookingStatus.ASSIGNED)


def payable_bookings(customer):
    """Priced, unpaid bookings that have been approved or assigned."""
    return (
        Booking.objects
        .filter(
            customer=customer,
            is_price_set=True,
            payment_status=PaymentStatus.PENDING,
            status__in=PAYABLE_STATUSES,
        )
        .order_by('booking_date')
    )


def _parse_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, TypeError):
        raise PaymentError("Amount must be a number.")
    if not amount.is_finite() or amount <= 0:
        raise PaymentError("Amount must be greater than zero.")
    return amount.quantize(Decimal('0.01'))


@transaction.atomic
def record_payment(customer, *, amount, payment_method, booking_id=None,
                   reference: str = '', description: str = '') -> Payment:
    """
    Record a completed payment. When a booking is given it must belong to the
    customer, be payable, and the amount must match its final price; the
    booking is marked paid in the same transaction.
    """
    amount = _parse_amount(amount)
    if payment_method not in PaymentMethod.values:
        raise PaymentError("Please choose a valid payment method.")

    booking = None
    if booking_id:
        booking = lock_booking(booking_id)
        if booking.customer_id != customer.pk:
            raise BookingAuthorizationError("You can only pay for your own bookings.")
        if booking.payment_status == PaymentStatus.PAID:
            raise PaymentError("This booking has already been paid.")
        if not booking.is_price_set or parse_status(booking.status) not in PAYABLE_STATUSES:
            raise PaymentError("This booking is not ready for payment yet.")
        if amount != booking.final_price:
            raise PaymentError(f"The amount due for this booking is {booking.final_price}.")

    # Names can change after booking; always read the current user row.
    fresh = get_user_model().objects.filter(pk=customer.pk).first()
    customer_name = get_customer_name(fresh)

    if not description:
        description = f"Payment for {booking.service_label}" if booking else "Payment"

    payment = Payment.objects.create(
        customer=customer,
        customer_name=customer_name,
        amount=amount,
        payment_method=payment_method,
        reference=(reference or '').strip(),
        description=description.strip(),
        booking=booking,
    )
    if booking is not None:
        mark_booking_paid(booking)

    logger.info("Payment %s of %s recorded for customer %s (booking %s)",
                payment.pk, amount, customer.pk, booking.pk if booking else '-')
    return payment
