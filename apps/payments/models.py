"""
Payment model: one row per customer payment.

A payment may reference a booking (BookingId). Recording one marks that
booking paid in the same transaction; see services.record_payment().
There is no refund or void flow, so rows are append-only.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.models import UUIDModel
from apps.bookings.models import Booking


class PaymentMethod(models.TextChoices):
    CARD = 'card', 'Card'
    EFT  = 'eft',  'EFT / Bank Transfer'
    CASH = 'cash', 'Cash'


class PaymentRecordStatus(models.TextChoices):
    COMPLETED = 'completed', 'Completed'


class Payment(UUIDModel):
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT,
        related_name='payments', db_column='CustomerId',
    )
    customer_name = models.CharField(max_length=150, db_column='CustomerName')
    amount = models.DecimalField(
        max_digits=10, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))], db_column='Amount',
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, db_column='PaymentMethod')
    reference = models.CharField(max_length=100, blank=True, db_column='Reference')
    description = models.CharField(max_length=255, blank=True, db_column='Description')
    payment_date = models.DateTimeField(default=timezone.now, db_index=True, db_column='PaymentDate')
    status = models.CharField(
        max_length=20, choices=PaymentRecordStatus.choices,
        default=PaymentRecordStatus.COMPLETED, db_column='Status',
    )
    booking = models.ForeignKey(
        Booking, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='payments', db_column='BookingId',
    )

    class Meta:
        db_table = 'payments'
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        ordering = ['-payment_date']

    def __str__(self):
        return f"Payment {self.id_short} [{self.status}] — {self.amount} by {self.customer_name}"

    @property
    def id_short(self):
        return str(self.id)[:8].upper()
