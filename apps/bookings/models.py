"""
Bookings app models:
  - Booking          : customer service request, carries the status machine
  - Assignment       : join record linking a Booking to the Worker doing it
  - BookingStatusLog : audit trail of status transitions

Tables and columns keep the legacy collection/field names (``bookings``,
``BookingDate``, ``WorkerStatus``...). Booking mirrors AssignedWorker and
WorkerStatus from its active Assignment for display; lifecycle.py is the only
code that writes those copies.
"""
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import UUIDModel, TimestampedModel
from apps.workers.models import Worker

from .statuses import (
    ACTIVE_STATUSES,
    DEFAULT_ASSIGNMENT_STATUS,
    BookingStatus,
    PaymentStatus,
    WorkerStatus,
    booking_status_badge_class,
    is_active_status,
    worker_status_badge_class,
)


class ServiceType(models.TextChoices):
    GENERAL_CLEANING = 'general_cleaning', 'General Cleaning'
    DEEP_CLEANING    = 'deep_cleaning',    'Deep Cleaning'
    BIN_CLEANING     = 'bin_cleaning',     'Bin Cleaning'
    CARPET_CLEANING  = 'carpet_cleaning',  'Carpet Cleaning'
    WASTE_REMOVAL    = 'waste_removal',    'Waste Removal'


class Booking(TimestampedModel):
    """
    A customer's request for a scheduled cleaning or waste-removal visit.
    Status transitions go through apps.bookings.lifecycle, not direct field writes.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='BookingId')
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT,
        related_name='bookings', db_column='CustomerId',
    )
    customer_name = models.CharField(max_length=150, db_column='CustomerName')
    booking_address = models.TextField(db_column='BookingAddress')
    booking_date = models.DateField(db_index=True, db_column='BookingDate')
    preferred_time = models.CharField(max_length=50, blank=True, db_column='PreferredTime')
    service_type = models.CharField(max_length=40, db_column='ServiceType')
    bin_size = models.CharField(max_length=40, blank=True, db_column='BinSize')
    carpet_size = models.CharField(max_length=40, blank=True, db_column='CarpetSize')
    special_request = models.TextField(blank=True, db_column='SpecialRequest')

    estimated_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0'),
        validators=[MinValueValidator(0)], db_column='EstimatedPrice',
    )
    final_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0'),
        validators=[MinValueValidator(0)], db_column='FinalPrice',
    )
    is_price_set = models.BooleanField(default=False, db_column='IsPriceSet')
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING, db_column='PaymentStatus',
    )

    status = models.CharField(
        max_length=20, choices=BookingStatus.choices,
        default=BookingStatus.PENDING, db_index=True, db_column='Status',
    )
    worker_status = models.CharField(max_length=100, null=True, blank=True, db_column='WorkerStatus')
    assigned_worker = models.ForeignKey(
        Worker, on_delete=models.PROTECT, null=True, blank=True,
        related_name='bookings', db_column='AssignedWorker',
    )
    worker_feedback = models.TextField(blank=True, db_column='WorkerFeedback')
    feedback_timestamp = models.DateTimeField(null=True, blank=True, db_column='FeedbackTimestamp')

    class Meta:
        db_table = 'bookings'
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        ordering = ['-booking_date', '-created_at']
        # Backstop for has_active_booking_for_date(): two concurrent creates
        # for the same customer/day cannot both commit.
        constraints = [
            models.UniqueConstraint(
                fields=['customer', 'booking_date'],
                condition=models.Q(status__in=sorted(s.value for s in ACTIVE_STATUSES)),
                name='uq_active_booking_per_customer_date',
            )
        ]

    def __str__(self):
        return f"#{self.id_short} | {self.customer_name} | {self.service_type} | {self.booking_date}"

    @property
    def id_short(self):
        return str(self.id)[:8].upper()

    @property
    def is_active(self):
        return is_active_status(self.status)

    @property
    def service_label(self):
        return self.service_type.replace('_', ' ').title()

    @property
    def status_badge_class(self):
        return booking_status_badge_class(self.status)

    @property
    def worker_status_badge_class(self):
        return worker_status_badge_class(self.worker_status)

    @property
    def payment_badge_class(self):
        classes = {
            PaymentStatus.PAID: 'bg-success text-white',
            PaymentStatus.FAILED: 'bg-danger text-white',
        }
        return classes.get(self.payment_status, 'bg-warning text-dark')

    def transition(self, new_status, changed_by, reason=''):
        """Set a new status and record the change; the caller saves the booking."""
        old_status = self.status
        self.status = new_status
        BookingStatusLog.objects.create(
            booking=self,
            from_status=old_status,
            to_status=new_status,
            changed_by=changed_by,
            reason=reason,
        )


class Assignment(UUIDModel, TimestampedModel):
    """
    Links a Booking to the Worker responsible for it. This row is the
    authoritative copy of AssignedWorker / WorkerStatus.
    """
    booking = models.ForeignKey(
        Booking, on_delete=models.CASCADE,
        related_name='assignments', db_column='BookingId',
    )
    assigned_worker = models.ForeignKey(
        Worker, on_delete=models.PROTECT,
        related_name='assignments', db_column='AssignedWorker',
    )
    status = models.CharField(max_length=20, default=DEFAULT_ASSIGNMENT_STATUS, db_column='Status')
    worker_status = models.CharField(max_length=100, default=WorkerStatus.PENDING, db_column='WorkerStatus')
    is_fully_completed = models.BooleanField(default=False, db_index=True, db_column='IsFullyCompleted')
    completed_at = models.DateTimeField(null=True, blank=True, db_column='CompletedAt')

    class Meta:
        db_table = 'assignments'
        verbose_name = 'Assignment'
        verbose_name_plural = 'Assignments'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['booking'],
                condition=models.Q(is_fully_completed=False),
                name='uq_active_assignment_per_booking',
            )
        ]

    def __str__(self):
        return f"Assignment {str(self.id)[:8]} | booking {str(self.booking_id)[:8]} → {self.assigned_worker_id}"

    @property
    def worker_status_badge_class(self):
        return worker_status_badge_class(self.worker_status)


class BookingStatusLog(UUIDModel):
    """Immutable audit trail of every status transition on a booking."""
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='status_logs')
    from_status = models.CharField(max_length=20, blank=True)
    to_status = models.CharField(max_length=20)
    changed_by = models.CharField(max_length=150, help_text='customer / admin / worker / system')
    reason = models.TextField(blank=True)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'booking_status_logs'
        verbose_name = 'Booking Status Log'
        verbose_name_plural = 'Booking Status Logs'
        ordering = ['changed_at']

    def __str__(self):
        return f"Booking {str(self.booking_id)[:8]}: {self.from_status or '∅'} → {self.to_status}"
