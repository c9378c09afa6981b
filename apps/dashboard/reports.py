"""
Aggregates for the admin overview page.

Public API:
  dashboard_totals()
  monthly_performance(year)
  booking_status_breakdown(statuses)
  recent_activities(limit=8)
"""
import calendar
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from django.db.models.functions import ExtractMonth
from django.utils import timezone
from django.utils.timesince import timesince

from apps.bookings.models import Booking
from apps.bookings.statuses import BookingStatus, UnknownStatus, parse_status
from apps.payments.models import Payment
from apps.workers.models import Worker

RECENT_PER_SOURCE = 5

STATUS_BUCKETS = {
    BookingStatus.COMPLETED:   'completed',
    BookingStatus.PENDING:     'pending',
    BookingStatus.CANCELLED:   'cancelled',
    BookingStatus.IN_PROGRESS: 'in_progress',
    BookingStatus.READING_BPS: 'reading_bps',
    BookingStatus.APPROVED:    'approved',
    BookingStatus.ASSIGNED:    'assigned',
    BookingStatus.REJECTED:    'rejected',
}


def dashboard_totals() -> dict:
    User = get_user_model()
    return {
        'customers': User.objects.filter(is_staff=False).count(),
        'workers':   Worker.objects.count(),
        'bookings':  Booking.objects.count(),
        'revenue':   Payment.objects.aggregate(total=Sum('amount'))['total'] or Decimal('0'),
    }


def monthly_performance(year: int) -> list:
    """
    Twelve rows, January first. Bookings are bucketed by the day they are
    booked for, payments by when they were made.
    """
    bookings = dict(
        Booking.objects
        .filter(booking_date__year=year)
        .annotate(month=ExtractMonth('booking_date'))
        .values('month')
        .annotate(n=Count('id'))
        .values_list('month', 'n')
    )
    payments = {
        row['month']: row
        for row in (
            Payment.objects
            .filter(payment_date__year=year)
            .annotate(month=ExtractMonth('payment_date'))
            .values('month')
            .annotate(n=Count('id'), total=Sum('amount'))
        )
    }

    rows = []
    for month in range(1, 13):
        paid = payments.get(month, {})
        rows.append({
            'month':    calendar.month_abbr[month],
            'bookings': bookings.get(month, 0),
            'payments': paid.get('n', 0),
            'revenue':  float(paid.get('total') or 0),
        })
    return rows


def booking_status_breakdown(statuses) -> dict:
    """
    Count raw status strings into display buckets. Legacy spellings fold onto
    their canonical bucket and anything unrecognised counts as pending.
    """
    counts = {bucket: 0 for bucket in STATUS_BUCKETS.values()}
    for raw in statuses:
        status = parse_status(raw)
        if isinstance(status, UnknownStatus):
            counts['pending'] += 1
        else:
            counts[STATUS_BUCKETS[status]] += 1
    return counts


def _time_ago(moment, now) -> str:
    if (now - moment).total_seconds() < 60:
        return 'just now'
    return f'{timesince(moment, now)} ago'


def recent_activities(limit: int = 8) -> list:
    """Newest sign-ups, bookings and payments merged into one feed."""
    User = get_user_model()
    now = timezone.now()
    items = []

    for user in User.objects.filter(is_staff=False).order_by('-date_joined')[:RECENT_PER_SOURCE]:
        items.append({
            'type': 'user',
            'icon': 'bi-person-plus',
            'title': 'New customer registered',
            'description': user.get_full_name() or user.email,
            'timestamp': user.date_joined,
        })

    for booking in Booking.objects.order_by('-created_at')[:RECENT_PER_SOURCE]:
        items.append({
            'type': 'booking',
            'icon': 'bi-calendar-check',
            'title': f'Booking #{booking.id_short} ({booking.get_status_display()})',
            'description': f'{booking.customer_name} · {booking.service_label}',
            'timestamp': booking.created_at,
        })

    for payment in Payment.objects.order_by('-payment_date')[:RECENT_PER_SOURCE]:
        items.append({
            'type': 'payment',
            'icon': 'bi-cash-coin',
            'title': f'Payment received: {payment.amount}',
            'description': payment.customer_name,
            'timestamp': payment.payment_date,
        })

    items.sort(key=lambda item: item['timestamp'], reverse=True)
    items = items[:limit]
    for item in items:
        item['time_ago'] = _time_ago(item['timestamp'], now)
    return items
