"""
Admin dashboard views: overview KPIs, bookings, assignments, payments and
customers. Worker CRUD lives in views_workers.py, admin accounts in
views_admins.py.

Every state change goes through apps.bookings.lifecycle; the views only map
its exceptions onto flash messages and send notifications afterwards.
"""
import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.db.models import Count, Q, Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET, require_POST

from apps.accounts.decorators import admin_required
from apps.bookings import lifecycle
from apps.bookings.exceptions import BookingValidationError, LifecycleNotFoundError
from apps.bookings.models import Assignment, Booking
from apps.bookings.statuses import BookingStatus, WorkerStatus, parse_status
from apps.notifications.emails import send_booking_cancelled, send_booking_confirmed
from apps.payments.models import Payment
from apps.workers.models import Worker

from . import reports

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _run(request, operation, *args, **kwargs):
    """
    Call a lifecycle operation, turning its errors into flash messages.
    Returns (ok, result).
    """
    try:
        return True, operation(*args, **kwargs)
    except (BookingValidationError, LifecycleNotFoundError) as exc:
        messages.error(request, str(exc))
    except DatabaseError:
        logger.exception('%s failed (args=%s)', operation.__name__, args)
        messages.error(request, 'The change could not be saved. Please try again.')
    return False, None


def _back(request, default):
    next_url = request.POST.get('next', '')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect(default)


def _changed_by(request):
    return f'admin:{request.user.get_username()}'


def _parse_day(value):
    try:
        return parse_date(value or '')
    except ValueError:
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Overview / KPI dashboard
# ─────────────────────────────────────────────────────────────────────────────

@admin_required
def overview(request):
    year = timezone.localdate().year
    statuses = Booking.objects.values_list('status', flat=True)

    return render(request, 'dashboard/overview.html', {
        'totals':      reports.dashboard_totals(),
        'monthly':     reports.monthly_performance(year),
        'breakdown':   reports.booking_status_breakdown(statuses),
        'activities':  reports.recent_activities(getattr(settings, 'RECENT_ACTIVITY_LIMIT', 8)),
        'year':        year,
        'currency':    getattr(settings, 'CURRENCY_SYMBOL', 'R'),
        'page': 'overview',
    })


@require_GET
@admin_required
def chart_data(request):
    try:
        year = int(request.GET.get('year', ''))
    except ValueError:
        year = timezone.localdate().year
    return JsonResponse({'year': year, 'months': reports.monthly_performance(year)})


# ─────────────────────────────────────────────────────────────────────────────
# Bookings
# ─────────────────────────────────────────────────────────────────────────────

@admin_required
def booking_list(request):
    qs = Booking.objects.select_related('assigned_worker', 'customer').order_by('-booking_date', '-created_at')

    status_filter = request.GET.get('status', '')
    search        = request.GET.get('q', '').strip()
    date_from     = request.GET.get('date_from', '')
    date_to       = request.GET.get('date_to', '')

    if status_filter:
        qs = qs.filter(status=str(parse_status(status_filter)))
    if search:
        qs = qs.filter(
            Q(customer_name__icontains=search) |
            Q(booking_address__icontains=search) |
            Q(customer__email__icontains=search) |
            Q(assigned_worker__name__icontains=search)
        )
    d_from, d_to = _parse_day(date_from), _parse_day(date_to)
    if d_from:
        qs = qs.filter(booking_date__gte=d_from)
    if d_to:
        qs = qs.filter(booking_date__lte=d_to)

    return render(request, 'dashboard/booking_list.html', {
        'bookings':       qs,
        'status_choices': BookingStatus.choices,
        'status_filter':  status_filter,
        'page': 'bookings',
    })


@require_POST
@admin_required
def booking_set_status(request, booking_id):
    new_status = request.POST.get('status', '').strip()
    ok, booking = _run(request, lifecycle.set_booking_status, booking_id, new_status, _changed_by(request))
    if ok:
        status = parse_status(booking.status)
        if status == BookingStatus.APPROVED:
            send_booking_confirmed(booking)
        elif status in (BookingStatus.CANCELLED, BookingStatus.REJECTED):
            send_booking_cancelled(booking, reason=request.POST.get('reason', '').strip())
        messages.success(request, f'Booking #{booking.id_short} is now {booking.get_status_display()}.')
    return _back(request, 'dashboard:booking_list')


@require_POST
@admin_required
def booking_set_price(request, booking_id):
    ok, booking = _run(
        request, lifecycle.set_booking_price,
        booking_id, request.POST.get('final_price', ''), _changed_by(request),
    )
    if ok:
        messages.success(request, f'Price for booking #{booking.id_short} set to {booking.final_price}.')
    return _back(request, 'dashboard:booking_list')


@require_POST
@admin_required
def booking_delete(request, booking_id):
    ok, _ = _run(request, lifecycle.delete_booking, booking_id)
    if ok:
        messages.success(request, f'Booking #{str(booking_id)[:8].upper()} deleted.')
    return redirect('dashboard:booking_list')


# ─────────────────────────────────────────────────────────────────────────────
# Assignments
# ─────────────────────────────────────────────────────────────────────────────

@admin_required
def assignment_list(request):
    assignments = (
        Assignment.objects
        .select_related('booking', 'assigned_worker')
        .order_by('is_fully_completed', '-created_at')
    )
    return render(request, 'dashboard/assignment_list.html', {
        'assignments': assignments,
        'suggestions': [value for value, _ in WorkerStatus.choices],
        'page': 'assignments',
    })


@admin_required
def assign_page(request, booking_id):
    booking = get_object_or_404(Booking.objects.select_related('assigned_worker'), id=booking_id)
    current = booking.assignments.filter(is_fully_completed=False).select_related('assigned_worker').first()
    return render(request, 'dashboard/assign_worker.html', {
        'booking':     booking,
        'assignment':  current,
        'workers':     Worker.objects.filter(is_active=True).order_by('name'),
        'status_logs': booking.status_logs.all().order_by('changed_at'),
        'page': 'assignments',
    })


@require_POST
@admin_required
def assign_worker(request, booking_id):
    worker_id = request.POST.get('worker_id', '').strip()
    if not worker_id:
        messages.error(request, 'Please select a worker.')
        return redirect('dashboard:assign_page', booking_id=booking_id)

    ok, assignment = _run(request, lifecycle.assign_worker, booking_id, worker_id, _changed_by(request))
    if ok:
        messages.success(
            request,
            f'Booking #{assignment.booking.id_short} assigned to {assignment.assigned_worker.name}.'
        )
        return redirect('dashboard:assignment_list')
    return redirect('dashboard:assign_page', booking_id=booking_id)


@require_POST
@admin_required
def assignment_complete(request, assignment_id):
    ok, assignment = _run(
        request, lifecycle.complete_assignment,
        assignment_id, request.POST.get('booking_id') or None, _changed_by(request),
    )
    if ok:
        messages.success(request, f'Booking #{assignment.booking.id_short} marked as completed.')
    return _back(request, 'dashboard:assignment_list')


@require_POST
@admin_required
def assignment_update_status(request, assignment_id):
    ok, assignment = _run(
        request, lifecycle.update_worker_status,
        assignment_id, request.POST.get('worker_status', ''), _changed_by(request),
    )
    if ok:
        messages.success(request, f'Worker status set to "{assignment.worker_status}".')
    return _back(request, 'dashboard:assignment_list')


@require_POST
@admin_required
def assignment_delete(request, assignment_id):
    ok, booking = _run(request, lifecycle.delete_assignment, assignment_id, _changed_by(request))
    if ok:
        messages.success(request, f'Assignment removed; booking #{booking.id_short} is {booking.get_status_display()}.')
    return _back(request, 'dashboard:assignment_list')


# ─────────────────────────────────────────────────────────────────────────────
# Payments
# ─────────────────────────────────────────────────────────────────────────────

@admin_required
def payment_history(request):
    qs = Payment.objects.select_related('booking', 'customer').order_by('-payment_date')

    search    = request.GET.get('q', '').strip()
    date_from = _parse_day(request.GET.get('date_from', ''))
    date_to   = _parse_day(request.GET.get('date_to', ''))

    if search:
        qs = qs.filter(
            Q(customer_name__icontains=search) |
            Q(reference__icontains=search) |
            Q(description__icontains=search)
        )
    if date_from:
        qs = qs.filter(payment_date__date__gte=date_from)
    if date_to:
        qs = qs.filter(payment_date__date__lte=date_to)

    return render(request, 'dashboard/payment_history.html', {
        'payments': qs,
        'total':    qs.aggregate(total=Sum('amount'))['total'] or 0,
        'currency': getattr(settings, 'CURRENCY_SYMBOL', 'R'),
        'page': 'payments',
    })


# ─────────────────────────────────────────────────────────────────────────────
# Customers
# ─────────────────────────────────────────────────────────────────────────────

@admin_required
def customer_list(request):
    User = get_user_model()
    customers = (
        User.objects
        .filter(is_staff=False)
        .annotate(booking_count=Count('bookings'))
        .order_by('-date_joined')
    )
    search = request.GET.get('q', '').strip()
    if search:
        customers = customers.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(email__icontains=search)
        )
    return render(request, 'dashboard/customer_list.html', {
        'customers': customers,
        'page': 'customers',
    })


@require_POST
@admin_required
def customer_toggle(request, user_id):
    """Enable or disable a customer account. Customers are never hard-deleted; bookings reference them."""
    customer = get_object_or_404(get_user_model(), pk=user_id, is_staff=False)
    customer.is_active = not customer.is_active
    customer.save(update_fields=['is_active'])
    state = 'enabled' if customer.is_active else 'disabled'
    logger.info("Customer %s %s by %s", customer.pk, state, request.user.pk)
    messages.success(request, f'Customer {customer.email} {state}.')
    return redirect('dashboard:customer_list')
