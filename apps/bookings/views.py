"""
Customer booking views: dashboard, booking form, history and cancellation.

Business rules live in lifecycle.py; these views translate its exceptions
into form errors, flash messages or a 403.
"""
import logging

from django.contrib import messages
from django.db import DatabaseError
from django.http import HttpResponseForbidden, JsonResponse
from django.shortcuts import redirect, render
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.http import require_GET, require_POST

from apps.accounts.decorators import customer_required
from apps.accounts.identity import get_customer_name
from apps.notifications.emails import send_booking_cancelled, send_booking_received
from apps.payments.services import payable_bookings

from . import lifecycle
from .exceptions import (
    BookingAuthorizationError,
    BookingValidationError,
    LifecycleNotFoundError,
)
from .forms import BookCleaningForm
from .models import Booking
from .statuses import is_active_status

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Dashboard / history
# ─────────────────────────────────────────────────────────────────────────────

@customer_required
def customer_dashboard(request):
    bookings = list(
        Booking.objects
        .filter(customer=request.user)
        .select_related('assigned_worker')
        .order_by('booking_date', 'created_at')
    )
    today = timezone.localdate()
    upcoming = [b for b in bookings if is_active_status(b.status) and b.booking_date >= today]

    return render(request, 'bookings/dashboard.html', {
        'customer_name':  get_customer_name(request.user),
        'upcoming':       upcoming,
        'total_bookings': len(bookings),
        'active_count':   sum(1 for b in bookings if is_active_status(b.status)),
        'payable_count':  payable_bookings(request.user).count(),
        'page': 'dashboard',
    })


@customer_required
def booking_history(request):
    bookings = (
        Booking.objects
        .filter(customer=request.user)
        .select_related('assigned_worker')
        .order_by('-booking_date', '-created_at')
    )
    return render(request, 'bookings/history.html', {
        'bookings': bookings,
        'page': 'history',
    })


# ─────────────────────────────────────────────────────────────────────────────
# Book a cleaning
# ─────────────────────────────────────────────────────────────────────────────

@customer_required
def book_cleaning(request):
    form = BookCleaningForm(request.POST or None)

    if request.method == 'POST' and form.is_valid():
        data = form.cleaned_data
        try:
            booking = lifecycle.create_booking(
                request.user,
                booking_date=data['booking_date'],
                preferred_time=data['preferred_time'],
                address=data['address'],
                service_type=data['service_type'],
                estimated_price=data.get('estimated_price') or 0,
                special_request=data.get('special_request', ''),
                bin_size=data.get('bin_size', ''),
                carpet_size=data.get('carpet_size', ''),
            )
        except BookingValidationError as exc:
            form.add_error(None, str(exc))
        except DatabaseError:
            logger.exception('Booking creation failed for customer %s', request.user.pk)
            messages.error(request, 'We could not save your booking. Please try again.')
        else:
            send_booking_received(booking)
            messages.success(
                request,
                f'Booking #{booking.id_short} received. We will confirm it shortly.'
            )
            return redirect('bookings:dashboard')

    return render(request, 'bookings/book.html', {
        'form': form,
        'customer_name': get_customer_name(request.user),
        'page': 'book',
    })


@require_GET
@customer_required
def check_active_booking(request):
    """JSON probe used by the booking form before submit."""
    day = None
    try:
        day = parse_date(request.GET.get('date', ''))
    except ValueError:
        pass
    if day is None:
        return JsonResponse({'error': 'A valid date (YYYY-MM-DD) is required.'}, status=400)
    return JsonResponse({
        'hasActiveBooking': lifecycle.has_active_booking_for_date(request.user.pk, day),
    })


# ─────────────────────────────────────────────────────────────────────────────
# Cancel
# ─────────────────────────────────────────────────────────────────────────────

@require_POST
@customer_required
def cancel_booking(request, booking_id):
    reason = request.POST.get('reason', '').strip()
    try:
        booking = lifecycle.cancel_booking(booking_id, request.user.pk, reason=reason)
    except BookingAuthorizationError:
        logger.warning('Customer %s tried to cancel booking %s', request.user.pk, booking_id)
        return HttpResponseForbidden('You are not authorized to cancel this booking.')
    except (BookingValidationError, LifecycleNotFoundError) as exc:
        messages.error(request, str(exc))
        return redirect('bookings:history')
    except DatabaseError:
        logger.exception('Cancellation failed for booking %s', booking_id)
        messages.error(request, 'Could not cancel the booking. Please try again.')
        return redirect('bookings:history')

    send_booking_cancelled(booking, reason=reason)
    messages.success(request, f'Booking #{booking.id_short} cancelled.')
    return redirect('bookings:history')
