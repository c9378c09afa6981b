"""
Worker portal: email + phone sign-in, assignment lists, progress updates
and feedback. Workers are identified by the WorkerId session key, not by
django.contrib.auth.
"""
import logging

from django.contrib import messages
from django.db import DatabaseError
from django.http import HttpResponseForbidden
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from apps.accounts.decorators import worker_required
from apps.accounts.session import clear_worker_session, get_worker_id, set_worker_session
from apps.bookings import lifecycle
from apps.bookings.exceptions import (
    BookingAuthorizationError,
    BookingValidationError,
    LifecycleNotFoundError,
)
from apps.bookings.models import Assignment
from apps.bookings.statuses import BookingStatus, parse_status

from .forms import FeedbackForm, WorkerLoginForm, WorkerStatusForm
from .models import Worker

logger = logging.getLogger(__name__)

HIDDEN_BOOKING_STATUSES = (BookingStatus.CANCELLED, BookingStatus.REJECTED)


# ─────────────────────────────────────────────────────────────────────────────
# Auth views
# ─────────────────────────────────────────────────────────────────────────────

def worker_login(request):
    if get_worker_id(request):
        return redirect('workers:dashboard')

    form = WorkerLoginForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        worker = Worker.authenticate(form.cleaned_data['email'], form.cleaned_data['phone'])
        if worker is None:
            messages.error(request, 'Invalid credentials or your account is inactive.')
        else:
            request.session.cycle_key()
            set_worker_session(request, worker)
            logger.info("Worker %s signed in", worker.pk)
            next_url = request.POST.get('next', '') or request.GET.get('next', '')
            if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                return redirect(next_url)
            return redirect('workers:dashboard')

    return render(request, 'workers/login.html', {
        'form': form,
        'next': request.GET.get('next', ''),
    })


def worker_logout(request):
    clear_worker_session(request)
    messages.success(request, 'You have been signed out.')
    return redirect('workers:login')


# ─────────────────────────────────────────────────────────────────────────────
# Assignment lists
# ─────────────────────────────────────────────────────────────────────────────

@worker_required
def worker_dashboard(request):
    open_work = (
        Assignment.objects
        .filter(assigned_worker=request.worker, is_fully_completed=False)
        .select_related('booking')
        .order_by('booking__booking_date', 'created_at')
    )
    # Legacy rows may spell the status differently ('Cancelled', 'canceled').
    assignments = [a for a in open_work if parse_status(a.booking.status) not in HIDDEN_BOOKING_STATUSES]
    return render(request, 'workers/dashboard.html', {
        'worker':      request.worker,
        'assignments': assignments,
        'suggestions': WorkerStatusForm.suggestions,
        'page': 'dashboard',
    })


@worker_required
def completed_assignments(request):
    assignments = (
        Assignment.objects
        .filter(assigned_worker=request.worker, is_fully_completed=True)
        .select_related('booking')
        .order_by('-completed_at')
    )
    return render(request, 'workers/completed.html', {
        'worker':      request.worker,
        'assignments': assignments,
        'page': 'completed',
    })


# ─────────────────────────────────────────────────────────────────────────────
# Actions
# ─────────────────────────────────────────────────────────────────────────────

@require_POST
@worker_required
def update_status(request, assignment_id):
    form = WorkerStatusForm(request.POST)
    if not form.is_valid():
        messages.error(request, 'Please enter a status of at most 100 characters.')
        return redirect('workers:dashboard')

    try:
        assignment = lifecycle.update_worker_status(
            assignment_id,
            form.cleaned_data['worker_status'],
            changed_by=f'worker:{request.worker.pk}',
            worker_id=request.worker.pk,
        )
    except BookingAuthorizationError:
        return HttpResponseForbidden('This assignment belongs to another worker.')
    except (BookingValidationError, LifecycleNotFoundError) as exc:
        messages.error(request, str(exc))
    except DatabaseError:
        logger.exception('Worker status update failed for assignment %s', assignment_id)
        messages.error(request, 'Could not update the status. Please try again.')
    else:
        messages.success(request, f'Status updated to "{assignment.worker_status}".')
    return redirect('workers:dashboard')


@require_POST
@worker_required
def submit_feedback(request, booking_id):
    form = FeedbackForm(request.POST)
    if not form.is_valid():
        messages.error(request, 'Feedback cannot be empty.')
        return redirect('workers:dashboard')

    try:
        lifecycle.submit_feedback(booking_id, request.worker.pk, form.cleaned_data['feedback'])
    except BookingAuthorizationError:
        return HttpResponseForbidden('You are not assigned to this booking.')
    except (BookingValidationError, LifecycleNotFoundError) as exc:
        messages.error(request, str(exc))
    except DatabaseError:
        logger.exception('Feedback failed for booking %s', booking_id)
        messages.error(request, 'Could not save your feedback. Please try again.')
    else:
        messages.success(request, 'Feedback submitted.')
    return redirect('workers:dashboard')
