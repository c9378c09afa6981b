"""
Role decorators.

Each one redirects to the matching login page with ?next= preserved instead
of raising, so bookmarked URLs land back where the user started.
"""
from functools import wraps

from django.contrib import messages
from django.shortcuts import redirect
from django.urls import reverse

from apps.workers.models import Worker

from .session import clear_worker_session, get_worker_id


def _login_redirect(request, url_name):
    return redirect(f'{reverse(url_name)}?next={request.path}')


def admin_required(view_func):
    """Require an authenticated staff user."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated or not request.user.is_staff:
            return _login_redirect(request, 'accounts:login')
        return view_func(request, *args, **kwargs)
    return wrapper


def customer_required(view_func):
    """Require an authenticated, non-staff user. Admins are sent to their dashboard."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _login_redirect(request, 'accounts:login')
        if request.user.is_staff:
            return redirect('dashboard:overview')
        return view_func(request, *args, **kwargs)
    return wrapper


def worker_required(view_func):
    """
    Require a worker session whose worker still exists and is active.
    The worker is attached as request.worker.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        worker_id = get_worker_id(request)
        worker = Worker.objects.filter(pk=worker_id, is_active=True).first() if worker_id else None
        if worker is None:
            if worker_id:
                clear_worker_session(request)
                messages.error(request, 'Your worker account is no longer active.')
            return _login_redirect(request, 'workers:login')
        request.worker = worker
        return view_func(request, *args, **kwargs)
    return wrapper
