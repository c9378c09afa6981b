"""
Sign-in, sign-up and landing views for customers and admins.
Workers sign in through apps.workers.
"""
import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET

from .forms import LoginForm, RegistrationForm
from .session import get_worker_id, session_identity, set_user_session

logger = logging.getLogger(__name__)


def _landing_for(user):
    return 'dashboard:overview' if user.is_staff else 'bookings:dashboard'


def _safe_next(request):
    next_url = request.POST.get('next', '') or request.GET.get('next', '')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return next_url
    return ''


def home(request):
    if get_worker_id(request):
        return redirect('workers:dashboard')
    if request.user.is_authenticated:
        return redirect(_landing_for(request.user))
    return render(request, 'home.html')


def login_view(request):
    if request.user.is_authenticated:
        return redirect(_landing_for(request.user))

    form = LoginForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        user = authenticate(
            request,
            username=form.cleaned_data['email'],
            password=form.cleaned_data['password'],
        )
        if user is None:
            messages.error(request, 'Invalid email or password.')
        elif not user.is_active:
            messages.error(request, 'This account has been disabled.')
        else:
            login(request, user)
            set_user_session(request, user)
            logger.info("User %s signed in as %s", user.pk, 'admin' if user.is_staff else 'customer')
            return redirect(_safe_next(request) or _landing_for(user))

    return render(request, 'accounts/login.html', {
        'form': form,
        'next': request.GET.get('next', ''),
    })


def logout_view(request):
    logout(request)
    messages.success(request, 'You have been signed out.')
    return redirect('accounts:login')


def register(request):
    if request.user.is_authenticated:
        return redirect(_landing_for(request.user))

    form = RegistrationForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        user = form.save()
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        set_user_session(request, user)
        logger.info("Customer %s registered", user.pk)
        messages.success(request, 'Welcome! Your account has been created.')
        return redirect('bookings:dashboard')

    return render(request, 'accounts/register.html', {'form': form})


@require_GET
def session_info(request):
    """JSON snapshot of the current session identity."""
    return JsonResponse(session_identity(request))
