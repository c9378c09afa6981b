"""Staff account management for the dashboard."""
import logging
from django.contrib import messages
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from apps.accounts.decorators import admin_required
from .forms import AdminUserForm

logger = logging.getLogger(__name__)


@admin_required
def admin_list(request):
    admins = get_user_model().objects.filter(is_staff=True).order_by('-date_joined')
    return render(request, 'dashboard/admins/list.html', {
        'admins': admins,
        'page': 'admins',
    })


@admin_required
def admin_create(request):
    form = AdminUserForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        admin = form.save()
        logger.info("Admin %s created by %s", admin.pk, request.user.pk)
        messages.success(request, f'Admin {admin.email} added.')
        return redirect('dashboard:admin_list')
    return render(request, 'dashboard/admins/form.html', {
        'form':  form,
        'title': 'Add Admin',
        'page':  'admins',
    })


@require_POST
@admin_required
def admin_toggle(request, user_id):
    """Enable or disable another admin. Disabling drops their session on the next request."""
    admin = get_object_or_404(get_user_model(), pk=user_id, is_staff=True)
    if admin.pk == request.user.pk:
        messages.error(request, 'You cannot disable your own account.')
        return redirect('dashboard:admin_list')

    admin.is_active = not admin.is_active
    admin.save(update_fields=['is_active'])
    state = 'enabled' if admin.is_active else 'disabled'
    logger.info("Admin %s %s by %s", admin.pk, state, request.user.pk)
    messages.success(request, f'Admin {admin.email} {state}.')
    return redirect('dashboard:admin_list')
