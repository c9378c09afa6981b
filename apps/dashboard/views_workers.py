"""Worker CRUD views for the admin dashboard."""
import logging
from django.contrib import messages
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from apps.accounts.decorators import admin_required
from apps.bookings.statuses import WorkerStatus
from apps.notifications.emails import send_worker_welcome
from apps.workers.models import Worker
from .forms import WorkerForm

logger = logging.getLogger(__name__)


@admin_required
def worker_list(request):
    workers = (
        Worker.objects
        .annotate(open_assignments=Count('assignments', filter=Q(assignments__is_fully_completed=False)))
        .order_by('name')
    )
    return render(request, 'dashboard/workers/list.html', {
        'workers': workers,
        'page': 'workers',
    })


@admin_required
def worker_create(request):
    form = WorkerForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        worker = form.save()
        logger.info("Worker %s created by %s", worker.pk, request.user.pk)
        send_worker_welcome(worker)
        messages.success(request, f'Worker "{worker.name}" created. Login details were emailed to {worker.email}.')
        return redirect('dashboard:worker_list')
    return render(request, 'dashboard/workers/form.html', {
        'form':  form,
        'title': 'Add Worker',
        'page':  'workers',
    })


@admin_required
def worker_edit(request, pk):
    worker = get_object_or_404(Worker, pk=pk)
    form   = WorkerForm(request.POST or None, instance=worker)
    if request.method == 'POST' and form.is_valid():
        form.save()
        messages.success(request, f'Worker "{worker.name}" updated.')
        return redirect('dashboard:worker_list')
    return render(request, 'dashboard/workers/form.html', {
        'form':   form,
        'title':  f'Edit Worker — {worker.name}',
        'worker': worker,
        'page':   'workers',
    })


@require_POST
@admin_required
def worker_toggle(request, pk):
    worker = get_object_or_404(Worker, pk=pk)
    worker.is_active = not worker.is_active
    worker.save(update_fields=['is_active', 'updated_at'])
    state = 'activated' if worker.is_active else 'deactivated'
    messages.success(request, f'Worker "{worker.name}" {state}.')
    return redirect('dashboard:worker_list')


@require_POST
@admin_required
def worker_delete(request, pk):
    """
    Soft delete: the row stays so bookings and assignments that name this
    worker still resolve. Open assignments must be reassigned first.
    """
    worker = get_object_or_404(Worker, pk=pk)
    open_work = worker.assignments.filter(is_fully_completed=False).exclude(worker_status=WorkerStatus.CANCELLED)
    if open_work.exists():
        messages.error(request, f'"{worker.name}" still has open assignments. Reassign or remove them first.')
        return redirect('dashboard:worker_list')

    worker.is_active = False
    worker.save(update_fields=['is_active', 'updated_at'])
    worker.delete()
    logger.info("Worker %s deleted by %s", worker.pk, request.user.pk)
    messages.success(request, f'Worker "{worker.name}" removed.')
    return redirect('dashboard:worker_list')
