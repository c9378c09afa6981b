from django.urls import path
from . import views, views_admins, views_workers

app_name = 'dashboard'

urlpatterns = [
    # ── Overview ──────────────────────────────────────────────────────────
    path('',                 views.overview,   name='overview'),
    path('chart-data/',      views.chart_data, name='chart_data'),

    # ── Bookings ──────────────────────────────────────────────────────────
    path('bookings/',                              views.booking_list,       name='booking_list'),
    path('bookings/<uuid:booking_id>/status/',     views.booking_set_status, name='booking_set_status'),
    path('bookings/<uuid:booking_id>/price/',      views.booking_set_price,  name='booking_set_price'),
    path('bookings/<uuid:booking_id>/delete/',     views.booking_delete,     name='booking_delete'),

    # ── Assignments ───────────────────────────────────────────────────────
    path('assignments/',                                   views.assignment_list,          name='assignment_list'),
    path('assignments/assign/<uuid:booking_id>/',          views.assign_page,              name='assign_page'),
    path('assignments/assign/<uuid:booking_id>/save/',     views.assign_worker,            name='assign_worker'),
    path('assignments/<uuid:assignment_id>/complete/',     views.assignment_complete,      name='assignment_complete'),
    path('assignments/<uuid:assignment_id>/status/',       views.assignment_update_status, name='assignment_update_status'),
    path('assignments/<uuid:assignment_id>/delete/',       views.assignment_delete,        name='assignment_delete'),

    # ── Payments / customers ──────────────────────────────────────────────
    path('payments/',                              views.payment_history, name='payment_history'),
    path('customers/',                             views.customer_list,   name='customer_list'),
    path('customers/<int:user_id>/toggle/',        views.customer_toggle, name='customer_toggle'),

    # ── Worker CRUD ───────────────────────────────────────────────────────
    path('workers/',                       views_workers.worker_list,   name='worker_list'),
    path('workers/new/',                   views_workers.worker_create, name='worker_create'),
    path('workers/<uuid:pk>/edit/',        views_workers.worker_edit,   name='worker_edit'),
    path('workers/<uuid:pk>/toggle/',      views_workers.worker_toggle, name='worker_toggle'),
    path('workers/<uuid:pk>/delete/',      views_workers.worker_delete, name='worker_delete'),

    # ── Admin accounts ────────────────────────────────────────────────────
    path('admins/',                        views_admins.admin_list,   name='admin_list'),
    path('admins/new/',                    views_admins.admin_create, name='admin_create'),
    path('admins/<int:user_id>/toggle/',   views_admins.admin_toggle, name='admin_toggle'),
]
