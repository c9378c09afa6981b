from django.urls import path
from . import views

app_name = 'workers'

urlpatterns = [
    path('login/',                                  views.worker_login,          name='login'),
    path('logout/',                                 views.worker_logout,         name='logout'),
    path('',                                        views.worker_dashboard,      name='dashboard'),
    path('completed/',                              views.completed_assignments, name='completed'),
    path('assignments/<uuid:assignment_id>/status/', views.update_status,        name='update_status'),
    path('bookings/<uuid:booking_id>/feedback/',    views.submit_feedback,       name='feedback'),
]
