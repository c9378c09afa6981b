"""
URL configuration for The Rock Waste Management booking system.
"""
from django.contrib import admin
from django.conf import settings
from django.urls import path, include

from apps.accounts import views as account_views

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path('', account_views.home, name='home'),
    path('accounts/', include('apps.accounts.urls', namespace='accounts')),
    path('bookings/', include('apps.bookings.urls', namespace='bookings')),
    path('payments/', include('apps.payments.urls', namespace='payments')),
    path('workers/', include('apps.workers.urls', namespace='workers')),
    path('dashboard/', include('apps.dashboard.urls', namespace='dashboard')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [path('__debug__/', include(debug_toolbar.urls))] + urlpatterns
