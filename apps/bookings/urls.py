from django.urls import path
from . import views

app_name = 'bookings'

urlpatterns = [
    path('',                               views.customer_dashboard,   name='dashboard'),
    path('book/',                          views.book_cleaning,        name='book'),
    path('history/',                       views.booking_history,      name='history'),
    path('check-active/',                  views.check_active_booking, name='check_active'),
    path('<uuid:booking_id>/cancel/',      views.cancel_booking,       name='cancel'),
]
