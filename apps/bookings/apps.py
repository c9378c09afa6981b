from django.apps import AppConfig


class BookingsConfig(AppConfig):
    name = 'apps.bookings'
    verbose_name = 'Bookings'
