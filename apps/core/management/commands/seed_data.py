"""
Seed management command.

Populates the database with demo data:
  - 1 admin user and 2 customers
  - 3 workers
  - a handful of bookings walked through the lifecycle
    (pending, approved + priced, assigned, completed, cancelled)

Usage:
    python manage.py seed_data
    python manage.py seed_data --flush   # wipe and re-seed
"""
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.bookings import lifecycle
from apps.bookings.models import Assignment, Booking, ServiceType
from apps.payments.models import Payment
from apps.workers.models import Worker

DEMO_PASSWORD = 'RockWaste#2024'


class Command(BaseCommand):
    help = 'Seed demo users, workers and bookings'

    def add_arguments(self, parser):
        parser.add_argument(
            '--flush', action='store_true',
            help='Delete all existing demo data before creating fresh records',
        )

    def handle(self, *args, **options):
        User = get_user_model()

        if options['flush']:
            self.stdout.write('Flushing existing data...')
            Payment.objects.all().delete()
            Assignment.objects.all().delete()
            Booking.objects.all().delete()
            Worker.all_objects.all().delete()
            User.objects.filter(is_superuser=False).delete()

        # ── Users ─────────────────────────────────────────────────────────────
        self.stdout.write('Seeding users...')
        admin, created = User.objects.get_or_create(
            username='admin@therockwaste.co.za',
            defaults={'email': 'admin@therockwaste.co.za', 'is_staff': True, 'first_name': 'Site'},
        )
        if created:
            admin.set_password(DEMO_PASSWORD)
            admin.save()

        customers = []
        for first, last, email in [
            ('Jane', 'Mokoena', 'jane@example.com'),
            ('Pieter', 'van Wyk', 'pieter@example.com'),
        ]:
            user, created = User.objects.get_or_create(
                username=email,
                defaults={'email': email, 'first_name': first, 'last_name': last},
            )
            if created:
                user.set_password(DEMO_PASSWORD)
                user.save()
            customers.append(user)
        self.stdout.write(self.style.SUCCESS(f'  ✔ admin + {len(customers)} customers (password: {DEMO_PASSWORD})'))

        # ── Workers ───────────────────────────────────────────────────────────
        self.stdout.write('Seeding workers...')
        workers = []
        for name, email, phone in [
            ('Sipho Dlamini', 'sipho@therockwaste.co.za', '+27821110001'),
            ('Thandi Nkosi',  'thandi@therockwaste.co.za', '+27821110002'),
            ('Johan Botha',   'johan@therockwaste.co.za', '+27821110003'),
        ]:
            worker, _ = Worker.objects.get_or_create(email=email, defaults={'name': name, 'phone': phone})
            workers.append(worker)
        self.stdout.write(self.style.SUCCESS(f'  ✔ {len(workers)} workers created'))

        # ── Bookings ──────────────────────────────────────────────────────────
        if Booking.objects.exists():
            self.stdout.write(self.style.WARNING('  bookings already present, skipping (use --flush)'))
            return

        self.stdout.write('Seeding bookings...')
        today = timezone.localdate()
        jane, pieter = customers

        def book(customer, days, service, **extra):
            return lifecycle.create_booking(
                customer,
                booking_date=today + timedelta(days=days),
                preferred_time='08:00 - 10:00',
                address='12 Long Street, Cape Town',
                service_type=service,
                estimated_price=Decimal('450.00'),
                **extra,
            )

        book(jane, 3, ServiceType.GENERAL_CLEANING)

        approved = book(jane, 5, ServiceType.BIN_CLEANING, bin_size='medium')
        lifecycle.set_booking_status(approved.pk, 'approved', 'seed')
        lifecycle.set_booking_price(approved.pk, '380.00', 'seed')

        assigned = book(pieter, 2, ServiceType.WASTE_REMOVAL)
        lifecycle.set_booking_status(assigned.pk, 'approved', 'seed')
        assignment = lifecycle.assign_worker(assigned.pk, workers[0].pk, 'seed')
        lifecycle.update_worker_status(assignment.pk, 'In Progress', 'seed')

        completed = book(pieter, 1, ServiceType.CARPET_CLEANING, carpet_size='large')
        lifecycle.set_booking_status(completed.pk, 'approved', 'seed')
        done = lifecycle.assign_worker(completed.pk, workers[1].pk, 'seed')
        lifecycle.complete_assignment(done.pk, completed.pk, 'seed')

        cancelled = book(jane, 9, ServiceType.DEEP_CLEANING)
        lifecycle.cancel_booking(cancelled.pk, jane.pk, reason='Plans changed')

        self.stdout.write(self.style.SUCCESS(f'  ✔ {Booking.objects.count()} bookings created'))
        self.stdout.write(self.style.SUCCESS('Seed complete.'))
