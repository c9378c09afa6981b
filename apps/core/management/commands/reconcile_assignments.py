"""
management command: reconcile_assignments

Reports bookings whose mirrored AssignedWorker / WorkerStatus / Status
disagree with their assignments (rows written before both copies were
updated in one transaction). With --fix, rewrites each booking from its
assignments.

Usage:
    python manage.py reconcile_assignments          # report only
    python manage.py reconcile_assignments --fix
"""
from django.core.management.base import BaseCommand

from apps.bookings.lifecycle import find_divergent_bookings, reconcile_booking


class Command(BaseCommand):
    help = 'Find (and optionally repair) bookings out of sync with their assignments'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix', action='store_true',
            help='Rewrite divergent bookings from their assignments',
        )

    def handle(self, *args, **options):
        divergent = find_divergent_bookings()
        if not divergent:
            self.stdout.write(self.style.SUCCESS('reconcile_assignments: all bookings in sync'))
            return

        for item in divergent:
            details = ', '.join(
                f'{attr}: {getattr(item.booking, attr)!r} → {item.expected[attr]!r}'
                for attr in item.fields
            )
            self.stdout.write(f'  #{item.booking.id_short} {details}')

        if not options['fix']:
            self.stdout.write(self.style.WARNING(
                f'reconcile_assignments: {len(divergent)} divergent bookings (run with --fix to repair)'
            ))
            return

        fixed = 0
        for item in divergent:
            if reconcile_booking(item.booking.pk):
                fixed += 1
        self.stdout.write(self.style.SUCCESS(f'reconcile_assignments: repaired {fixed} bookings'))
