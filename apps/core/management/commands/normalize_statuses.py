"""
management command: normalize_statuses

Rewrites legacy status spellings ('Approved', 'In Progress', 'canceled',
'done', ...) to their canonical stored form. Worker statuses that match a
known value get its canonical spelling; free text is left alone. Unknown
booking statuses are reported, never guessed.

Usage:
    python manage.py normalize_statuses
    python manage.py normalize_statuses --dry-run
"""
from django.core.management.base import BaseCommand
from django.db import IntegrityError, transaction

from apps.bookings.models import Assignment, Booking, BookingStatusLog
from apps.bookings.statuses import UnknownStatus, parse_status, parse_worker_status


class Command(BaseCommand):
    help = 'Normalize legacy booking and worker status spellings'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run', action='store_true',
            help='Report what would change without writing',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        booking_count = unknown_count = worker_count = 0

        for booking in Booking.objects.order_by('created_at'):
            status = parse_status(booking.status)
            if isinstance(status, UnknownStatus):
                unknown_count += 1
                self.stdout.write(self.style.WARNING(
                    f'  #{booking.id_short}: unknown status {booking.status!r} left as is'
                ))
                continue

            updates = {}
            if booking.status != status.value:
                updates['status'] = status.value
            if booking.worker_status:
                worker_status = str(parse_worker_status(booking.worker_status))
                if worker_status != booking.worker_status:
                    updates['worker_status'] = worker_status
            if not updates:
                continue

            self.stdout.write(f'  #{booking.id_short}: {booking.status!r} → {updates}')
            if dry_run:
                booking_count += 1
                continue
            try:
                with transaction.atomic():
                    Booking.objects.filter(pk=booking.pk).update(**updates)
                    if 'status' in updates:
                        BookingStatusLog.objects.create(
                            booking=booking,
                            from_status=booking.status[:20],
                            to_status=updates['status'],
                            changed_by='system:normalize',
                            reason='Legacy status spelling normalized',
                        )
            except IntegrityError:
                self.stderr.write(
                    f'  #{booking.id_short}: skipped, another active booking exists '
                    f'for this customer on {booking.booking_date}'
                )
                continue
            booking_count += 1

        for assignment in Assignment.objects.all():
            worker_status = str(parse_worker_status(assignment.worker_status))
            if worker_status and worker_status != assignment.worker_status:
                worker_count += 1
                if not dry_run:
                    Assignment.objects.filter(pk=assignment.pk).update(worker_status=worker_status)

        prefix = '[dry run] ' if dry_run else ''
        self.stdout.write(self.style.SUCCESS(
            f'{prefix}normalize_statuses: {booking_count} bookings, '
            f'{worker_count} assignments updated; {unknown_count} unknown statuses'
        ))
