import decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('workers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_column='CreatedAt')),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='UpdatedAt')),
                ('id', models.UUIDField(db_column='BookingId', default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('customer_name', models.CharField(db_column='CustomerName', max_length=150)),
                ('booking_address', models.TextField(db_column='BookingAddress')),
                ('booking_date', models.DateField(db_column='BookingDate', db_index=True)),
                ('preferred_time', models.CharField(blank=True, db_column='PreferredTime', max_length=50)),
                ('service_type', models.CharField(db_column='ServiceType', max_length=40)),
                ('bin_size', models.CharField(blank=True, db_column='BinSize', max_length=40)),
                ('carpet_size', models.CharField(blank=True, db_column='CarpetSize', max_length=40)),
                ('special_request', models.TextField(blank=True, db_column='SpecialRequest')),
                ('estimated_price', models.DecimalField(db_column='EstimatedPrice', decimal_places=2, default=decimal.Decimal('0'), max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('final_price', models.DecimalField(db_column='FinalPrice', decimal_places=2, default=decimal.Decimal('0'), max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('is_price_set', models.BooleanField(db_column='IsPriceSet', default=False)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed')], db_column='PaymentStatus', default='pending', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('assigned', 'Assigned'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('rejected', 'Rejected'), ('in-progress', 'In Progress'), ('reading-bps', 'Reading BPS')], db_column='Status', db_index=True, default='pending', max_length=20)),
                ('worker_status', models.CharField(blank=True, db_column='WorkerStatus', max_length=100, null=True)),
                ('worker_feedback', models.TextField(blank=True, db_column='WorkerFeedback')),
                ('feedback_timestamp', models.DateTimeField(blank=True, db_column='FeedbackTimestamp', null=True)),
                ('assigned_worker', models.ForeignKey(blank=True, db_column='AssignedWorker', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='workers.worker')),
                ('customer', models.ForeignKey(db_column='CustomerId', on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Booking',
                'verbose_name_plural': 'Bookings',
                'db_table': 'bookings',
                'ordering': ['-booking_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Assignment',
            fields=[
                ('id', models.UUIDField(db_column='Id', default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_column='CreatedAt')),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='UpdatedAt')),
                ('status', models.CharField(db_column='Status', default='assigned', max_length=20)),
                ('worker_status', models.CharField(db_column='WorkerStatus', default='Pending', max_length=100)),
                ('is_fully_completed', models.BooleanField(db_column='IsFullyCompleted', db_index=True, default=False)),
                ('completed_at', models.DateTimeField(blank=True, db_column='CompletedAt', null=True)),
                ('assigned_worker', models.ForeignKey(db_column='AssignedWorker', on_delete=django.db.models.deletion.PROTECT, related_name='assignments', to='workers.worker')),
                ('booking', models.ForeignKey(db_column='BookingId', on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='bookings.booking')),
            ],
            options={
                'verbose_name': 'Assignment',
                'verbose_name_plural': 'Assignments',
                'db_table': 'assignments',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='BookingStatusLog',
            fields=[
                ('id', models.UUIDField(db_column='Id', default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('from_status', models.CharField(blank=True, max_length=20)),
                ('to_status', models.CharField(max_length=20)),
                ('changed_by', models.CharField(help_text='customer / admin / worker / system', max_length=150)),
                ('reason', models.TextField(blank=True)),
                ('changed_at', models.DateTimeField(auto_now_add=True)),
                ('booking', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_logs', to='bookings.booking')),
            ],
            options={
                'verbose_name': 'Booking Status Log',
                'verbose_name_plural': 'Booking Status Logs',
                'db_table': 'booking_status_logs',
                'ordering': ['changed_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='booking',
            constraint=models.UniqueConstraint(condition=models.Q(('status__in', ['approved', 'assigned', 'pending'])), fields=('customer', 'booking_date'), name='uq_active_booking_per_customer_date'),
        ),
        migrations.AddConstraint(
            model_name='assignment',
            constraint=models.UniqueConstraint(condition=models.Q(('is_fully_completed', False)), fields=('booking',), name='uq_active_assignment_per_booking'),
        ),
    ]
