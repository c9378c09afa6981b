import decimal
import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('bookings', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.UUIDField(db_column='Id', default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('customer_name', models.CharField(db_column='CustomerName', max_length=150)),
                ('amount', models.DecimalField(db_column='Amount', decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.01'))])),
                ('payment_method', models.CharField(choices=[('card', 'Card'), ('eft', 'EFT / Bank Transfer'), ('cash', 'Cash')], db_column='PaymentMethod', max_length=20)),
                ('reference', models.CharField(blank=True, db_column='Reference', max_length=100)),
                ('description', models.CharField(blank=True, db_column='Description', max_length=255)),
                ('payment_date', models.DateTimeField(db_column='PaymentDate', db_index=True, default=django.utils.timezone.now)),
                ('status', models.CharField(choices=[('completed', 'Completed')], db_column='Status', default='completed', max_length=20)),
                ('booking', models.ForeignKey(blank=True, db_column='BookingId', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payments', to='bookings.booking')),
                ('customer', models.ForeignKey(db_column='CustomerId', on_delete=django.db.models.deletion.PROTECT, related_name='payments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Payment',
                'verbose_name_plural': 'Payments',
                'db_table': 'payments',
                'ordering': ['-payment_date'],
            },
        ),
    ]
