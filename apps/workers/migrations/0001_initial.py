import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Worker',
            fields=[
                ('id', models.UUIDField(db_column='Id', default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_column='CreatedAt')),
                ('updated_at', models.DateTimeField(auto_now=True, db_column='UpdatedAt')),
                ('deleted_at', models.DateTimeField(blank=True, db_column='DeletedAt', db_index=True, null=True)),
                ('name', models.CharField(db_column='Name', max_length=120)),
                ('phone', models.CharField(db_column='Phone', max_length=20)),
                ('email', models.EmailField(db_column='Email', db_index=True, max_length=254)),
                ('is_active', models.BooleanField(db_column='IsActive', db_index=True, default=True)),
            ],
            options={
                'verbose_name': 'Worker',
                'verbose_name_plural': 'Workers',
                'db_table': 'workers',
                'ordering': ['name'],
            },
        ),
    ]
