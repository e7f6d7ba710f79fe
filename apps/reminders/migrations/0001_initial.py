# Generated manually for the initial schema

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('groups', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RecurringReminder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('frequency', models.CharField(choices=[('weekly', 'Weekly'), ('monthly', 'Monthly'), ('every_6_months', 'Every 6 months'), ('yearly', 'Yearly')], max_length=20)),
                ('next_due_date', models.DateField()),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_reminders', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reminders', to='groups.group')),
            ],
            options={
                'db_table': 'recurring_reminders',
                'ordering': ['next_due_date', 'created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='recurringreminder',
            index=models.Index(fields=['group', 'is_active'], name='recurring_r_group_i_f02d6a_idx'),
        ),
        migrations.AddIndex(
            model_name='recurringreminder',
            index=models.Index(fields=['next_due_date'], name='recurring_r_next_du_ae0e46_idx'),
        ),
    ]
