import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import scheduling.models


DAY_CHOICES = [
    (1, 'Monday'),
    (2, 'Tuesday'),
    (3, 'Wednesday'),
    (4, 'Thursday'),
    (5, 'Friday'),
    (6, 'Saturday'),
    (7, 'Sunday'),
]


def resource_ref():
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name='+',
        to='scheduling.resource',
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Resource',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('kind', models.CharField(choices=[
                    ('barber', 'Barber'),
                    ('court', 'Court'),
                    ('room', 'Room'),
                    ('location', 'Location'),
                    ('program', 'Program'),
                    ('team', 'Team'),
                ], max_length=20)),
                ('timezone', models.CharField(
                    default=scheduling.models.default_resource_timezone,
                    help_text="IANA timezone of the resource's wall clock",
                    max_length=64,
                )),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(
                    blank=True,
                    help_text="User who manages this resource's availability (e.g. the barber)",
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='owned_resources',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'ordering': ['kind', 'name'],
            },
        ),
        migrations.CreateModel(
            name='RecurrencePattern',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day_of_week', models.PositiveSmallIntegerField(
                    choices=DAY_CHOICES,
                    help_text='Day of week for recurring occurrences (1=Monday, 7=Sunday)',
                )),
                ('recurrence_start_date', models.DateField()),
                ('recurrence_end_date', models.DateField()),
                ('occurrence_start_time', models.TimeField()),
                ('occurrence_end_time', models.TimeField()),
                ('capacity', models.PositiveIntegerField(
                    blank=True,
                    help_text='Fixed for every occurrence of the series (null = unbounded)',
                    null=True,
                )),
                ('timezone', models.CharField(
                    help_text='Resource timezone at creation; wall times are read in it',
                    max_length=64,
                )),
                ('request_id', models.CharField(max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resource', models.ForeignKey(
                    help_text='Contention resource the occurrences are booked against',
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='recurrence_patterns',
                    to='scheduling.resource',
                )),
                ('program', resource_ref()),
                ('location', resource_ref()),
                ('court', resource_ref()),
                ('team', resource_ref()),
            ],
            options={
                'ordering': ['recurrence_start_date', 'occurrence_start_time'],
            },
        ),
        migrations.CreateModel(
            name='Occurrence',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('start_at', models.DateTimeField()),
                ('end_at', models.DateTimeField()),
                ('local_date', models.DateField(help_text="Start date on the resource's wall clock")),
                ('capacity', models.PositiveIntegerField(blank=True, null=True)),
                ('status', models.CharField(
                    choices=[('scheduled', 'Scheduled'), ('cancelled', 'Cancelled')],
                    default='scheduled',
                    max_length=20,
                )),
                ('request_id', models.CharField(max_length=64)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resource', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='occurrences',
                    to='scheduling.resource',
                )),
                ('recurrence_pattern', models.ForeignKey(
                    blank=True,
                    help_text='Parent pattern for recurring occurrences (null for one-time)',
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='occurrences',
                    to='scheduling.recurrencepattern',
                )),
                ('program', resource_ref()),
                ('location', resource_ref()),
                ('court', resource_ref()),
                ('team', resource_ref()),
            ],
            options={
                'ordering': ['start_at'],
            },
        ),
        migrations.CreateModel(
            name='Attendance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_id', models.CharField(max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('occurrence', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='attendances',
                    to='scheduling.occurrence',
                )),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='AvailabilityWindow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day_of_week', models.PositiveSmallIntegerField(
                    choices=DAY_CHOICES,
                    help_text='Canonical day of week (1=Monday, 7=Sunday)',
                )),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resource', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='availability_windows',
                    to='scheduling.resource',
                )),
            ],
            options={
                'ordering': ['resource', 'day_of_week'],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('customer_id', models.CharField(max_length=64)),
                ('start_at', models.DateTimeField()),
                ('end_at', models.DateTimeField()),
                ('request_id', models.CharField(max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('resource', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='bookings',
                    to='scheduling.resource',
                )),
            ],
            options={
                'ordering': ['start_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='availabilitywindow',
            constraint=models.UniqueConstraint(
                fields=('resource', 'day_of_week'),
                name='unique_window_per_resource_day',
            ),
        ),
        migrations.AddConstraint(
            model_name='recurrencepattern',
            constraint=models.UniqueConstraint(
                fields=('resource', 'request_id'),
                name='unique_pattern_per_request',
            ),
        ),
        migrations.AddConstraint(
            model_name='attendance',
            constraint=models.UniqueConstraint(
                fields=('occurrence', 'customer_id'),
                name='unique_attendee_per_occurrence',
            ),
        ),
        migrations.AddIndex(
            model_name='occurrence',
            index=models.Index(fields=['resource', 'start_at'], name='occurrence_resource_start_idx'),
        ),
        migrations.AddIndex(
            model_name='occurrence',
            index=models.Index(fields=['start_at', 'status'], name='occurrence_start_status_idx'),
        ),
        migrations.AddIndex(
            model_name='occurrence',
            index=models.Index(fields=['recurrence_pattern', 'start_at'], name='occurrence_pattern_start_idx'),
        ),
        migrations.AddIndex(
            model_name='booking',
            index=models.Index(fields=['resource', 'start_at'], name='booking_resource_start_idx'),
        ),
    ]
