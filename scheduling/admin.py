"""
Admin configuration for the scheduling app.
"""

from django.contrib import admin
from .models import AvailabilityWindow, Booking, Occurrence, RecurrencePattern, Resource


class AvailabilityWindowInline(admin.TabularInline):
    model = AvailabilityWindow
    extra = 0
    fields = ['day_of_week', 'start_time', 'end_time', 'is_active']


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    """Admin interface for Resource model."""

    list_display = ['name', 'kind', 'timezone', 'owner', 'is_active']
    list_filter = ['kind', 'is_active']
    search_fields = ['name']
    inlines = [AvailabilityWindowInline]
    readonly_fields = ['created_at', 'updated_at']


@admin.register(RecurrencePattern)
class RecurrencePatternAdmin(admin.ModelAdmin):
    """Admin interface for RecurrencePattern model."""

    list_display = [
        'resource', 'weekday_name', 'occurrence_start_time', 'occurrence_end_time',
        'recurrence_start_date', 'recurrence_end_date', 'capacity',
    ]
    list_filter = ['day_of_week', 'resource', 'created_at']
    search_fields = ['resource__name', 'request_id']
    date_hierarchy = 'recurrence_start_date'

    fieldsets = (
        ('Resources', {
            'fields': ('resource', 'program', 'location', 'court', 'team')
        }),
        ('Recurrence Rules', {
            'fields': ('day_of_week', 'occurrence_start_time', 'occurrence_end_time', 'timezone')
        }),
        ('Pattern Boundaries', {
            'fields': ('recurrence_start_date', 'recurrence_end_date', 'capacity')
        }),
        ('Metadata', {
            'fields': ('request_id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = ['request_id', 'created_at', 'updated_at']


@admin.register(Occurrence)
class OccurrenceAdmin(admin.ModelAdmin):
    """
    Read-mostly view of occurrences; bookings and cancellations go through
    the API so the conflict checks run.
    """

    list_display = ['resource', 'local_date', 'start_at', 'end_at', 'status', 'capacity', 'recurrence_pattern']
    list_filter = ['status', 'resource', 'created_at']
    search_fields = ['resource__name', 'request_id']
    date_hierarchy = 'start_at'

    fieldsets = (
        ('Resources', {
            'fields': ('resource', 'recurrence_pattern', 'program', 'location', 'court', 'team')
        }),
        ('Schedule', {
            'fields': ('local_date', 'start_at', 'end_at', 'capacity')
        }),
        ('Status', {
            'fields': ('status', 'cancelled_at')
        }),
        ('Metadata', {
            'fields': ('request_id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = [
        'resource', 'recurrence_pattern', 'local_date', 'start_at', 'end_at',
        'request_id', 'cancelled_at', 'created_at', 'updated_at',
    ]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Admin interface for Booking model."""

    list_display = ['resource', 'customer_id', 'start_at', 'end_at']
    list_filter = ['resource']
    search_fields = ['customer_id', 'resource__name']
    date_hierarchy = 'start_at'
    readonly_fields = ['request_id', 'created_at', 'updated_at']
