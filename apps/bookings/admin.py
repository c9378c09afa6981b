from django.contrib import admin
from .models import Assignment, Booking, BookingStatusLog


class BookingStatusLogInline(admin.TabularInline):
    model = BookingStatusLog
    extra = 0
    readonly_fields = ['from_status', 'to_status', 'changed_by', 'reason', 'changed_at']
    can_delete = False


class AssignmentInline(admin.TabularInline):
    model = Assignment
    extra = 0
    readonly_fields = ['assigned_worker', 'status', 'worker_status', 'is_fully_completed', 'completed_at', 'created_at']
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """
    Read-mostly view. Fields the lifecycle owns are read-only here so every
    change keeps Booking and Assignment in sync and still passes the
    one-active-booking-per-day check.
    """
    list_display = [
        'short_id', 'customer_name', 'service_type', 'booking_date', 'preferred_time',
        'status', 'assigned_worker', 'worker_status', 'final_price', 'payment_status',
    ]
    list_filter = ['status', 'payment_status', 'service_type', 'booking_date']
    search_fields = ['customer_name', 'booking_address', 'customer__email', 'assigned_worker__name']
    readonly_fields = [
        'id', 'customer', 'booking_date', 'status', 'assigned_worker', 'worker_status', 'payment_status',
        'worker_feedback', 'feedback_timestamp', 'created_at', 'updated_at',
    ]
    date_hierarchy = 'booking_date'
    inlines = [AssignmentInline, BookingStatusLogInline]
    fieldsets = (
        ('Booking', {'fields': ('id', 'customer', 'customer_name', 'booking_address')}),
        ('Service', {'fields': ('service_type', 'bin_size', 'carpet_size', 'special_request')}),
        ('Schedule', {'fields': ('booking_date', 'preferred_time')}),
        ('Pricing', {'fields': ('estimated_price', 'final_price', 'is_price_set', 'payment_status')}),
        ('Status', {'fields': ('status', 'assigned_worker', 'worker_status')}),
        ('Feedback', {'fields': ('worker_feedback', 'feedback_timestamp'), 'classes': ('collapse',)}),
        ('Audit', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    def has_add_permission(self, request):
        return False

    def short_id(self, obj):
        return obj.id_short
    short_id.short_description = 'ID'


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ['booking', 'assigned_worker', 'status', 'worker_status', 'is_fully_completed', 'completed_at']
    list_filter = ['is_fully_completed', 'status']
    search_fields = ['assigned_worker__name', 'booking__customer_name']
    readonly_fields = [
        'id', 'booking', 'assigned_worker', 'status', 'worker_status',
        'is_fully_completed', 'completed_at', 'created_at', 'updated_at',
    ]


@admin.register(BookingStatusLog)
class BookingStatusLogAdmin(admin.ModelAdmin):
    list_display = ['booking', 'from_status', 'to_status', 'changed_by', 'changed_at']
    readonly_fields = ['id', 'booking', 'from_status', 'to_status', 'changed_by', 'reason', 'changed_at']
    search_fields = ['booking__customer_name']
