from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'booking', 'amount', 'payment_method', 'status', 'payment_date']
    list_filter = ['status', 'payment_method']
    search_fields = ['customer_name', 'reference', 'customer__email']
    readonly_fields = [
        'id', 'customer', 'customer_name', 'amount', 'payment_method',
        'reference', 'description', 'payment_date', 'status', 'booking',
    ]
    date_hierarchy = 'payment_date'
    fieldsets = (
        ('Payment', {'fields': ('id', 'customer', 'customer_name', 'amount', 'payment_method', 'status', 'payment_date')}),
        ('Details', {'fields': ('reference', 'description', 'booking')}),
    )
