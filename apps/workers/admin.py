from django.contrib import admin
from .models import Worker


@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'is_active', 'deleted_at']
    list_filter = ['is_active']
    search_fields = ['name', 'email', 'phone']
    list_editable = ['is_active']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
    fieldsets = (
        ('Worker Info', {'fields': ('id', 'name', 'email', 'phone')}),
        ('Status', {'fields': ('is_active',)}),
        ('Audit', {'fields': ('created_at', 'updated_at', 'deleted_at'), 'classes': ('collapse',)}),
    )
