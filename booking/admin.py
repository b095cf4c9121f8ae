from django.contrib import admin
from .models import Booking, BookingHistory


class BookingHistoryInline(admin.TabularInline):
    model = BookingHistory
    extra = 0
    can_delete = False
    readonly_fields = ('action', 'actor_role', 'changes', 'admin_only_note', 'created_at')


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer', 'date', 'start_time', 'end_time', 'vehicle', 'driver', 'status', 'source']
    list_filter = ['status', 'source', 'color', 'date']
    search_fields = ['customer__first_name', 'customer__last_name', 'contact_name', 'pickup_point', 'dropoff_point']
    raw_id_fields = ['customer', 'vehicle', 'driver']
    readonly_fields = ['confirmed_at', 'customer_verify_token', 'customer_verified_at', 'created_at', 'updated_at']
    inlines = [BookingHistoryInline]


@admin.register(BookingHistory)
class BookingHistoryAdmin(admin.ModelAdmin):
    list_display = ['booking', 'action', 'actor_role', 'created_at']
    list_filter = ['action', 'actor_role']
