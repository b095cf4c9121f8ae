from django.contrib import admin
from .models import Customer, Driver, Vehicle


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'email', 'phone', 'created_at')
    search_fields = ('first_name', 'last_name', 'email', 'phone')


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'license_number', 'license_expiry', 'phone', 'status')
    list_filter = ('status',)
    search_fields = ('first_name', 'last_name', 'license_number', 'email')


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ('name', 'plate', 'make', 'model', 'capacity', 'status')
    list_filter = ('status',)
    search_fields = ('name', 'plate', 'vin', 'make', 'model')
