from django.db import models
from django.utils import timezone
import secrets

from .constants import (
    BOOKING_STATUS_CHOICES,
    BOOKING_SOURCE_CHOICES,
    COLOR_CHOICES,
    COLOR_DEFAULT,
    STATUS_PENDING,
    STATUS_CONFIRMED,
    STATUS_CANCELLED,
)


class Booking(models.Model):
    customer = models.ForeignKey('fleet.Customer', on_delete=models.CASCADE, related_name='bookings')
    vehicle = models.ForeignKey(
        'fleet.Vehicle', on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings'
    )
    driver = models.ForeignKey(
        'fleet.Driver', on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings'
    )

    date = models.DateField()
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)

    pickup_point = models.CharField(max_length=255, blank=True)
    dropoff_point = models.CharField(max_length=255, blank=True)
    special_instructions = models.TextField(blank=True)

    contact_name = models.CharField(max_length=150, blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)
    contact_email = models.EmailField(max_length=255, blank=True)

    source = models.CharField(max_length=10, choices=BOOKING_SOURCE_CHOICES, default='web')
    status = models.CharField(max_length=20, choices=BOOKING_STATUS_CHOICES, default=STATUS_PENDING)
    color = models.CharField(max_length=20, choices=COLOR_CHOICES, default=COLOR_DEFAULT)
    estimated_price_cents = models.PositiveIntegerField(null=True, blank=True)
    admin_note = models.TextField(blank=True)
    created_by_name = models.CharField(max_length=150, blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    customer_verify_token = models.CharField(max_length=64, blank=True)
    customer_verified_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['date'], name='booking_date_idx'),
            models.Index(fields=['status'], name='booking_status_idx'),
        ]

    def __str__(self):
        return f"#{self.pk} {self.customer} - {self.date}"

    @property
    def customer_name(self):
        return self.contact_name or (self.customer.full_name if self.customer_id else '')

    @property
    def window_text(self):
        """Human readable time window used in notifications"""
        if self.start_time and self.end_time:
            return f"{self.date.isoformat()} {self.start_time:%H:%M} to {self.end_time:%H:%M}"
        return self.date.isoformat()

    def confirm(self, driver=None):
        """Confirm the booking, optionally assigning a driver"""
        if self.status == STATUS_CONFIRMED and driver is None:
            return False
        self.status = STATUS_CONFIRMED
        self.confirmed_at = timezone.now()
        if driver is not None:
            self.driver = driver
        if not self.customer_verify_token:
            self.customer_verify_token = secrets.token_urlsafe(24)
        self.save()
        return True

    def cancel(self):
        if self.status == STATUS_CANCELLED:
            return False
        self.status = STATUS_CANCELLED
        self.save(update_fields=['status', 'updated_at'])
        return True


class BookingHistory(models.Model):
    """Audit trail of changes made to a booking"""
    ACTION_CHOICES = [
        ('create', 'Created'),
        ('update', 'Updated'),
        ('confirm', 'Confirmed'),
        ('cancel', 'Cancelled'),
        ('reschedule', 'Rescheduled'),
    ]

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='history')
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    actor_role = models.CharField(max_length=20, blank=True)
    changes = models.JSONField(default=dict, blank=True)
    admin_only_note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'Booking history'

    def __str__(self):
        return f"{self.booking_id} - {self.action}"
