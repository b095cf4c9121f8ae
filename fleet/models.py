from django.db import models
from django.core.validators import RegexValidator, MinValueValidator
import re


phone_regex = RegexValidator(
    regex=r'^\+?[\d\s\-().]{5,50}$',
    message="Phone number may contain digits, spaces, dashes, dots, brackets and a leading '+'"
)


class CustomerManager(models.Manager):
    def normalize_email(self, email):
        """Lower-cased email or '' when empty"""
        return (email or '').strip().lower()

    def search(self, query):
        query = (query or '').strip()
        qs = self.get_queryset()
        if not query:
            return qs
        return qs.filter(
            models.Q(first_name__icontains=query) |
            models.Q(last_name__icontains=query) |
            models.Q(email__icontains=query) |
            models.Q(phone__icontains=query)
        )


class Customer(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True, validators=[phone_regex])
    notes = models.TextField(max_length=2000, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomerManager()

    class Meta:
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class Driver(models.Model):
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True, validators=[phone_regex])
    license_number = models.CharField(max_length=100, unique=True)
    license_expiry = models.DateField(null=True, blank=True)
    hire_date = models.DateField(null=True, blank=True)
    dob = models.DateField(null=True, blank=True, verbose_name='Date of birth')
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    zipcode = models.CharField(max_length=20, blank=True)
    experience_years = models.PositiveIntegerField(null=True, blank=True)
    salary_cents = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(max_length=2000, blank=True)

    # URLs returned by the document upload endpoint
    id_proof_url = models.CharField(max_length=255, blank=True)
    work_permit_url = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self):
        return self.status == 'active'


class Vehicle(models.Model):
    STATUS_CHOICES = [
        ('available', 'Available'),
        ('assigned', 'Assigned'),
        ('maintenance', 'Maintenance'),
    ]

    name = models.CharField(max_length=100)
    make = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=100, blank=True)
    plate = models.CharField(max_length=20, unique=True)
    vin = models.CharField(max_length=32, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='available')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.plate})"

    def save(self, *args, **kwargs):
        # Plates are compared case-insensitively and without spaces
        self.plate = re.sub(r'\s+', '', self.plate or '').upper()
        super().save(*args, **kwargs)
