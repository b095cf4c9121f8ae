from django.core.management.base import BaseCommand
from django.utils import timezone
from datetime import timedelta, time

from booking.models import Booking
from fleet.models import Customer, Driver, Vehicle


class Command(BaseCommand):
    help = 'Creates demo customers, drivers, vehicles and bookings'

    def add_arguments(self, parser):
        parser.add_argument(
            '--no-bookings',
            action='store_true',
            help='Only create customers, drivers and vehicles',
        )

    def handle(self, *args, **options):
        customers = self.seed_customers()
        drivers = self.seed_drivers()
        vehicles = self.seed_vehicles()

        if not options['no_bookings']:
            self.seed_bookings(customers, drivers, vehicles)

        self.stdout.write(self.style.SUCCESS('Demo data is ready'))

    def report(self, label, obj, created):
        if created:
            self.stdout.write(self.style.SUCCESS(f'Created {label}: {obj}'))
        else:
            self.stdout.write(self.style.WARNING(f'{label.capitalize()} already exists: {obj}'))

    def seed_customers(self):
        customers_data = [
            {'first_name': 'Alice', 'last_name': 'Johnson', 'email': 'alice@example.com', 'phone': '+1 555 0101'},
            {'first_name': 'Bruno', 'last_name': 'Martins', 'email': 'bruno@example.com', 'phone': '+1 555 0102'},
            {'first_name': 'Chen', 'last_name': 'Wei', 'email': 'chen@example.com', 'phone': '+1 555 0103'},
        ]

        customers = []
        for data in customers_data:
            customer, created = Customer.objects.get_or_create(
                email=data['email'],
                defaults=data,
            )
            self.report('customer', customer, created)
            customers.append(customer)
        return customers

    def seed_drivers(self):
        drivers_data = [
            {'first_name': 'Diego', 'last_name': 'Ramirez', 'license_number': 'DL-100200', 'experience_years': 8},
            {'first_name': 'Emma', 'last_name': 'Schultz', 'license_number': 'DL-100201', 'experience_years': 3},
        ]

        drivers = []
        for data in drivers_data:
            driver, created = Driver.objects.get_or_create(
                license_number=data['license_number'],
                defaults=data,
            )
            self.report('driver', driver, created)
            drivers.append(driver)
        return drivers

    def seed_vehicles(self):
        vehicles_data = [
            {'name': 'Executive sedan', 'make': 'Mercedes', 'model': 'E-Class', 'plate': 'FLT001', 'capacity': 3},
            {'name': 'Sprinter van', 'make': 'Mercedes', 'model': 'Sprinter', 'plate': 'FLT002', 'capacity': 12},
            {'name': 'City SUV', 'make': 'Toyota', 'model': 'RAV4', 'plate': 'FLT003', 'capacity': 4},
        ]

        vehicles = []
        for data in vehicles_data:
            vehicle, created = Vehicle.objects.get_or_create(
                plate=data['plate'],
                defaults=data,
            )
            self.report('vehicle', vehicle, created)
            vehicles.append(vehicle)
        return vehicles

    def seed_bookings(self, customers, drivers, vehicles):
        today = timezone.localdate()
        bookings_data = [
            (0, 0, 0, 0, 'Airport T1', 'Grand Hotel', time(9, 0), time(10, 30), 'confirmed', 'sky'),
            (1, 1, 1, 1, 'Central Station', 'Convention Center', time(13, 0), time(14, 0), 'pending', 'amber'),
            (3, 2, None, 2, 'Harbor Pier', 'Old Town', None, None, 'pending', 'default'),
            (7, 0, 1, 1, 'Grand Hotel', 'Airport T1', time(6, 30), time(8, 0), 'confirmed', 'emerald'),
        ]

        created_count = 0
        for offset, customer_idx, driver_idx, vehicle_idx, pickup, dropoff, start, end, status, color in bookings_data:
            customer = customers[customer_idx]
            booking, created = Booking.objects.get_or_create(
                customer=customer,
                date=today + timedelta(days=offset),
                pickup_point=pickup,
                defaults={
                    'dropoff_point': dropoff,
                    'driver': drivers[driver_idx] if driver_idx is not None else None,
                    'vehicle': vehicles[vehicle_idx],
                    'start_time': start,
                    'end_time': end,
                    'status': status,
                    'color': color,
                    'contact_name': customer.full_name,
                    'contact_email': customer.email,
                    'source': 'phone',
                    'created_by_name': 'seed_fleet',
                },
            )
            self.report('booking', booking, created)
            created_count += int(created)

        self.stdout.write(self.style.SUCCESS(f'Created {created_count} new bookings'))
