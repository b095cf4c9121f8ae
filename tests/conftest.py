import pytest
from datetime import date, time

from booking.models import Booking
from fleet.models import Customer, Driver, Vehicle

ADMIN_TOKEN = 'test-admin-token'
STAFF_TOKEN = 'test-staff-token'


@pytest.fixture(autouse=True)
def api_settings(settings, tmp_path):
    """Known tokens, no rate limiting and uploads written to a temp dir"""
    settings.ADMIN_TOKEN = ADMIN_TOKEN
    settings.STAFF_TOKEN = STAFF_TOKEN
    settings.RATELIMIT_ENABLE = False
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.ADMIN_NOTIFY_TO = 'ops@example.com'
    settings.BASE_URL = 'http://testserver'
    return settings


@pytest.fixture
def admin_headers():
    return {'HTTP_X_ADMIN_TOKEN': ADMIN_TOKEN}


@pytest.fixture
def staff_headers():
    return {'HTTP_X_STAFF_TOKEN': STAFF_TOKEN}


@pytest.fixture
def customer(db):
    return Customer.objects.create(
        first_name='Alice',
        last_name='Johnson',
        email='alice@example.com',
        phone='+1 555 0101',
    )


@pytest.fixture
def driver(db):
    return Driver.objects.create(
        first_name='Diego',
        last_name='Ramirez',
        email='diego@example.com',
        license_number='DL-1',
    )


@pytest.fixture
def vehicle(db):
    return Vehicle.objects.create(name='Sprinter van', make='Mercedes', plate='flt 002', capacity=12)


@pytest.fixture
def booking(customer, vehicle):
    return Booking.objects.create(
        customer=customer,
        vehicle=vehicle,
        date=date(2024, 3, 1),
        start_time=time(9, 0),
        end_time=time(10, 30),
        pickup_point='Airport T1',
        dropoff_point='Grand Hotel',
        contact_name='Alice Johnson',
        contact_email='alice@example.com',
        status='confirmed',
        color='sky',
    )


@pytest.fixture
def staff_user(db, django_user_model):
    return django_user_model.objects.create_user(
        username='manager', password='StrongPass123!', is_staff=True
    )
