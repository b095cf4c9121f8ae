import pytest
from datetime import date

from fleet.models import Customer


pytestmark = pytest.mark.django_db


def test_pages_require_staff(client):
    response = client.get('/manager/')
    assert response.status_code == 302
    assert '/admin/login/' in response['Location']


def test_dashboard(client, staff_user, booking):
    client.force_login(staff_user)
    response = client.get('/manager/')
    assert response.status_code == 200
    assert response.context['stats']['customers'] == 1


def test_calendar_page_renders_cells(client, staff_user, booking):
    client.force_login(staff_user)
    response = client.get('/manager/calendar/', {'date': '2024-03-01', 'view': 'week'})

    assert response.status_code == 200
    assert response.context['title'] == '9th week 2024'
    week = response.context['weeks'][0]
    assert week[0].day == date(2024, 2, 25)
    assert 'Airport T1' in response.content.decode()


def test_calendar_page_falls_back_on_bad_query(client, staff_user):
    client.force_login(staff_user)
    response = client.get('/manager/calendar/', {'view': 'decade'})
    assert response.status_code == 200
    assert response.context['view'] == 'month'


def test_customer_registration_page(client, staff_user):
    client.force_login(staff_user)
    assert client.get('/manager/customers/register/').status_code == 200

    response = client.post('/manager/customers/register/', {
        'first_name': 'Dana', 'last_name': 'Scully', 'email': 'dana@example.com',
    })
    assert response.status_code == 302
    assert Customer.objects.filter(email='dana@example.com').exists()


def test_customer_registration_shows_errors(client, staff_user):
    client.force_login(staff_user)
    response = client.post('/manager/customers/register/', {'first_name': 'Dana'})
    assert response.status_code == 200
    assert 'Last name is required' in response.content.decode()
    assert not Customer.objects.exists()
