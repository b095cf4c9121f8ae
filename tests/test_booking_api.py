import json
import pytest
from datetime import date, time

from booking.models import Booking, BookingHistory


pytestmark = pytest.mark.django_db


def post_json(client, url, payload, **headers):
    return client.post(url, data=json.dumps(payload), content_type='application/json', **headers)


class TestAccess:
    def test_missing_token_is_rejected(self, client, booking):
        response = client.get('/api/bookings/')
        assert response.status_code == 401
        assert response.json()['success'] is False

    def test_staff_cannot_decide(self, client, booking, staff_headers):
        response = post_json(client, f'/api/bookings/{booking.id}/decision/', {'action': 'confirm'}, **staff_headers)
        assert response.status_code == 401
        assert response.json()['error'] == 'Admin only'

    def test_empty_admin_token_leaves_api_open(self, client, booking, settings):
        settings.ADMIN_TOKEN = ''
        assert client.get('/api/bookings/').status_code == 200

    def test_logged_in_staff_user_is_admin(self, client, booking, staff_user):
        client.force_login(staff_user)
        assert client.get('/api/bookings/').status_code == 200


class TestBookings:
    def test_list_filters_by_status(self, client, booking, customer, staff_headers):
        Booking.objects.create(customer=customer, date=date(2024, 3, 2), status='cancelled')

        response = client.get('/api/bookings/', {'status': 'confirmed'}, **staff_headers)
        items = response.json()['items']
        assert [item['id'] for item in items] == [booking.id]
        assert items[0]['customer_name'] == 'Alice Johnson'
        assert items[0]['start_time'] == '09:00'

    def test_list_rejects_bad_dates(self, client, staff_headers):
        response = client.get('/api/bookings/', {'start': '03/01/2024'}, **staff_headers)
        assert response.status_code == 400

    def test_create_logs_history_and_notifies(self, client, customer, staff_headers, mailoutbox):
        response = post_json(client, '/api/bookings/create/', {
            'customer': customer.id,
            'date': '2024-03-04',
            'start_time': '08:00',
            'end_time': '09:00',
            'pickup_point': 'Airport',
            'dropoff_point': 'Hotel',
            'contact_email': 'alice@example.com',
        }, **staff_headers)

        assert response.status_code == 200
        booking = Booking.objects.get(id=response.json()['id'])
        assert booking.status == 'pending'
        assert booking.source == 'web'
        assert booking.color == 'default'
        assert booking.history.get().action == 'create'
        assert booking.history.get().actor_role == 'staff'
        assert {tuple(m.to) for m in mailoutbox} == {('ops@example.com',), ('alice@example.com',)}

    def test_create_requires_complete_time_window(self, client, customer, staff_headers):
        response = post_json(client, '/api/bookings/create/', {
            'customer': customer.id, 'date': '2024-03-04', 'start_time': '08:00',
        }, **staff_headers)
        assert response.status_code == 400
        assert Booking.objects.count() == 0

    def test_create_rejects_vehicle_conflict(self, client, booking, customer, vehicle, staff_headers):
        response = post_json(client, '/api/bookings/create/', {
            'customer': customer.id,
            'vehicle': vehicle.id,
            'date': '2024-03-01',
            'start_time': '10:00',
            'end_time': '11:00',
        }, **staff_headers)
        assert response.status_code == 400
        assert 'vehicle' in response.json()['errors']

    def test_invalid_json(self, client, staff_headers):
        response = client.post('/api/bookings/create/', data='{nope', content_type='application/json', **staff_headers)
        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid JSON'

    def test_partial_update(self, client, booking, admin_headers, mailoutbox):
        response = post_json(client, f'/api/bookings/{booking.id}/update/', {'dropoff_point': 'Museum'}, **admin_headers)

        assert response.status_code == 200
        booking.refresh_from_db()
        assert booking.dropoff_point == 'Museum'
        assert booking.pickup_point == 'Airport T1'
        entry = booking.history.get(action='update')
        assert entry.changes == {'dropoff_point': ['Grand Hotel', 'Museum']}
        assert len(mailoutbox) == 1

    def test_confirm_with_driver(self, client, customer, driver, admin_headers, mailoutbox):
        pending = Booking.objects.create(customer=customer, date=date(2024, 3, 4), contact_email='alice@example.com')

        response = post_json(client, f'/api/bookings/{pending.id}/decision/', {
            'action': 'confirm', 'driver': driver.id,
        }, **admin_headers)

        assert response.status_code == 200
        pending.refresh_from_db()
        assert pending.status == 'confirmed'
        assert pending.driver == driver
        assert pending.confirmed_at is not None
        assert pending.customer_verify_token
        recipients = [m.to[0] for m in mailoutbox]
        assert recipients == ['alice@example.com', 'diego@example.com']
        assert pending.customer_verify_token in mailoutbox[0].body

    def test_decline_cancels(self, client, booking, admin_headers, mailoutbox):
        response = post_json(client, f'/api/bookings/{booking.id}/decision/', {
            'action': 'decline', 'reason': 'No vehicles left',
        }, **admin_headers)

        assert response.status_code == 200
        booking.refresh_from_db()
        assert booking.status == 'cancelled'
        assert 'No vehicles left' in mailoutbox[0].body

    def test_unknown_decision(self, client, booking, admin_headers):
        response = post_json(client, f'/api/bookings/{booking.id}/decision/', {'action': 'maybe'}, **admin_headers)
        assert response.status_code == 400

    def test_customer_verify(self, client, booking):
        booking.status = 'pending'
        assert booking.confirm()

        assert client.get(f'/api/bookings/{booking.id}/customer-verify/', {'token': 'wrong'}).status_code == 403

        response = client.get(f'/api/bookings/{booking.id}/customer-verify/', {'token': booking.customer_verify_token})
        assert response.status_code == 200
        booking.refresh_from_db()
        assert booking.customer_verified_at is not None

    def test_delete(self, client, booking, admin_headers):
        response = client.post(f'/api/bookings/{booking.id}/delete/', **admin_headers)
        assert response.status_code == 200
        assert not Booking.objects.exists()

    def test_missing_booking_is_404(self, client, admin_headers):
        assert client.get('/api/bookings/999/', **admin_headers).status_code == 404

    def test_availability(self, client, booking, vehicle, driver, staff_headers):
        response = client.get('/api/availability/', {
            'date': '2024-03-01', 'start_time': '10:00', 'end_time': '11:00',
            'vehicle_id': vehicle.id, 'driver_id': driver.id,
        }, **staff_headers)

        data = response.json()
        assert data['vehicle_available'] is False
        assert data['driver_available'] is True
        assert data['conflicts'][0]['booking_id'] == booking.id

        later = client.get('/api/availability/', {
            'date': '2024-03-01', 'start_time': '10:30', 'end_time': '11:00', 'vehicle_id': vehicle.id,
        }, **staff_headers)
        assert later.json()['vehicle_available'] is True


class TestCalendarApi:
    def test_feed_returns_cells_with_cards(self, client, booking, staff_headers):
        response = client.get('/api/calendar/', {'date': '2024-03-15', 'view': 'month'}, **staff_headers)

        calendar = response.json()['calendar']
        assert calendar['title'] == 'March 2024'
        assert len(calendar['cells']) == 42
        cell = next(c for c in calendar['cells'] if c['date'] == '2024-03-01')
        assert cell['bookings'][0]['id'] == str(booking.id)
        assert cell['bookings'][0]['route'] == 'Airport T1 → Grand Hotel'
        assert cell['bookings'][0]['color'] == 'sky'

    def test_feed_rejects_unknown_view(self, client, staff_headers):
        response = client.get('/api/calendar/', {'view': 'year'}, **staff_headers)
        assert response.status_code == 400

    def test_drop_persists_new_date(self, client, booking, admin_headers, mailoutbox):
        response = post_json(client, '/api/calendar/drop/', {
            'booking_id': str(booking.id), 'date': '2024-03-05', 'cursor': '2024-03-01', 'view': 'month',
        }, **admin_headers)

        data = response.json()
        assert response.status_code == 200
        assert data['changed'] is True
        assert data['rescheduled'] == [booking.id]

        booking.refresh_from_db()
        assert booking.date == date(2024, 3, 5)
        assert booking.start_time == time(9, 0)
        entry = BookingHistory.objects.get(booking=booking, action='reschedule')
        assert entry.changes == {'date': ['2024-03-01', '2024-03-05']}
        assert entry.actor_role == 'admin'
        assert mailoutbox[0].to == ['alice@example.com']

    def test_drop_of_unknown_booking_changes_nothing(self, client, booking, admin_headers, mailoutbox):
        response = post_json(client, '/api/calendar/drop/', {
            'booking_id': '987654', 'date': '2024-03-05', 'cursor': '2024-03-01',
        }, **admin_headers)

        assert response.status_code == 200
        assert response.json()['changed'] is False
        booking.refresh_from_db()
        assert booking.date == date(2024, 3, 1)
        assert not BookingHistory.objects.filter(action='reschedule').exists()
        assert mailoutbox == []

    def test_drop_on_same_day_writes_nothing(self, client, booking, admin_headers):
        response = post_json(client, '/api/calendar/drop/', {
            'booking_id': str(booking.id), 'date': '2024-03-01',
        }, **admin_headers)

        assert response.json()['rescheduled'] == []
        assert not BookingHistory.objects.filter(action='reschedule').exists()

    def test_drop_requires_admin(self, client, booking, staff_headers):
        response = post_json(client, '/api/calendar/drop/', {
            'booking_id': str(booking.id), 'date': '2024-03-05',
        }, **staff_headers)
        assert response.status_code == 401

    def test_drop_requires_target_date(self, client, booking, admin_headers):
        response = post_json(client, '/api/calendar/drop/', {'booking_id': str(booking.id)}, **admin_headers)
        assert response.status_code == 400
