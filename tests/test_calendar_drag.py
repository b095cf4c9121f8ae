"""Drag-and-drop rescheduling in the admin calendar"""
import pytest
from datetime import date

from booking.calendar_view import (
    AdminCalendar,
    DragPayload,
    begin_drag,
    cancel_drag,
    drop,
    initial_state,
)


BOOKINGS = [
    {'id': 'b1', 'date': '2024-03-01', 'pickup': 'Airport', 'dropoff': 'Hotel', 'customer': 'Alice', 'status': 'pending'},
    {'id': 'b2', 'date': '2024-03-01', 'pickup': 'Station', 'dropoff': 'Office', 'vehicle_id': '3'},
    {'id': 'b3', 'date': '2024-03-20', 'pickup': 'Pier', 'dropoff': 'Old Town', 'color': 'rose'},
]


@pytest.fixture
def changes():
    return []


@pytest.fixture
def calendar(changes):
    return AdminCalendar(initial_date='2024-03-01', bookings=BOOKINGS, on_change=changes.append)


def test_drop_moves_only_the_dragged_booking(calendar, changes):
    before = {b.id: b for b in calendar.bookings}

    calendar.begin_drag('b1')
    assert calendar.is_dragging
    assert calendar.drop('2024-03-05') is True

    after = {b.id: b for b in calendar.bookings}
    assert after['b1'].date == '2024-03-05'
    assert after['b1'].pickup == before['b1'].pickup
    assert after['b1'].customer == before['b1'].customer
    assert after['b1'].status == before['b1'].status
    assert after['b2'] == before['b2']
    assert after['b3'] == before['b3']
    assert not calendar.is_dragging

    assert len(changes) == 1
    assert changes[0] == calendar.bookings


def test_drop_replaces_the_list(calendar):
    state_before = calendar.state
    calendar.drop(date(2024, 3, 5), DragPayload('b2'))
    assert calendar.state is not state_before
    assert state_before.bookings[1].date == '2024-03-01'


def test_drop_accepts_a_raw_booking_id(calendar, changes):
    assert calendar.drop('2024-03-05', 'b1') is True
    assert {b.id: b.date for b in calendar.bookings}['b1'] == '2024-03-05'
    assert len(changes) == 1

    assert calendar.drop('2024-03-06', 'zzz') is False
    assert len(changes) == 1


def test_unknown_id_drop_is_a_no_op(calendar, changes):
    before = calendar.bookings

    calendar.begin_drag('missing')
    assert calendar.drop('2024-03-05') is False

    assert calendar.bookings == before
    assert changes == []
    assert not calendar.is_dragging


def test_drop_without_drag_does_nothing(calendar, changes):
    assert calendar.drop('2024-03-05') is False
    assert changes == []


def test_cancel_drag_clears_payload(calendar, changes):
    calendar.begin_drag('b1').cancel_drag()
    assert not calendar.is_dragging
    assert calendar.drop('2024-03-05') is False
    assert changes == []


def test_payload_must_be_a_booking_id():
    state = initial_state('2024-03-01', bookings=BOOKINGS)
    for bad in ('', '   ', None, True, 1.5, {'id': 'b1'}):
        with pytest.raises(ValueError):
            begin_drag(state, bad)
    assert begin_drag(state, 12).drag == DragPayload('12')


def test_pure_transitions_do_not_touch_the_input_state():
    state = initial_state('2024-03-01', bookings=BOOKINGS)
    dragging = begin_drag(state, 'b3')
    new_state, changed = drop(dragging, '2024-03-02')

    assert changed
    assert state.drag is None
    assert dragging.bookings[2].date == '2024-03-20'
    assert new_state.bookings[2].date == '2024-03-02'
    assert cancel_drag(dragging).drag is None


def test_navigating_away_keeps_bookings(calendar, changes):
    before = calendar.bookings

    calendar.next()
    assert (calendar.cursor.year, calendar.cursor.month) == (2024, 4)
    april_days = [cell for cell in calendar.cells() if cell.in_current_month]
    assert all('b1' not in [b.id for b in cell.bookings] for cell in april_days)
    assert calendar.bookings == before
    assert changes == []


def test_booking_can_be_dropped_onto_another_month_cell(calendar):
    # Grid edge cell: 2024-04-02 is shown in the March grid
    assert calendar.drop('2024-04-02', DragPayload('b3'))
    assert calendar.bookings_on('2024-04-02')[0].id == 'b3'
