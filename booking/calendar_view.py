"""
Admin calendar: month/week/day grids and drag-and-drop rescheduling

State lives in an immutable CalendarState value. Every transition is a plain
function returning a new state, so the logic is testable without a browser.
AdminCalendar wraps those functions for hosts that want a stateful object
with an on_change callback.
"""
import calendar
import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from .constants import (
    BOOKING_STATUSES,
    COLOR_CATEGORIES,
    COLOR_DEFAULT,
    DATE_KEY_FORMAT,
    DAYS_IN_WEEK,
    DEFAULT_BOOKING_LABEL,
    DEFAULT_DISPLAY_STATUS,
    DEFAULT_VIEW,
    VIEW_DAY,
    VIEW_MODES,
    VIEW_MONTH,
    VIEW_WEEK,
    WEEK_STARTS_ON,
)

logger = logging.getLogger(__name__)

DATE_KEY_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


# =============================================================================
# DATE KEYS
# =============================================================================

def date_key(value):
    """
    Normalized key of a calendar day, e.g. '2024-03-05'

    Built from the year/month/day fields of the value as given. Datetimes are
    never converted to another timezone first, so a booking cannot slip to
    the neighbouring day.

    Args:
        value: date, datetime or an existing 'YYYY-MM-DD' string

    Returns:
        'YYYY-MM-DD' string
    """
    if isinstance(value, str):
        return date_key(parse_date_key(value))
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    raise ValueError(f"Cannot build a date key from {value!r}")


def parse_date_key(value):
    """Parse a 'YYYY-MM-DD' string into a date, raising ValueError if malformed"""
    if not isinstance(value, str) or not DATE_KEY_RE.match(value.strip()):
        raise ValueError(f"Invalid date key: {value!r} (expected YYYY-MM-DD)")
    return datetime.strptime(value.strip(), DATE_KEY_FORMAT).date()


def to_date(value):
    """Calendar date of a date, datetime or date key"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date_key(value)


def validate_view(view):
    if view not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {view!r} (expected one of {', '.join(VIEW_MODES)})")
    return view


# =============================================================================
# GRID BUILDER
# =============================================================================

def start_of_week(day):
    """Sunday on or before the given day"""
    offset = (day.weekday() - WEEK_STARTS_ON) % DAYS_IN_WEEK
    return day - timedelta(days=offset)


def end_of_week(day):
    """Saturday on or after the given day"""
    return start_of_week(day) + timedelta(days=DAYS_IN_WEEK - 1)


def start_of_month(day):
    return day.replace(day=1)


def end_of_month(day):
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_months(day, delta):
    """
    Shift a date by whole calendar months

    The day of month is clamped to the length of the target month, so
    January 31 plus one month is February 28/29.
    """
    month_index = day.year * 12 + (day.month - 1) + delta
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def build_month_matrix(day):
    """
    Weeks shown for the month containing `day`

    Returns:
        list of 7-day lists running from the Sunday before the 1st to the
        Saturday after the last day of the month (4 to 6 rows)
    """
    current = start_of_week(start_of_month(day))
    last = end_of_week(end_of_month(day))
    weeks = []
    while current <= last:
        week = []
        for _ in range(DAYS_IN_WEEK):
            week.append(current)
            current += timedelta(days=1)
        weeks.append(week)
    return weeks


def build_week(day):
    """The seven days of the Sunday-start week containing `day`"""
    start = start_of_week(day)
    return [start + timedelta(days=i) for i in range(DAYS_IN_WEEK)]


def visible_days(cursor, view):
    """Flat list of the days rendered for a cursor and view mode"""
    validate_view(view)
    if view == VIEW_MONTH:
        return [day for week in build_month_matrix(cursor) for day in week]
    if view == VIEW_WEEK:
        return build_week(cursor)
    return [cursor]


def shift_cursor(cursor, view, delta):
    """Move the cursor `delta` periods: months, weeks or days depending on the view"""
    validate_view(view)
    if view == VIEW_MONTH:
        return add_months(cursor, delta)
    if view == VIEW_WEEK:
        return cursor + timedelta(days=DAYS_IN_WEEK * delta)
    return cursor + timedelta(days=delta)


def is_today(day, today=None):
    return date_key(day) == date_key(today or date.today())


def ordinal(number):
    if 10 <= number % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(number % 10, 'th')
    return f"{number}{suffix}"


def week_of_year(day):
    """
    Sunday-start week number; week 1 is the week containing January 1

    Returns:
        (week_year, week_number)
    """
    week_start = start_of_week(day)
    week_year = (week_start + timedelta(days=DAYS_IN_WEEK - 1)).year
    first_week_start = start_of_week(date(week_year, 1, 1))
    return week_year, (week_start - first_week_start).days // DAYS_IN_WEEK + 1


def long_date(day):
    """'Friday, March 1st, 2024'"""
    return f"{day.strftime('%A')}, {day.strftime('%B')} {ordinal(day.day)}, {day.year}"


def period_title(cursor, view):
    """Header text for the current period"""
    validate_view(view)
    if view == VIEW_MONTH:
        return f"{cursor.strftime('%B')} {cursor.year}"
    if view == VIEW_WEEK:
        _, number = week_of_year(cursor)
        return f"{ordinal(number)} week {cursor.year}"
    return long_date(cursor)


# =============================================================================
# BOOKINGS
# =============================================================================

@dataclass(frozen=True)
class CalendarBooking:
    """A booking card as the calendar sees it; `date` is always a date key"""
    id: str
    date: str
    pickup: str = ''
    dropoff: str = ''
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    customer: Optional[str] = None
    status: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self):
        booking_id = str(self.id).strip() if self.id is not None else ''
        if not booking_id:
            raise ValueError("Booking id is required")
        if self.status is not None and self.status not in BOOKING_STATUSES:
            raise ValueError(f"Unknown booking status: {self.status!r}")
        object.__setattr__(self, 'id', booking_id)
        object.__setattr__(self, 'date', date_key(self.date))

    @property
    def display_status(self):
        return self.status or DEFAULT_DISPLAY_STATUS

    @property
    def display_customer(self):
        return self.customer or DEFAULT_BOOKING_LABEL

    @property
    def color_category(self):
        return self.color if self.color in COLOR_CATEGORIES else COLOR_DEFAULT

    @property
    def route(self):
        return f"{self.pickup} → {self.dropoff}"

    def moved_to(self, day):
        return replace(self, date=date_key(day))

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date,
            'pickup': self.pickup,
            'dropoff': self.dropoff,
            'vehicle_id': self.vehicle_id,
            'driver_id': self.driver_id,
            'customer': self.customer,
            'status': self.status,
            'color': self.color,
        }

    def card(self):
        """Fields a presentation layer needs to draw the card"""
        return {
            'id': self.id,
            'date': self.date,
            'customer': self.display_customer,
            'pickup': self.pickup,
            'dropoff': self.dropoff,
            'route': self.route,
            'status': self.display_status,
            'color': self.color_category,
            'vehicle_id': self.vehicle_id,
            'driver_id': self.driver_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            date=data.get('date'),
            pickup=data.get('pickup') or '',
            dropoff=data.get('dropoff') or '',
            vehicle_id=data.get('vehicle_id'),
            driver_id=data.get('driver_id'),
            customer=data.get('customer'),
            status=data.get('status') or None,
            color=data.get('color') or None,
        )


def bookings_for_day(bookings, day):
    """Bookings whose date key equals the day's date key, in list order"""
    key = date_key(day)
    return [booking for booking in bookings if booking.date == key]


@dataclass(frozen=True)
class DragPayload:
    """Id carried by a drag gesture, resolved against the list only on drop"""
    booking_id: str

    def __post_init__(self):
        if not isinstance(self.booking_id, (str, int)) or isinstance(self.booking_id, bool):
            raise ValueError("Drag payload must be a booking id")
        booking_id = str(self.booking_id).strip()
        if not booking_id:
            raise ValueError("Drag payload must be a non-empty booking id")
        object.__setattr__(self, 'booking_id', booking_id)


# =============================================================================
# STATE AND TRANSITIONS
# =============================================================================

@dataclass(frozen=True)
class CalendarState:
    cursor: date
    view: str = DEFAULT_VIEW
    bookings: Tuple[CalendarBooking, ...] = field(default_factory=tuple)
    drag: Optional[DragPayload] = None

    @property
    def is_dragging(self):
        return self.drag is not None


def initial_state(initial_date=None, initial_view=DEFAULT_VIEW, bookings=None):
    """
    Build the starting state

    Args:
        initial_date: cursor date (date, datetime or date key), today if omitted
        initial_view: 'month', 'week' or 'day'
        bookings: iterable of CalendarBooking or dicts

    Raises:
        ValueError: unknown view, malformed date or booking
    """
    cursor = to_date(initial_date) if initial_date is not None else date.today()
    items = tuple(
        booking if isinstance(booking, CalendarBooking) else CalendarBooking.from_dict(booking)
        for booking in (bookings or ())
    )
    return CalendarState(cursor=cursor, view=validate_view(initial_view), bookings=items)


def navigate(state, delta):
    return replace(state, cursor=shift_cursor(state.cursor, state.view, delta))


def go_previous(state):
    return navigate(state, -1)


def go_next(state):
    return navigate(state, 1)


def go_to(state, day):
    return replace(state, cursor=to_date(day))


def switch_view(state, view):
    """Change the view mode; cursor and bookings stay as they are"""
    return replace(state, view=validate_view(view))


def begin_drag(state, booking_id):
    payload = booking_id if isinstance(booking_id, DragPayload) else DragPayload(booking_id)
    return replace(state, drag=payload)


def cancel_drag(state):
    return replace(state, drag=None)


def drop(state, target_day, payload=None):
    """
    Finish a drag gesture on a day cell

    Args:
        state: current CalendarState
        target_day: day the card was dropped on
        payload: DragPayload or raw booking id to use instead of the one
            stored in the state

    Returns:
        (new_state, changed). When the id matches no booking the list is left
        untouched and changed is False.
    """
    if payload is not None and not isinstance(payload, DragPayload):
        payload = DragPayload(payload)
    payload = payload or state.drag
    idle = replace(state, drag=None)
    if payload is None:
        return idle, False

    if not any(booking.id == payload.booking_id for booking in state.bookings):
        logger.info(f"Ignoring drop of unknown booking {payload.booking_id}")
        return idle, False

    target_key = date_key(target_day)
    bookings = tuple(
        booking.moved_to(target_key) if booking.id == payload.booking_id else booking
        for booking in state.bookings
    )
    return replace(idle, bookings=bookings), True


# =============================================================================
# RENDERING
# =============================================================================

@dataclass(frozen=True)
class DayCell:
    day: date
    key: str
    label: str
    is_today: bool
    in_current_month: bool
    bookings: Tuple[CalendarBooking, ...]

    def to_dict(self):
        return {
            'date': self.key,
            'label': self.label,
            'is_today': self.is_today,
            'in_current_month': self.in_current_month,
            'bookings': [booking.card() for booking in self.bookings],
        }


def cell_label(day, view):
    if view == VIEW_MONTH:
        return str(day.day)
    if view == VIEW_WEEK:
        return f"{day.strftime('%A')} {day.day}"
    return long_date(day)


def build_cells(state, today=None):
    """Day cells for the state's view, each with its bookings"""
    today = today or date.today()
    cells = []
    for day in visible_days(state.cursor, state.view):
        in_month = (day.year, day.month) == (state.cursor.year, state.cursor.month)
        cells.append(DayCell(
            day=day,
            key=date_key(day),
            label=cell_label(day, state.view),
            is_today=is_today(day, today),
            in_current_month=in_month if state.view == VIEW_MONTH else True,
            bookings=tuple(bookings_for_day(state.bookings, day)),
        ))
    return cells


def chunk_weeks(cells):
    return [cells[i:i + DAYS_IN_WEEK] for i in range(0, len(cells), DAYS_IN_WEEK)]


def visible_range(state):
    days = visible_days(state.cursor, state.view)
    return days[0], days[-1]


# =============================================================================
# STATEFUL FACADE
# =============================================================================

class AdminCalendar:
    """
    Calendar component owned by one admin session

    Holds a CalendarState and replaces it on every transition. After a
    successful drop `on_change` is called once with the full new list.
    """

    def __init__(self, initial_date=None, initial_view=DEFAULT_VIEW, bookings=None, on_change=None):
        self._state = initial_state(initial_date, initial_view, bookings)
        self.on_change = on_change

    @property
    def state(self):
        return self._state

    @property
    def cursor(self):
        return self._state.cursor

    @property
    def view(self):
        return self._state.view

    @property
    def bookings(self):
        return list(self._state.bookings)

    @property
    def is_dragging(self):
        return self._state.is_dragging

    @property
    def title(self):
        return period_title(self._state.cursor, self._state.view)

    def previous(self):
        self._state = go_previous(self._state)
        return self

    def next(self):
        self._state = go_next(self._state)
        return self

    def go_to(self, day):
        self._state = go_to(self._state, day)
        return self

    def set_view(self, view):
        self._state = switch_view(self._state, view)
        return self

    def begin_drag(self, booking_id):
        self._state = begin_drag(self._state, booking_id)
        return self

    def cancel_drag(self):
        self._state = cancel_drag(self._state)
        return self

    def drop(self, target_day, payload=None):
        """Apply a drop; returns True when a booking moved"""
        self._state, changed = drop(self._state, target_day, payload)
        if changed and self.on_change is not None:
            self.on_change(self.bookings)
        return changed

    def bookings_on(self, day):
        return bookings_for_day(self._state.bookings, day)

    def cells(self, today=None):
        return build_cells(self._state, today)

    def weeks(self, today=None):
        return chunk_weeks(self.cells(today))

    def visible_range(self):
        return visible_range(self._state)

    def to_dict(self, today=None):
        start, end = self.visible_range()
        return {
            'cursor': date_key(self.cursor),
            'view': self.view,
            'title': self.title,
            'start': date_key(start),
            'end': date_key(end),
            'previous': date_key(shift_cursor(self.cursor, self.view, -1)),
            'next': date_key(shift_cursor(self.cursor, self.view, 1)),
            'cells': [cell.to_dict() for cell in self.cells(today)],
        }
