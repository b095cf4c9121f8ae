"""
Constants for the booking app
"""

# Calendar view modes
VIEW_MONTH = 'month'
VIEW_WEEK = 'week'
VIEW_DAY = 'day'
VIEW_MODES = (VIEW_MONTH, VIEW_WEEK, VIEW_DAY)
DEFAULT_VIEW = VIEW_MONTH

# Weeks start on Sunday (Python weekday(): Monday=0 ... Sunday=6)
WEEK_STARTS_ON = 6
DAYS_IN_WEEK = 7
WEEKDAY_HEADERS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']

# Date keys look like 2024-03-05
DATE_KEY_FORMAT = '%Y-%m-%d'

# Booking statuses
STATUS_PENDING = 'pending'
STATUS_CONFIRMED = 'confirmed'
STATUS_COMPLETED = 'completed'
STATUS_CANCELLED = 'cancelled'
BOOKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED)
BOOKING_STATUS_CHOICES = [
    (STATUS_PENDING, 'Pending'),
    (STATUS_CONFIRMED, 'Confirmed'),
    (STATUS_COMPLETED, 'Completed'),
    (STATUS_CANCELLED, 'Cancelled'),
]
# Shown on a calendar card when a booking carries no status
DEFAULT_DISPLAY_STATUS = STATUS_CONFIRMED
# Statuses that still occupy a driver or a vehicle
ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

# Where a booking request came from
BOOKING_SOURCE_CHOICES = [
    ('email', 'Email'),
    ('phone', 'Phone'),
    ('web', 'Web'),
]

# Calendar card color categories
COLOR_DEFAULT = 'default'
COLOR_CATEGORIES = (COLOR_DEFAULT, 'emerald', 'sky', 'amber', 'rose')
COLOR_CHOICES = [(color, color.capitalize()) for color in COLOR_CATEGORIES]

# Card title when no customer name is known
DEFAULT_BOOKING_LABEL = 'Booking'

# Listing limits
MAX_LIST_BOOKINGS = 200
