"""
Helpers shared by the booking views and services
"""
from django.http import JsonResponse
from django.utils.html import format_html
import json


def create_error_message(title="Error", message="Something went wrong"):
    """
    Build the HTML snippet shown in a flash message on failure

    Args:
        title: Message title
        message: Message body

    Returns:
        Formatted HTML string
    """
    return format_html('''
        <div class="flash flash-error">
            <div class="flash-title">❌ {}</div>
            <div class="flash-body">{}</div>
        </div>
    ''', title, message)


def create_success_message(title="Done", message="Saved successfully"):
    """
    Build the HTML snippet shown in a flash message on success

    Args:
        title: Message title
        message: Message body

    Returns:
        Formatted HTML string
    """
    return format_html('''
        <div class="flash flash-success">
            <div class="flash-title">✅ {}</div>
            <div class="flash-body">{}</div>
        </div>
    ''', title, message)


def form_errors(form):
    """
    Flatten form errors for a JSON response

    Returns:
        (errors, first_error) - field -> list of messages, and the first message
    """
    errors = {}
    for field_name, error_list in form.errors.items():
        errors[field_name] = [str(error) for error in error_list]

    first_error = ''
    if errors:
        first_field = list(errors.keys())[0]
        if errors[first_field]:
            first_error = errors[first_field][0]
    return errors, first_error


def form_error_response(form, status=400):
    errors, first_error = form_errors(form)
    return JsonResponse({
        'success': False,
        'errors': errors,
        'error': first_error or 'Invalid input',
    }, status=status)


def error_response(message, status=400):
    return JsonResponse({'success': False, 'error': message}, status=status)


def parse_json_body(request):
    """
    Decode a JSON request body, falling back to form data

    Raises:
        ValueError: body is not valid JSON or not an object
    """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            raise ValueError('Invalid JSON')
        if not isinstance(data, dict):
            raise ValueError('JSON body must be an object')
        return data
    return request.POST.dict()


def times_overlap(start_a, end_a, start_b, end_b):
    """True when the half-open windows [start_a, end_a) and [start_b, end_b) intersect"""
    return start_a < end_b and start_b < end_a


def check_time_conflicts(booking_date, start_time, end_time, driver=None, vehicle=None, exclude_booking_id=None):
    """
    Find active bookings that hold the same driver or vehicle at the same time

    Bookings without a time window occupy the whole day.

    Args:
        booking_date: Date of the booking
        start_time: Window start (None for all day)
        end_time: Window end (None for all day)
        driver: Driver to check, optional
        vehicle: Vehicle to check, optional
        exclude_booking_id: Booking to ignore (when editing)

    Returns:
        list of (resource, booking) tuples, resource is 'driver' or 'vehicle'
    """
    from .models import Booking
    from .constants import ACTIVE_STATUSES

    conflicts = []
    for resource, value in (('driver', driver), ('vehicle', vehicle)):
        if value is None:
            continue
        existing = Booking.objects.filter(
            date=booking_date,
            status__in=ACTIVE_STATUSES,
            **{resource: value}
        )
        if exclude_booking_id:
            existing = existing.exclude(id=exclude_booking_id)

        for booking in existing.order_by('start_time'):
            if None in (start_time, end_time, booking.start_time, booking.end_time):
                conflicts.append((resource, booking))
            elif times_overlap(start_time, end_time, booking.start_time, booking.end_time):
                conflicts.append((resource, booking))
    return conflicts


def format_cents(cents):
    if cents is None:
        return None
    return f"{cents / 100:.2f}"
