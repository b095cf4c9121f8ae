"""
Booking JSON API: CRUD, admin decisions, availability and the calendar feed
"""
from django.shortcuts import get_object_or_404
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST, require_http_methods
from django.utils import timezone
from django.db import transaction
from datetime import datetime
import hmac
import logging

from .models import Booking
from .forms import (
    BookingForm,
    BookingUpdateForm,
    DecisionForm,
    BookingFilterForm,
    CalendarQueryForm,
    CalendarDropForm,
)
from .services import (
    BookingHistoryService,
    NotificationService,
    CalendarSyncService,
    BookingCalendarService,
)
from .calendar_view import DragPayload, date_key
from .constants import MAX_LIST_BOOKINGS
from .decorators import (
    admin_token_required,
    staff_token_required,
    api_data_ratelimit,
    api_write_ratelimit,
)
from .utils import (
    error_response,
    form_error_response,
    parse_json_body,
    check_time_conflicts,
    format_cents,
)

logger = logging.getLogger(__name__)


def serialize_booking(booking):
    return {
        'id': booking.id,
        'customer_id': booking.customer_id,
        'customer_name': booking.customer_name,
        'vehicle_id': booking.vehicle_id,
        'driver_id': booking.driver_id,
        'date': booking.date.isoformat(),
        'start_time': booking.start_time.strftime('%H:%M') if booking.start_time else None,
        'end_time': booking.end_time.strftime('%H:%M') if booking.end_time else None,
        'pickup_point': booking.pickup_point,
        'dropoff_point': booking.dropoff_point,
        'special_instructions': booking.special_instructions,
        'contact_name': booking.contact_name,
        'contact_phone': booking.contact_phone,
        'contact_email': booking.contact_email,
        'source': booking.source,
        'status': booking.status,
        'color': booking.color,
        'estimated_price_cents': booking.estimated_price_cents,
        'estimated_price': format_cents(booking.estimated_price_cents),
        'admin_note': booking.admin_note,
        'created_by_name': booking.created_by_name,
        'confirmed_at': booking.confirmed_at.isoformat() if booking.confirmed_at else None,
        'created_at': booking.created_at.isoformat(),
        'updated_at': booking.updated_at.isoformat(),
    }


# =============================================================================
# BOOKINGS
# =============================================================================

@require_GET
@staff_token_required
@api_data_ratelimit()
def api_bookings_list(request):
    """
    API: bookings, newest first
    GET /api/bookings/?status=confirmed&source=web&start=2024-03-01&end=2024-03-31
    """
    form = BookingFilterForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)

    try:
        filters = form.cleaned_data
        bookings = Booking.objects.select_related('customer')
        if filters['status']:
            bookings = bookings.filter(status=filters['status'])
        if filters['source']:
            bookings = bookings.filter(source=filters['source'])
        if filters['start']:
            bookings = bookings.filter(date__gte=filters['start'])
        if filters['end']:
            bookings = bookings.filter(date__lte=filters['end'])

        items = [serialize_booking(b) for b in bookings.order_by('-created_at')[:MAX_LIST_BOOKINGS]]
        return JsonResponse({'success': True, 'items': items})
    except Exception as e:
        logger.error(f"Error in api_bookings_list: {e}", exc_info=True)
        return JsonResponse({'success': False, 'items': [], 'error': str(e)}, status=500)


@require_GET
@staff_token_required
def api_booking_detail(request, booking_id):
    booking = get_object_or_404(Booking.objects.select_related('customer'), id=booking_id)
    return JsonResponse({'success': True, 'booking': serialize_booking(booking)})


@csrf_exempt
@require_POST
@staff_token_required
@api_write_ratelimit()
def api_booking_create(request):
    """API: create a booking; staff and admin callers"""
    try:
        data = parse_json_body(request)
    except ValueError as e:
        return error_response(str(e))

    form = BookingForm(data)
    if not form.is_valid():
        return form_error_response(form)

    try:
        with transaction.atomic():
            booking = form.save()
            BookingHistoryService.log_booking_created(booking, request.actor_role)

        logger.info(f"Booking {booking.id} created by {request.actor_role}")
        NotificationService.notify_created(booking, request.actor_role)
        CalendarSyncService.safe_upsert(booking)

        return JsonResponse({'success': True, 'id': booking.id, 'booking': serialize_booking(booking)})
    except Exception as e:
        logger.error(f"Error in api_booking_create: {e}", exc_info=True)
        return error_response(str(e), status=500)


@csrf_exempt
@require_POST
@admin_token_required
@api_write_ratelimit()
def api_booking_update(request, booking_id):
    """API: partial update of a booking; admin only"""
    booking = get_object_or_404(Booking, id=booking_id)
    try:
        data = parse_json_body(request)
    except ValueError as e:
        return error_response(str(e))

    if not data:
        return JsonResponse({'success': True, 'booking': serialize_booking(booking)})

    old_values = serialize_booking(booking)
    form = BookingUpdateForm(data, instance=booking)
    if not form.is_valid():
        return form_error_response(form)

    try:
        with transaction.atomic():
            booking = form.save()
            new_values = serialize_booking(booking)
            changes = {
                key: [old_values[key], new_values[key]]
                for key in data
                if key in new_values and old_values[key] != new_values[key]
            }
            BookingHistoryService.create_history_entry(
                booking, 'update', request.actor_role, changes, data.get('admin_note', '')
            )

        CalendarSyncService.safe_upsert(booking)
        NotificationService.notify_updated(booking)

        return JsonResponse({'success': True, 'booking': serialize_booking(booking)})
    except Exception as e:
        logger.error(f"Error in api_booking_update: {e}", exc_info=True)
        return error_response(str(e), status=500)


def _confirm(booking, actor_role, driver_id=None):
    from fleet.models import Driver

    driver = get_object_or_404(Driver, id=driver_id) if driver_id else None
    if driver is not None and not driver.is_active:
        return error_response('Driver is inactive')
    if driver is not None:
        conflicts = check_time_conflicts(
            booking.date, booking.start_time, booking.end_time,
            driver=driver, exclude_booking_id=booking.id
        )
        if conflicts:
            return error_response(f'Driver is already booked (booking #{conflicts[0][1].id})')

    with transaction.atomic():
        if not booking.confirm(driver=driver):
            return error_response('Booking is already confirmed')
        BookingHistoryService.create_history_entry(
            booking, 'confirm', actor_role, {'driver_id': booking.driver_id}
        )

    CalendarSyncService.safe_upsert(booking)
    NotificationService.notify_confirmed(booking)
    return JsonResponse({'success': True, 'booking': serialize_booking(booking)})


@csrf_exempt
@require_POST
@admin_token_required
def api_booking_confirm(request, booking_id):
    """API: confirm a booking, optionally assigning a driver"""
    booking = get_object_or_404(Booking, id=booking_id)
    try:
        data = parse_json_body(request)
    except ValueError as e:
        return error_response(str(e))

    driver_id = data.get('driver_id') or data.get('driver')
    try:
        driver_id = int(driver_id) if driver_id else None
    except (TypeError, ValueError):
        return error_response('Invalid driver id')

    try:
        return _confirm(booking, request.actor_role, driver_id)
    except Exception as e:
        logger.error(f"Error in api_booking_confirm: {e}", exc_info=True)
        return error_response(str(e), status=500)


@csrf_exempt
@require_POST
@admin_token_required
def api_booking_decision(request, booking_id):
    """API: admin decision on a pending booking: confirm or decline"""
    booking = get_object_or_404(Booking, id=booking_id)
    try:
        data = parse_json_body(request)
    except ValueError as e:
        return error_response(str(e))

    form = DecisionForm(data)
    if not form.is_valid():
        return form_error_response(form)

    try:
        action = form.cleaned_data['action']
        if action == 'confirm':
            return _confirm(booking, request.actor_role, form.cleaned_data.get('driver'))

        reason = form.cleaned_data.get('reason', '')
        with transaction.atomic():
            if not booking.cancel():
                return error_response('Booking is already cancelled')
            BookingHistoryService.create_history_entry(
                booking, 'cancel', request.actor_role, note=reason
            )

        CalendarSyncService.safe_upsert(booking)
        NotificationService.notify_declined(booking, reason)
        return JsonResponse({'success': True, 'booking': serialize_booking(booking)})
    except Exception as e:
        logger.error(f"Error in api_booking_decision: {e}", exc_info=True)
        return error_response(str(e), status=500)


@csrf_exempt
@require_http_methods(['POST', 'DELETE'])
@admin_token_required
def api_booking_delete(request, booking_id):
    booking = get_object_or_404(Booking, id=booking_id)
    booking_info = f"#{booking.id} - {booking.date}"
    booking.delete()
    logger.info(f"Booking {booking_info} deleted by {request.actor_role}")
    return JsonResponse({'success': True, 'message': f'Booking {booking_info} deleted'})


@require_GET
def api_booking_customer_verify(request, booking_id):
    """Link from the confirmation email: the customer confirms the details"""
    booking = get_object_or_404(Booking, id=booking_id)
    token = request.GET.get('token', '')
    if not booking.customer_verify_token or not hmac.compare_digest(token, booking.customer_verify_token):
        return error_response('Invalid or expired verification link', status=403)

    if booking.customer_verified_at is None:
        booking.customer_verified_at = timezone.now()
        booking.save(update_fields=['customer_verified_at', 'updated_at'])
        logger.info(f"Booking {booking.id} verified by customer")
    return JsonResponse({'success': True, 'message': 'Thank you, your booking details are verified'})


@require_GET
@staff_token_required
def api_availability(request):
    """
    API: conflicts for a driver and/or vehicle on a date
    GET /api/availability/?date=2024-03-05&start_time=09:00&end_time=11:00&driver_id=1&vehicle_id=2
    """
    from fleet.models import Driver, Vehicle

    try:
        booking_date = datetime.strptime(request.GET.get('date', ''), '%Y-%m-%d').date()
        start_str = request.GET.get('start_time')
        end_str = request.GET.get('end_time')
        start_time = datetime.strptime(start_str, '%H:%M').time() if start_str else None
        end_time = datetime.strptime(end_str, '%H:%M').time() if end_str else None
    except ValueError:
        return error_response('date must be YYYY-MM-DD and times HH:MM')

    driver_id = request.GET.get('driver_id')
    vehicle_id = request.GET.get('vehicle_id')
    driver = get_object_or_404(Driver, id=driver_id) if driver_id else None
    vehicle = get_object_or_404(Vehicle, id=vehicle_id) if vehicle_id else None

    conflicts = check_time_conflicts(booking_date, start_time, end_time, driver=driver, vehicle=vehicle)
    busy = {resource for resource, _ in conflicts}
    return JsonResponse({
        'success': True,
        'driver_available': None if driver is None else 'driver' not in busy,
        'vehicle_available': None if vehicle is None else 'vehicle' not in busy,
        'conflicts': [
            {
                'booking_id': booking.id,
                'resource': resource,
                'date': booking.date.isoformat(),
                'start_time': booking.start_time.strftime('%H:%M') if booking.start_time else None,
                'end_time': booking.end_time.strftime('%H:%M') if booking.end_time else None,
            }
            for resource, booking in conflicts
        ],
    })


# =============================================================================
# CALENDAR
# =============================================================================

@require_GET
@staff_token_required
@api_data_ratelimit()
def api_calendar(request):
    """
    API: grid cells with bookings for the admin calendar
    GET /api/calendar/?date=2024-03-01&view=month
    """
    form = CalendarQueryForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)

    cursor = form.cleaned_data['date'] or timezone.localdate()
    admin_calendar = BookingCalendarService.build_calendar(
        cursor, form.cleaned_data['view'], status=form.cleaned_data['status'] or None
    )
    return JsonResponse({
        'success': True,
        'calendar': admin_calendar.to_dict(today=timezone.localdate()),
    })


@csrf_exempt
@require_POST
@admin_token_required
@api_write_ratelimit()
def api_calendar_drop(request):
    """
    API: a booking card was dropped on a day cell
    POST /api/calendar/drop/ {"booking_id": "12", "date": "2024-03-05", "cursor": "2024-03-01", "view": "month"}

    `cursor` and `view` describe the calendar the user was looking at. A
    booking id that is not on that calendar is ignored (changed: false).
    """
    try:
        data = parse_json_body(request)
    except ValueError as e:
        return error_response(str(e))

    form = CalendarDropForm(data)
    if not form.is_valid():
        return form_error_response(form)

    try:
        payload = DragPayload(form.cleaned_data['booking_id'])
        target = form.cleaned_data['date']
        cursor = form.cleaned_data['cursor'] or target

        rescheduled = []

        def persist(bookings):
            rescheduled.extend(
                BookingCalendarService.persist_calendar_change(bookings, request.actor_role)
            )

        admin_calendar = BookingCalendarService.build_calendar(
            cursor, form.cleaned_data['view'], on_change=persist
        )
        changed = admin_calendar.drop(target, payload)

        return JsonResponse({
            'success': True,
            'changed': changed,
            'booking_id': payload.booking_id,
            'date': date_key(target),
            'rescheduled': [b.id for b in rescheduled],
            'calendar': admin_calendar.to_dict(today=timezone.localdate()),
        })
    except Exception as e:
        logger.error(f"Error in api_calendar_drop: {e}", exc_info=True)
        return error_response(str(e), status=500)
