"""
Services for bookings: audit history, notifications, calendar sync and the
database side of the admin calendar
"""
from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from .calendar_view import AdminCalendar, CalendarBooking, parse_date_key
from .models import Booking, BookingHistory
import logging

logger = logging.getLogger(__name__)


class BookingHistoryService:
    """Audit trail entries"""

    @staticmethod
    def create_history_entry(booking, action, actor_role='admin', changes=None, note=''):
        history_entry = BookingHistory.objects.create(
            booking=booking,
            action=action,
            actor_role=actor_role,
            changes=changes or {},
            admin_only_note=note or ''
        )
        logger.debug(f"History entry created: {booking.id} - {action}")
        return history_entry

    @staticmethod
    def log_booking_created(booking, actor_role):
        return BookingHistoryService.create_history_entry(
            booking=booking,
            action='create',
            actor_role=actor_role,
            changes={
                'date': booking.date.isoformat(),
                'pickup_point': booking.pickup_point,
                'dropoff_point': booking.dropoff_point,
            },
            note=booking.admin_note
        )

    @staticmethod
    def log_booking_rescheduled(booking, old_date, actor_role='admin'):
        return BookingHistoryService.create_history_entry(
            booking=booking,
            action='reschedule',
            actor_role=actor_role,
            changes={'date': [old_date.isoformat(), booking.date.isoformat()]}
        )


class NotificationService:
    """
    Best-effort email notifications

    Sending never breaks the request that triggered it. Without SMTP settings
    the console backend prints the message instead; delivery errors are
    logged as warnings.
    """

    @staticmethod
    def send_email(to, subject, body):
        recipients = [to] if isinstance(to, str) else list(to)
        recipients = [r for r in recipients if r]
        if not recipients:
            return False

        try:
            send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, recipients, fail_silently=False)
            logger.info(f"[notify] Email sent to {recipients}: {subject}")
            return True
        except Exception as e:
            logger.warning(f"[notify] Email to {recipients} failed: {e}")
            return False

    @staticmethod
    def booking_lines(booking):
        return (
            f"When: {booking.window_text}\n"
            f"Pickup: {booking.pickup_point}\n"
            f"Dropoff: {booking.dropoff_point}\n"
        )

    @classmethod
    def notify_created(cls, booking, actor_role):
        lines = cls.booking_lines(booking)
        cls.send_email(
            settings.ADMIN_NOTIFY_TO,
            f"New booking (id {booking.id}) pending approval",
            f"A new booking was created by {actor_role} {booking.created_by_name}.\n"
            f"Customer: {booking.customer}\n{lines}"
            f"Contact: {booking.contact_name} {booking.contact_phone} {booking.contact_email}\n\n"
            f"Approve in the admin panel at {settings.BASE_URL}/manager/calendar/"
        )
        cls.send_email(
            booking.contact_email,
            "We received your booking request (pending confirmation)",
            "Thank you for your request. This is an acknowledgement only; confirmation is pending.\n\n"
            f"{lines}"
        )

    @classmethod
    def notify_confirmed(cls, booking):
        lines = cls.booking_lines(booking)
        if booking.customer_verify_token:
            verify_url = (
                f"{settings.BASE_URL}/api/bookings/{booking.id}/customer-verify/"
                f"?token={booking.customer_verify_token}"
            )
            cls.send_email(
                booking.contact_email,
                "Booking confirmed - please verify details",
                f"Your booking has been confirmed. Please verify the details:\n\n{lines}\n"
                f"Click to verify: {verify_url}"
            )
        if booking.driver_id and booking.driver.email:
            cls.send_email(
                booking.driver.email,
                f"New assignment: Booking #{booking.id}",
                f"Hello {booking.driver.full_name},\n\nYou have been assigned a booking.\n\n{lines}"
            )

    @classmethod
    def notify_declined(cls, booking, reason=''):
        body = "We are sorry, but your booking could not be accommodated.\n"
        if reason:
            body += f"Reason: {reason}\n"
        body += f"Window: {booking.window_text}\n"
        cls.send_email(booking.contact_email, f"Booking declined (#{booking.id})", body)

    @classmethod
    def notify_updated(cls, booking):
        lines = cls.booking_lines(booking)
        cls.send_email(
            booking.contact_email,
            f"Booking updated (#{booking.id})",
            f"Your booking has been updated by admin.\n\n{lines}"
        )
        if booking.driver_id and booking.driver.email:
            cls.send_email(
                booking.driver.email,
                f"Assigned booking updated (#{booking.id})",
                f"A booking assigned to you has been updated.\n\n{lines}"
            )


class CalendarSyncService:
    """Placeholder for an external calendar integration"""

    @staticmethod
    def upsert_calendar_event(booking):
        logger.info(f"[calendar] upsert event for booking {booking.id}")

    @classmethod
    def safe_upsert(cls, booking):
        try:
            cls.upsert_calendar_event(booking)
        except Exception as e:
            logger.warning(f"[calendar] upsert failed for booking {booking.id}: {e}")


class BookingCalendarService:
    """Connects the admin calendar to the bookings table"""

    @staticmethod
    def to_calendar_booking(booking):
        return CalendarBooking(
            id=str(booking.id),
            date=booking.date,
            pickup=booking.pickup_point,
            dropoff=booking.dropoff_point,
            vehicle_id=str(booking.vehicle_id) if booking.vehicle_id else None,
            driver_id=str(booking.driver_id) if booking.driver_id else None,
            customer=booking.customer_name or None,
            status=booking.status or None,
            color=booking.color or None,
        )

    @classmethod
    def load_bookings(cls, start, end, status=None):
        qs = Booking.objects.filter(date__range=[start, end]).select_related('customer')
        if status:
            qs = qs.filter(status=status)
        return [cls.to_calendar_booking(b) for b in qs.order_by('date', 'start_time', 'id')]

    @classmethod
    def build_calendar(cls, cursor, view, status=None, on_change=None):
        """AdminCalendar positioned on `cursor` with the bookings of its visible range"""
        admin_calendar = AdminCalendar(initial_date=cursor, initial_view=view)
        start, end = admin_calendar.visible_range()
        return AdminCalendar(
            initial_date=cursor,
            initial_view=view,
            bookings=cls.load_bookings(start, end, status),
            on_change=on_change,
        )

    @staticmethod
    def persist_calendar_change(calendar_bookings, actor_role='admin'):
        """
        Save the dates of a calendar list after a drop

        Only rows whose date differs from the list are written.

        Returns:
            list of rescheduled Booking instances
        """
        by_id = {int(b.id): b for b in calendar_bookings}
        rescheduled = []
        with transaction.atomic():
            for booking in Booking.objects.select_for_update().filter(id__in=by_id.keys()):
                new_date = parse_date_key(by_id[booking.id].date)
                if booking.date == new_date:
                    continue
                old_date = booking.date
                booking.date = new_date
                booking.save(update_fields=['date', 'updated_at'])
                BookingHistoryService.log_booking_rescheduled(booking, old_date, actor_role)
                rescheduled.append(booking)
                logger.info(f"Booking {booking.id} rescheduled {old_date} -> {new_date}")

        for booking in rescheduled:
            CalendarSyncService.safe_upsert(booking)
            NotificationService.notify_updated(booking)
        return rescheduled
