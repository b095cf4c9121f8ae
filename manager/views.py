"""
Manager App Views
Staff panel: dashboard, booking calendar and customer registration
"""

from django.shortcuts import render, redirect
from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.views.decorators.http import require_http_methods
from django.utils import timezone
from datetime import timedelta
import logging

from booking.models import Booking
from booking.constants import STATUS_PENDING, STATUS_CONFIRMED, ACTIVE_STATUSES, WEEKDAY_HEADERS, VIEW_MODES
from booking.forms import CalendarQueryForm
from booking.services import BookingCalendarService
from booking.calendar_view import date_key, shift_cursor
from booking.utils import create_success_message, create_error_message
from fleet.forms import CustomerRegistrationForm
from fleet.models import Customer, Driver, Vehicle

logger = logging.getLogger(__name__)


@staff_member_required
def dashboard(request):
    """Main manager page with today's numbers and the next bookings"""
    today = timezone.localdate()
    upcoming = (
        Booking.objects.filter(date__range=[today, today + timedelta(days=7)], status__in=ACTIVE_STATUSES)
        .select_related('customer', 'vehicle', 'driver')
        .order_by('date', 'start_time')[:20]
    )

    context = {
        'current_page': 'dashboard',
        'today': today,
        'stats': {
            'total_today': Booking.objects.filter(date=today).count(),
            'pending': Booking.objects.filter(status=STATUS_PENDING).count(),
            'confirmed_upcoming': Booking.objects.filter(date__gte=today, status=STATUS_CONFIRMED).count(),
            'customers': Customer.objects.count(),
            'active_drivers': Driver.objects.filter(status='active').count(),
            'available_vehicles': Vehicle.objects.filter(status='available').count(),
        },
        'upcoming': upcoming,
    }
    return render(request, 'manager/dashboard.html', context)


@staff_member_required
def calendar(request):
    """
    Booking calendar in month, week or day view

    Cards are moved by the page script through the calendar drop API.
    """
    form = CalendarQueryForm(request.GET)
    if form.is_valid():
        cursor = form.cleaned_data['date'] or timezone.localdate()
        view = form.cleaned_data['view']
        status = form.cleaned_data['status'] or None
    else:
        cursor, view, status = timezone.localdate(), 'month', None

    admin_calendar = BookingCalendarService.build_calendar(cursor, view, status=status)
    context = {
        'current_page': 'calendar',
        'calendar': admin_calendar,
        'title': admin_calendar.title,
        'view': admin_calendar.view,
        'views': VIEW_MODES,
        'cursor': date_key(admin_calendar.cursor),
        'previous': date_key(shift_cursor(admin_calendar.cursor, view, -1)),
        'next': date_key(shift_cursor(admin_calendar.cursor, view, 1)),
        'today': date_key(timezone.localdate()),
        'weekday_headers': WEEKDAY_HEADERS,
        'weeks': admin_calendar.weeks(today=timezone.localdate()),
    }
    return render(request, 'manager/calendar.html', context)


@staff_member_required
@require_http_methods(['GET', 'POST'])
def customer_register(request):
    """Customer registration form"""
    if request.method == 'POST':
        form = CustomerRegistrationForm(request.POST)
        if form.is_valid():
            customer = form.save()
            logger.info(f"Customer {customer.id} registered by {request.user}")
            messages.success(
                request,
                create_success_message('Customer registered', f'{customer.full_name} was added'),
            )
            return redirect('manager:customer_register')

        messages.error(request, create_error_message('Registration failed', 'Please correct the errors below'))
    else:
        form = CustomerRegistrationForm()

    context = {
        'current_page': 'customers',
        'form': form,
        'recent_customers': Customer.objects.order_by('-created_at')[:10],
    }
    return render(request, 'manager/customer_register.html', context)
