from django.urls import path
from . import views

app_name = 'booking'

urlpatterns = [
    # Bookings
    path('bookings/', views.api_bookings_list, name='bookings_list'),
    path('bookings/create/', views.api_booking_create, name='booking_create'),
    path('bookings/<int:booking_id>/', views.api_booking_detail, name='booking_detail'),
    path('bookings/<int:booking_id>/update/', views.api_booking_update, name='booking_update'),
    path('bookings/<int:booking_id>/decision/', views.api_booking_decision, name='booking_decision'),
    path('bookings/<int:booking_id>/confirm/', views.api_booking_confirm, name='booking_confirm'),
    path('bookings/<int:booking_id>/delete/', views.api_booking_delete, name='booking_delete'),
    path('bookings/<int:booking_id>/customer-verify/', views.api_booking_customer_verify, name='booking_customer_verify'),
    path('availability/', views.api_availability, name='availability'),

    # Calendar
    path('calendar/', views.api_calendar, name='calendar'),
    path('calendar/drop/', views.api_calendar_drop, name='calendar_drop'),
]
