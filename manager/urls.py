"""
Manager App URLs
"""

from django.urls import path
from . import views

app_name = 'manager'

urlpatterns = [
    path('', views.dashboard, name='dashboard'),
    path('calendar/', views.calendar, name='calendar'),
    path('customers/register/', views.customer_register, name='customer_register'),
]
