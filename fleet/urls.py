from django.urls import path
from . import views

app_name = 'fleet'

urlpatterns = [
    path('customers/', views.api_customers, name='customers'),
    path('customers/<int:customer_id>/', views.api_customer_detail, name='customer_detail'),
    path('drivers/', views.api_drivers, name='drivers'),
    path('drivers/documents/', views.api_driver_documents_upload, name='driver_documents_upload'),
    path('vehicles/', views.api_vehicles, name='vehicles'),
]
