from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from fleet.views import serve_document
from . import views

urlpatterns = [
                  path('admin/', admin.site.urls),

                  path('', views.home, name='home'),

                  # Health checks
                  path('api/ping', views.ping, name='ping'),
                  path('api/db-ping', views.db_ping, name='db_ping'),

                  # Bookings and the calendar API
                  path('api/', include('booking.urls')),

                  # Customers, drivers and vehicles
                  path('api/', include('fleet.urls')),

                  # Uploaded driver documents
                  path('uploads/documents/<str:filename>', serve_document, name='serve_document'),

                  # Staff panel
                  path('manager/', include('manager.urls')),
              ] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
