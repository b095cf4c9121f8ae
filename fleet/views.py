"""
Fleet registry API: customers, drivers, vehicles and driver documents
"""
from django.shortcuts import get_object_or_404
from django.http import JsonResponse, FileResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST, require_http_methods
from django.db.models import Q
import logging

from booking.decorators import (
    admin_token_required,
    staff_token_required,
    api_data_ratelimit,
    api_write_ratelimit,
    upload_ratelimit,
)
from booking.utils import error_response, form_error_response, parse_json_body
from .models import Customer, Driver, Vehicle
from .forms import (
    CustomerRegistrationForm,
    DriverRegistrationForm,
    VehicleForm,
    VehicleSearchForm,
    DriverDocumentUploadForm,
)
from .services import DocumentStorageService, DOCUMENT_FIELDS

logger = logging.getLogger(__name__)


def serialize_customer(customer):
    return {
        'id': customer.id,
        'first_name': customer.first_name,
        'last_name': customer.last_name,
        'full_name': customer.full_name,
        'email': customer.email,
        'phone': customer.phone,
        'notes': customer.notes,
        'created_at': customer.created_at.isoformat(),
    }


def serialize_driver(driver):
    return {
        'id': driver.id,
        'first_name': driver.first_name,
        'last_name': driver.last_name,
        'full_name': driver.full_name,
        'email': driver.email,
        'phone': driver.phone,
        'license_number': driver.license_number,
        'license_expiry': driver.license_expiry.isoformat() if driver.license_expiry else None,
        'status': driver.status,
        'experience_years': driver.experience_years,
        'id_proof_url': driver.id_proof_url,
        'work_permit_url': driver.work_permit_url,
    }


def serialize_vehicle(vehicle):
    return {
        'id': vehicle.id,
        'name': vehicle.name,
        'make': vehicle.make,
        'model': vehicle.model,
        'plate': vehicle.plate,
        'vin': vehicle.vin,
        'capacity': vehicle.capacity,
        'status': vehicle.status,
    }


def _create_from_form(request, form_class, serializer, label):
    try:
        data = parse_json_body(request)
    except ValueError as e:
        return error_response(str(e))

    form = form_class(data)
    if not form.is_valid():
        return form_error_response(form)

    try:
        obj = form.save()
        logger.info(f"{label} {obj.id} registered by {request.actor_role}")
        return JsonResponse({'success': True, 'id': obj.id, label.lower(): serializer(obj)}, status=201)
    except Exception as e:
        logger.error(f"Error registering {label.lower()}: {e}", exc_info=True)
        return error_response(str(e), status=500)


# =============================================================================
# CUSTOMERS
# =============================================================================

@csrf_exempt
@require_http_methods(['GET', 'POST'])
@staff_token_required
@api_write_ratelimit()
def api_customers(request):
    """
    GET: customers matching ?q= (name, email or phone)
    POST: register a customer (admin only)
    """
    if request.method == 'POST':
        if request.actor_role != 'admin':
            return JsonResponse({'success': False, 'error': 'Admin only'}, status=401)
        return _create_from_form(request, CustomerRegistrationForm, serialize_customer, 'Customer')

    customers = Customer.objects.search(request.GET.get('q'))[:200]
    return JsonResponse({'success': True, 'items': [serialize_customer(c) for c in customers]})


@require_GET
@staff_token_required
def api_customer_detail(request, customer_id):
    customer = get_object_or_404(Customer, id=customer_id)
    return JsonResponse({'success': True, 'customer': serialize_customer(customer)})


# =============================================================================
# DRIVERS
# =============================================================================

@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_token_required
@api_write_ratelimit()
def api_drivers(request):
    """
    GET: drivers, optionally ?status=active
    POST: register a driver
    """
    if request.method == 'POST':
        return _create_from_form(request, DriverRegistrationForm, serialize_driver, 'Driver')

    drivers = Driver.objects.all()
    status = request.GET.get('status')
    if status:
        drivers = drivers.filter(status=status)
    return JsonResponse({'success': True, 'items': [serialize_driver(d) for d in drivers]})


# =============================================================================
# VEHICLES
# =============================================================================

@csrf_exempt
@require_http_methods(['GET', 'POST'])
@staff_token_required
@api_data_ratelimit()
def api_vehicles(request):
    """
    GET: vehicle search
    GET /api/vehicles/?q=van&capacity_min=8

    Vehicles without a recorded capacity always match capacity_min.

    POST: register a vehicle (admin only)
    """
    if request.method == 'POST':
        if request.actor_role != 'admin':
            return JsonResponse({'success': False, 'error': 'Admin only'}, status=401)
        return _create_from_form(request, VehicleForm, serialize_vehicle, 'Vehicle')

    form = VehicleSearchForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)

    vehicles = Vehicle.objects.all()
    q = (form.cleaned_data.get('q') or '').strip()
    if q:
        vehicles = vehicles.filter(
            Q(name__icontains=q) |
            Q(make__icontains=q) |
            Q(model__icontains=q) |
            Q(plate__icontains=q) |
            Q(vin__icontains=q)
        )
    capacity_min = form.cleaned_data.get('capacity_min')
    if capacity_min is not None:
        vehicles = vehicles.filter(Q(capacity__isnull=True) | Q(capacity__gte=capacity_min))

    return JsonResponse({'success': True, 'items': [serialize_vehicle(v) for v in vehicles[:200]]})


# =============================================================================
# DRIVER DOCUMENTS
# =============================================================================

@csrf_exempt
@require_POST
@admin_token_required
@upload_ratelimit()
def api_driver_documents_upload(request):
    """
    Multipart upload of `id_proof` and/or `work_permit`

    With `driver` set, the returned URLs are also stored on that driver.
    """
    form = DriverDocumentUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return form_error_response(form)

    driver = None
    if form.cleaned_data.get('driver'):
        driver = get_object_or_404(Driver, id=form.cleaned_data['driver'])

    files = {}
    try:
        for name in DOCUMENT_FIELDS:
            uploaded = form.cleaned_data.get(name)
            if uploaded:
                files[f'{name}_url'] = DocumentStorageService.save(uploaded)

        if driver is not None:
            for field, url in files.items():
                setattr(driver, field, url)
            driver.save(update_fields=list(files.keys()) + ['updated_at'])

        return JsonResponse({'success': True, 'files': files})
    except Exception as e:
        for url in files.values():
            DocumentStorageService.discard(url)
        logger.error(f"Error uploading driver documents: {e}", exc_info=True)
        return error_response(str(e) or 'Upload failed', status=500)


@require_GET
@staff_token_required
def serve_document(request, filename):
    path = DocumentStorageService.resolve(filename)
    if path is None:
        return JsonResponse({'success': False, 'error': 'File not found'}, status=404)
    return FileResponse(open(path, 'rb'))
