import io
import json
import os
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from fleet.models import Customer, Driver, Vehicle
from fleet.services import DocumentStorageService


pytestmark = pytest.mark.django_db


def png_file(name='id.png'):
    buffer = io.BytesIO()
    Image.new('RGB', (4, 4), color='blue').save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


def pdf_file(name='permit.pdf', content=b'%PDF-1.4 test document'):
    return SimpleUploadedFile(name, content, content_type='application/pdf')


class TestCustomers:
    def test_register(self, client, admin_headers):
        response = client.post('/api/customers/', data=json.dumps({
            'first_name': ' Bruno ', 'last_name': 'Martins', 'email': 'Bruno@Example.COM', 'phone': '+1 (555) 010-2',
        }), content_type='application/json', **admin_headers)

        assert response.status_code == 201
        customer = Customer.objects.get(id=response.json()['id'])
        assert customer.first_name == 'Bruno'
        assert customer.email == 'bruno@example.com'

    def test_register_requires_names(self, client, admin_headers):
        response = client.post('/api/customers/', data=json.dumps({'first_name': 'Bruno'}),
                               content_type='application/json', **admin_headers)
        assert response.status_code == 400
        assert response.json()['errors']['last_name'] == ['Last name is required']

    def test_register_rejects_bad_email_and_phone(self, client, admin_headers):
        response = client.post('/api/customers/', data={
            'first_name': 'A', 'last_name': 'B', 'email': 'not-an-email', 'phone': 'call me',
        }, **admin_headers)
        assert response.status_code == 400
        assert set(response.json()['errors']) == {'email', 'phone'}

    def test_register_is_admin_only(self, client, staff_headers):
        response = client.post('/api/customers/', data=json.dumps({'first_name': 'Bruno', 'last_name': 'Martins'}),
                               content_type='application/json', **staff_headers)
        assert response.status_code == 401
        assert not Customer.objects.exists()

    def test_search(self, client, customer, staff_headers):
        Customer.objects.create(first_name='Chen', last_name='Wei')
        response = client.get('/api/customers/', {'q': 'johns'}, **staff_headers)
        assert [c['id'] for c in response.json()['items']] == [customer.id]


class TestDrivers:
    def test_register_and_list(self, client, admin_headers):
        response = client.post('/api/drivers/', data=json.dumps({
            'first_name': 'Emma', 'last_name': 'Schultz', 'license_number': ' dl-77 ', 'experience_years': 3,
        }), content_type='application/json', **admin_headers)

        assert response.status_code == 201
        driver = Driver.objects.get()
        assert driver.license_number == 'DL-77'
        assert driver.status == 'active'

        listing = client.get('/api/drivers/', {'status': 'active'}, **admin_headers).json()
        assert [d['license_number'] for d in listing['items']] == ['DL-77']

    def test_duplicate_license(self, client, driver, admin_headers):
        response = client.post('/api/drivers/', data=json.dumps({
            'first_name': 'X', 'last_name': 'Y', 'license_number': 'dl-1',
        }), content_type='application/json', **admin_headers)
        assert response.status_code == 400
        assert 'license_number' in response.json()['errors']


class TestVehicles:
    def test_plate_is_normalized(self, vehicle):
        assert vehicle.plate == 'FLT002'

    def test_register_rejects_duplicate_plate(self, client, vehicle, admin_headers):
        response = client.post('/api/vehicles/', data=json.dumps({'name': 'Van', 'plate': 'flt 002'}),
                               content_type='application/json', **admin_headers)
        assert response.status_code == 400
        assert 'plate' in response.json()['errors']

    def test_staff_cannot_register(self, client, staff_headers):
        response = client.post('/api/vehicles/', data=json.dumps({'name': 'Van', 'plate': 'NEW1'}),
                               content_type='application/json', **staff_headers)
        assert response.status_code == 401
        assert not Vehicle.objects.exists()

    def test_search_by_text_and_capacity(self, client, vehicle, staff_headers):
        Vehicle.objects.create(name='City car', make='Toyota', plate='ABC1', capacity=4)
        unknown = Vehicle.objects.create(name='Loaner', plate='ABC2')

        by_text = client.get('/api/vehicles/', {'q': 'merc'}, **staff_headers).json()['items']
        assert [v['id'] for v in by_text] == [vehicle.id]

        big = client.get('/api/vehicles/', {'capacity_min': 8}, **staff_headers).json()['items']
        assert {v['id'] for v in big} == {vehicle.id, unknown.id}

    def test_search_rejects_bad_capacity(self, client, staff_headers):
        response = client.get('/api/vehicles/', {'capacity_min': 0}, **staff_headers)
        assert response.status_code == 400


class TestDocumentUpload:
    url = '/api/drivers/documents/'

    def test_upload_both_documents(self, client, admin_headers, driver):
        response = client.post(self.url, {
            'id_proof': png_file(), 'work_permit': pdf_file(), 'driver': driver.id,
        }, **admin_headers)

        assert response.status_code == 200
        files = response.json()['files']
        assert files['id_proof_url'].startswith('/uploads/documents/id-')
        assert files['id_proof_url'].endswith('.png')
        assert files['work_permit_url'].startswith('/uploads/documents/permit-')

        driver.refresh_from_db()
        assert driver.id_proof_url == files['id_proof_url']

        served = client.get(files['work_permit_url'], **admin_headers)
        assert served.status_code == 200
        assert b''.join(served.streaming_content) == b'%PDF-1.4 test document'

    def test_no_files(self, client, admin_headers):
        response = client.post(self.url, {}, **admin_headers)
        assert response.status_code == 400
        assert response.json()['error'] == 'No files uploaded'

    def test_rejects_unknown_type(self, client, admin_headers):
        response = client.post(self.url, {
            'id_proof': SimpleUploadedFile('run.exe', b'MZ', content_type='application/octet-stream'),
        }, **admin_headers)
        assert response.status_code == 400
        assert 'id_proof' in response.json()['errors']

    def test_rejects_fake_image(self, client, admin_headers):
        response = client.post(self.url, {
            'id_proof': SimpleUploadedFile('scan.jpg', b'not really a jpeg', content_type='image/jpeg'),
        }, **admin_headers)
        assert response.status_code == 400

    def test_rejects_oversized_file(self, client, admin_headers, settings):
        settings.UPLOAD_MAX_FILE_SIZE = 10
        response = client.post(self.url, {'work_permit': pdf_file()}, **admin_headers)
        assert response.status_code == 400
        assert 'too large' in response.json()['error']

    def test_rejects_two_files_for_one_field(self, client, admin_headers):
        response = client.post(self.url, {'work_permit': [pdf_file('a.pdf'), pdf_file('b.pdf')]}, **admin_headers)
        assert response.status_code == 400

    def test_unknown_driver(self, client, admin_headers):
        response = client.post(self.url, {'work_permit': pdf_file(), 'driver': 999}, **admin_headers)
        assert response.status_code == 404

    def test_failed_upload_removes_stored_files(self, client, admin_headers, driver, monkeypatch):
        original_save = DocumentStorageService.save

        def save(uploaded_file):
            if uploaded_file.name.endswith('.pdf'):
                raise OSError('disk full')
            return original_save(uploaded_file)

        monkeypatch.setattr(DocumentStorageService, 'save', save)
        response = client.post(self.url, {
            'id_proof': png_file(), 'work_permit': pdf_file(), 'driver': driver.id,
        }, **admin_headers)

        assert response.status_code == 500
        assert response.json()['error'] == 'disk full'
        root = DocumentStorageService.documents_root()
        assert not os.path.isdir(root) or os.listdir(root) == []
        driver.refresh_from_db()
        assert not driver.id_proof_url

    def test_discard_ignores_foreign_urls(self, tmp_path):
        outside = tmp_path / 'keep.pdf'
        outside.write_bytes(b'x')
        DocumentStorageService.discard('/uploads/documents/../../keep.pdf')
        DocumentStorageService.discard('/static/keep.pdf')
        assert outside.exists()

    def test_serve_missing_file(self, client, admin_headers):
        assert client.get('/uploads/documents/nothing.pdf', **admin_headers).status_code == 404

    def test_resolve_rejects_traversal(self, settings, tmp_path):
        secret = tmp_path / 'secret.txt'
        secret.write_text('x')
        assert DocumentStorageService.resolve('../secret.txt') is None
        assert DocumentStorageService.resolve('..') is None
        assert DocumentStorageService.resolve('') is None

    def test_unique_filenames(self):
        first = DocumentStorageService.unique_filename('my id card.PNG')
        assert first.startswith('my_id_card-')
        assert first.endswith('.png')
