from django import forms
from .models import Customer, Driver, Vehicle
from .services import DocumentStorageService, DOCUMENT_FIELDS
import re


class CustomerRegistrationForm(forms.ModelForm):
    class Meta:
        model = Customer
        fields = ['first_name', 'last_name', 'email', 'phone', 'notes']
        widgets = {
            'first_name': forms.TextInput(attrs={'class': 'form-input', 'placeholder': 'First name'}),
            'last_name': forms.TextInput(attrs={'class': 'form-input', 'placeholder': 'Last name'}),
            'email': forms.EmailInput(attrs={'class': 'form-input', 'placeholder': 'name@example.com'}),
            'phone': forms.TextInput(attrs={'class': 'form-input', 'placeholder': '+1 555 123 4567'}),
            'notes': forms.Textarea(attrs={'class': 'form-input', 'rows': 3}),
        }
        error_messages = {
            'first_name': {'required': 'First name is required'},
            'last_name': {'required': 'Last name is required'},
        }

    def clean_first_name(self):
        return self.cleaned_data['first_name'].strip()

    def clean_last_name(self):
        return self.cleaned_data['last_name'].strip()

    def clean_email(self):
        return Customer.objects.normalize_email(self.cleaned_data.get('email'))


class DriverRegistrationForm(forms.ModelForm):
    class Meta:
        model = Driver
        fields = [
            'first_name', 'last_name', 'email', 'phone',
            'license_number', 'license_expiry', 'hire_date', 'dob',
            'address', 'city', 'state', 'zipcode',
            'experience_years', 'salary_cents', 'status', 'notes',
            'id_proof_url', 'work_permit_url',
        ]
        widgets = {
            'license_expiry': forms.DateInput(attrs={'type': 'date'}),
            'hire_date': forms.DateInput(attrs={'type': 'date'}),
            'dob': forms.DateInput(attrs={'type': 'date'}),
        }
        error_messages = {
            'license_number': {
                'required': 'License number is required',
                'unique': 'A driver with this license number already exists',
            },
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['status'].required = False

    def clean_license_number(self):
        return self.cleaned_data['license_number'].strip().upper()

    def clean_status(self):
        return self.cleaned_data.get('status') or 'active'


class VehicleForm(forms.ModelForm):
    class Meta:
        model = Vehicle
        fields = ['name', 'make', 'model', 'plate', 'vin', 'capacity', 'status']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['status'].required = False

    def clean_plate(self):
        plate = re.sub(r'\s+', '', self.cleaned_data.get('plate', '')).upper()
        if not plate:
            raise forms.ValidationError('Plate is required')

        qs = Vehicle.objects.filter(plate=plate)
        if self.instance.pk:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise forms.ValidationError('A vehicle with this plate already exists')
        return plate

    def clean_status(self):
        return self.cleaned_data.get('status') or 'available'


class VehicleSearchForm(forms.Form):
    q = forms.CharField(max_length=100, required=False)
    capacity_min = forms.IntegerField(min_value=1, required=False)


class DriverDocumentUploadForm(forms.Form):
    """ID proof and work permit, each optional, at least one required"""
    id_proof = forms.FileField(required=False)
    work_permit = forms.FileField(required=False)
    driver = forms.IntegerField(min_value=1, required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        files = kwargs.get('files') or (args[1] if len(args) > 1 else None)
        self._multiple = [
            name for name in DOCUMENT_FIELDS
            if files is not None and len(files.getlist(name)) > 1
        ]

    def clean_id_proof(self):
        return self._clean_document('id_proof')

    def clean_work_permit(self):
        return self._clean_document('work_permit')

    def _clean_document(self, name):
        if name in self._multiple:
            raise forms.ValidationError('Only one file per document is allowed')
        uploaded = self.cleaned_data.get(name)
        if uploaded:
            DocumentStorageService.validate(uploaded)
        return uploaded

    def clean(self):
        cleaned_data = super().clean()
        if not self.errors and not any(cleaned_data.get(name) for name in DOCUMENT_FIELDS):
            raise forms.ValidationError('No files uploaded')
        return cleaned_data
