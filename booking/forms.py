from django import forms
from django.forms.models import model_to_dict
from .models import Booking
from .constants import BOOKING_STATUS_CHOICES, VIEW_MODES, DEFAULT_VIEW
from .utils import check_time_conflicts


class BookingForm(forms.ModelForm):
    """Create a booking from the admin panel or the API"""

    class Meta:
        model = Booking
        fields = [
            'customer', 'vehicle', 'driver', 'date', 'start_time', 'end_time',
            'pickup_point', 'dropoff_point', 'special_instructions',
            'contact_name', 'contact_phone', 'contact_email',
            'source', 'status', 'color', 'estimated_price_cents',
            'admin_note', 'created_by_name',
        ]
        widgets = {
            'date': forms.DateInput(attrs={'type': 'date', 'class': 'form-control'}),
            'start_time': forms.TimeInput(attrs={'type': 'time', 'class': 'form-control'}),
            'end_time': forms.TimeInput(attrs={'type': 'time', 'class': 'form-control'}),
            'special_instructions': forms.Textarea(attrs={'rows': 3, 'class': 'form-control'}),
            'admin_note': forms.Textarea(attrs={'rows': 2, 'class': 'form-control'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Fields with model defaults may be left out of API payloads
        for name in ('source', 'status', 'color'):
            self.fields[name].required = False

    def clean(self):
        cleaned_data = super().clean()
        for name in ('source', 'status', 'color'):
            if not cleaned_data.get(name):
                cleaned_data[name] = Booking._meta.get_field(name).default

        start_time = cleaned_data.get('start_time')
        end_time = cleaned_data.get('end_time')
        if (start_time is None) != (end_time is None):
            raise forms.ValidationError('Start and end time must be given together')
        if start_time and end_time and end_time <= start_time:
            self.add_error('end_time', 'End time must be after start time')
            return cleaned_data

        booking_date = cleaned_data.get('date')
        if booking_date and (cleaned_data.get('driver') or cleaned_data.get('vehicle')):
            conflicts = check_time_conflicts(
                booking_date, start_time, end_time,
                driver=cleaned_data.get('driver'),
                vehicle=cleaned_data.get('vehicle'),
                exclude_booking_id=self.instance.pk
            )
            for resource, booking in conflicts:
                self.add_error(resource, f'The {resource} is already booked (booking #{booking.id})')

        return cleaned_data


class BookingUpdateForm(BookingForm):
    """Partial update: only the submitted fields are changed"""

    def __init__(self, data=None, *args, **kwargs):
        instance = kwargs.get('instance')
        if data is not None and instance is not None:
            merged = model_to_dict(instance, fields=self.Meta.fields)
            merged.update(data)
            data = merged
        super().__init__(data, *args, **kwargs)


class DecisionForm(forms.Form):
    ACTION_CHOICES = [
        ('confirm', 'Confirm'),
        ('decline', 'Decline'),
    ]

    action = forms.ChoiceField(choices=ACTION_CHOICES)
    reason = forms.CharField(max_length=2000, required=False)
    driver = forms.IntegerField(min_value=1, required=False)


class BookingFilterForm(forms.Form):
    status = forms.ChoiceField(choices=BOOKING_STATUS_CHOICES, required=False)
    source = forms.CharField(max_length=10, required=False)
    start = forms.DateField(required=False, input_formats=['%Y-%m-%d'])
    end = forms.DateField(required=False, input_formats=['%Y-%m-%d'])


class CalendarQueryForm(forms.Form):
    """Cursor and view mode of the admin calendar"""
    date = forms.DateField(required=False, input_formats=['%Y-%m-%d'])
    view = forms.ChoiceField(choices=[(v, v.capitalize()) for v in VIEW_MODES], required=False)
    status = forms.ChoiceField(choices=BOOKING_STATUS_CHOICES, required=False)

    def clean_view(self):
        return self.cleaned_data.get('view') or DEFAULT_VIEW


class CalendarDropForm(forms.Form):
    """
    A card dropped on a day cell

    `date` is the target day; `cursor` and `view` describe the calendar the
    card was dragged on and default to the target day in month view.
    """
    booking_id = forms.CharField(max_length=64)
    date = forms.DateField(input_formats=['%Y-%m-%d'])
    cursor = forms.DateField(required=False, input_formats=['%Y-%m-%d'])
    view = forms.ChoiceField(choices=[(v, v.capitalize()) for v in VIEW_MODES], required=False)

    def clean_view(self):
        return self.cleaned_data.get('view') or DEFAULT_VIEW

    def clean_booking_id(self):
        booking_id = self.cleaned_data['booking_id'].strip()
        if not booking_id:
            raise forms.ValidationError('Booking id is required')
        return booking_id
