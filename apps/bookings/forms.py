from django import forms
from django.utils import timezone

from .models import ServiceType

PREFERRED_TIME_CHOICES = [
    ('08:00 - 10:00', 'Morning (08:00 – 10:00)'),
    ('10:00 - 12:00', 'Late morning (10:00 – 12:00)'),
    ('12:00 - 14:00', 'Midday (12:00 – 14:00)'),
    ('14:00 - 16:00', 'Afternoon (14:00 – 16:00)'),
]

BIN_SIZE_CHOICES = [
    ('', '—'),
    ('small', 'Small (up to 120 L)'),
    ('medium', 'Medium (240 L)'),
    ('large', 'Large (660 L and up)'),
]

CARPET_SIZE_CHOICES = [
    ('', '—'),
    ('small', 'Small (up to 2 m²)'),
    ('medium', 'Medium (2 – 6 m²)'),
    ('large', 'Large (over 6 m²)'),
]


class BookCleaningForm(forms.Form):
    booking_date = forms.DateField(
        label='Service Date',
        widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
    )
    preferred_time = forms.ChoiceField(
        label='Preferred Time',
        choices=PREFERRED_TIME_CHOICES,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    address = forms.CharField(
        max_length=500,
        label='Service Address',
        widget=forms.Textarea(attrs={
            'class': 'form-control',
            'rows': 2,
            'placeholder': 'Street address, suburb, city',
        }),
    )
    service_type = forms.ChoiceField(
        label='Service',
        choices=ServiceType.choices,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    bin_size = forms.ChoiceField(
        required=False,
        label='Bin Size',
        choices=BIN_SIZE_CHOICES,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    carpet_size = forms.ChoiceField(
        required=False,
        label='Carpet Size',
        choices=CARPET_SIZE_CHOICES,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    estimated_price = forms.DecimalField(
        required=False,
        min_value=0,
        max_digits=10,
        decimal_places=2,
        widget=forms.HiddenInput(),
    )
    special_request = forms.CharField(
        required=False,
        max_length=1000,
        label='Special Requests (optional)',
        widget=forms.Textarea(attrs={
            'class': 'form-control',
            'rows': 3,
            'placeholder': 'Gate codes, pets, access instructions...',
        }),
    )

    def clean_booking_date(self):
        value = self.cleaned_data['booking_date']
        if value < timezone.localdate():
            raise forms.ValidationError('Please choose today or a future date.')
        return value

    def clean(self):
        cleaned = super().clean()
        service = cleaned.get('service_type')
        if service == ServiceType.BIN_CLEANING and not cleaned.get('bin_size'):
            self.add_error('bin_size', 'Please choose a bin size.')
        if service == ServiceType.CARPET_CLEANING and not cleaned.get('carpet_size'):
            self.add_error('carpet_size', 'Please choose a carpet size.')
        # Sizes only apply to their own service.
        if service != ServiceType.BIN_CLEANING:
            cleaned['bin_size'] = ''
        if service != ServiceType.CARPET_CLEANING:
            cleaned['carpet_size'] = ''
        return cleaned
