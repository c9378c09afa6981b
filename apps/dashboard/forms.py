"""Dashboard forms."""
import re

from django import forms
from django.contrib.auth import get_user_model

from apps.accounts.forms import RegistrationForm
from apps.workers.models import Worker, normalize_phone


_ctrl  = {'class': 'form-control'}
_check = {'class': 'form-check-input'}

E164_PHONE = re.compile(r'^\+[1-9]\d{1,14}$')


class WorkerForm(forms.ModelForm):
    class Meta:
        model  = Worker
        fields = ['name', 'email', 'phone', 'is_active']
        widgets = {
            'name':      forms.TextInput(attrs={**_ctrl, 'placeholder': 'Full name'}),
            'email':     forms.EmailInput(attrs={**_ctrl, 'placeholder': 'worker@example.com'}),
            'phone':     forms.TextInput(attrs={**_ctrl, 'placeholder': '+27821234567'}),
            'is_active': forms.CheckboxInput(attrs=_check),
        }
        help_texts = {
            'phone': 'International format, e.g. +27821234567. Used as the worker’s login secret.',
        }

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if len(name) < 2:
            raise forms.ValidationError('Name must be at least 2 characters.')
        return name

    def clean_phone(self):
        phone = normalize_phone(self.cleaned_data['phone'])
        if not E164_PHONE.match(phone):
            raise forms.ValidationError('Enter the phone number in international format, e.g. +27821234567.')
        return phone

    def clean_email(self):
        email = self.cleaned_data['email'].strip().lower()
        clash = Worker.objects.filter(email=email)
        if self.instance.pk:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise forms.ValidationError('Another worker already uses this email address.')
        return email


class AdminUserForm(RegistrationForm):
    """Same checks as customer sign-up; the account is created as staff."""

    def save(self):
        data = self.cleaned_data
        return get_user_model().objects.create_user(
            username=data['email'],
            email=data['email'],
            password=data['password1'],
            first_name=data['first_name'].strip(),
            last_name=(data.get('last_name') or '').strip(),
            is_staff=True,
        )
