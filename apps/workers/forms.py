from django import forms

from apps.bookings.statuses import WorkerStatus


class WorkerLoginForm(forms.Form):
    email = forms.EmailField(
        label='Email Address',
        widget=forms.EmailInput(attrs={
            'class': 'form-control',
            'placeholder': 'you@example.com',
            'autocomplete': 'email',
        }),
    )
    phone = forms.CharField(
        max_length=20,
        label='Phone Number',
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': '+27821234567',
            'autocomplete': 'tel',
        }),
    )


class WorkerStatusForm(forms.Form):
    """Free-text status; the known values are offered as suggestions in the template."""
    worker_status = forms.CharField(max_length=100)

    suggestions = [value for value, _ in WorkerStatus.choices]


class FeedbackForm(forms.Form):
    feedback = forms.CharField(
        max_length=2000,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 4}),
    )
