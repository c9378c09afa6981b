"""
Worker model: field crew members who carry out assigned bookings.
Workers sign in with their email + phone pair; IsActive gates login.
"""
import re

from django.db import models
from apps.core.models import BaseModel


def normalize_phone(value) -> str:
    """Drop spaces, dashes and brackets: '+27 82-123 (4567)' becomes '+27821234567'."""
    return re.sub(r'[\s\-()]', '', value or '')


class Worker(BaseModel):
    name = models.CharField(max_length=120, db_column='Name')
    phone = models.CharField(max_length=20, db_column='Phone')
    email = models.EmailField(db_column='Email', db_index=True)
    is_active = models.BooleanField(default=True, db_index=True, db_column='IsActive')

    class Meta:
        db_table = 'workers'
        verbose_name = 'Worker'
        verbose_name_plural = 'Workers'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def first_name(self):
        return self.name.split()[0] if self.name else ""

    def save(self, *args, **kwargs):
        self.email = (self.email or '').strip().lower()
        super().save(*args, **kwargs)

    @classmethod
    def authenticate(cls, email: str, phone: str):
        """Return the active worker matching the email + phone pair, or None."""
        return (
            cls.objects
            .filter(
                email=(email or '').strip().lower(),
                phone=normalize_phone(phone),
                is_active=True,
            )
            .first()
        )
