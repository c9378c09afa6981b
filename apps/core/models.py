"""
Core base model mixins.

Column names follow the legacy document field names (``Id``, ``CreatedAt``,
``UpdatedAt``) so existing exports load without a rename step.
"""
import uuid
from django.db import models
from django.utils import timezone


class UUIDModel(models.Model):
    """Primary key is a UUID, not an auto-incrementing integer."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='Id')

    class Meta:
        abstract = True


class TimestampedModel(models.Model):
    """Automatically tracks creation and last-update timestamps."""
    created_at = models.DateTimeField(auto_now_add=True, db_column='CreatedAt')
    updated_at = models.DateTimeField(auto_now=True, db_column='UpdatedAt')

    class Meta:
        abstract = True


class SoftDeleteQuerySet(models.QuerySet):
    def delete(self):
        """Bulk delete (the admin's "delete selected" action) only stamps DeletedAt."""
        return self.update(deleted_at=timezone.now())


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager: hides rows whose DeletedAt is set."""
    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class SoftDeleteModel(models.Model):
    """
    Rows are stamped with DeletedAt instead of removed, so bookings and
    assignments that name a removed worker still resolve through
    ``all_objects``.
    """
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True, db_column='DeletedAt')

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def delete(self, *args, **kwargs):
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at'])


class BaseModel(UUIDModel, TimestampedModel, SoftDeleteModel):
    """UUID pk + timestamps + soft delete."""
    class Meta:
        abstract = True
