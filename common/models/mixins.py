"""Mixins for models."""

from django.db import models


class TimestampedMixin(models.Model):
    """Mixin adding timestamps for creation and last update."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class EffectiveTimeMixin(models.Model):
    """
    The HL7 ``effectiveTime`` of a record.

    SPL expresses it either as a point (``<effectiveTime value="..."/>``) or as
    an interval with ``low`` and ``high`` children. A point fills
    :attr:`effective_time`; an interval fills the low and high bounds.
    """

    effective_time = models.DateField(blank=True, null=True)
    effective_time_low = models.DateField(blank=True, null=True)
    effective_time_high = models.DateField(blank=True, null=True)

    class Meta:
        abstract = True
