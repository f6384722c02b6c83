"""Models used by all apps in the project."""

from common.models.mixins import EffectiveTimeMixin
from common.models.mixins import TimestampedMixin

__all__ = [
    "EffectiveTimeMixin",
    "TimestampedMixin",
]
