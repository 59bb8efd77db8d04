"""Domain enumerations.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (Pydantic default behaviour).
"""

from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


class CouponValidity(str, Enum):
    PERMANENT = "permanent"
    SCHEDULED = "scheduled"  # validityStart / validityExpire apply


class WebhookVerb(str, Enum):
    """Mutation verbs announced on the webhook bus as <entity>.<verb>."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

