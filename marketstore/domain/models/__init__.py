"""Domain model package.

All domain objects are pure Python / Pydantic models with no storage,
cache or transport dependencies.  Import from this package to avoid
coupling application code to individual module paths.
"""

from .base import Entity, is_valid_id, new_object_id
from .coupons import Coupon
from .enums import CouponValidity, DiscountType, SortDirection, WebhookVerb
from .pagination import Edge, Page, PageRequest, decode_cursor, encode_cursor
from .predicates import NOT_DELETED, Condition, Operator, Predicate
from .tokens import RefreshToken
from .webhooks import Webhook, WebhookEvent

__all__ = [
    # enums
    "CouponValidity",
    "DiscountType",
    "SortDirection",
    "WebhookVerb",
    # base
    "Entity",
    "is_valid_id",
    "new_object_id",
    # predicates
    "Condition",
    "Operator",
    "Predicate",
    "NOT_DELETED",
    # pagination
    "Edge",
    "Page",
    "PageRequest",
    "decode_cursor",
    "encode_cursor",
    # entities
    "Coupon",
    "RefreshToken",
    "Webhook",
    "WebhookEvent",
]
