"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in marketstore/infrastructure/persistence/
and are wired at the application boundary via get_repositories().

Import from this package rather than individual modules to avoid coupling
callers to specific repository module paths.
"""

from .base import PredicateLike, Repository
from .coupons import CouponRepository
from .tokens import RefreshTokenRepository
from .webhooks import WebhookRepository

__all__ = [
    "PredicateLike",
    "Repository",
    "CouponRepository",
    "RefreshTokenRepository",
    "WebhookRepository",
]
