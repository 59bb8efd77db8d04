"""Coupon repository interface."""

from __future__ import annotations

from abc import abstractmethod

from marketstore.domain.models.coupons import Coupon

from .base import Repository


class CouponRepository(Repository[Coupon]):
    """Read/write interface for Coupon entities.

    get_by_code returns None when no live coupon carries the code.
    Codes are matched exactly (case-sensitive), as they are printed.
    """

    @abstractmethod
    async def get_by_code(self, code: str) -> Coupon | None:
        """Return the live coupon with the given code, or None."""
