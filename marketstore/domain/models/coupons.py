"""Coupon domain model — the worked example entity.

Cross-entity references (creator, products, categories, redeeming users)
are held as ids only; resolving them is the caller's concern.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field, model_validator

from .base import Entity, Timestamp
from .enums import CouponValidity, DiscountType


class Coupon(Entity):
    """A discount code.

    discount_amount is a percentage (0–100) when discount_type is
    PERCENTAGE and an absolute amount in store currency when FLAT.
    usage_limit / usage_limit_per_user of 0 mean unlimited.
    validity_start / validity_expire are required for SCHEDULED coupons
    and ignored for PERMANENT ones.
    """

    code: str = Field(min_length=1)
    description: str = ""
    created_by: str | None = None
    discount_amount: float = Field(default=0.0, ge=0.0)
    discount_type: DiscountType = DiscountType.FLAT
    validity: CouponValidity = CouponValidity.PERMANENT
    validity_start: Timestamp | None = None
    validity_expire: Timestamp | None = None
    usage_limit: int = Field(default=0, ge=0)
    used_limit: int = Field(default=0, ge=0)
    usage_limit_per_user: int = Field(default=0, ge=0)
    limit_usage_to_x_items: int = Field(default=0, ge=0)
    is_active: bool = True
    individual_use: bool = False
    free_shipping: bool = False
    exclude_sale_items: bool = False
    minimum_amount: float = Field(default=0.0, ge=0.0)
    maximum_amount: float = Field(default=0.0, ge=0.0)
    product_ids: list[str] = Field(default_factory=list)
    excluded_product_ids: list[str] = Field(default_factory=list)
    product_categories: list[str] = Field(default_factory=list)
    excluded_product_categories: list[str] = Field(default_factory=list)
    email_restrictions: list[str] = Field(default_factory=list)
    used_by: list[str] = Field(default_factory=list)
    meta_data: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _percentage_within_range(self) -> Coupon:
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_amount > 100.0:
            raise ValueError(
                f"percentage discount must be <= 100, got {self.discount_amount}"
            )
        return self

    @model_validator(mode="after")
    def _schedule_complete(self) -> Coupon:
        if self.validity == CouponValidity.SCHEDULED:
            if self.validity_start is None or self.validity_expire is None:
                raise ValueError("scheduled coupons need validity_start and validity_expire")
            if self.validity_start >= self.validity_expire:
                raise ValueError("validity_start must be before validity_expire")
        return self

    def is_redeemable(self, at: datetime | None = None) -> bool:
        """Active, inside its validity window and not used up."""
        if not self.is_active or self.is_deleted:
            return False
        if self.usage_limit and self.used_limit >= self.usage_limit:
            return False
        if self.validity == CouponValidity.SCHEDULED:
            at = at or datetime.now(timezone.utc)
            return self.validity_start <= at < self.validity_expire
        return True
