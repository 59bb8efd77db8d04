"""Domain services package."""

from .pagination import PagePlan, cursor_bounds, plan_page, scoped_filter

__all__ = ["PagePlan", "cursor_bounds", "plan_page", "scoped_filter"]
