"""
Dashboard aggregation over an inventory snapshot and the activity history.
"""
from decimal import Decimal
from typing import Iterable, Sequence

from . import schemas
from .config import RECENT_ACTIVITY_COUNT


def item_value(item) -> Decimal:
    return item.quantity * Decimal(str(item.unit_price))


def build_dashboard_stats(items: Iterable, activities: Sequence) -> schemas.DashboardStats:
    """
    Reduce the inventory and the newest-first activity history to dashboard figures.

    Args:
        items: Inventory items with quantity, unit_price, reorder_point and category
        activities: Activity log entries, newest first

    Returns:
        DashboardStats. Category totals are ordered by stock value, highest
        first; categories with equal value keep the order in which they were
        first seen.
    """
    total_items = 0
    total_value = Decimal(0)
    low_stock_items = 0
    out_of_stock_items = 0
    categories = {}

    for item in items:
        value = item_value(item)
        total_items += 1
        total_value += value

        if item.quantity == 0:
            out_of_stock_items += 1
        elif item.quantity <= item.reorder_point:
            low_stock_items += 1

        summary = categories.setdefault(item.category, {"count": 0, "value": Decimal(0)})
        summary["count"] += 1
        summary["value"] += value

    # sorted() is stable, so ties stay in first-seen order
    top_categories = sorted(
        (
            schemas.CategorySummary(name=name, count=data["count"], value=data["value"])
            for name, data in categories.items()
        ),
        key=lambda category: category.value,
        reverse=True,
    )

    return schemas.DashboardStats(
        total_items=total_items,
        total_value=total_value,
        low_stock_items=low_stock_items,
        out_of_stock_items=out_of_stock_items,
        categories_count=len(categories),
        recent_activities=[
            schemas.ActivityLog.model_validate(activity)
            for activity in activities[:RECENT_ACTIVITY_COUNT]
        ],
        top_categories=top_categories,
    )
