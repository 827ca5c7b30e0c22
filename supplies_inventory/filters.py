"""
Filtering and sorting helpers for item and alert listings.

These operate on already-loaded snapshots; nothing here touches the database.
"""
from decimal import Decimal
from typing import Iterable, List, Literal, Optional

from . import schemas

SortKey = Literal["name", "quantity", "price", "category"]
AlertStatusFilter = Literal["all", "acknowledged", "unacknowledged"]
AlertSeverityFilter = Literal["all", "low", "medium", "high"]


def stock_status(quantity: int, reorder_point: int) -> str:
    """Classify an item as out_of_stock, low_stock or in_stock."""
    if quantity == 0:
        return "out_of_stock"
    if quantity <= reorder_point:
        return "low_stock"
    return "in_stock"


def filter_items(items: Iterable, search: Optional[str] = None, category: Optional[str] = None) -> List:
    """
    Filter items by a search term and category.

    Args:
        items: Inventory items
        search: Case-insensitive substring matched against name, product ID and supplier
        category: Exact category name; None or "all" disables the filter

    Returns:
        Matching items in input order
    """
    term = (search or "").strip().lower()
    matches = []
    for item in items:
        if term and not (
            term in item.name.lower()
            or term in item.product_id.lower()
            or term in item.supplier.lower()
        ):
            continue
        if category and category != "all" and item.category != category:
            continue
        matches.append(item)
    return matches


def sort_items(items: Iterable, sort_by: SortKey = "name") -> List:
    """
    Sort items for display.

    name and category sort ascending, quantity and price sort descending.
    Unknown keys leave the input order unchanged.
    """
    items = list(items)
    if sort_by == "name":
        return sorted(items, key=lambda item: item.name.lower())
    if sort_by == "category":
        return sorted(items, key=lambda item: item.category.lower())
    if sort_by == "quantity":
        return sorted(items, key=lambda item: item.quantity, reverse=True)
    if sort_by == "price":
        return sorted(items, key=lambda item: Decimal(str(item.unit_price)), reverse=True)
    return items


def filter_alerts(alerts: Iterable, status: AlertStatusFilter = "all", severity: AlertSeverityFilter = "all") -> List:
    """
    Filter alerts by acknowledgement status and severity.

    Args:
        alerts: Stored alerts
        status: "all", "acknowledged" or "unacknowledged"
        severity: "all", "low", "medium" or "high"
    """
    matches = []
    for alert in alerts:
        if status == "acknowledged" and not alert.acknowledged:
            continue
        if status == "unacknowledged" and alert.acknowledged:
            continue
        if severity != "all" and alert.severity != severity:
            continue
        matches.append(alert)
    return matches


def alert_summary(alerts: Iterable) -> schemas.AlertSummary:
    alerts = list(alerts)
    return schemas.AlertSummary(
        total=len(alerts),
        unacknowledged=sum(1 for alert in alerts if not alert.acknowledged),
        high_severity=sum(1 for alert in alerts if alert.severity == "high"),
        out_of_stock=sum(1 for alert in alerts if alert.alert_type == "out_of_stock"),
    )
