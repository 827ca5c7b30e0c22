"""
Stock alert derivation.

Alerts are never authored directly. They are recomputed from the full
inventory snapshot after every inventory change and replace the stored set.
"""
from datetime import datetime
from typing import Iterable, List, Optional

from . import schemas


def alert_id(item_id: str, alert_type: str) -> str:
    return f"alert-{item_id}-{alert_type}"


def derive_alerts(items: Iterable, now: Optional[datetime] = None) -> List[schemas.AlertCreate]:
    """
    Compute the active alerts for an inventory snapshot.

    Items are evaluated in snapshot order and at most one alert is produced
    per item:

    - quantity == 0: out_of_stock, high
    - quantity <= reorder_point / 2: reorder_needed, high
    - quantity <= reorder_point: low_stock, medium
    - otherwise no alert

    The midpoint is not rounded: with a reorder point of 25, a quantity of
    13 is low_stock while 12 is reorder_needed.

    Args:
        items: Inventory items (ORM rows or schemas) with id, name,
            quantity and reorder_point attributes
        now: Timestamp stamped on every alert (defaults to utcnow)

    Returns:
        List of unacknowledged AlertCreate records
    """
    created_at = now or datetime.utcnow()
    derived = []

    for item in items:
        if item.quantity == 0:
            alert_type, severity = "out_of_stock", "high"
            message = f"{item.name} is out of stock"
        elif item.quantity <= item.reorder_point:
            if item.quantity <= item.reorder_point / 2:
                alert_type, severity = "reorder_needed", "high"
            else:
                alert_type, severity = "low_stock", "medium"
            message = f"{item.name} is running low ({item.quantity} remaining)"
        else:
            continue

        derived.append(schemas.AlertCreate(
            id=alert_id(item.id, alert_type),
            item_id=item.id,
            item_name=item.name,
            alert_type=alert_type,
            severity=severity,
            message=message,
            current_quantity=item.quantity,
            reorder_point=item.reorder_point,
            acknowledged=False,
            created_at=created_at,
        ))

    return derived


def reconcile_acknowledgements(derived: List[schemas.AlertCreate], previous: Iterable) -> List[schemas.AlertCreate]:
    """
    Carry acknowledgement state over from the previously stored alert set.

    An alert whose (alert_type, item_id) pair was already active keeps its
    acknowledged flag and its first created_at. A condition that changes
    type (low_stock to out_of_stock, say) counts as a new alert.

    Args:
        derived: Freshly derived alerts
        previous: Alerts currently stored

    Returns:
        The derived alerts with prior state re-applied
    """
    prior = {(alert.alert_type, alert.item_id): alert for alert in previous}

    reconciled = []
    for alert in derived:
        match = prior.get((alert.alert_type, alert.item_id))
        if match is not None:
            alert = alert.model_copy(update={
                "acknowledged": match.acknowledged,
                "created_at": match.created_at,
            })
        reconciled.append(alert)
    return reconciled
