"""
CRUD (Create, Read, Update, Delete) operations for the Supplies Inventory service.

This module contains all database operations for inventory items, alerts,
the activity log and user accounts. Nothing here derives alerts or writes
activity entries on its own; see service.py for the orchestration.
"""
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from . import models, schemas
from .config import ACTIVITY_HISTORY_LIMIT

def get_inventory_item(db: Session, item_id: str) -> Optional[models.InventoryItem]:
    """
    Retrieve a single inventory item by ID.

    Args:
        db: Database session
        item_id: ID of the inventory item to retrieve

    Returns:
        InventoryItem object or None if not found
    """
    return db.query(models.InventoryItem).filter(models.InventoryItem.id == item_id).first()

def get_inventory_item_by_product_id(db: Session, product_id: str) -> Optional[models.InventoryItem]:
    """
    Retrieve an inventory item by its business-facing product ID.

    Args:
        db: Database session
        product_id: Product ID to search for

    Returns:
        InventoryItem object or None if not found
    """
    return db.query(models.InventoryItem).filter(models.InventoryItem.product_id == product_id).first()

def get_inventory_items(db: Session) -> List[models.InventoryItem]:
    """
    Retrieve the full inventory snapshot, oldest item first.

    Args:
        db: Database session

    Returns:
        List of InventoryItem objects
    """
    return (
        db.query(models.InventoryItem)
        .order_by(models.InventoryItem.created_at, models.InventoryItem.product_id)
        .all()
    )

def create_inventory_item(db: Session, item: schemas.InventoryItemCreate, updated_by: str) -> models.InventoryItem:
    """
    Create a new inventory item in the database.

    Args:
        db: Database session
        item: Inventory item data to create
        updated_by: Email of the acting user

    Returns:
        Created InventoryItem object
    """
    now = datetime.utcnow()
    db_item = models.InventoryItem(
        **item.model_dump(),
        created_at=now,
        last_updated=now,
        updated_by=updated_by,
    )
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item

def update_inventory_item(
    db: Session,
    item_id: str,
    item: schemas.InventoryItemUpdate,
    updated_by: str
) -> Optional[models.InventoryItem]:
    """
    Update an existing inventory item and refresh its audit fields.

    Args:
        db: Database session
        item_id: ID of the inventory item to update
        item: Updated item data (only provided fields will be updated)
        updated_by: Email of the acting user

    Returns:
        Updated InventoryItem object or None if not found
    """
    db_item = get_inventory_item(db, item_id)
    if db_item is None:
        return None

    update_data = item.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_item, key, value)
    db_item.last_updated = datetime.utcnow()
    db_item.updated_by = updated_by

    db.commit()
    db.refresh(db_item)
    return db_item

def delete_inventory_item(db: Session, item_id: str) -> bool:
    """
    Delete an inventory item from the database.

    Args:
        db: Database session
        item_id: ID of the inventory item to delete

    Returns:
        True if item was deleted, False if not found
    """
    db_item = get_inventory_item(db, item_id)
    if db_item is None:
        return False

    db.delete(db_item)
    db.commit()
    return True


def get_alerts(db: Session) -> List[models.InventoryAlert]:
    """
    Retrieve all stored alerts, newest first.
    """
    return (
        db.query(models.InventoryAlert)
        .order_by(models.InventoryAlert.created_at.desc(), models.InventoryAlert.id)
        .all()
    )

def get_alert(db: Session, alert_id: str) -> Optional[models.InventoryAlert]:
    return db.query(models.InventoryAlert).filter(models.InventoryAlert.id == alert_id).first()

def replace_alerts(db: Session, alerts: Iterable[schemas.AlertCreate]) -> List[models.InventoryAlert]:
    """
    Replace the stored alert set in a single transaction.

    Args:
        db: Database session
        alerts: The complete new alert set

    Returns:
        The stored alerts
    """
    # Flush the deletes first: new alerts may reuse the ids of the old ones
    for existing in db.query(models.InventoryAlert).all():
        db.delete(existing)
    db.flush()
    db.add_all(models.InventoryAlert(**alert.model_dump()) for alert in alerts)
    db.commit()
    return get_alerts(db)

def acknowledge_alert(db: Session, alert_id: str) -> Optional[models.InventoryAlert]:
    """
    Mark an alert as acknowledged.

    Returns:
        Updated InventoryAlert object or None if not found
    """
    db_alert = get_alert(db, alert_id)
    if db_alert is None:
        return None

    db_alert.acknowledged = True
    db.commit()
    db.refresh(db_alert)
    return db_alert

def acknowledge_all_alerts(db: Session) -> int:
    """
    Acknowledge every outstanding alert.

    Returns:
        Number of alerts that changed
    """
    count = (
        db.query(models.InventoryAlert)
        .filter(models.InventoryAlert.acknowledged.is_(False))
        .update({models.InventoryAlert.acknowledged: True}, synchronize_session=False)
    )
    db.commit()
    return count


def append_activity(
    db: Session,
    user_id: str,
    user_name: str,
    action: str,
    details: str,
    item_id: Optional[str] = None,
    item_name: Optional[str] = None
) -> models.ActivityLog:
    """
    Append an entry to the activity log and drop entries beyond the history limit.

    Args:
        db: Database session
        user_id: Acting user's ID
        user_name: Acting user's display name
        action: One of create, update, delete, export, login, logout
        details: Human-readable description
        item_id: Affected item ID (optional)
        item_name: Affected item name (optional)

    Returns:
        Created ActivityLog object
    """
    entry = models.ActivityLog(
        user_id=user_id,
        user_name=user_name,
        action=action,
        details=details,
        item_id=item_id,
        item_name=item_name,
        timestamp=datetime.utcnow(),
    )
    db.add(entry)
    db.flush()

    stale_ids = [
        row.id
        for row in db.query(models.ActivityLog.id)
        .order_by(models.ActivityLog.id.desc())
        .offset(ACTIVITY_HISTORY_LIMIT)
        .all()
    ]
    if stale_ids:
        db.query(models.ActivityLog).filter(
            models.ActivityLog.id.in_(stale_ids)
        ).delete(synchronize_session=False)

    db.commit()
    db.refresh(entry)
    return entry

def get_activities(db: Session, limit: int = ACTIVITY_HISTORY_LIMIT) -> List[models.ActivityLog]:
    """
    Retrieve the activity history, newest first.

    Args:
        db: Database session
        limit: Maximum number of entries to return

    Returns:
        List of ActivityLog objects
    """
    return (
        db.query(models.ActivityLog)
        .order_by(models.ActivityLog.id.desc())
        .limit(limit)
        .all()
    )


def get_user(db: Session, user_id: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    """
    Retrieve a user by email address (case-insensitive).
    """
    return db.query(models.User).filter(models.User.email == email.lower()).first()

def get_users(db: Session) -> List[models.User]:
    return db.query(models.User).order_by(models.User.id).all()

def create_user(db: Session, user_id: str, email: str, name: str, role: str, password_hash: str) -> models.User:
    db_user = models.User(
        id=user_id,
        email=email.lower(),
        name=name,
        role=role,
        password_hash=password_hash,
        is_active=True,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def touch_last_login(db: Session, user: models.User) -> models.User:
    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user
