"""
Inventory workflows.

Every mutating operation runs the same sequence explicitly: write the change,
reload the inventory snapshot, re-derive the alert set and store it, append
an activity entry for the acting user, and retire the cached dashboard.
"""
import logging
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session

from . import alerts, auth, cache, crud, dashboard, models, schemas
from .config import DASHBOARD_CACHE_TTL

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"user_id": "1", "email": "admin@mworx.com", "name": "M-Worx Administrator", "role": "admin"},
    {"user_id": "2", "email": "manager@mworx.com", "name": "Inventory Manager", "role": "manager"},
]

SAMPLE_INVENTORY = [
    schemas.InventoryItemCreate(
        product_id="MWX-001",
        name="A4 Premium Paper",
        category="Paper",
        quantity=250,
        unit_price=Decimal("12.99"),
        reorder_point=50,
        supplier="Paper Plus Suppliers",
        description="High-quality A4 printing paper, 80gsm",
        location="Warehouse A-1",
        barcode="1234567890123",
    ),
    schemas.InventoryItemCreate(
        product_id="MWX-002",
        name="Black Toner Cartridge",
        category="Ink & Toners",
        quantity=15,
        unit_price=Decimal("89.99"),
        reorder_point=25,
        supplier="Ink Solutions Ltd",
        description="Compatible black toner for HP LaserJet series",
        location="Storage B-3",
        barcode="2345678901234",
    ),
    schemas.InventoryItemCreate(
        product_id="MWX-003",
        name="Large Format Printer",
        category="Equipment",
        quantity=2,
        unit_price=Decimal("2499.99"),
        reorder_point=1,
        supplier="Digital Print Equipment Co",
        description="Professional large format inkjet printer",
        location="Equipment Room",
        barcode="3456789012345",
    ),
]


def refresh_alerts(db: Session) -> List[models.InventoryAlert]:
    """
    Re-derive the alert set from the current inventory and store it.

    Acknowledgements on alerts that are still active are kept.
    """
    snapshot = crud.get_inventory_items(db)
    derived = alerts.derive_alerts(snapshot)
    derived = alerts.reconcile_acknowledgements(derived, crud.get_alerts(db))
    stored = crud.replace_alerts(db, derived)
    logger.info(f"Alert set refreshed: {len(stored)} active alerts for {len(snapshot)} items")
    return stored


def record_activity(
    db: Session,
    actor: models.User,
    action: str,
    details: str,
    item_id: Optional[str] = None,
    item_name: Optional[str] = None
) -> models.ActivityLog:
    """Append an activity entry stamped with the acting user."""
    entry = crud.append_activity(
        db,
        user_id=actor.id,
        user_name=actor.name,
        action=action,
        details=details,
        item_id=item_id,
        item_name=item_name,
    )
    cache.invalidate(cache.DASHBOARD_CACHE_KEY)
    return entry


def add_item(db: Session, item: schemas.InventoryItemCreate, actor: models.User) -> models.InventoryItem:
    """
    Create an inventory item on behalf of a user.

    The caller is responsible for rejecting duplicate product IDs first.
    """
    db_item = crud.create_inventory_item(db, item, updated_by=actor.email)
    refresh_alerts(db)
    record_activity(
        db, actor, "create", f"Created new inventory item: {db_item.name}",
        item_id=db_item.id, item_name=db_item.name,
    )
    logger.info(f"{actor.email} created item {db_item.product_id} ({db_item.id})")
    return db_item


def update_item(
    db: Session,
    item_id: str,
    updates: schemas.InventoryItemUpdate,
    actor: models.User
) -> Optional[models.InventoryItem]:
    """
    Apply a partial update to an item on behalf of a user.

    Returns:
        The updated item, or None if it does not exist
    """
    existing = crud.get_inventory_item(db, item_id)
    if existing is None:
        return None
    previous_name = existing.name

    db_item = crud.update_inventory_item(db, item_id, updates, updated_by=actor.email)
    refresh_alerts(db)
    record_activity(
        db, actor, "update", f"Updated inventory item: {previous_name}",
        item_id=db_item.id, item_name=previous_name,
    )
    logger.info(f"{actor.email} updated item {db_item.product_id} ({db_item.id})")
    return db_item


def delete_item(db: Session, item_id: str, actor: models.User) -> bool:
    """
    Delete an item on behalf of a user.

    Returns:
        True if the item was deleted, False if it does not exist
    """
    db_item = crud.get_inventory_item(db, item_id)
    if db_item is None:
        return False
    name = db_item.name

    crud.delete_inventory_item(db, item_id)
    refresh_alerts(db)
    record_activity(
        db, actor, "delete", f"Deleted inventory item: {name}",
        item_id=item_id, item_name=name,
    )
    logger.info(f"{actor.email} deleted item {item_id}")
    return True


def record_login(db: Session, user: models.User) -> models.User:
    user = crud.touch_last_login(db, user)
    record_activity(db, user, "login", "User logged in successfully")
    logger.info(f"{user.email} logged in")
    return user


def record_logout(db: Session, user: models.User) -> None:
    record_activity(db, user, "logout", "User logged out")
    logger.info(f"{user.email} logged out")


def record_export(db: Session, actor: models.User, count: int) -> None:
    record_activity(db, actor, "export", f"Exported {count} inventory items to CSV")


def get_dashboard_stats(db: Session) -> schemas.DashboardStats:
    """
    Return dashboard statistics, served from Redis when a fresh copy exists.

    The key is resolved before the database is read, so a result computed
    while another request invalidates the cache lands in a retired generation.
    """
    key = cache.versioned_key(cache.DASHBOARD_CACHE_KEY)
    cached = cache.get_cache(key) if key else None
    if cached is not None:
        return schemas.DashboardStats.model_validate(cached)

    stats = dashboard.build_dashboard_stats(
        crud.get_inventory_items(db),
        crud.get_activities(db),
    )
    if key:
        cache.set_cache(key, stats.model_dump(mode="json"), ttl=DASHBOARD_CACHE_TTL)
    return stats


def seed_demo_users(db: Session, password: str) -> None:
    """Create the demo accounts that do not exist yet."""
    for demo in DEMO_USERS:
        if crud.get_user_by_email(db, demo["email"]) is None:
            crud.create_user(db, password_hash=auth.hash_password(password), **demo)
            logger.info(f"Seeded demo user {demo['email']}")


def seed_sample_inventory(db: Session) -> None:
    """Load the sample catalogue into an empty inventory."""
    if crud.get_inventory_items(db):
        return
    for item in SAMPLE_INVENTORY:
        crud.create_inventory_item(db, item, updated_by=DEMO_USERS[0]["email"])
    refresh_alerts(db)
    logger.info(f"Seeded {len(SAMPLE_INVENTORY)} sample inventory items")
