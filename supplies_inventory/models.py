"""
SQLAlchemy ORM models for the Supplies Inventory service.

Defines the database schema for inventory items, alerts, the activity log
and the demo user accounts.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric, Boolean, Text
from .database import Base


def generate_id() -> str:
    return str(uuid.uuid4())


class InventoryItem(Base):
    """
    Inventory item model representing a stocked product.

    Attributes:
        id (str): Primary key, opaque identifier
        product_id (str): Business-facing product code (unique), e.g. "MWX-001"
        name (str): Display name
        category (str): One of the fixed supply categories
        quantity (int): Units in stock
        unit_price (Decimal): Price per unit
        reorder_point (int): Quantity at or below which restocking is due
        supplier (str): Supplier name
        description (str): Optional free text
        location (str): Optional storage location
        barcode (str): Optional barcode
        last_updated (datetime): Timestamp of the last mutation
        created_at (datetime): Timestamp when the item was created
        updated_by (str): Email of the user who last changed the item
    """
    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, index=True, default=generate_id)
    product_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)
    reorder_point = Column(Integer, nullable=False, default=0)
    supplier = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    barcode = Column(String, nullable=True)
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_by = Column(String, nullable=False)


class InventoryAlert(Base):
    """
    Stock alert derived from an inventory item.

    The whole alert table is replaced every time inventory changes.

    Attributes:
        id (str): Deterministic key, "alert-{item_id}-{alert_type}"
        item_id (str): Source item ID
        item_name (str): Source item name at derivation time
        alert_type (str): "out_of_stock", "low_stock" or "reorder_needed"
        severity (str): "low", "medium" or "high"
        message (str): Human-readable description
        current_quantity (int): Item quantity at derivation time
        reorder_point (int): Item reorder point at derivation time
        acknowledged (bool): Whether a user has handled the alert
        created_at (datetime): When the condition was first raised
    """
    __tablename__ = "inventory_alerts"

    id = Column(String, primary_key=True, index=True)
    item_id = Column(String(36), nullable=False, index=True)
    item_name = Column(String, nullable=False)
    alert_type = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    current_quantity = Column(Integer, nullable=False)
    reorder_point = Column(Integer, nullable=False)
    acknowledged = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ActivityLog(Base):
    """
    Append-only audit trail entry.

    Attributes:
        id (int): Primary key, auto-incrementing; higher means newer
        user_id (str): Acting user's ID
        user_name (str): Acting user's display name
        action (str): create, update, delete, export, login or logout
        item_id (str): Affected item ID (optional)
        item_name (str): Affected item name (optional)
        details (str): Human-readable description
        timestamp (datetime): When the action happened
    """
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    action = Column(String, nullable=False)
    item_id = Column(String(36), nullable=True)
    item_name = Column(String, nullable=True)
    details = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)


class User(Base):
    """
    Demo user account.

    Attributes:
        id (str): Primary key
        email (str): Login key (unique)
        name (str): Display name
        role (str): admin, manager or user
        password_hash (str): Hashed password
        last_login (datetime): Timestamp of the last successful login
        is_active (bool): Whether the account may log in
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, default="user", nullable=False)
    password_hash = Column(String, nullable=False)
    last_login = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
