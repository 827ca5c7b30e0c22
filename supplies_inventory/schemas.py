"""
Pydantic schemas for request/response validation in the Supplies Inventory service.

These schemas define the structure of data for API requests and responses.
Input validation that the storefront form used to perform (non-negative
quantities and prices, known categories) is enforced here so that malformed
records never reach the alert and dashboard computations.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional, get_args
from pydantic import BaseModel, EmailStr, Field, field_validator

Category = Literal[
    "Paper",
    "Ink & Toners",
    "Equipment",
    "Finishing Materials",
    "Software",
    "Maintenance Supplies",
    "Office Supplies",
    "Other",
]
CATEGORIES = get_args(Category)

AlertType = Literal["out_of_stock", "low_stock", "reorder_needed"]
Severity = Literal["low", "medium", "high"]
ActivityAction = Literal["create", "update", "delete", "export", "login", "logout"]
UserRole = Literal["admin", "manager", "user"]


class InventoryItemBase(BaseModel):
    """Base schema with common inventory item attributes."""
    product_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: Category
    quantity: int = Field(..., ge=0)
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    reorder_point: int = Field(..., ge=0)
    supplier: str = Field(..., min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    barcode: Optional[str] = None

class InventoryItemCreate(InventoryItemBase):
    """Schema for creating a new inventory item."""
    pass

class InventoryItemUpdate(BaseModel):
    """Schema for updating an existing inventory item. All fields are optional."""
    product_id: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None
    quantity: Optional[int] = Field(None, ge=0)
    unit_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    reorder_point: Optional[int] = Field(None, ge=0)
    supplier: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    barcode: Optional[str] = None

    @field_validator("product_id", "name", "category", "quantity", "unit_price", "reorder_point", "supplier")
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; these columns cannot be cleared.
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value

class InventoryItem(InventoryItemBase):
    """
    Schema for inventory item responses, includes all database fields.

    Attributes:
        id (str): Item's opaque identifier
        last_updated (datetime): When the item was last changed
        created_at (datetime): When the item was created
        updated_by (str): Email of the user who last changed the item
    """
    id: str
    last_updated: datetime
    created_at: datetime
    updated_by: str

    class Config:
        from_attributes = True


class AlertCreate(BaseModel):
    """A derived alert, ready to be stored."""
    id: str
    item_id: str
    item_name: str
    alert_type: AlertType
    severity: Severity
    message: str
    current_quantity: int
    reorder_point: int
    acknowledged: bool = False
    created_at: datetime

class InventoryAlert(AlertCreate):
    """Schema for alert responses."""

    class Config:
        from_attributes = True

class AlertSummary(BaseModel):
    """Counts shown above the alert list."""
    total: int
    unacknowledged: int
    high_severity: int
    out_of_stock: int


class ActivityLog(BaseModel):
    """Schema for activity log responses."""
    id: int
    user_id: str
    user_name: str
    action: ActivityAction
    item_id: Optional[str] = None
    item_name: Optional[str] = None
    details: str
    timestamp: datetime

    class Config:
        from_attributes = True


class User(BaseModel):
    """
    Schema for user responses, excludes the password hash.
    """
    id: str
    email: EmailStr
    name: str
    role: UserRole
    last_login: Optional[datetime] = None
    is_active: bool

    class Config:
        from_attributes = True

class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str

class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
    user: User


class CategorySummary(BaseModel):
    """Item count and stock value for one category."""
    name: str
    count: int
    value: Decimal

class DashboardStats(BaseModel):
    """Summary statistics for the dashboard."""
    total_items: int
    total_value: Decimal
    low_stock_items: int
    out_of_stock_items: int
    categories_count: int
    recent_activities: List[ActivityLog]
    top_categories: List[CategorySummary]
