"""
    Supplies Inventory Service API

    This module implements a FastAPI-based service for tracking printing-supplies
    stock. It provides endpoints for managing inventory items, reviewing and
    acknowledging stock alerts, reading the activity log and the dashboard
    summary, with PostgreSQL database persistence.

    The service exposes:
    - Authentication endpoints for the demo accounts (login, logout, me)
    - CRUD endpoints for inventory items
    - Alert listing and acknowledgement
    - Dashboard statistics and activity history
    - CSV export of the inventory
    - Health endpoint: Provides service health status for monitoring and orchestration
"""
from contextlib import asynccontextmanager
from typing import List, Optional
import csv
import io
import logging
import uvicorn
from fastapi import FastAPI, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from . import auth, crud, filters, models, schemas, service
from .config import ACTIVITY_HISTORY_LIMIT, DEMO_PASSWORD, LOG_LEVEL, SEED_SAMPLE_DATA
from .database import SessionLocal, engine, get_db

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
models.Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        service.seed_demo_users(db, DEMO_PASSWORD)
        if SEED_SAMPLE_DATA:
            service.seed_sample_inventory(db)
    finally:
        db.close()
    yield


app = FastAPI(title="supplies-inventory-service", lifespan=lifespan)

@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the inventory service.

    Returns:
        dict: A dictionary containing the health status of the service.
            - status (str): "healthy" if the service is operational.

    Example:
        GET /healthz
        Response: {"status": "healthy"}
    """
    return {"status": "healthy"}


@app.post("/auth/login", response_model=schemas.Token)
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate a demo user and record the login.

    Raises:
        HTTPException: 401 if credentials are invalid
    """
    user = auth.authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = service.record_login(db, user)
    return schemas.Token(
        access_token=auth.issue_token(user),
        user=schemas.User.model_validate(user),
    )

@app.post("/auth/logout", response_model=dict)
def logout(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """
    Record a logout. Tokens are stateless, so the client simply discards its token.
    """
    service.record_logout(db, current_user)
    return {"status": "logged out"}

@app.get("/auth/me", response_model=schemas.User)
def get_current_user_info(current_user: models.User = Depends(auth.get_current_user)):
    """Get current authenticated user information."""
    return current_user


@app.get("/categories", response_model=List[str])
def list_categories():
    """List the supply categories an item may belong to."""
    return list(schemas.CATEGORIES)


@app.get("/items", response_model=List[schemas.InventoryItem])
def list_inventory_items(
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: filters.SortKey = "name",
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """
    List inventory items (authenticated users only).

    Args:
        search: Case-insensitive match on name, product ID or supplier
        category: Category name, or "all"
        sort_by: name, quantity, price or category
        db: Database session (injected)
        current_user: Current authenticated user (injected)

    Returns:
        List of inventory item objects
    """
    items = filters.filter_items(crud.get_inventory_items(db), search=search, category=category)
    return filters.sort_items(items, sort_by)

@app.get("/items/{item_id}", response_model=schemas.InventoryItem)
def get_inventory_item(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """
    Get a single inventory item by ID (authenticated users only).

    Raises:
        HTTPException: 404 if item not found
    """
    db_item = crud.get_inventory_item(db, item_id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return db_item

@app.post("/items", response_model=schemas.InventoryItem, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    item: schemas.InventoryItemCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.require_staff)
):
    """
    Create a new inventory item (admins and managers).

    Args:
        item: Inventory item data to create
        db: Database session (injected)
        current_user: Current authenticated staff user (injected)

    Returns:
        Created inventory item object

    Raises:
        HTTPException: 400 if the product ID already exists
    """
    if crud.get_inventory_item_by_product_id(db, product_id=item.product_id):
        raise HTTPException(status_code=400, detail="Product ID already exists")
    return service.add_item(db, item, current_user)

@app.put("/items/{item_id}", response_model=schemas.InventoryItem)
def update_inventory_item(
    item_id: str,
    item: schemas.InventoryItemUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.require_staff)
):
    """
    Update an existing inventory item (admins and managers).

    Raises:
        HTTPException: 404 if item not found
        HTTPException: 400 if the new product ID belongs to another item
    """
    if crud.get_inventory_item(db, item_id=item_id) is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")

    if item.product_id is not None:
        clash = crud.get_inventory_item_by_product_id(db, product_id=item.product_id)
        if clash is not None and clash.id != item_id:
            raise HTTPException(status_code=400, detail="Product ID already exists")

    return service.update_item(db, item_id, item, current_user)

@app.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory_item(
    item_id: str,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.require_staff)
):
    """
    Delete an inventory item (admins and managers).

    Raises:
        HTTPException: 404 if item not found
    """
    if not service.delete_item(db, item_id, current_user):
        raise HTTPException(status_code=404, detail="Inventory item not found")


@app.get("/alerts", response_model=List[schemas.InventoryAlert])
def list_alerts(
    status_filter: filters.AlertStatusFilter = Query("all", alias="status"),
    severity: filters.AlertSeverityFilter = "all",
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """
    List the active alerts, optionally filtered by acknowledgement and severity.
    """
    return filters.filter_alerts(crud.get_alerts(db), status=status_filter, severity=severity)

@app.get("/alerts/summary", response_model=schemas.AlertSummary)
def get_alert_summary(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """Counts of total, unacknowledged, high-severity and out-of-stock alerts."""
    return filters.alert_summary(crud.get_alerts(db))

@app.post("/alerts/acknowledge-all", response_model=dict)
def acknowledge_all_alerts(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.require_staff)
):
    """
    Acknowledge every outstanding alert (admins and managers).

    Returns:
        dict: acknowledged_count, the number of alerts that changed
    """
    count = crud.acknowledge_all_alerts(db)
    logger.info(f"{current_user.email} acknowledged {count} alerts")
    return {"acknowledged_count": count}

@app.post("/alerts/{alert_id}/acknowledge", response_model=schemas.InventoryAlert)
def acknowledge_alert(
    alert_id: str,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.require_staff)
):
    """
    Acknowledge a single alert (admins and managers).

    Raises:
        HTTPException: 404 if alert not found
    """
    db_alert = crud.acknowledge_alert(db, alert_id)
    if db_alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return db_alert


@app.get("/dashboard", response_model=schemas.DashboardStats)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """
    Get dashboard statistics (authenticated users).

    Returns:
        Totals, stock value, low/out-of-stock counts, per-category breakdown
        and the ten most recent activities
    """
    return service.get_dashboard_stats(db)


@app.get("/activities", response_model=List[schemas.ActivityLog])
def list_activities(
    limit: int = Query(ACTIVITY_HISTORY_LIMIT, ge=1, le=ACTIVITY_HISTORY_LIMIT),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """List the activity history, newest first."""
    return crud.get_activities(db, limit=limit)


@app.get("/users", response_model=List[schemas.User])
def list_users(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.require_admin)
):
    """List the user accounts (admin only)."""
    return crud.get_users(db)


@app.get("/export/csv")
def export_inventory_csv(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user)
):
    """
    Export all inventory items to CSV (authenticated users).

    Returns:
        CSV file with one row per item
    """
    items = crud.get_inventory_items(db)

    output = io.StringIO()
    writer = csv.writer(output)

    # Write header
    writer.writerow([
        'id', 'product_id', 'name', 'category', 'quantity', 'unit_price',
        'reorder_point', 'supplier', 'location', 'barcode', 'stock_status',
        'last_updated', 'updated_by'
    ])

    # Write data
    for item in items:
        writer.writerow([
            item.id,
            item.product_id,
            item.name,
            item.category,
            item.quantity,
            item.unit_price,
            item.reorder_point,
            item.supplier,
            item.location or '',
            item.barcode or '',
            filters.stock_status(item.quantity, item.reorder_point),
            item.last_updated.isoformat(),
            item.updated_by
        ])

    service.record_export(db, current_user, len(items))

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=inventory.csv"}
    )


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
