from decimal import Decimal

from supplies_inventory import crud, schemas
from supplies_inventory.alerts import derive_alerts

from conftest import ADMIN_EMAIL, MANAGER_EMAIL, item_payload


def test_create_and_get_item(db):
    item = crud.create_inventory_item(db, schemas.InventoryItemCreate(**item_payload()), updated_by=ADMIN_EMAIL)

    assert item.id
    assert item.unit_price == Decimal("24.50")
    assert item.updated_by == ADMIN_EMAIL
    assert item.created_at == item.last_updated
    assert crud.get_inventory_item(db, item.id).product_id == "MWX-100"
    assert crud.get_inventory_item_by_product_id(db, "MWX-100").id == item.id


def test_update_refreshes_audit_fields(db):
    item = crud.create_inventory_item(db, schemas.InventoryItemCreate(**item_payload()), updated_by=ADMIN_EMAIL)
    created_at = item.created_at

    updated = crud.update_inventory_item(
        db, item.id, schemas.InventoryItemUpdate(quantity=3), updated_by=MANAGER_EMAIL
    )

    assert updated.quantity == 3
    assert updated.name == "Cyan Ink"
    assert updated.updated_by == MANAGER_EMAIL
    assert updated.created_at == created_at
    assert updated.last_updated >= created_at


def test_update_and_delete_missing_item(db):
    assert crud.update_inventory_item(db, "missing", schemas.InventoryItemUpdate(quantity=1), ADMIN_EMAIL) is None
    assert crud.delete_inventory_item(db, "missing") is False


def test_delete_item(db):
    item = crud.create_inventory_item(db, schemas.InventoryItemCreate(**item_payload()), updated_by=ADMIN_EMAIL)

    assert crud.delete_inventory_item(db, item.id) is True
    assert crud.get_inventory_items(db) == []


def test_replace_alerts_discards_previous_set(db):
    first = crud.create_inventory_item(db, schemas.InventoryItemCreate(**item_payload(quantity=0)), ADMIN_EMAIL)
    crud.replace_alerts(db, derive_alerts([first]))
    assert [a.alert_type for a in crud.get_alerts(db)] == ["out_of_stock"]

    first = crud.update_inventory_item(db, first.id, schemas.InventoryItemUpdate(quantity=15), ADMIN_EMAIL)
    stored = crud.replace_alerts(db, derive_alerts([first]))

    assert [a.alert_type for a in stored] == ["low_stock"]
    assert len(crud.get_alerts(db)) == 1


def test_acknowledge_alerts(db):
    items = [
        crud.create_inventory_item(db, schemas.InventoryItemCreate(**item_payload(product_id=f"P-{n}", quantity=0)), ADMIN_EMAIL)
        for n in range(3)
    ]
    stored = crud.replace_alerts(db, derive_alerts(items))

    assert crud.acknowledge_alert(db, stored[0].id).acknowledged is True
    assert crud.acknowledge_alert(db, "missing") is None
    assert crud.acknowledge_all_alerts(db) == 2
    assert all(a.acknowledged for a in crud.get_alerts(db))


def test_activity_history_is_newest_first_and_capped(db):
    for n in range(55):
        crud.append_activity(db, user_id="1", user_name="Admin", action="update", details=f"entry {n}")

    history = crud.get_activities(db, limit=100)

    assert len(history) == 50
    assert history[0].details == "entry 54"
    assert history[-1].details == "entry 5"
    assert [a.details for a in crud.get_activities(db, limit=2)] == ["entry 54", "entry 53"]


def test_user_lookup_is_case_insensitive(db):
    crud.create_user(db, user_id="9", email="Clerk@MWorx.com", name="Clerk", role="user", password_hash="x")

    assert crud.get_user_by_email(db, "clerk@mworx.com").id == "9"
    assert crud.get_user_by_email(db, "CLERK@mworx.com").id == "9"
