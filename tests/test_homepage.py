import pytest

from conftest import make_ctx, make_user
from mall_admin.core.errors import ErrorCode
from mall_admin.modules.homepage.feed import resolve
from mall_admin.modules.homepage.service import HomepageService


@pytest.fixture
def service(backends):
    return HomepageService(backends)


def test_custom_override_wins_over_reference():
    item = {"id": "1", "content_type": "event", "reference_id": "e1", "custom_title": "Weekend Parade"}
    resolved = resolve(item, {"id": "e1", "title": "Parade", "images": [{"url": "https://cdn.test/p.jpg"}]})
    assert resolved.display_title == "Weekend Parade"
    assert resolved.display_image == "https://cdn.test/p.jpg"
    assert resolved.reference_data.title == "Parade"


def test_tenant_reference_falls_back_to_name_and_logo():
    item = {"id": "1", "content_type": "tenant", "reference_id": "t1"}
    resolved = resolve(item, {"id": "t1", "name": "Zara", "logo_url": "https://cdn.test/zara.png"})
    assert resolved.display_title == "Zara"
    assert resolved.display_image == "https://cdn.test/zara.png"


def test_deleted_reference_resolves_to_custom_fields(service, db):
    event = db.seed("events", {"title": "Parade", "slug": "parade", "images": ["https://cdn.test/p.jpg"]})[0]
    db.seed(
        "whats_on",
        {"content_type": "event", "reference_id": event["id"], "sort_order": 1, "is_active": True},
        {"content_type": "post", "reference_id": "0b5d4f3e-1111-4c1a-9d2e-000000000000", "custom_title": "Gone",
         "sort_order": 2, "is_active": True},
        {"content_type": "custom", "custom_title": "Car Free Day", "sort_order": 0, "is_active": False},
    )

    items = service.list_whats_on()

    assert [item.display_title for item in items] == ["Car Free Day", "Parade", "Gone"]
    assert items[1].display_image == "https://cdn.test/p.jpg"
    assert items[2].reference_data is None
    assert [item.display_title for item in service.list_whats_on(active_only=True)] == ["Parade", "Gone"]


def test_custom_item_needs_title(service, admin_ctx):
    result = service.create_whats_on(admin_ctx, {"content_type": "custom", "custom_title": "x"})
    assert result.code == ErrorCode.VALIDATION_FAILED
    assert result.error == "Custom items require a title, other types require a reference"


def test_reference_item_needs_reference(service, admin_ctx):
    result = service.create_whats_on(admin_ctx, {"content_type": "tenant"})
    assert result.error == "Custom items require a title, other types require a reference"


def test_rule_applies_to_merged_update(service, db, admin_ctx):
    item = db.seed("whats_on", {"content_type": "custom", "custom_title": "Car Free Day", "sort_order": 0})[0]
    result = service.update_whats_on(admin_ctx, item["id"], {"content_type": "tenant"})
    assert result.code == ErrorCode.VALIDATION_FAILED
    assert service.update_whats_on(admin_ctx, item["id"], {"custom_description": "Sunday morning"}).success


def test_reorder(service, db, admin_ctx, revalidator):
    first, second = db.seed(
        "whats_on",
        {"content_type": "custom", "custom_title": "First", "sort_order": 0},
        {"content_type": "custom", "custom_title": "Second", "sort_order": 1},
    )

    result = service.reorder_whats_on(admin_ctx, {"items": [
        {"id": first["id"], "sort_order": 1},
        {"id": second["id"], "sort_order": 0},
    ]})

    assert result.success
    assert result.message == "Order updated successfully"
    assert [i.custom_title for i in service.list_whats_on()] == ["Second", "First"]
    log = db.rows("admin_activity_logs")[0]
    assert log["action"] == "reorder"
    assert log["metadata"] == {"count": 2}
    assert "/homepage/whats-on" in revalidator.paths


def test_reorder_needs_manage(service, db):
    editor = make_ctx(make_user(permissions=["whats_on.edit"]))
    result = service.reorder_whats_on(editor, {"items": []})
    assert result.code == ErrorCode.FORBIDDEN


def test_restaurant_featured_once(service, db, admin_ctx):
    tenant = db.seed("tenants", {"tenant_code": "SB-01", "name": "Starbucks", "is_active": True})[0]
    assert service.create_restaurant(admin_ctx, {"tenant_id": tenant["id"]}).success
    result = service.create_restaurant(admin_ctx, {"tenant_id": tenant["id"]})
    assert result.code == ErrorCode.DUPLICATE
    assert result.error == "This restaurant is already featured"
    assert service.list_restaurants()[0].tenant.name == "Starbucks"


def test_restaurant_options_prefer_food_categories(service, db):
    food, fashion = db.seed(
        "tenant_categories",
        {"name": "food-beverage", "display_name": "Food & Beverage"},
        {"name": "fashion", "display_name": "Fashion"},
    )
    db.seed(
        "tenants",
        {"tenant_code": "SB-01", "name": "Starbucks", "category_id": food["id"], "is_active": True},
        {"tenant_code": "ZR-01", "name": "Zara", "category_id": fashion["id"], "is_active": True},
    )
    assert [t.name for t in service.restaurant_options()] == ["Starbucks"]


def test_reference_options(service, db):
    db.seed(
        "tenants",
        {"tenant_code": "SB-01", "name": "Starbucks", "logo_url": "https://cdn.test/sb.png", "is_active": True},
        {"tenant_code": "ZR-01", "name": "Zara", "is_active": False},
    )
    options = service.reference_options("tenant")
    assert [(o.label, o.image) for o in options] == [("Starbucks", "https://cdn.test/sb.png")]
    assert service.reference_options("custom") == []
