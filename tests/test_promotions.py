from datetime import datetime, timezone

import pytest

from conftest import make_ctx, make_user
from mall_admin.core import crud
from mall_admin.core.errors import ErrorCode
from mall_admin.modules.promotions.schemas import PromotionListParams
from mall_admin.modules.promotions.service import PromotionService

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    monkeypatch.setattr(crud, "utcnow", lambda: NOW)


@pytest.fixture
def service(backends):
    return PromotionService(backends)


@pytest.fixture
def tenant(db):
    return db.seed("tenants", {"tenant_code": "ZR-01", "name": "Zara", "main_floor": "GF", "is_active": True})[0]


def test_create_defaults_to_staging(service, admin_ctx, tenant):
    result = service.create_promotion(admin_ctx, {"title": "Mid Season Sale", "tenant_id": tenant["id"]})
    assert result.success, result.error
    assert result.data.status == "staging"
    assert result.data.published_at is None


def test_invalid_tenant(service, admin_ctx):
    result = service.create_promotion(admin_ctx, {"title": "Mid Season Sale", "tenant_id": "zara"})
    assert result.error == "Please select a valid tenant"


def test_status_change_stamps_first_publish(service, db, admin_ctx, tenant):
    promotion = db.seed("promotions", {"title": "Sale", "tenant_id": tenant["id"], "status": "staging"})[0]

    result = service.update_status(admin_ctx, promotion["id"], {"status": "published"})

    assert result.success, result.error
    assert result.message == "Promotion published"
    assert result.data.published_at == NOW
    log = db.rows("admin_activity_logs")[0]
    assert log["action"] == "update_status"
    assert log["old_values"] == {"status": "staging", "published_at": None}
    assert log["new_values"]["published_at"] == NOW.isoformat()


def test_status_change_needs_publish_permission(service, db, tenant):
    promotion = db.seed("promotions", {"title": "Sale", "tenant_id": tenant["id"], "status": "staging"})[0]
    editor = make_ctx(make_user(permissions=["promotions.edit"]))
    assert service.update_status(editor, promotion["id"], {"status": "published"}).code == ErrorCode.FORBIDDEN


def test_status_change_checks_identity_before_input(service, db, tenant):
    promotion = db.seed("promotions", {"title": "Sale", "tenant_id": tenant["id"], "status": "staging"})[0]
    result = service.update_status(make_ctx(None), promotion["id"], {"status": "archived"})
    assert result.code == ErrorCode.UNAUTHORIZED
    viewer = make_ctx(make_user(permissions=["promotions.view"]))
    assert service.update_status(viewer, promotion["id"], {"status": "archived"}).code == ErrorCode.FORBIDDEN


def test_unknown_status_rejected(service, db, admin_ctx, tenant):
    promotion = db.seed("promotions", {"title": "Sale", "tenant_id": tenant["id"], "status": "staging"})[0]
    result = service.update_status(admin_ctx, promotion["id"], {"status": "archived"})
    assert result.code == ErrorCode.VALIDATION_FAILED


def test_auto_expire(service, db, admin_ctx, tenant, revalidator):
    db.seed(
        "promotions",
        {"title": "Ended", "tenant_id": tenant["id"], "status": "published", "end_date": "2026-04-30T00:00:00+00:00"},
        {"title": "Running", "tenant_id": tenant["id"], "status": "published", "end_date": "2026-05-20T00:00:00+00:00"},
        {"title": "Draft", "tenant_id": tenant["id"], "status": "staging", "end_date": "2026-04-01T00:00:00+00:00"},
    )

    result = service.auto_expire(admin_ctx)

    assert result.data == 1
    assert result.message == "1 promotion(s) expired"
    statuses = {row["title"]: row["status"] for row in db.rows("promotions")}
    assert statuses == {"Ended": "expired", "Running": "published", "Draft": "staging"}
    assert "/promotions" in revalidator.paths


def test_expiring_soon(service, db, tenant):
    db.seed(
        "promotions",
        {"title": "Tomorrow", "tenant_id": tenant["id"], "status": "published", "end_date": "2026-05-02T00:00:00+00:00"},
        {"title": "Next week", "tenant_id": tenant["id"], "status": "published", "end_date": "2026-05-08T00:00:00+00:00"},
        {"title": "Staged", "tenant_id": tenant["id"], "status": "staging", "end_date": "2026-05-02T00:00:00+00:00"},
    )
    assert [p.title for p in service.expiring_soon()] == ["Tomorrow"]


def test_list_filters_by_status_with_tenant(service, db, tenant):
    db.seed(
        "promotions",
        {"title": "A", "tenant_id": tenant["id"], "status": "published"},
        {"title": "B", "tenant_id": tenant["id"], "status": "expired"},
    )
    page = service.list_promotions(PromotionListParams(status="published"))
    assert [p.title for p in page.data] == ["A"]
    assert page.data[0].tenant.tenant_code == "ZR-01"
    assert service.list_promotions(PromotionListParams(status="all")).total == 2


def test_tenant_options_only_active(service, db, tenant):
    db.seed("tenants", {"tenant_code": "HM-01", "name": "H&M", "main_floor": "1F", "is_active": False})
    assert [t.name for t in service.tenant_options()] == ["Zara"]
