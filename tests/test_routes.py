import pytest

from conftest import make_user
from fake_supabase import FakeStorage

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def category(db):
    return db.seed("tenant_categories", {"name": "fashion", "display_name": "Fashion", "sort_order": 0})[0]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    response = client.get("/")
    assert response.headers["X-Frame-Options"] == "DENY"


def test_list_requires_session(client):
    response = client.get("/api/v1/tenants")
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


def test_list_requires_view_permission(client, sign_in):
    sign_in(make_user(permissions=["events.view"]))
    response = client.get("/api/v1/tenants")
    assert response.status_code == 403
    assert response.json() == {
        "success": False, "error": "Insufficient permissions. Required: tenants.view", "code": "FORBIDDEN",
    }


def test_list_envelope(client, db, sign_in, category):
    sign_in(make_user(permissions=["tenants.view"]))
    for i in range(3):
        db.seed("tenants", {"tenant_code": f"T-{i}", "name": f"Tenant {i}", "category_id": category["id"], "main_floor": "GF"})

    response = client.get("/api/v1/tenants", params={"page": 2, "perPage": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["page"] == 2
    assert body["perPage"] == 2
    assert body["totalPages"] == 2
    assert [t["name"] for t in body["data"]] == ["Tenant 2"]


def test_page_size_is_accepted(client, db, sign_in, category):
    sign_in(make_user(permissions=["tenants.view"]))
    for i in range(5):
        db.seed("tenants", {"tenant_code": f"T-{i}", "name": f"Tenant {i}", "category_id": category["id"], "main_floor": "GF"})

    body = client.get("/api/v1/tenants", params={"page": 1, "pageSize": 2}).json()

    assert (body["total"], body["page"], body["perPage"], body["totalPages"]) == (5, 1, 2, 3)
    assert [t["name"] for t in body["data"]] == ["Tenant 0", "Tenant 1"]


def test_walking_every_page_returns_each_row_once(client, db, sign_in, category):
    sign_in(make_user(permissions=["tenants.view"]))
    for i in range(7):
        db.seed("tenants", {"tenant_code": f"T-{i}", "name": "Same name", "category_id": category["id"], "main_floor": "GF"})

    first = client.get("/api/v1/tenants", params={"perPage": 3}).json()
    seen = [t["id"] for t in first["data"]]
    for page in range(2, first["totalPages"] + 1):
        seen += [t["id"] for t in client.get("/api/v1/tenants", params={"page": page, "perPage": 3}).json()["data"]]

    assert first["totalPages"] == 3
    assert len(seen) == len(set(seen)) == first["total"] == 7


def test_invalid_query_reports_first_error(client, sign_in):
    sign_in(make_user(permissions=["tenants.view"]))
    response = client.get("/api/v1/tenants", params={"page": 0})
    assert response.status_code == 422
    assert response.json() == {"success": False, "error": "Page must be at least 1", "code": "VALIDATION_FAILED"}


def test_create_and_duplicate(client, db, sign_in, category, revalidator):
    sign_in(make_user(permissions=["tenants.create"]))
    payload = {"tenant_code": "ZR-01", "name": "Zara", "category_id": category["id"], "main_floor": "GF"}

    created = client.post("/api/v1/tenants", json=payload)
    assert created.status_code == 201
    assert created.json()["message"] == "Tenant created successfully"
    assert created.json()["data"]["tenant_code"] == "ZR-01"
    assert "/tenants" in revalidator.paths

    duplicate = client.post("/api/v1/tenants", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.json() == {"success": False, "error": "A tenant with this code already exists", "code": "DUPLICATE"}

    log = db.rows("admin_activity_logs")[0]
    assert log["user_agent"] == "testclient"


def test_mutation_forbidden(client, sign_in, category):
    sign_in(make_user(permissions=["tenants.view"]))
    response = client.post("/api/v1/tenants", json={"name": "Zara"})
    assert response.status_code == 403
    assert response.json()["error"] == "You don't have permission to create tenants"


def test_validation_failure(client, sign_in, category):
    sign_in(make_user(permissions=["tenants.create"]))
    response = client.post("/api/v1/tenants", json={"tenant_code": "ZR-01", "name": "Zara", "category_id": "fashion"})
    assert response.status_code == 422
    assert response.json()["error"] == "Please select a valid category"


def test_toggle_without_body_flips(client, db, sign_in, category):
    sign_in(make_user(permissions=["tenants.edit"]))
    tenant = db.seed("tenants", {
        "tenant_code": "ZR-01", "name": "Zara", "category_id": category["id"], "main_floor": "GF", "is_active": True,
    })[0]
    response = client.patch(f"/api/v1/tenants/{tenant['id']}/status")
    assert response.status_code == 200
    assert response.json()["message"] == "Tenant deactivated successfully"


def test_not_found(client, sign_in):
    sign_in(make_user(permissions=["tenants.view"]))
    response = client.get("/api/v1/tenants/5b1f7c4e-0000-4000-8000-000000000000")
    assert response.status_code == 404
    assert response.json()["error"] == "Tenant not found"


def test_media_upload(client, db, sign_in):
    sign_in(make_user(permissions=["events.create"]))

    response = client.post(
        "/api/v1/media/upload",
        files={"file": ("poster.png", PNG, "image/png")},
        data={"bucket": "events"},
    )

    assert response.status_code == 201
    url = response.json()["data"]["url"]
    assert url.startswith(f"{FakeStorage.BASE_URL}/storage/v1/object/public/events/")
    assert url.endswith(".png")
    assert list(db.storage.files.values()) == [PNG]

    deleted = client.post("/api/v1/media/delete", json={"url": url})
    assert deleted.status_code == 200
    assert db.storage.files == {}


def test_media_upload_checks_bucket_permission(client, db, sign_in):
    sign_in(make_user(permissions=["events.create"]))
    response = client.post(
        "/api/v1/media/upload",
        files={"file": ("logo.png", PNG, "image/png")},
        data={"bucket": "tenants"},
    )
    assert response.status_code == 403
    assert db.storage.files == {}


def test_media_rejects_non_images(client, sign_in):
    sign_in(make_user(permissions=["events.create"]))
    response = client.post(
        "/api/v1/media/upload",
        files={"file": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
        data={"bucket": "events"},
    )
    assert response.status_code == 422
    assert response.json()["error"] == "Invalid file type. Please upload a JPEG, PNG, WebP or GIF image."


def test_media_avatar_open_to_any_admin(client, sign_in):
    sign_in(make_user())
    response = client.post(
        "/api/v1/media/upload",
        files={"file": ("me.jpg", b"\xff\xd8\xff", "image/jpeg")},
        data={"bucket": "avatars"},
    )
    assert response.status_code == 201


def test_media_delete_unknown_url(client, sign_in):
    sign_in(make_user(permissions=["events.edit"]))
    response = client.post("/api/v1/media/delete", json={"url": "https://elsewhere.test/file.png"})
    assert response.status_code == 404
