import uuid
from typing import Iterable, List

import pytest
from fastapi.testclient import TestClient

from fake_supabase import FakeSupabase
from mall_admin.config.permissions_config import SUPER_ADMIN_ROLE
from mall_admin.core.activity import ActivityLogger
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_current_user
from mall_admin.core.limiter import limiter
from mall_admin.core.permissions import AuthUser, RoleSummary
from mall_admin.core.revalidation import Revalidator, get_revalidator
from mall_admin.core.security import hash_password
from mall_admin.database.supabase_client import get_service_supabase, get_supabase
from mall_admin.main import app

UNIQUE_COLUMNS = {
    "tenants": ["tenant_code"],
    "tenant_categories": ["name"],
    "posts": ["slug"],
    "blog_categories": ["slug"],
    "events": ["slug"],
    "vip_tiers": ["tier_level"],
    "featured_restaurants": ["tenant_id"],
    "site_settings": ["key"],
    "admin_users": ["email"],
    "admin_roles": ["name"],
    "admin_permissions": ["name"],
    "admin_user_roles": ["user_id,role_id"],
    "admin_role_permissions": ["role_id,permission_id"],
}


class RecordingRevalidator(Revalidator):
    """Never calls out; remembers every path it was asked to invalidate."""

    def __init__(self):
        super().__init__(url="")
        self.paths: List[str] = []

    def revalidate(self, paths: Iterable[str]) -> List[str]:
        revalidated = super().revalidate(paths)
        self.paths.extend(revalidated)
        return revalidated


def make_user(permissions: Iterable[str] = (), roles: Iterable[str] = (), **fields) -> AuthUser:
    return AuthUser(
        id=fields.pop("id", str(uuid.uuid4())),
        email=fields.pop("email", "editor@supermal.test"),
        full_name=fields.pop("full_name", "Test Editor"),
        roles=[RoleSummary(id=str(uuid.uuid4()), name=name) for name in roles],
        permissions=set(permissions),
        **fields,
    )


def make_ctx(user: AuthUser = None) -> RequestContext:
    return RequestContext(user=user, ip_address="127.0.0.1", user_agent="pytest")


@pytest.fixture
def db():
    return FakeSupabase(unique=UNIQUE_COLUMNS)


@pytest.fixture
def revalidator():
    return RecordingRevalidator()


@pytest.fixture
def backends(db, revalidator):
    return Backends(reader=db, writer=db, activity=ActivityLogger(db), revalidator=revalidator)


@pytest.fixture
def admin():
    return make_user(roles=[SUPER_ADMIN_ROLE], email="admin@supermal.test", full_name="Super Admin")


@pytest.fixture
def admin_ctx(admin):
    return make_ctx(admin)


@pytest.fixture
def create_account(db):
    """Store an admin account whose role grants `permissions`; returns the admin_users row."""
    def create(email="staff@supermal.test", password="Secret123", permissions=(), role="staff", is_active=True, **fields):
        user = db.seed("admin_users", {
            "email": email,
            "full_name": fields.pop("full_name", "Staff Member"),
            "password_hash": hash_password(password),
            "is_active": is_active,
            **fields,
        })[0]
        role_row = next((r for r in db.rows("admin_roles") if r["name"] == role), None)
        if role_row is None:
            role_row = db.seed("admin_roles", {"name": role, "display_name": role.title(), "is_active": True})[0]
        db.seed("admin_user_roles", {"user_id": user["id"], "role_id": role_row["id"]})
        for name in permissions:
            permission = next((p for p in db.rows("admin_permissions") if p["name"] == name), None)
            if permission is None:
                module, action = name.split(".", 1)
                permission = db.seed("admin_permissions", {
                    "name": name, "module": module, "action": action, "is_active": True,
                })[0]
            db.seed("admin_role_permissions", {"role_id": role_row["id"], "permission_id": permission["id"]})
        return user
    return create


@pytest.fixture
def client(db, revalidator):
    limiter.enabled = False
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_revalidator] = lambda: revalidator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def sign_in(client):
    """Act as `user` for every following request without going through /auth/login."""
    def sign_in(user: AuthUser):
        app.dependency_overrides[get_current_user] = lambda: user
        return client
    return sign_in
