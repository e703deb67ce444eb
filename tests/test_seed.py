import pytest

from fake_supabase import FakeSupabase
from mall_admin.config.permissions_config import PERMISSION_MATRIX, SUPER_ADMIN_ROLE
from mall_admin.core.security import verify_password
from mall_admin.scripts.seed_permissions_roles import (
    assign_permissions_to_role,
    seed_admin,
    seed_permissions,
    seed_roles,
)


@pytest.fixture
def db():
    return FakeSupabase(unique={"admin_permissions": ["name"], "admin_roles": ["name"], "admin_users": ["email"]})


def grants_of(db, role_id):
    return {row["permission_id"] for row in db.rows("admin_role_permissions") if row["role_id"] == role_id}


def test_seed_is_idempotent(db):
    permission_ids = seed_permissions(db)
    role_ids = seed_roles(db, permission_ids)

    assert len(permission_ids) == len(PERMISSION_MATRIX["permissions"])
    assert set(role_ids) == {role["name"] for role in PERMISSION_MATRIX["roles"]}
    grant_count = len(db.rows("admin_role_permissions"))

    assert seed_permissions(db) == permission_ids
    assert seed_roles(db, permission_ids) == role_ids
    assert len(db.rows("admin_permissions")) == len(permission_ids)
    assert len(db.rows("admin_role_permissions")) == grant_count


def test_super_admin_gets_every_permission(db):
    permission_ids = seed_permissions(db)
    role_ids = seed_roles(db, permission_ids)
    assert grants_of(db, role_ids[SUPER_ADMIN_ROLE]) == set(permission_ids.values())


def test_assign_syncs_grants(db):
    permission_ids = seed_permissions(db)
    role = db.seed("admin_roles", {"name": "events_team", "display_name": "Events Team"})[0]

    assign_permissions_to_role(db, role["id"], "events_team", ["events.view", "events.edit"], permission_ids)
    assign_permissions_to_role(db, role["id"], "events_team", ["events.view", "events.fly"], permission_ids)

    assert grants_of(db, role["id"]) == {permission_ids["events.view"]}


def test_seed_admin(db):
    role = db.seed("admin_roles", {"name": SUPER_ADMIN_ROLE, "display_name": "Super Admin"})[0]

    user_id = seed_admin(db, " Owner@Supermal.co.id ", "Bootstrap123", role["id"])
    again = seed_admin(db, "owner@supermal.co.id", "Different123", role["id"])

    assert again == user_id
    account = db.rows("admin_users")[0]
    assert account["email"] == "owner@supermal.co.id"
    assert verify_password("Bootstrap123", account["password_hash"])
    assert [(r["user_id"], r["role_id"]) for r in db.rows("admin_user_roles")] == [(user_id, role["id"])]


def test_seed_admin_skipped_without_credentials(db):
    assert seed_admin(db, None, None, None) is None
    assert db.rows("admin_users") == []
