import pytest

from conftest import make_ctx, make_user
from mall_admin.config.permissions_config import SUPER_ADMIN_ROLE
from mall_admin.core.errors import ErrorCode
from mall_admin.core.security import verify_password
from mall_admin.modules.roles.service import RoleService
from mall_admin.modules.users.schemas import UserListParams
from mall_admin.modules.users.service import UserService, generate_temp_password


@pytest.fixture
def users(backends):
    return UserService(backends)


@pytest.fixture
def roles(backends):
    return RoleService(backends)


@pytest.fixture
def editor_role(db):
    return db.seed("admin_roles", {
        "name": "content_manager", "display_name": "Content Manager", "color": "#2563eb", "sort_order": 2, "is_active": True,
    })[0]


@pytest.fixture
def super_role(db):
    return db.seed("admin_roles", {
        "name": SUPER_ADMIN_ROLE, "display_name": "Super Admin", "color": "#dc2626", "sort_order": 1, "is_active": True,
    })[0]


def user_payload(role, **overrides):
    payload = {
        "email": " Rina@Supermal.co.id ",
        "full_name": "Rina Wijaya",
        "password": "Welcome123",
        "role_ids": [role["id"]],
    }
    payload.update(overrides)
    return payload


# Users

def test_create_user_hashes_password(users, db, admin_ctx, editor_role):
    result = users.create_user(admin_ctx, user_payload(editor_role))

    assert result.success, result.error
    assert result.message == "User created successfully"
    assert result.data.email == "rina@supermal.co.id"
    assert [r.name for r in result.data.roles] == ["content_manager"]
    stored = db.rows("admin_users")[0]
    assert stored["password_hash"] != "Welcome123"
    assert verify_password("Welcome123", stored["password_hash"])
    assert db.rows("admin_user_roles")[0]["assigned_by"] == admin_ctx.user_id
    assert "password_hash" not in db.rows("admin_activity_logs")[0]["new_values"]


def test_create_user_without_password_returns_temporary_one(users, db, admin_ctx, editor_role):
    payload = user_payload(editor_role)
    del payload["password"]

    result = users.create_user(admin_ctx, payload)

    assert result.message.startswith("User created. Temporary password: ")
    temporary = result.message.rsplit(" ", 1)[1]
    assert verify_password(temporary, db.rows("admin_users")[0]["password_hash"])


def test_user_rules(users, admin_ctx, editor_role):
    assert users.create_user(admin_ctx, user_payload(editor_role, password="weakpass1")).error == \
        "Password must contain uppercase, lowercase, and number"
    assert users.create_user(admin_ctx, user_payload(editor_role, password="Ab1")).error == \
        "Password must be at least 8 characters"
    assert users.create_user(admin_ctx, user_payload(editor_role, role_ids=[])).error == "At least one role is required"
    assert users.create_user(admin_ctx, user_payload(editor_role, role_ids=["editor"])).error == "Invalid role ID"
    assert users.create_user(admin_ctx, user_payload(editor_role, email="rina")).error == "Invalid email address"


def test_duplicate_email(users, admin_ctx, editor_role):
    users.create_user(admin_ctx, user_payload(editor_role))
    result = users.create_user(admin_ctx, user_payload(editor_role, email="rina@supermal.co.id"))
    assert result.code == ErrorCode.DUPLICATE
    assert result.error == "A user with this email already exists"


def test_unknown_role_creates_nothing(users, db, admin_ctx, editor_role):
    missing = "5b1f7c4e-0000-4000-8000-000000000000"
    result = users.create_user(admin_ctx, user_payload(editor_role, role_ids=[editor_role["id"], missing]))
    assert result.error == "Invalid role ID"
    assert db.rows("admin_users") == []


def test_failed_role_link_removes_new_account(users, db, admin_ctx, editor_role):
    db.fail("admin_user_roles")
    result = users.create_user(admin_ctx, user_payload(editor_role))
    assert result.code == ErrorCode.STORAGE_UNAVAILABLE
    assert db.rows("admin_users") == []

    db.failures.clear()
    assert users.create_user(admin_ctx, user_payload(editor_role)).success


def test_update_roles_needs_manage_roles(users, db, editor_role):
    target = db.seed("admin_users", {"email": "rina@supermal.co.id", "full_name": "Rina", "is_active": True})[0]
    editor = make_ctx(make_user(permissions=["admin_users.edit"]))

    assert users.update_user(editor, target["id"], {"full_name": "Rina W."}).success
    result = users.update_user(editor, target["id"], {"role_ids": [editor_role["id"]]})
    assert result.code == ErrorCode.FORBIDDEN
    assert db.rows("admin_user_roles") == []


def test_update_replaces_roles(users, db, admin_ctx, editor_role, super_role):
    target = db.seed("admin_users", {"email": "rina@supermal.co.id", "full_name": "Rina", "is_active": True})[0]
    db.seed("admin_user_roles", {"user_id": target["id"], "role_id": super_role["id"]})

    result = users.update_user(admin_ctx, target["id"], {"role_ids": [editor_role["id"]]})

    assert result.success, result.error
    assert [r.name for r in result.data.roles] == ["content_manager"]
    assert [a["role_id"] for a in db.rows("admin_user_roles")] == [editor_role["id"]]


def test_cannot_deactivate_self(users, db, admin, admin_ctx):
    db.seed("admin_users", {"id": admin.id, "email": admin.email, "full_name": "Super Admin", "is_active": True})
    result = users.set_status(admin_ctx, admin.id, False)
    assert result.error == "You cannot deactivate your own account"
    result = users.update_user(admin_ctx, admin.id, {"is_active": False})
    assert result.error == "You cannot deactivate your own account"
    assert db.rows("admin_users")[0]["is_active"] is True


def test_set_status_flips(users, db, admin_ctx):
    target = db.seed("admin_users", {"email": "rina@supermal.co.id", "full_name": "Rina", "is_active": True})[0]
    result = users.set_status(admin_ctx, target["id"])
    assert result.message == "User deactivated successfully"
    assert db.rows("admin_users")[0]["is_active"] is False


def test_reset_password(users, db, admin_ctx):
    target = db.seed("admin_users", {"email": "rina@supermal.co.id", "full_name": "Rina", "password_hash": "x"})[0]
    result = users.reset_password(admin_ctx, target["id"], {"new_password": "Another123", "confirm_password": "Another12"})
    assert result.error == "Passwords do not match"

    result = users.reset_password(admin_ctx, target["id"], {"new_password": "Another123", "confirm_password": "Another123"})
    assert result.success
    assert verify_password("Another123", db.rows("admin_users")[0]["password_hash"])
    assert db.rows("admin_activity_logs")[-1]["action"] == "reset_password"


def test_list_users_by_role(users, db, editor_role, super_role):
    rina, budi = db.seed(
        "admin_users",
        {"email": "rina@supermal.co.id", "full_name": "Rina", "is_active": True, "password_hash": "secret"},
        {"email": "budi@supermal.co.id", "full_name": "Budi", "is_active": False},
    )
    db.seed(
        "admin_user_roles",
        {"user_id": rina["id"], "role_id": editor_role["id"]},
        {"user_id": budi["id"], "role_id": super_role["id"]},
    )

    page = users.list_users(UserListParams(roleId=editor_role["id"]))
    assert [u.full_name for u in page.data] == ["Rina"]
    assert [r.name for r in page.data[0].roles] == ["content_manager"]
    assert "password_hash" not in page.data[0].model_dump()
    assert users.list_users(UserListParams(status="inactive")).data[0].full_name == "Budi"
    assert users.list_users(UserListParams()).per_page == 20


def test_temporary_password_satisfies_rule():
    for _ in range(20):
        password = generate_temp_password()
        assert len(password) == 12
        assert any(c.isupper() for c in password)
        assert any(c.islower() for c in password)
        assert any(c.isdigit() for c in password)


# Roles

def test_create_role_with_permissions(roles, db, admin_ctx, editor_role):
    permission = db.seed("admin_permissions", {"name": "events.view", "module": "events", "action": "view", "is_active": True})[0]

    result = roles.create_role(admin_ctx, {"name": "events_team", "display_name": "Events Team", "permission_ids": [permission["id"]]})

    assert result.success, result.error
    assert result.data.sort_order == 3
    assert result.data.permission_count == 1
    assert [p.name for p in roles.get_role(result.data.id).permissions] == ["events.view"]


def test_role_name_rules(roles, admin_ctx, editor_role):
    assert roles.create_role(admin_ctx, {"name": "Events Team", "display_name": "Events Team"}).error == \
        "Name must be lowercase with underscores only"
    result = roles.create_role(admin_ctx, {"name": "content_manager", "display_name": "Again"})
    assert result.code == ErrorCode.DUPLICATE
    assert result.error == "A role with this name already exists"


def test_super_admin_role_is_protected(roles, admin_ctx, super_role):
    result = roles.update_role(admin_ctx, super_role["id"], {"name": "root"})
    assert result.error == "The super admin role cannot be renamed"
    assert roles.update_role(admin_ctx, super_role["id"], {"display_name": "Owner"}).success

    result = roles.delete_role(admin_ctx, super_role["id"])
    assert result.code == ErrorCode.FORBIDDEN
    assert result.error == "The super admin role cannot be deleted"


def test_assigned_role_cannot_be_deleted(roles, db, admin_ctx, editor_role):
    permission = db.seed("admin_permissions", {"name": "events.view", "module": "events", "action": "view"})[0]
    db.seed("admin_role_permissions", {"role_id": editor_role["id"], "permission_id": permission["id"]})
    db.seed("admin_user_roles", {"user_id": "u1", "role_id": editor_role["id"]})

    result = roles.delete_role(admin_ctx, editor_role["id"])

    assert result.code == ErrorCode.REFERENTIAL_CONFLICT
    assert result.error == "Cannot delete role that is assigned to 1 user(s)"
    assert len(db.rows("admin_role_permissions")) == 1


def test_delete_role_removes_grants(roles, db, admin_ctx, editor_role):
    permission = db.seed("admin_permissions", {"name": "events.view", "module": "events", "action": "view"})[0]
    db.seed("admin_role_permissions", {"role_id": editor_role["id"], "permission_id": permission["id"]})

    assert roles.delete_role(admin_ctx, editor_role["id"]).success
    assert db.rows("admin_roles") == []
    assert db.rows("admin_role_permissions") == []


def test_list_roles_with_counts(roles, db, editor_role, super_role):
    db.seed("admin_user_roles", {"user_id": "u1", "role_id": editor_role["id"]}, {"user_id": "u2", "role_id": editor_role["id"]})
    listed = roles.list_roles()
    assert [(r.name, r.user_count) for r in listed] == [(SUPER_ADMIN_ROLE, 0), ("content_manager", 2)]


def test_permissions_grouped_in_catalog_order(roles, db):
    db.seed(
        "admin_permissions",
        {"name": "vip.view", "module": "vip", "action": "view", "is_active": True},
        {"name": "events.edit", "module": "events", "action": "edit", "is_active": True},
        {"name": "events.view", "module": "events", "action": "view", "is_active": True},
        {"name": "events.legacy", "module": "events", "action": "legacy", "is_active": False},
    )
    groups = roles.permissions_by_module()
    assert [g.module for g in groups] == ["events", "vip"]
    assert [p.action for p in groups[0].permissions] == ["edit", "view"]


def test_role_admin_needs_permission(roles):
    viewer = make_ctx(make_user(permissions=["admin_roles.view"]))
    result = roles.create_role(viewer, {"name": "events_team", "display_name": "Events Team"})
    assert result.code == ErrorCode.FORBIDDEN
