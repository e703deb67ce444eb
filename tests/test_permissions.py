from conftest import make_user
from mall_admin.config.permissions_config import MODULES, PERMISSION_MATRIX, SUPER_ADMIN_ROLE
from mall_admin.core.permissions import (
    check_route_permission,
    get_accessible_modules,
    get_highest_role,
    get_user_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
    load_auth_user,
    normalize_route,
)


def test_super_admin_passes_every_check():
    admin = make_user(roles=[SUPER_ADMIN_ROLE])
    assert has_permission(admin, "admin_roles", "delete")
    assert has_all_permissions(admin, [("events", "create"), ("vip", "manage")])
    assert get_accessible_modules(admin) == list(MODULES)


def test_permission_checks_use_module_dot_action_names():
    user = make_user(permissions=["events.view", "events.create"])
    assert has_permission(user, "events", "create")
    assert not has_permission(user, "events", "delete")
    assert has_any_permission(user, [("events", "delete"), ("events", "view")])
    assert not has_all_permissions(user, [("events", "delete"), ("events", "view")])
    assert not has_permission(None, "events", "view")


def test_accessible_modules_follow_catalog_order():
    user = make_user(permissions=["vip.view", "events.view", "events.edit"])
    assert get_accessible_modules(user) == ["events", "vip"]


def test_highest_role_uses_hierarchy():
    user = make_user(roles=["viewer", "content_manager"])
    assert get_highest_role(user) == "content_manager"
    assert get_highest_role(make_user()) is None


def test_normalize_route_replaces_ids():
    assert normalize_route("/events/3f1c2b9e-8d7a-4c6b-9e5f-1a2b3c4d5e6f") == "/events/[id]"
    assert normalize_route("/tenants/42/") == "/tenants/[id]"
    assert normalize_route("/") == "/"


def test_route_permissions():
    editor = make_user(permissions=["events.view", "events.edit"])
    assert check_route_permission(editor, "/events")
    assert check_route_permission(editor, "/events/3f1c2b9e-8d7a-4c6b-9e5f-1a2b3c4d5e6f")
    assert not check_route_permission(editor, "/events/create")
    assert not check_route_permission(editor, "/users")
    # Routes without an entry are open to any signed-in admin
    assert check_route_permission(editor, "/help")
    assert not check_route_permission(None, "/help")


def test_permissions_are_union_of_active_roles(db, create_account):
    user = create_account(permissions=["events.view"], role="events_viewer")
    role = db.seed("admin_roles", {"name": "blog", "display_name": "Blog", "is_active": True})[0]
    disabled = db.seed("admin_roles", {"name": "disabled", "display_name": "Disabled", "is_active": False})[0]
    posts = db.seed("admin_permissions", {"name": "posts.view", "module": "posts", "action": "view", "is_active": True})[0]
    vip = db.seed("admin_permissions", {"name": "vip.view", "module": "vip", "action": "view", "is_active": True})[0]
    db.seed(
        "admin_user_roles",
        {"user_id": user["id"], "role_id": role["id"]},
        {"user_id": user["id"], "role_id": disabled["id"]},
    )
    db.seed(
        "admin_role_permissions",
        {"role_id": role["id"], "permission_id": posts["id"]},
        {"role_id": disabled["id"], "permission_id": vip["id"]},
    )

    assert get_user_permissions(user["id"], db) == {"events.view", "posts.view"}


def test_inactive_permissions_are_ignored(db, create_account):
    user = create_account(permissions=["events.view", "events.delete"])
    for permission in db.rows("admin_permissions"):
        if permission["name"] == "events.delete":
            permission["is_active"] = False
    assert get_user_permissions(user["id"], db) == {"events.view"}


def test_permission_lookup_fails_closed(db, create_account):
    user = create_account(permissions=["events.view"])
    db.fail("admin_role_permissions")
    assert get_user_permissions(user["id"], db) == set()


def test_request_cache_avoids_repeat_queries(db, create_account):
    user = create_account(permissions=["events.view"])
    cache = {}
    get_user_permissions(user["id"], db, cache)
    calls = len(db.calls)
    assert get_user_permissions(user["id"], db, cache) == {"events.view"}
    assert len(db.calls) == calls


def test_deactivated_accounts_do_not_resolve(db, create_account):
    active = create_account(email="a@supermal.test", permissions=["events.view"])
    inactive = create_account(email="b@supermal.test", is_active=False)
    loaded = load_auth_user(active["id"], db)
    assert loaded.email == "a@supermal.test"
    assert loaded.permissions == {"events.view"}
    assert [role.name for role in loaded.roles] == ["staff"]
    assert load_auth_user(inactive["id"], db) is None
    assert load_auth_user("missing", db) is None


def test_permission_matrix_covers_catalog():
    names = {p["name"] for p in PERMISSION_MATRIX["permissions"]}
    assert len(names) == sum(len(m["actions"]) for m in MODULES.values())
    roles = {r["name"]: r for r in PERMISSION_MATRIX["roles"]}
    assert set(roles[SUPER_ADMIN_ROLE]["permissions"]) == names
    assert all(name.endswith(".view") for name in roles["viewer"]["permissions"])
    assert "admin_users.view" not in roles["viewer"]["permissions"]
