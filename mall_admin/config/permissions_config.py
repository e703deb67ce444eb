"""
Permissions and Roles Configuration
This config defines the permission catalog for every admin module and the preset roles.
Permission names follow "<module>.<action>". Used by the seed script, the permission
resolver and the dashboard route table.
"""

SUPER_ADMIN_ROLE = "super_admin"

# Define modules and their actions
MODULES = {
    "dashboard": {
        "actions": ["view"],
        "description": "Dashboard overview"
    },
    "analytics": {
        "actions": ["view"],
        "description": "Content and activity analytics"
    },
    "events": {
        "actions": ["view", "create", "edit", "delete", "publish", "feature"],
        "description": "Mall events"
    },
    "posts": {
        "actions": ["view", "create", "edit", "delete", "publish", "feature", "manage"],
        "description": "Blog posts and blog categories"
    },
    "promotions": {
        "actions": ["view", "create", "edit", "delete", "publish"],
        "description": "Tenant promotions"
    },
    "tenants": {
        "actions": ["view", "create", "edit", "delete", "feature"],
        "description": "Tenant directory"
    },
    "tenant_categories": {
        "actions": ["view", "create", "edit", "delete"],
        "description": "Tenant categories"
    },
    "whats_on": {
        "actions": ["view", "create", "edit", "delete", "manage"],
        "description": "Homepage What's On feed"
    },
    "featured_restaurants": {
        "actions": ["view", "create", "edit", "delete", "manage"],
        "description": "Homepage featured restaurants"
    },
    "vip": {
        "actions": ["view", "create", "edit", "delete", "manage"],
        "description": "VIP card tiers and benefits"
    },
    "contacts": {
        "actions": ["view", "respond", "delete"],
        "description": "Contact form submissions"
    },
    "admin_users": {
        "actions": ["view", "create", "edit", "delete", "manage_roles"],
        "description": "Admin user accounts"
    },
    "admin_roles": {
        "actions": ["view", "create", "edit", "delete"],
        "description": "Admin roles and permissions"
    },
    "seo_settings": {
        "actions": ["view", "edit"],
        "description": "Site settings, SEO and injected scripts"
    },
    "activity_logs": {
        "actions": ["view"],
        "description": "Audit trail of admin activity"
    },
}

# Additional descriptions for non-CRUD actions
MODULE_SPECIFIC_PERMISSIONS = {
    "events": {"publish": "Publish or unpublish events", "feature": "Feature events"},
    "posts": {
        "publish": "Publish or unpublish blog posts",
        "feature": "Feature blog posts",
        "manage": "Manage blog categories",
    },
    "promotions": {"publish": "Change promotion status"},
    "tenants": {"feature": "Feature tenants"},
    "whats_on": {"manage": "Reorder and toggle What's On items"},
    "featured_restaurants": {"manage": "Reorder and toggle featured restaurants"},
    "vip": {"manage": "Assign benefits to tiers"},
    "contacts": {"respond": "Mark submissions read and export them"},
    "admin_users": {"manage_roles": "Assign roles to admin users"},
}

# Preset roles. "*" grants every action of the module.
ROLES = {
    SUPER_ADMIN_ROLE: {
        "display_name": "Super Admin",
        "description": "Full access to every module",
        "color": "#dc2626",
        "sort_order": 1,
        "grants": {module: "*" for module in MODULES},
    },
    "content_manager": {
        "display_name": "Content Manager",
        "description": "Manages events, blog, promotions and homepage content",
        "color": "#2563eb",
        "sort_order": 2,
        "grants": {
            "dashboard": "*",
            "analytics": "*",
            "events": "*",
            "posts": "*",
            "promotions": "*",
            "whats_on": "*",
            "featured_restaurants": "*",
            "tenants": ["view"],
            "tenant_categories": ["view"],
            "seo_settings": ["view"],
        },
    },
    "operations_manager": {
        "display_name": "Operations Manager",
        "description": "Handles enquiries, VIP programme and day-to-day operations",
        "color": "#16a34a",
        "sort_order": 3,
        "grants": {
            "dashboard": "*",
            "analytics": "*",
            "contacts": "*",
            "vip": "*",
            "tenants": ["view"],
            "promotions": ["view"],
            "activity_logs": "*",
        },
    },
    "leasing_manager": {
        "display_name": "Leasing Manager",
        "description": "Manages tenants, categories and tenant promotions",
        "color": "#ca8a04",
        "sort_order": 4,
        "grants": {
            "dashboard": "*",
            "tenants": "*",
            "tenant_categories": "*",
            "promotions": "*",
            "contacts": ["view", "respond"],
        },
    },
    "viewer": {
        "display_name": "Viewer",
        "description": "Read-only access to content modules",
        "color": "#6b7280",
        "sort_order": 5,
        "grants": {
            module: ["view"]
            for module in MODULES
            if module not in ("admin_users", "admin_roles", "activity_logs")
        },
    },
}

# Highest first; used for display purposes
ROLE_HIERARCHY = [SUPER_ADMIN_ROLE, "content_manager", "operations_manager", "leasing_manager", "viewer"]

# Dashboard routes and the permission needed to open them. Dynamic segments are "[id]".
ROUTE_PERMISSIONS = {
    "/": ("dashboard", "view"),
    "/events": ("events", "view"),
    "/events/create": ("events", "create"),
    "/events/[id]": ("events", "edit"),
    "/promotions": ("promotions", "view"),
    "/promotions/create": ("promotions", "create"),
    "/promotions/[id]": ("promotions", "edit"),
    "/blog": ("posts", "view"),
    "/blog/create": ("posts", "create"),
    "/blog/[id]": ("posts", "edit"),
    "/blog/categories": ("posts", "manage"),
    "/homepage/whats-on": ("whats_on", "view"),
    "/homepage/restaurants": ("featured_restaurants", "view"),
    "/tenants": ("tenants", "view"),
    "/tenants/create": ("tenants", "create"),
    "/tenants/[id]": ("tenants", "edit"),
    "/tenants/categories": ("tenant_categories", "view"),
    "/settings": ("seo_settings", "view"),
    "/contacts": ("contacts", "view"),
    "/contacts/[id]": ("contacts", "view"),
    "/users": ("admin_users", "view"),
    "/users/[id]": ("admin_users", "edit"),
    "/users/roles": ("admin_roles", "view"),
    "/vip": ("vip", "view"),
    "/vip/tiers/create": ("vip", "create"),
    "/vip/tiers/[id]": ("vip", "edit"),
    "/vip/benefits": ("vip", "view"),
    "/activity": ("activity_logs", "view"),
    "/profile": ("dashboard", "view"),
}


def permission_name(module: str, action: str) -> str:
    return f"{module}.{action}"


def _expand_grants(grants: dict) -> list:
    names = []
    for module, actions in grants.items():
        if actions == "*":
            actions = MODULES[module]["actions"]
        for action in actions:
            if action in MODULES[module]["actions"]:
                names.append(permission_name(module, action))
    return sorted(names)


# Generate permission matrix
def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the preset roles
    Format: {
        "permissions": [
            {"name": "tenants.create", "module": "tenants", "action": "create", "display_name": "...", ...},
            ...
        ],
        "roles": [
            {"name": "content_manager", "display_name": "...", "permissions": ["events.create", ...]},
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for module_name, module_config in MODULES.items():
        for action in module_config["actions"]:
            description = f"{action.replace('_', ' ').capitalize()} {module_config['description'].lower()}"
            if action in MODULE_SPECIFIC_PERMISSIONS.get(module_name, {}):
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]

            permissions.append({
                "name": permission_name(module_name, action),
                "display_name": f"{module_name.replace('_', ' ').title()}: {action.replace('_', ' ').title()}",
                "module": module_name,
                "action": action,
                "description": description
            })

    for role_name, role_config in ROLES.items():
        roles.append({
            "name": role_name,
            "display_name": role_config["display_name"],
            "description": role_config["description"],
            "color": role_config["color"],
            "sort_order": role_config["sort_order"],
            "permissions": _expand_grants(role_config["grants"])
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


# Export the matrix for use in seed scripts
PERMISSION_MATRIX = get_permission_matrix()
