# Supabase tables: admin_permissions, admin_roles, admin_role_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

admin_permissions:
- id: uuid (primary key)
- name: text (not null, unique) - "<module>.<action>", e.g. "events.publish"
- display_name: text (not null)
- module: text (not null) - e.g. "events", "tenants", "admin_users"
- action: text (not null) - e.g. "view", "create", "edit", "delete", "publish"
- description: text (nullable)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())

admin_roles:
- id: uuid (primary key)
- name: text (not null, unique) - lowercase with underscores, e.g. "content_manager"
- display_name: text (not null)
- description: text (nullable)
- color: text (default: '#6366f1')
- is_active: boolean (default: true)
- sort_order: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

admin_role_permissions:
- id: uuid (primary key)
- role_id: uuid (foreign key to admin_roles.id, not null)
- permission_id: uuid (foreign key to admin_permissions.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (role_id, permission_id)
"""
