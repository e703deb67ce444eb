# Supabase tables: admin_users, admin_user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by this service (password_hash + signed session cookie)

"""
Expected Supabase table structure:

admin_users:
- id: uuid (primary key)
- email: text (not null, unique) - stored lowercased
- password_hash: text (nullable) - passlib pbkdf2_sha256
- full_name: text (not null)
- avatar_url: text (nullable)
- is_active: boolean (default: true) - accounts are deactivated, never deleted
- last_login_at: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

admin_user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to admin_users.id, not null)
- role_id: uuid (foreign key to admin_roles.id, not null)
- assigned_by: uuid (foreign key to admin_users.id, nullable)
- created_at: timestamp (default: now())
- unique constraint on (user_id, role_id)
"""
