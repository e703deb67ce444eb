# Supabase table: admin_activity_logs
# This file documents the expected database schema
# Rows are written by core/activity.py; this module only reads them

"""
Expected Supabase table structure:

admin_activity_logs:
- id: uuid (primary key)
- user_id: uuid (nullable) - references admin_users.id
- action: text (not null) - create, update, delete, login, publish, ...
- module: text (not null) - auth, events, tenants, blog, promotions, ...
- resource_type: text (nullable)
- resource_id: text (nullable)
- resource_name: text (nullable)
- old_values: jsonb (nullable)
- new_values: jsonb (nullable)
- ip_address: text (nullable)
- user_agent: text (nullable)
- metadata: jsonb (nullable)
- created_at: timestamp (default: now())
"""
