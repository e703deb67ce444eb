# Supabase table: site_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

site_settings:
- id: uuid (primary key)
- key: text (not null, unique) - lowercase alphanumeric with underscores
- display_name: text (not null)
- description: text (nullable)
- value: text (nullable) - markup/script for injected settings, a JSON document for settings groups
- setting_type: text (not null) - meta_tag | script | link | json_ld | custom_html
- injection_point: text (not null) - head_start | head_end | body_start | body_end
- is_active: boolean (default: true)
- sort_order: integer (default: 0)
- created_by: uuid (nullable) - references admin_users.id
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Settings groups (general, contact, social, seo, analytics, operating hours) are
stored as rows keyed "settings_<group>" whose value is the JSON-encoded group.
Those rows are not injected into pages and cannot be deleted.
"""
