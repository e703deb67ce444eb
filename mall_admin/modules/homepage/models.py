# Supabase tables: whats_on, featured_restaurants
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

whats_on:
- id: uuid (primary key)
- content_type: text (not null) - event | tenant | post | promotion | custom
- reference_id: uuid (nullable) - id in events/tenants/posts/promotions; not a declared FK,
  the referenced row may have been deleted
- custom_title: text (nullable) - required for custom items, overrides the referenced title otherwise
- custom_description: text (nullable)
- custom_image_url: text (nullable)
- custom_link_url: text (nullable)
- sort_order: integer (default: 0)
- is_active: boolean (default: true)
- override_start_date: timestamp (nullable)
- override_end_date: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

featured_restaurants:
- id: uuid (primary key)
- tenant_id: uuid (not null, unique) - references tenants.id
- featured_image_url: text (nullable)
- featured_description: text (nullable)
- highlight_text: text (nullable) - short badge, e.g. "New Menu"
- sort_order: integer (default: 0)
- is_active: boolean (default: true)
- start_date: timestamp (nullable)
- end_date: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
