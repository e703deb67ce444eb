# Supabase tables: tenants, tenant_categories
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tenant_categories:
- id: uuid (primary key)
- name: text (not null, unique) - lowercase with hyphens, e.g. "food-beverage"
- display_name: text (not null)
- icon: text (default: 'store')
- color: text (default: '#6b7280')
- description: text (nullable)
- sort_order: integer (default: 0)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

tenants:
- id: uuid (primary key)
- tenant_code: text (not null, unique) - uppercase alphanumeric with dashes
- name: text (not null)
- category_id: uuid (foreign key to tenant_categories.id)
- description: text (nullable)
- main_floor: text (not null) - e.g. "GF", "UG", "1F"
- operating_hours: jsonb (nullable) - {"monday": "10:00-22:00", ...}
- phone: text (nullable)
- logo_url: text (nullable)
- banner_url: text (nullable)
- is_active: boolean (default: true)
- is_featured: boolean (default: false)
- is_new_tenant: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
