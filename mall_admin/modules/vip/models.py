# Supabase tables: vip_tiers, vip_benefits, vip_tier_benefits
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

vip_tiers:
- id: uuid (primary key)
- name: text (not null)
- description: text (not null)
- qualification_requirement: text (not null)
- minimum_spend_amount: numeric (default: 0)
- minimum_receipt_amount: numeric (nullable)
- tier_level: integer (not null, unique) - 1..10
- card_color: text (default: '#6b7280')
- is_active: boolean (default: true)
- sort_order: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

vip_benefits:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- icon: text (default: 'gift') - icon name rendered by the site
- is_active: boolean (default: true)
- sort_order: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

vip_tier_benefits:
- id: uuid (primary key)
- tier_id: uuid (not null) - references vip_tiers.id
- benefit_id: uuid (not null) - references vip_benefits.id
- benefit_note: text (nullable) - tier-specific note, e.g. "10% off"
- display_order: integer (default: 0)
"""
