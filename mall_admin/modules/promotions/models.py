# Supabase table: promotions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

promotions:
- id: uuid (primary key)
- title: text (not null)
- tenant_id: uuid (not null) - references tenants.id
- full_description: text (nullable)
- image_url: text (nullable)
- source_post: text (nullable) - link to the tenant's original post
- start_date: timestamp (nullable)
- end_date: timestamp (nullable)
- status: text (default: 'staging') - staging | published | expired
- published_at: timestamp (nullable) - stamped the first time status becomes published
- raw_json: jsonb (default: '{}')
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
