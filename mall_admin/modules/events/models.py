# Supabase table: events
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

events:
- id: uuid (primary key)
- title: text (not null)
- slug: text (not null, unique)
- summary: text (nullable)
- body: text (nullable) - rich text HTML
- start_at: timestamp (not null)
- end_at: timestamp (nullable) - open-ended when null
- venue: text (nullable)
- images: jsonb (default: '[]') - [{"url": "...", "alt": "...", "caption": "..."}];
  older rows may hold plain URL strings
- tags: text[] (default: '{}')
- is_published: boolean (default: false)
- is_featured: boolean (default: false)
- published_at: timestamp (nullable) - stamped on first publish
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
