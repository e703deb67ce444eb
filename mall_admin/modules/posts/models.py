# Supabase tables: posts, blog_categories
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

blog_categories:
- id: uuid (primary key)
- name: text (not null)
- slug: text (not null, unique)
- description: text (nullable)
- color: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

posts:
- id: uuid (primary key)
- title: text (not null)
- slug: text (not null, unique)
- excerpt: text (nullable)
- body: text (nullable) - rich text HTML
- featured_image: text (nullable) - public URL
- category_id: uuid (foreign key to blog_categories.id, nullable)
- tags: text[] (default: '{}')
- is_published: boolean (default: false)
- is_featured: boolean (default: false)
- published_at: timestamp (nullable) - stamped on first publish
- meta_title: text (nullable)
- meta_description: text (nullable)
- author_id: uuid (foreign key to admin_users.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
