# Supabase table: contacts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

contacts:
- id: uuid (primary key)
- full_name: text (not null)
- email: text (not null)
- phone_number: text (nullable)
- enquiry_type: text (not null) - General | Leasing | Marketing | Legal | Lost & Found | Parking & Security
- enquiry_details: text (not null)
- submitted_date: timestamp (default: now())
- is_read: boolean (default: false, indexed)

Rows are inserted by the public website's contact form; the dashboard only
reads them, flips is_read and deletes them.
"""
