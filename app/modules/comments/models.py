# Supabase table: comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

comments:
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, not null)
- user_id: uuid (foreign key to user_profiles.id, not null) - author
- content: text (not null, non-blank)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable) - set on content edits
"""
