# Supabase tables: user_profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

user_profiles:
- id: uuid (primary key, references auth.users.id)
- name: text (not null)
- email: text (unique case-insensitive, not null) - stored lowercase
- role: text (not null, default: 'user') - values: admin, user
- avatar_url: text (nullable)
- phone: text (nullable)
- bio: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

A user's households are not stored here; they are the household_members
rows whose user_id points at the profile.
"""
