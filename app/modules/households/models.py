# Supabase tables: households, household_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL lives in app/database/migrations/001_chore_schema.sql

"""
Expected Supabase table structure:

households:
- id: uuid (primary key)
- name: text (not null)
- number_of_rooms: integer (nullable)
- house_size: numeric (nullable) - square meters
- number_of_floors: integer (nullable)
- address: text (nullable)
- house_type: text (nullable) - values: apartment, house, studio, villa, other
- has_garden, has_garage, has_basement, has_attic: boolean (default: false)
- description: text (nullable)
- created_by: uuid (foreign key to user_profiles.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

household_members:
- id: uuid (primary key)
- household_id: uuid (foreign key to households.id, not null)
- user_id: uuid (foreign key to user_profiles.id, nullable) - the only link to an account
- name: text (not null)
- color: text (not null, default: '#3B82F6')
- role: text (not null, default: 'Member') - 'owner' grants household management
- age: integer (nullable)
- room, email, phone, bio: text (nullable)
- join_date: timestamp (default: now())
- unique (household_id, user_id) where user_id is not null
- unique (household_id, lower(email)) where email is not null

Postgres functions:
- delete_household(p_household_id) -> {"deleted": bool, "comments", "history", "tasks", "members"}
- remove_household_member(p_household_id, p_member_id) -> {"status": "removed" | "has_tasks" | "not_found", ...}
"""
