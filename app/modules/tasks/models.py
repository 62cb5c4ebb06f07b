# Supabase table: tasks
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL lives in app/database/migrations/001_chore_schema.sql

"""
Expected Supabase table structure:

tasks:
- id: uuid (primary key)
- household_id: uuid (foreign key to households.id, not null)
- title: text (not null)
- description: text (nullable)
- assigned_to: uuid (foreign key to household_members.id, nullable, on delete restrict)
- priority: text (not null, default: 'medium') - values: low, medium, high
- category: text (not null, default: 'General')
- status: text (not null, default: 'To Do') - values: To Do, In Progress, Done
- due_date: date (nullable)
- created_by: uuid (foreign key to user_profiles.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

`completed` is not stored; API responses derive it from status == 'Done'.

Postgres functions (one transaction each):
- create_task(p_task, p_created_by) -> task row; also writes the (created -> status) history entry
- update_task(p_task_id, p_changes, p_expected_status, p_changed_by)
  -> {"status": "updated" | "conflict" | "not_found", "task": ...}; a status change is
  compare-and-swap on p_expected_status and is recorded in task_history
- delete_task(p_task_id, p_changed_by) records (status -> 'deleted') in task_history,
  then deletes the task's comments and the task. Returns {"status": "deleted" | "not_found", "old_status": ...}.
"""
