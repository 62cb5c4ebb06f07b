# Supabase table: task_history
# Append-only; rows are written by the task lifecycle and removed only by
# the delete_household function.

"""
Expected Supabase table structure:

task_history:
- id: uuid (primary key)
- task_id: uuid (not null, no foreign key so entries survive task deletion)
- household_id: uuid (foreign key to households.id, not null)
- changed_by: uuid (foreign key to user_profiles.id)
- old_status: text (not null) - a task status or 'created'
- new_status: text (not null) - a task status or 'deleted'
- changed_at: timestamp (default: now())
- check (old_status <> new_status)
"""
