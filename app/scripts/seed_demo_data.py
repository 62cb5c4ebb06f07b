"""
Seed Demo Data Script
This script populates a demo household ("Smith Family Home") with members,
tasks, comments and history so a fresh project has something to show.
Can be run manually after applying the migrations. It is idempotent: an
existing household with the demo name is left untouched.
"""

import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.database.supabase_client import SupabaseClient
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_HOUSEHOLD = {
    "name": "Smith Family Home",
    "number_of_rooms": 5,
    "house_size": 140,
    "number_of_floors": 2,
    "address": "12 Maple Street",
    "house_type": "house",
    "has_garden": True,
    "has_garage": True,
    "description": "Demo household",
}

DEMO_MEMBERS = [
    {"name": "John Smith", "email": "john@example.com", "color": "#3B82F6", "role": "owner", "age": 42, "room": "Master Bedroom"},
    {"name": "Sam", "email": "sam@example.com", "color": "#22C55E", "role": "Chef", "age": 23, "room": "Room 2",
     "bio": "The house chef who loves cooking for everyone."},
    {"name": "Jordan", "email": "jordan@example.com", "color": "#A855F7", "role": "Student", "age": 21, "room": "Room 3",
     "bio": "Busy student but always helps with household tasks."},
]

# (title, category, priority, assignee email, days until due)
DEMO_TASKS = [
    ("Clean the kitchen", "Kitchen", "high", "john@example.com", 1),
    ("Take out trash", "Outdoor", "medium", "john@example.com", 2),
    ("Do the laundry", "Laundry", "low", "jordan@example.com", 3),
    ("Cook Sunday dinner", "Kitchen", "medium", "sam@example.com", 5),
]


def find_profile_id(supabase: Client, email: str):
    """Return the user_profiles id registered with this email, if any"""
    result = supabase.table("user_profiles")\
        .select("id")\
        .eq("email", email.lower())\
        .limit(1)\
        .execute()
    return result.data[0]["id"] if result.data else None


def seed_household(supabase: Client):
    """Create the demo household unless it already exists"""
    existing = supabase.table("households")\
        .select("id")\
        .eq("name", DEMO_HOUSEHOLD["name"])\
        .limit(1)\
        .execute()
    if existing.data:
        logger.info(f"Household '{DEMO_HOUSEHOLD['name']}' already exists, skipping")
        return None

    owner_id = find_profile_id(supabase, DEMO_MEMBERS[0]["email"])
    result = supabase.table("households").insert({**DEMO_HOUSEHOLD, "created_by": owner_id}).execute()
    household_id = result.data[0]["id"]
    logger.info(f"Created household: {DEMO_HOUSEHOLD['name']} ({household_id})")
    return household_id, owner_id


def seed_members(supabase: Client, household_id: str):
    """Add demo members; members whose email has an account get linked to it"""
    member_ids = {}
    for member in DEMO_MEMBERS:
        row = {**member, "household_id": household_id, "user_id": find_profile_id(supabase, member["email"])}
        result = supabase.table("household_members").insert(row).execute()
        member_ids[member["email"]] = result.data[0]["id"]
        logger.debug(f"Created member: {member['name']}")
    logger.info(f"Members seeded: {len(member_ids)}")
    return member_ids


def seed_tasks(supabase: Client, household_id: str, member_ids: dict, owner_id):
    """Add demo tasks; the create_task function writes each creation history entry"""
    today = date.today()
    task_ids = {}
    for title, category, priority, assignee, due_in in DEMO_TASKS:
        result = supabase.rpc("create_task", {
            "p_task": {
                "household_id": household_id,
                "title": title,
                "category": category,
                "priority": priority,
                "assigned_to": member_ids[assignee],
                "due_date": (today + timedelta(days=due_in)).isoformat(),
                "status": "To Do",
            },
            "p_created_by": owner_id,
        }).execute()
        task_ids[title] = result.data["id"]
        logger.debug(f"Created task: {title}")
    logger.info(f"Tasks seeded: {len(task_ids)}")
    return task_ids


def seed_comments(supabase: Client, task_ids: dict, owner_id):
    """Comments need an author account; skipped when John has not registered"""
    if owner_id is None:
        logger.warning("No account for john@example.com, skipping demo comments")
        return 0
    supabase.table("comments").insert({
        "task_id": task_ids["Clean the kitchen"],
        "user_id": owner_id,
        "content": "I started cleaning the kitchen this morning. Will finish it after lunch.",
    }).execute()
    return 1


def main():
    """Main function to seed the demo household"""
    try:
        supabase = SupabaseClient.get_service_client()

        logger.info("Starting demo data seeding...")

        seeded = seed_household(supabase)
        if seeded is None:
            return
        household_id, owner_id = seeded

        member_ids = seed_members(supabase, household_id)
        task_ids = seed_tasks(supabase, household_id, member_ids, owner_id)
        comment_count = seed_comments(supabase, task_ids, owner_id)

        logger.info("Seeding completed successfully!")
        logger.info(f"Total: {len(member_ids)} members, {len(task_ids)} tasks, {comment_count} comments")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
