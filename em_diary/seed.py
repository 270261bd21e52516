#!/usr/bin/env python3
"""
Database Seeding for EM Diary

Usage:
    python -m em_diary.seed                  # Add the starter team members
    python -m em_diary.seed hash-password    # Print a MANAGER_PASSWORD_HASH for a password

Behavior:
    - Creates each starter team member whose name is not already in the roster
    - Safe to run multiple times (idempotent)

This script does NOT:
    - Auto-run on application startup
    - Modify or delete existing team members or notes
"""

import getpass
import sys
from typing import Dict, List

from em_diary.auth import hash_password
from em_diary.logging_config import setup_logging
from em_diary.models import TeamMemberCreate
from em_diary.store import MongoStore, TeamMemberRepository


# =============================================================================
# STARTER ROSTER
# =============================================================================

INITIAL_MEMBERS: List[Dict[str, str]] = [
    {
        "name": "John Doe",
        "role": "Senior Frontend Engineer",
        "birthday": "1990-01-01",
        "hiringDate": "2020-01-01",
        "location": "New York, NY",
    },
    {
        "name": "Jane Doe",
        "role": "Senior Backend Engineer",
        "birthday": "1990-01-01",
        "hiringDate": "2020-01-01",
        "location": "San Francisco, CA",
    },
    {
        "name": "Jim Doe",
        "role": "Engineering Manager",
        "birthday": "1990-01-01",
        "hiringDate": "2020-01-01",
        "location": "Los Angeles, CA",
    },
]


# =============================================================================
# SEEDING FUNCTIONS
# =============================================================================


def seed_members(members: TeamMemberRepository, roster=INITIAL_MEMBERS) -> int:
    """
    Create starter team members that don't exist yet (matched by name).
    Returns count of members created.
    """
    existing = {member.name for member in members.list_all()}
    created_count = 0

    for member_data in roster:
        if member_data["name"] in existing:
            print(f"  [SKIP] Team member exists: {member_data['name']}")
            continue
        print(f"  [CREATE] Team member: {member_data['name']} ({member_data['role']})")
        members.create(TeamMemberCreate.model_validate(member_data))
        created_count += 1

    return created_count


def print_password_hash():
    """Prompt for a password and print the hash to put in MANAGER_PASSWORD_HASH."""
    password = getpass.getpass("Manager password: ")
    if not password:
        print("[ERROR] Empty password")
        sys.exit(1)
    print(hash_password(password))


def main(argv=None):
    """Main seeding entry point."""
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "hash-password":
        print_password_hash()
        return

    setup_logging()

    print("=" * 60)
    print("EM DIARY - DATABASE SEEDING")
    print("=" * 60)

    store = MongoStore()
    try:
        store.connect()
        created = seed_members(store.members)

        print("\n" + "=" * 60)
        print("SEEDING COMPLETE")
        print("=" * 60)
        if created > 0:
            print(f"Created {created} team member(s)")
        else:
            print("No changes made (all team members already exist)")

    except Exception as e:
        print(f"\n[ERROR] Seeding failed: {e}")
        raise

    finally:
        store.disconnect()


if __name__ == "__main__":
    main()
