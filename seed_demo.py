#!/usr/bin/env python3
"""
Fill a LinkLeaf database with demo data.

Creates (or recreates) the demo account ``demo@linkleaf.com`` with
password ``password123``, eight colored tags and ten sample contacts.
Everything goes through the regular services, so the data obeys the
same rules as data created through the API.

Usage:
    python seed_demo.py --db ./linkleaf_api/linkleaf.db
    python seed_demo.py --reset          # wipe contacts, tags and users first

Running it again without --reset only adds demo contacts that are
missing (matched by name).

If --db is omitted, DATABASE_URL (or the default ``linkleaf.db``) is used.
"""

import argparse
import asyncio
import logging
import os
import random
import sqlite3
import sys
import uuid

from linkleaf_api.app.core.config import settings
from linkleaf_api.app.core.db import get_connection, init_db, utc_now
from linkleaf_api.app.core.logging_config import setup_logging
from linkleaf_api.app.schemas.contact import ContactCreate
from linkleaf_api.app.schemas.user import UserRegister
from linkleaf_api.app.services.contact_service import ContactService
from linkleaf_api.app.services.user_service import UserService

logger = logging.getLogger("seed_demo")

DEMO_EMAIL = "demo@linkleaf.com"
DEMO_PASSWORD = "password123"

TAGS = [
    ("Business", "#3B82F6"),
    ("Client", "#10B981"),
    ("Friend", "#F59E0B"),
    ("Family", "#EF4444"),
    ("Partner", "#8B5CF6"),
    ("Colleague", "#06B6D4"),
    ("Designer", "#F97316"),
    ("Developer", "#84CC16"),
]

CONTACTS = [
    {
        "name": "Sarah Johnson",
        "email": "sarah.johnson@email.com",
        "phone": "+1 (555) 123-4567",
        "company": "Tech Solutions Inc",
        "job_title": "Product Manager",
        "website": "https://techsolutions.com",
        "notes": "Met at the tech conference. Very interested in our new product line.",
        "tags": ["Business", "Client"],
    },
    {
        "name": "Michael Chen",
        "email": "michael.chen@company.com",
        "phone": "+1 (555) 987-6543",
        "company": "Design Studio",
        "job_title": "Creative Director",
        "website": "https://designstudio.com",
        "notes": "Collaborated on several projects. Excellent designer with great vision.",
        "tags": ["Business", "Partner"],
    },
    {
        "name": "Emma Rodriguez",
        "email": "emma.r@gmail.com",
        "phone": "+1 (555) 456-7890",
        "company": "Freelancer",
        "job_title": "UI/UX Designer",
        "notes": "Friend from college. Always available for design consultations.",
        "tags": ["Friend", "Designer"],
    },
    {
        "name": "David Kim",
        "email": "david.kim@startup.io",
        "phone": "+1 (555) 321-9876",
        "company": "StartupCo",
        "job_title": "CTO",
        "website": "https://startupco.io",
        "notes": "Tech entrepreneur. Looking for potential collaboration opportunities.",
        "tags": ["Business", "Partner", "Developer"],
    },
    {
        "name": "Lisa Wang",
        "email": "lisa.wang@corp.com",
        "phone": "+1 (555) 654-3210",
        "company": "Corporate Solutions",
        "job_title": "Marketing Director",
        "website": "https://corpsolutions.com",
        "notes": "Potential client for our marketing automation tools.",
        "tags": ["Business", "Client"],
    },
    {
        "name": "Alex Thompson",
        "email": "alex.thompson@email.com",
        "phone": "+1 (555) 789-0123",
        "company": "Creative Agency",
        "job_title": "Art Director",
        "notes": "Colleague from previous job. Great for creative brainstorming sessions.",
        "tags": ["Colleague", "Designer"],
    },
    {
        "name": "Maria Garcia",
        "email": "maria.garcia@family.com",
        "phone": "+1 (555) 234-5678",
        "company": "Family Business",
        "job_title": "Operations Manager",
        "notes": "Cousin who runs the family restaurant. Always supportive of my projects.",
        "tags": ["Family"],
    },
    {
        "name": "James Wilson",
        "email": "james.wilson@dev.com",
        "phone": "+1 (555) 345-6789",
        "company": "DevCorp",
        "job_title": "Senior Developer",
        "website": "https://devcorp.com",
        "notes": "Met through a coding bootcamp. Great technical resource.",
        "tags": ["Friend", "Developer"],
    },
    {
        "name": "Rachel Brown",
        "email": "rachel.brown@consulting.com",
        "phone": "+1 (555) 456-7890",
        "company": "Business Consulting",
        "job_title": "Senior Consultant",
        "website": "https://businessconsulting.com",
        "notes": "Business consultant with expertise in digital transformation.",
        "tags": ["Business", "Client"],
    },
    {
        "name": "Tom Anderson",
        "email": "tom.anderson@email.com",
        "phone": "+1 (555) 567-8901",
        "company": "Design Studio",
        "job_title": "Graphic Designer",
        "notes": "Freelance designer. Very creative and reliable.",
        "tags": ["Partner", "Designer"],
    },
]


def reset_data() -> None:
    conn = get_connection()
    try:
        conn.execute("DELETE FROM contact_tags")
        conn.execute("DELETE FROM contacts")
        conn.execute("DELETE FROM tags")
        conn.execute("DELETE FROM users")
        conn.commit()
    finally:
        conn.close()


def seed_tags() -> None:
    """Create the palette of demo tags; existing names only get their color set."""
    conn = get_connection()
    try:
        for name, color in TAGS:
            conn.execute(
                "INSERT INTO tags (id, name, color, created_at) "
                "VALUES (?, ?, ?, ?) "
                "ON CONFLICT(name) DO UPDATE SET color = excluded.color",
                (str(uuid.uuid4()), name, color, utc_now()),
            )
        conn.commit()
    finally:
        conn.close()


def _contact_names(user_id: str) -> set:
    conn = get_connection()
    try:
        rows = conn.execute("SELECT name FROM contacts WHERE user_id = ?", (user_id,)).fetchall()
    finally:
        conn.close()
    return {row["name"] for row in rows}


async def seed(favorite_ratio: float) -> None:
    existing = await UserService.authenticate(DEMO_EMAIL, DEMO_PASSWORD)
    if existing:
        user = existing
        logger.info("Demo user already exists (%s); adding contacts", user.id)
    else:
        user = await UserService.create_user(
            UserRegister(email=DEMO_EMAIL, password=DEMO_PASSWORD, first_name="Demo", last_name="User")
        )
        conn = get_connection()
        try:
            conn.execute("UPDATE users SET is_verified = 1 WHERE id = ?", (user.id,))
            conn.commit()
        finally:
            conn.close()
        logger.info("Created demo user %s", user.id)

    seed_tags()
    logger.info("Created %d tags", len(TAGS))

    existing_names = _contact_names(user.id)
    created = 0
    for data in CONTACTS:
        if data["name"] in existing_names:
            continue
        contact = ContactCreate(**data, is_favorite=random.random() < favorite_ratio)
        await ContactService.create_contact(user.id, contact)
        created += 1
    logger.info("Created %d demo contacts, %d already present", created, len(CONTACTS) - created)


def main():
    ap = argparse.ArgumentParser(description="Seed the LinkLeaf database with demo data.")
    ap.add_argument("--db", help="Path to the SQLite DB file (defaults to DATABASE_URL)")
    ap.add_argument("--reset", action="store_true", help="Delete all users, contacts and tags first")
    ap.add_argument("--favorites", type=float, default=0.3, help="Share of contacts marked as favorite")
    args = ap.parse_args()

    setup_logging()
    if args.db:
        settings.database_url = os.path.abspath(args.db)

    try:
        init_db()
        if args.reset:
            reset_data()
            logger.info("Cleared existing data")
        asyncio.run(seed(args.favorites))
    except sqlite3.Error as e:
        print(f"[!] Seeding failed: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"[+] Demo data ready. Log in as {DEMO_EMAIL} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
