#!/usr/bin/env python3
"""Sample matching harness for manual end-to-end validation.

Seeds a database with a handful of lost and found items on two campuses,
then runs the matching pipeline for a newly posted lost backpack and prints
the ranked matches and the notifications that were created. Email is never
sent: the harness wires no email sender.

Usage:
    # In-memory database (default)
    python scripts/run_sample_match.py

    # Keep the seeded database for inspection
    python scripts/run_sample_match.py --database sqlite:////tmp/lostfound-sample.db
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lostfound.config.models import AppConfig
from lostfound.config.environment import EnvironmentConfig
from lostfound.domain.models import Item, ItemType
from lostfound.logging.config import configure_logging
from lostfound.persistence.database import close_database, get_session, init_database
from lostfound.persistence.repositories import (
    ItemRepository,
    NotificationRepository,
    UserRepository,
)
from lostfound.pipeline.runner import create_pipeline
from lostfound.utils.timestamps import utc_now

USERS = [
    ("u-asha", "asha@example.edu", "Asha"),
    ("u-ben", "ben@example.edu", "Ben"),
    ("u-chen", "chen@example.edu", "Chen"),
    ("u-dana", None, "Dana"),
]


def seed(now):
    """Found items that the sample lost backpack will be matched against."""
    return [
        (Item(
            id="found-backpack", title="Black Backpack",
            description="Black backpack found near the library entrance with a laptop sleeve",
            category="Bags", location="Central Library",
            coordinates={"latitude": 12.97160, "longitude": 77.59460},
            campus_id="main", posted_by="u-ben", created_at=now - timedelta(hours=2),
        ), ItemType.FOUND),
        (Item(
            id="found-bottle", title="Steel Water Bottle",
            description="Silver steel bottle left in the gym",
            category="Others", location="Sports Complex",
            campus_id="main", posted_by="u-chen", created_at=now - timedelta(days=1),
        ), ItemType.FOUND),
        (Item(
            id="found-bag-old", title="Black Bag",
            description="Black bag found in the canteen",
            category="Bags", location="Canteen",
            campus_id="main", posted_by="u-dana", created_at=now - timedelta(days=20),
        ), ItemType.FOUND),
        (Item(
            id="found-other-campus", title="Black Backpack",
            description="Black backpack with a laptop sleeve",
            category="Bags", location="Central Library",
            campus_id="north", posted_by="u-chen", created_at=now - timedelta(hours=1),
        ), ItemType.FOUND),
    ]


def print_header(title: str):
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the matching pipeline on seeded sample data")
    parser.add_argument("--database", default="sqlite:///:memory:", help="SQLAlchemy database URL")
    parser.add_argument("--log-level", default="WARNING", help="Log level for pipeline logs")
    args = parser.parse_args()

    configure_logging(level=args.log_level, format_type="key-value", environment="sample")
    init_database(args.database)

    now = utc_now()
    new_item = Item(
        id="lost-backpack", title="Black Backpack",
        description="Lost my black backpack with a laptop sleeve at the library",
        category="Bags", location="Central Library",
        coordinates={"latitude": 12.97165, "longitude": 77.59455},
        campus_id="main", posted_by="u-asha", created_at=now,
    )

    try:
        with get_session() as session:
            users = UserRepository(session)
            for user_id, email, name in USERS:
                users.add(user_id, email=email, full_name=name)

            items = ItemRepository(session)
            for item, item_type in seed(now):
                items.add(item, item_type)
            items.add(new_item, ItemType.LOST)

            app_config = AppConfig()
            pipeline = create_pipeline(app_config, EnvironmentConfig(), session)
            result = pipeline.run(new_item, ItemType.LOST)

            print_header(f"Matches for '{new_item.title}' ({result.match_count})")
            for rank, match in enumerate(result.matches, start=1):
                print(f"{rank}. {match.item.display_title} [{match.item.id}] {match.score}% ({match.match_quality})")
                for name, factor in match.factors.items():
                    print(f"     {name:<9} {factor.points:5.1f}/{factor.max_points:<3} {factor.reason}")

            print_header("Notifications")
            notifications = NotificationRepository(session)
            for user_id, _, name in USERS:
                for row in notifications.list_for_user(user_id):
                    print(f"- to {name}: {row.title} {row.message}")

            print_header("Summary")
            print(f"Candidates retrieved:  {result.retrieved_count}")
            print(f"Notifications created: {result.notifications_created}")
            print(f"Notifications failed:  {result.notifications_failed}")
            print(f"Emails skipped:        {result.emails_skipped}")
    finally:
        close_database()

    return 1 if result.had_errors else 0


if __name__ == "__main__":
    sys.exit(main())
