#!/usr/bin/env python3
"""
Create the conversions, conversion_products and customer_journey tables.

Existing tables are left untouched.

Usage:
    python scripts/init_db.py
"""
from dotenv import load_dotenv
load_dotenv()

from attribution_tracker.config import settings
from attribution_tracker.models import Base, Database


def main():
    """Create all tables and print what exists afterwards."""
    database = Database(
        settings.get_database_url(),
        sslmode=settings.database_sslmode or None,
    )

    connected, error = database.check_connection()
    if not connected:
        print(f"Could not connect to database: {error}")
        raise SystemExit(1)

    database.create_all()

    print()
    print("=" * 70)
    print("Database tables ready")
    print("=" * 70)
    for table in Base.metadata.sorted_tables:
        print(f"  • {table.name}")
    print("=" * 70)
    print()

    database.dispose()


if __name__ == '__main__':
    main()
