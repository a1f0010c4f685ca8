"""Florist database management CLI.

Provides commands to create and drop the database schema of the florist
domain, using the setup_db/drop_db utilities in ``florist.utils.db``.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    """Create database tables for every aggregate and entity."""
    from florist.domain import florist
    from florist.utils.db import setup_db

    print("Initializing florist domain...")
    florist.init()
    prepared = setup_db(florist)
    if prepared:
        print(f"  Schema ready for provider(s): {', '.join(prepared)}.")
    else:
        print("  No relational providers configured; nothing to do.")
    print("Done.")


def drop_database():
    """Drop the tables created by setup-db."""
    from florist.domain import florist
    from florist.utils.db import drop_db

    print("Initializing florist domain...")
    florist.init()
    dropped = drop_db(florist)
    if dropped:
        print(f"  Schema dropped for provider(s): {', '.join(dropped)}.")
    else:
        print("  No relational providers configured; nothing to do.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Florist database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
