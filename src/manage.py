"""Campus store database management CLI.

Usage:
    python src/manage.py setup-db       # Create all tables
    python src/manage.py drop-db        # Drop all tables
    python src/manage.py seed-catalog   # Insert sample products and combo
"""

import argparse
import sys


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("Done.")


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("Done.")


def seed_catalog():
    from ordering.catalogue.seed import seed_catalog as seed
    from ordering.domain import ordering

    ordering.init()
    with ordering.domain_context():
        if seed():
            print("Sample catalogue inserted.")
        else:
            print("Catalogue already has products; nothing to do.")


def main():
    parser = argparse.ArgumentParser(description="Campus store database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-catalog", help="Insert the sample catalogue into an empty store")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-catalog":
        seed_catalog()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
