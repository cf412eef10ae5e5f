#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database is reachable and the schema is in place.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from kolmarket.core.config import get_settings
from kolmarket.db.postgres import check_db_connection
from kolmarket.db.schema import missing_tables


def main():
    settings = get_settings()
    print("=" * 50)
    print("KOL MARKETPLACE - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Checking database...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if not check_db_connection():
        print("    ❌ Database: FAILED")
        return 1
    print("    ✅ Database: CONNECTED")

    print("\n[2] Checking schema...")
    missing = missing_tables()
    if missing:
        print(f"    ⚠️  Missing tables: {', '.join(missing)} (start the API or run scripts/seed_data.py)")
    else:
        print("    ✅ All tables present")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
