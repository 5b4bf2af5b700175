"""
Supabase migration helper

The Python client cannot run DDL, so this checks whether the `events` table
exists and, if not, prints the migration SQL to paste into the Supabase
SQL Editor.
"""
import sys
from pathlib import Path

from loguru import logger
from postgrest.exceptions import APIError

from database.supabase_client import create_supabase_client

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
EVENTS_MIGRATION = MIGRATIONS_DIR / "001_create_events.sql"


def events_table_exists(client) -> bool:
    try:
        client.table("events").select("id").limit(1).execute()
        return True
    except APIError as e:
        if "does not exist" in str(e) or "relation" in str(e).lower():
            return False
        raise


def run_migration() -> bool:
    """Report migration status; prints the SQL when the table is missing"""
    if not EVENTS_MIGRATION.exists():
        logger.error(f"Migration file not found: {EVENTS_MIGRATION}")
        return False

    try:
        client = create_supabase_client()
    except ValueError as e:
        logger.error(str(e))
        return False

    if events_table_exists(client):
        logger.info("events table already exists")
        return True

    sql_content = EVENTS_MIGRATION.read_text(encoding="utf-8")

    logger.info("=" * 60)
    logger.info("Run the SQL below in the Supabase Dashboard:")
    logger.info("1. https://supabase.com/dashboard")
    logger.info("2. Select the project -> SQL Editor")
    logger.info("3. Paste and run")
    logger.info("=" * 60)
    print("\n" + sql_content + "\n")
    return True


if __name__ == "__main__":
    logger.remove()
    logger.add(sys.stdout, format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}")
    sys.exit(0 if run_migration() else 1)
