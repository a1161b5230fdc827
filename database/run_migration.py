"""
Supabase schema check for the poker circuit
"""
from pathlib import Path
from typing import List

from loguru import logger

from database.supabase_client import get_supabase_client

MIGRATION_FILE = Path(__file__).parent / "migrations" / "001_circuit_schema.sql"
REQUIRED_TABLES = ["players", "tournaments", "stages", "stage_results"]


def find_missing_tables(client) -> List[str]:
    """Tables of the circuit schema that do not answer a select"""
    missing = []
    for table in REQUIRED_TABLES:
        try:
            client.table(table).select("id").limit(1).execute()
        except Exception as e:
            if "does not exist" in str(e) or "relation" in str(e).lower():
                missing.append(table)
            else:
                raise
    return missing


def run_migration(client=None) -> bool:
    """
    Verify the schema; print the migration SQL when tables are missing

    The Supabase client cannot run DDL, so the SQL has to be pasted into the
    dashboard SQL editor.
    """
    client = client or get_supabase_client()
    missing = find_missing_tables(client)

    if not missing:
        logger.info("All circuit tables exist")
        return True

    logger.warning(f"Missing tables: {', '.join(missing)}")
    sql_content = MIGRATION_FILE.read_text(encoding="utf-8")

    logger.info("=" * 60)
    logger.info("Run the SQL below in the Supabase dashboard (SQL Editor):")
    logger.info("=" * 60)
    print("\n" + sql_content + "\n")
    return False


if __name__ == "__main__":
    run_migration()
