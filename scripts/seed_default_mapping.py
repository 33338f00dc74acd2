"""
Seed the mapping configuration table with the default configuration.

Run this script once per environment. Does nothing if any configuration
is already stored.

Usage:
    python scripts/seed_default_mapping.py
"""

import os
import sys
from pathlib import Path

# Add backend to path so we can import modules
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from dotenv import load_dotenv
load_dotenv(os.path.join(backend_dir, ".env"))

from config import get_admin_client, get_supabase_client, settings
from config.mapping_defaults import DEFAULT_MAPPING_CONFIGURATION
import structlog

logger = structlog.get_logger(__name__)


def seed_default_mapping(db=None):
    """Insert the default mapping configuration if the table is empty."""
    db = db or get_admin_client() or get_supabase_client()
    table = settings.mapping_config_table

    # Check if configurations already exist
    existing = db.table(table).select("id", count="exact").execute()

    if existing.count:
        logger.info("mapping_configs_already_seeded", count=existing.count)
        print(f"✓ {table} already has {existing.count} configuration(s)")
        return None

    try:
        result = db.table(table).insert(DEFAULT_MAPPING_CONFIGURATION.to_row()).execute()

        logger.info("default_mapping_seeded", config_id=result.data[0]["id"])
        print(f"✓ Seeded '{result.data[0]['name']}' ({result.data[0]['id']})")

        return result.data[0]

    except Exception as e:
        logger.error("seed_default_mapping_failed", error=str(e))
        print(f"✗ Failed to seed default mapping: {e}")
        raise


if __name__ == "__main__":
    print("Seeding default mapping configuration...")
    seed_default_mapping()
    print("\nDone!")
