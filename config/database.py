"""
Supabase clients for the mapping and item tables.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings
from exceptions.errors import DatabaseError

logger = structlog.get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get the shared Supabase client.

    Cached; call get_supabase_client.cache_clear() to reconnect.

    Raises:
        DatabaseError: If the client cannot reach the mapping table
    """
    logger.info("connecting_to_supabase", url=settings.supabase_url[:30] + "...")

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        client.table(settings.mapping_config_table).select("id").limit(1).execute()
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseError("connect", str(e)) from e

    logger.info("supabase_connected")
    return client


def get_admin_client() -> Optional[Client]:
    """Service-role client for the seed script, or None without SUPABASE_SERVICE_KEY."""
    if not settings.supabase_service_key:
        logger.warning("admin_client_not_configured")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_service_key)
    except Exception as e:
        logger.error("admin_client_failed", error=str(e))
        return None


def check_connection() -> dict:
    """
    Health check: count stored mapping configurations.

    Returns:
        {"status": "healthy", "mapping_configs_count": n} or
        {"status": "unhealthy", "error": message}
    """
    try:
        configs = (
            get_supabase_client()
            .table(settings.mapping_config_table)
            .select("id", count="exact")
            .execute()
        )
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", "mapping_configs_count": configs.count}
