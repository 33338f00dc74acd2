"""
Reconciliation service.

Fetches the three inputs (mapping configuration, source items, target
items) and runs the reconciliation engine over them. Only a whole input
failing to load is an error; everything per-item ends up in the report.
"""

from typing import Optional
import structlog

from config import settings
from models.items import HierarchyLevel
from models.mapping_config import MappingConfiguration
from models.reconciliation import (
    Classification,
    ReconciliationReport,
    ResolveResponse,
)
from services.mapping_config_service import get_mapping_config_service
from services.source_item_service import get_source_item_service
from services.target_item_service import get_target_item_service
from services.location_resolver import resolve_expected_location
from services.type_resolver import resolve_expected_type
from services.reconciliation_engine import reconcile
from exceptions import AppError
from exceptions.errors import MappingConfigNotFoundError, ReconciliationInputError

logger = structlog.get_logger(__name__)


class ReconciliationService:
    """Runs reconciliation against the stored snapshots."""

    def __init__(self):
        self.config_service = get_mapping_config_service()
        self.source_service = get_source_item_service()
        self.target_service = get_target_item_service()

    def load_config(self, config_id: Optional[str] = None) -> Optional[MappingConfiguration]:
        """
        Get the configuration to reconcile against.

        The requested configuration if config_id is given, else the first
        stored one, else None (built-in type defaults only).

        Raises:
            MappingConfigNotFoundError: If config_id doesn't exist
            ReconciliationInputError: If configurations cannot be read
        """
        try:
            if config_id:
                return self.config_service.get_by_id(config_id)
            return self.config_service.get_active()
        except MappingConfigNotFoundError:
            raise
        except AppError as e:
            raise ReconciliationInputError("mapping configurations", e.message)

    def run(self, config_id: Optional[str] = None) -> ReconciliationReport:
        """
        Reconcile all correlated target items.

        Args:
            config_id: Configuration to use (default: first stored)

        Returns:
            ReconciliationReport

        Raises:
            MappingConfigNotFoundError: If config_id doesn't exist
            ReconciliationInputError: If an input cannot be fetched
        """
        logger.info("reconciliation_started", config_id=config_id)

        config = self.load_config(config_id)

        try:
            source_items = self.source_service.get_all()
        except AppError as e:
            logger.error("reconciliation_input_failed", input="source items", error=e.message)
            raise ReconciliationInputError("source items", e.message)

        try:
            target_items = self.target_service.get_all(correlated_only=True)
        except AppError as e:
            logger.error("reconciliation_input_failed", input="target items", error=e.message)
            raise ReconciliationInputError("target items", e.message)

        return reconcile(
            source_items,
            target_items,
            config,
            unknown_location=settings.unknown_location,
        )

    def resolve(
        self,
        hierarchy_level: HierarchyLevel,
        classification: Classification,
        config_id: Optional[str] = None
    ) -> ResolveResponse:
        """
        Resolve expected type and location for one ad hoc classification.

        Uses the requested or first stored configuration, falling back to
        the built-in default configuration when none are stored.
        """
        config = self.load_config(config_id) or self.config_service.get_default()

        expected_type = resolve_expected_type(hierarchy_level, config)
        expected_location = resolve_expected_location(
            classification,
            config,
            unknown=settings.unknown_location,
        )

        logger.debug(
            "resolved_classification",
            config_id=config.id,
            expected_type=expected_type,
            expected_location=expected_location
        )

        return ResolveResponse(
            expected_type=expected_type,
            expected_location=expected_location,
            config_id=config.id,
            config_name=config.name,
        )


# Singleton instance
_reconciliation_service: Optional[ReconciliationService] = None


def get_reconciliation_service() -> ReconciliationService:
    """Get or create ReconciliationService instance."""
    global _reconciliation_service
    if _reconciliation_service is None:
        _reconciliation_service = ReconciliationService()
    return _reconciliation_service
