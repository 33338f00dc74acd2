"""
Mapping configuration service.

Reads and saves mapping configurations. A configuration is always saved
whole (upsert by id); rule lists are stored verbatim in their order.
"""

from typing import Optional, Union
from pydantic import ValidationError as PydanticValidationError
import structlog

from config import get_supabase_client, settings
from config.mapping_defaults import DEFAULT_MAPPING_CONFIGURATION
from models.mapping_config import (
    ComponentProductRule,
    InitiativeEpicRule,
    LocationRule,
    MappingConfiguration,
    TypeRule,
    UserTeamRule,
)
from exceptions import DatabaseError
from exceptions.errors import InvalidMappingConfigError, MappingConfigNotFoundError

logger = structlog.get_logger(__name__)

# Column -> rule model for each rule table
RULE_COLUMNS = {
    "pb_to_ado_mappings": TypeRule,
    "area_path_mappings": LocationRule,
    "initiative_epic_mappings": InitiativeEpicRule,
    "user_team_mappings": UserTeamRule,
    "component_product_mappings": ComponentProductRule,
}


class MappingConfigService:
    """
    Mapping configuration persistence.

    Stored rows that contain a malformed rule still load: the bad rule is
    dropped (and logged) so it can never be selected. Configurations
    submitted for saving are validated strictly.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.mapping_config_table

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self, include_default: bool = True) -> list[MappingConfiguration]:
        """
        Get all stored configurations in storage order.

        Args:
            include_default: Return the default configuration when none are stored

        Returns:
            List of configurations; the first is the authoritative one
        """
        logger.info("getting_mapping_configs")

        try:
            response = (
                self.db.table(self.table)
                .select("*")
                .order("created_at")
                .execute()
            )

            configs = [self._row_to_config(row) for row in response.data]

        except Exception as e:
            logger.error("mapping_configs_get_all_failed", error=str(e))
            raise DatabaseError("select", str(e))

        logger.info("mapping_configs_retrieved", count=len(configs))

        if not configs and include_default:
            logger.info("mapping_configs_using_default")
            return [self.get_default()]

        return configs

    def get_by_id(self, config_id: str) -> MappingConfiguration:
        """
        Get configuration by id.

        Raises:
            MappingConfigNotFoundError: If configuration doesn't exist
        """
        logger.debug("getting_mapping_config", config_id=config_id)

        try:
            response = (
                self.db.table(self.table)
                .select("*")
                .eq("id", config_id)
                .execute()
            )

            if not response.data:
                raise MappingConfigNotFoundError(config_id)

            return self._row_to_config(response.data[0])

        except MappingConfigNotFoundError:
            raise
        except Exception as e:
            logger.error("mapping_config_get_failed", config_id=config_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_active(self) -> Optional[MappingConfiguration]:
        """
        Get the configuration reconciliation runs against.

        The first stored configuration is authoritative; there is no merge
        across several. Returns None when none are stored.
        """
        configs = self.get_all(include_default=False)
        return configs[0] if configs else None

    def get_default(self) -> MappingConfiguration:
        """Copy of the built-in default configuration."""
        return DEFAULT_MAPPING_CONFIGURATION.model_copy(deep=True)

    # ===================
    # WRITE OPERATIONS
    # ===================

    def parse(self, data: Union[dict, MappingConfiguration]) -> MappingConfiguration:
        """
        Validate a configuration payload.

        Raises:
            InvalidMappingConfigError: If the payload fails validation
        """
        if isinstance(data, MappingConfiguration):
            return data
        try:
            return MappingConfiguration.model_validate(data)
        except PydanticValidationError as e:
            errors = [
                {
                    "field": ".".join(str(part) for part in error["loc"]),
                    "message": error["msg"],
                }
                for error in e.errors()
            ]
            raise InvalidMappingConfigError(errors) from e

    def save(self, data: Union[dict, MappingConfiguration]) -> MappingConfiguration:
        """
        Save a configuration (insert, or replace the row with the same id).

        Args:
            data: Full configuration

        Returns:
            Stored configuration

        Raises:
            InvalidMappingConfigError: If the payload fails validation
        """
        config = self.parse(data)

        logger.info("saving_mapping_config", config_id=config.id, name=config.name)

        shadowed = config.shadowed_rules()
        if shadowed:
            logger.warning(
                "mapping_config_has_shadowed_rules",
                config_id=config.id,
                shadowed=shadowed
            )

        try:
            response = (
                self.db.table(self.table)
                .upsert(config.to_row())
                .execute()
            )

            if not response.data:
                raise DatabaseError("upsert", "No row returned")

            saved = self._row_to_config(response.data[0])

        except DatabaseError:
            raise
        except Exception as e:
            logger.error("mapping_config_save_failed", config_id=config.id, error=str(e))
            raise DatabaseError("upsert", str(e))

        logger.info("mapping_config_saved", config_id=saved.id)
        return saved

    def delete(self, config_id: str) -> None:
        """
        Delete a configuration.

        Raises:
            MappingConfigNotFoundError: If configuration doesn't exist
        """
        logger.info("deleting_mapping_config", config_id=config_id)

        self.get_by_id(config_id)

        try:
            self.db.table(self.table).delete().eq("id", config_id).execute()
        except Exception as e:
            logger.error("mapping_config_delete_failed", config_id=config_id, error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("mapping_config_deleted", config_id=config_id)

    # ===================
    # HELPERS
    # ===================

    def _row_to_config(self, row: dict) -> MappingConfiguration:
        """Convert database row to MappingConfiguration, dropping malformed rules."""
        data = dict(row)

        for column, model in RULE_COLUMNS.items():
            rules = []
            for index, rule in enumerate(row.get(column) or []):
                try:
                    rules.append(model.model_validate(rule))
                except PydanticValidationError as e:
                    logger.warning(
                        "mapping_rule_skipped",
                        config_id=row.get("id"),
                        table=column,
                        index=index,
                        error=str(e)
                    )
            data[column] = rules

        return MappingConfiguration.model_validate(data)


# Singleton instance
_mapping_config_service: Optional[MappingConfigService] = None


def get_mapping_config_service() -> MappingConfigService:
    """Get or create MappingConfigService instance."""
    global _mapping_config_service
    if _mapping_config_service is None:
        _mapping_config_service = MappingConfigService()
    return _mapping_config_service
