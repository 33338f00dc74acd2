"""
Mapping configuration API routes.

Configurations are saved whole: PUT inserts a new configuration or
replaces the one with the same id.
"""

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
import structlog

from models.mapping_config import MappingConfiguration, MappingConfigListResponse
from services.mapping_config_service import get_mapping_config_service
from exceptions import AppError
from exceptions.errors import InvalidMappingConfigError, MappingConfigNotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=MappingConfigListResponse)
async def list_mapping_configs():
    """
    List mapping configurations.

    The first configuration is the one reconciliation uses. Returns the
    built-in default when none are stored.
    """
    try:
        service = get_mapping_config_service()
        configs = service.get_all()

        return MappingConfigListResponse(
            data=configs,
            total=len(configs)
        )

    except Exception as e:
        return handle_error(e)


@router.get("/default", response_model=MappingConfiguration)
async def get_default_mapping_config():
    """Get the built-in default configuration."""
    try:
        service = get_mapping_config_service()
        return service.get_default()

    except Exception as e:
        return handle_error(e)


@router.get("/{config_id}", response_model=MappingConfiguration)
async def get_mapping_config(config_id: str):
    """Get mapping configuration by id."""
    try:
        service = get_mapping_config_service()
        return service.get_by_id(config_id)

    except MappingConfigNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.put("", response_model=MappingConfiguration)
async def save_mapping_config(data: dict = Body(...)):
    """
    Save a whole mapping configuration.

    Rule order is kept as submitted. Returns 422 with per-field errors
    when the configuration is invalid.
    """
    try:
        service = get_mapping_config_service()
        return service.save(data)

    except InvalidMappingConfigError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.delete("/{config_id}", status_code=204)
async def delete_mapping_config(config_id: str):
    """Delete a mapping configuration."""
    try:
        service = get_mapping_config_service()
        service.delete(config_id)
        return None

    except MappingConfigNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)
