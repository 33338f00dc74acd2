"""
Reconciliation API routes.

Reports are derived on every request from the current snapshots.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
from datetime import datetime, timezone
import structlog

from models.reconciliation import (
    MatchType,
    ReconciliationResponse,
    ResolveRequest,
    ResolveResponse,
)
from services.reconciliation_service import get_reconciliation_service
from services.reconciliation_engine import filter_records
from exceptions import AppError
from exceptions.errors import MappingConfigNotFoundError, ReconciliationInputError

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

@router.get("", response_model=ReconciliationResponse)
async def get_reconciliation(
    config_id: Optional[str] = Query(None, description="Mapping configuration (default: first stored)"),
    match_type: Optional[MatchType] = Query(None, description="Only records of this match type"),
    mismatches_only: bool = Query(False, description="Hide full matches"),
    search: Optional[str] = Query(None, description="Search source/target names and ids")
):
    """
    Reconcile source items against work items.

    Filters narrow the returned records; the summary always covers the
    whole report.
    """
    try:
        service = get_reconciliation_service()
        report = service.run(config_id=config_id)

        records = filter_records(
            report.records,
            match_type=match_type,
            mismatches_only=mismatches_only,
            search=search,
        )

        return ReconciliationResponse(
            records=records,
            summary=report.summary,
            config_id=report.config_id,
            config_name=report.config_name,
            filtered_count=len(records),
            generated_at=datetime.now(timezone.utc),
        )

    except (MappingConfigNotFoundError, ReconciliationInputError) as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_classification(data: ResolveRequest):
    """
    Resolve expected type and location for one classification.

    Used by the mapping editor to preview which rule a classification hits.
    """
    try:
        service = get_reconciliation_service()
        return service.resolve(
            data.hierarchy_level,
            data.classification,
            config_id=data.config_id,
        )

    except MappingConfigNotFoundError as e:
        return handle_error(e)
    except Exception as e:
        return handle_error(e)
