"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.mapping_configs import router as mapping_configs_router
from routes.reconciliation import router as reconciliation_router

__all__ = [
    "mapping_configs_router",
    "reconciliation_router",
]
