"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    approvals,
    audit_events,
    exit_clearance,
    health,
    notifications,
    payments,
    tenants,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(audit_events.router, prefix="/audit-events", tags=["audit"])
api_router.include_router(tenants.router, prefix="/tenants", tags=["tenants"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(
    exit_clearance.router, prefix="/exit-clearances", tags=["exit-clearance"]
)
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
