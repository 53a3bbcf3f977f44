"""
API v1 router setup
Organized into: public (guest booking page) and dashboard (X-Host-ID) routes
"""
from fastapi import APIRouter

from slotwise.api.v1.dashboard import availability, bookings, event_types, hosts, questions
from slotwise.api.v1.public import bookings as public_bookings, pages, slots

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(slots.router, tags=["Public"])
api_v1_router.include_router(public_bookings.router, tags=["Public"])
# Catch-all /public/{host}/{event}, keep after the other public routers
api_v1_router.include_router(pages.router, tags=["Public"])

# ============================================================================
# DASHBOARD ROUTES (X-Host-ID required, except host registration)
# ============================================================================
api_v1_router.include_router(hosts.router, tags=["Dashboard"])
api_v1_router.include_router(availability.router, tags=["Dashboard"])
api_v1_router.include_router(event_types.router, tags=["Dashboard"])
api_v1_router.include_router(questions.router, tags=["Dashboard"])
api_v1_router.include_router(bookings.router, tags=["Dashboard"])


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and route groups"""
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "dashboard": "X-Host-ID header identifying the acting host",
        }
    }
