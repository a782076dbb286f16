from fastapi import APIRouter

from turismo.api.v1.endpoints import packages, bookings, auth, uploads, contact


# Create main API router
api_v1_router = APIRouter()

# Include auth endpoints (public access)
api_v1_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"]
)

# Include catalog endpoints (public reads, operator writes)
api_v1_router.include_router(
    packages.router,
    prefix="/packages",
    tags=["packages"]
)

# Include booking endpoints (public create, operator lifecycle)
api_v1_router.include_router(
    bookings.router,
    prefix="/bookings",
    tags=["bookings"]
)

# Include media upload endpoints (operator access)
api_v1_router.include_router(
    uploads.router,
    prefix="/uploads",
    tags=["uploads"]
)

# Include contact form (public access)
api_v1_router.include_router(
    contact.router,
    prefix="/contact",
    tags=["contact"]
)
