"""StarShield API routes."""

from services.warranty.routes.claims import router as claims_router
from services.warranty.routes.warranties import router as warranties_router

__all__ = [
    "warranties_router",
    "claims_router",
]
