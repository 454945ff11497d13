"""
Shared Models
=============

Pydantic models shared across StarShield services.
"""

from shared.models.common import (
    CamelModel,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "HealthResponse",
]
