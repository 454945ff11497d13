"""
StarShield: Warranty & Claims Module.

Device registration with one-year screen warranty, warranty validation
with lazy expiry, and quota-limited claims with an audit trail.
"""

from services.warranty.audit import AuditRecorder
from services.warranty.lifecycle import (
    ClaimsLifecycleService,
    WarrantyLifecycleService,
)

__all__ = [
    "AuditRecorder",
    "ClaimsLifecycleService",
    "WarrantyLifecycleService",
]
