"""
StarShield Services
===================

Services:
- warranty: device registration, warranty validation and claims
"""

__all__ = [
    "warranty",
]
