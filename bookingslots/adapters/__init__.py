"""
Adapters layer - External availability sources.
"""

from .file_availability import FileAvailabilityProvider

__all__ = ["FileAvailabilityProvider"]
