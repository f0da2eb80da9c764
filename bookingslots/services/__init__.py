"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .slot_service import AvailabilityProviderProtocol, SlotService, get_slots

__all__ = ["AvailabilityProviderProtocol", "SlotService", "get_slots"]
