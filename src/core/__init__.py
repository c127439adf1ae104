"""Core package - Scheduling business logic."""

from src.core.availability import Availability, AvailabilityChecker
from src.core.recurrence import add_months, expand
from src.core.repository import AppointmentRepository
from src.core.scheduler import EntityLookup, SchedulingService

__all__ = [
    "Availability",
    "AvailabilityChecker",
    "add_months",
    "expand",
    "AppointmentRepository",
    "EntityLookup",
    "SchedulingService",
]
