"""Contracts package - Pydantic schemas for data validation."""

from src.contracts.appointment import (
    Appointment,
    AppointmentInput,
    AppointmentStatus,
    Recurrence,
    RecurrenceFrequency,
)
from src.contracts.entities import Client, Professional, Service

__all__ = [
    "Appointment",
    "AppointmentInput",
    "AppointmentStatus",
    "Recurrence",
    "RecurrenceFrequency",
    "Client",
    "Service",
    "Professional",
]
