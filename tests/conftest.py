"""Pytest Configuration - Shared fixtures for tests."""

import os
from collections.abc import AsyncGenerator, Callable
from typing import Any
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment before importing app
os.environ["APP_ENV"] = "development"
os.environ["ENABLE_TRACING"] = "false"

from src.contracts.appointment import Appointment  # noqa: E402
from src.contracts.entities import Client, Professional, Service  # noqa: E402
from src.core.availability import AvailabilityChecker  # noqa: E402
from src.core.dependencies import AppDependencies  # noqa: E402
from src.core.repository import AppointmentRepository  # noqa: E402
from src.core.scheduler import EntityLookup, SchedulingService  # noqa: E402
from src.services.supabase import SupabaseService  # noqa: E402
from tests.fakes import (  # noqa: E402
    CLIENT_ROWS,
    OWNER_ID,
    PROFESSIONAL_ROWS,
    SERVICE_ROWS,
    TZ,
    FakeSupabase,
)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    """In-memory Supabase client without the unique slot index."""
    return FakeSupabase()


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def tz() -> ZoneInfo:
    return TZ


@pytest.fixture
def availability(fake_supabase: FakeSupabase) -> AvailabilityChecker:
    return AvailabilityChecker(fake_supabase)


@pytest.fixture
def repository(
    fake_supabase: FakeSupabase, availability: AvailabilityChecker
) -> AppointmentRepository:
    return AppointmentRepository(fake_supabase, availability, TZ)


@pytest.fixture
def scheduling(repository: AppointmentRepository) -> SchedulingService:
    return SchedulingService(repository)


@pytest.fixture
def lookups() -> EntityLookup:
    """Clientes, serviços e profissionais já carregados pelo chamador."""
    return EntityLookup(
        clients=[Client.model_validate(r) for r in CLIENT_ROWS],
        services=[Service.model_validate(r) for r in SERVICE_ROWS],
        professionals=[Professional.model_validate(r) for r in PROFESSIONAL_ROWS],
    )


@pytest.fixture
def make_appointment() -> Callable[..., Appointment]:
    """Factory de agendamentos válidos com campos sobrescrevíveis."""

    def _make(**overrides: Any) -> Appointment:
        data = {
            "client_id": "cli-1",
            "service_id": "srv-1",
            "professional_id": "pro-1",
            "owner_id": OWNER_ID,
            "client_name": "Maria Souza",
            "service_name": "Corte Feminino",
            "professional_name": "Ana",
            "client_color": "#ff8800",
            "professional_color": "#3788d8",
            "scheduled_date": "2025-06-10",
            "scheduled_time": "14:00",
            "duration_minutes": 30,
            "cost": 80.0,
        }
        data.update(overrides)
        return Appointment(**data)

    return _make


@pytest.fixture
def sample_input() -> dict:
    """Sample valid form payload for a one-off appointment."""
    return {
        "client_id": "cli-1",
        "service_id": "srv-1",
        "professional_id": "pro-1",
        "scheduled_date": "2025-06-10",
        "scheduled_time": "14:00",
        "duration_minutes": 30,
        "cost": 80.0,
        "recurrence": {"frequency": "none"},
    }


@pytest.fixture
async def async_client(
    fake_supabase: FakeSupabase,
    scheduling: SchedulingService,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI app."""
    from src.handlers.appointments import get_dependencies
    from src.main import app

    app.dependency_overrides[get_dependencies] = lambda: AppDependencies(
        supabase=SupabaseService(fake_supabase),
        scheduling=scheduling,
        tz=TZ,
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
