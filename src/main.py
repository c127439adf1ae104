"""FastAPI Application - Main entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config.settings import get_settings
from src.handlers.appointments import router as appointments_router
from src.services.observability import instrument_fastapi, setup_tracing
from src.utils.logger import get_logger, setup_logging

# Initialize settings early
settings = get_settings()

# Setup logging
setup_logging(settings.log_level, json_logs=not settings.is_development)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    logger.info(
        "application_starting",
        environment=settings.app_env,
        port=settings.api_port,
        timezone=settings.timezone,
    )

    if not settings.supabase_url:
        logger.warning(
            "supabase_url_missing",
            message="SUPABASE_URL não configurada; requisições de agendamento falharão.",
        )

    setup_tracing()

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="Agenda Salão API",
    description="Agendamentos, recorrência e disponibilidade de horários do salão",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Instrument with OpenTelemetry
instrument_fastapi(app)

app.include_router(appointments_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status with environment info.
    """
    return {
        "status": "healthy",
        "environment": settings.app_env,
        "version": "1.0.0",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
