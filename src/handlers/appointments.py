"""Appointments Handler - Endpoints consumidos pela camada de apresentação."""

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query

from src.config.settings import get_settings
from src.contracts.appointment import Appointment
from src.core.dependencies import AppDependencies, build_dependencies
from src.core.errors import (
    AppointmentValidationError,
    NotFound,
    ReferenceNotFound,
    SchedulingError,
    SeriesIncomplete,
    SlotConflict,
    StoreUnavailable,
)
from src.core.reports import (
    DailySummary,
    PeriodReport,
    ReportPeriod,
    daily_summary,
    period_report,
)
from src.services.observability import get_tracer, mark_span_error
from src.services.supabase import create_supabase_client
from src.utils.logger import bind_request_context, get_logger

router = APIRouter(prefix="/appointments", tags=["appointments"])
logger = get_logger(__name__)
tracer = get_tracer(__name__)

# Dependencies (initialized lazily)
_dependencies: AppDependencies | None = None


def get_dependencies() -> AppDependencies:
    """Get or create the application dependencies."""
    global _dependencies
    if _dependencies is None:
        _dependencies = build_dependencies(create_supabase_client(), get_settings())
    return _dependencies


def get_owner_id(x_owner_id: str = Header(..., min_length=1)) -> str:
    """ID do salão da sessão atual, informado pelo provedor de autenticação."""
    bind_request_context(owner_id=x_owner_id)
    return x_owner_id


def _to_http_error(error: SchedulingError) -> HTTPException:
    """Traduz erros do núcleo em respostas HTTP com mensagem amigável."""
    if isinstance(error, AppointmentValidationError):
        return HTTPException(
            status_code=422,
            detail={
                "message": "Dados do agendamento inválidos",
                "errors": [
                    {"field": e.field, "message": e.message} for e in error.errors
                ],
            },
        )
    if isinstance(error, ReferenceNotFound | NotFound):
        return HTTPException(status_code=404, detail={"message": error.message})
    if isinstance(error, SeriesIncomplete):
        return HTTPException(
            status_code=409,
            detail={
                "message": error.message,
                "appointment_id": error.primary_id,
                "created_ids": error.created_ids,
                "failed_date": error.failed_date,
            },
        )
    if isinstance(error, SlotConflict):
        return HTTPException(status_code=409, detail={"message": error.message})
    if isinstance(error, StoreUnavailable):
        return HTTPException(
            status_code=503,
            detail={"message": error.message, "hint": error.hint},
        )
    return HTTPException(status_code=500, detail={"message": error.message})


async def _save(
    payload: dict[str, Any],
    owner_id: str,
    deps: AppDependencies,
) -> str:
    with tracer.start_as_current_span("save_appointment") as span:
        span.set_attribute("owner_id", owner_id)
        span.set_attribute("editing", bool(payload.get("id")))
        try:
            lookups = await deps.supabase.load_lookups(owner_id)
            appointment_id = await deps.scheduling.save_appointment(
                payload, owner_id=owner_id, lookups=lookups
            )
        except SchedulingError as e:
            mark_span_error(span, e)
            logger.warning(
                "save_appointment_failed",
                error=e.message,
                error_type=type(e).__name__,
            )
            raise _to_http_error(e) from e

        span.set_attribute("appointment_id", appointment_id)
        return appointment_id


@router.get("")
async def list_appointments(
    owner_id: str = Depends(get_owner_id),
    deps: AppDependencies = Depends(get_dependencies),
) -> list[Appointment]:
    """Lista agendamentos ativos, do criado mais recentemente ao mais antigo."""
    try:
        return await deps.scheduling.list_appointments(owner_id)
    except SchedulingError as e:
        raise _to_http_error(e) from e


@router.get("/summary")
async def get_daily_summary(
    day: date | None = Query(None, description="Dia do resumo (YYYY-MM-DD)"),
    owner_id: str = Depends(get_owner_id),
    deps: AppDependencies = Depends(get_dependencies),
) -> DailySummary:
    """Resumo financeiro do dia (hoje, no fuso do salão, se omitido)."""
    target = day or datetime.now(deps.tz).date()
    try:
        appointments = await deps.scheduling.list_appointments(owner_id)
        professionals = await deps.supabase.list_professionals(owner_id)
    except SchedulingError as e:
        raise _to_http_error(e) from e
    return daily_summary(appointments, professionals, target)


@router.get("/report")
async def get_period_report(
    period: ReportPeriod = Query("weekly", description="weekly, biweekly ou monthly"),
    owner_id: str = Depends(get_owner_id),
    deps: AppDependencies = Depends(get_dependencies),
) -> PeriodReport:
    """Receita do período (semana, quinzena ou mês) que contém hoje."""
    try:
        appointments = await deps.scheduling.list_appointments(owner_id)
    except SchedulingError as e:
        raise _to_http_error(e) from e
    return period_report(appointments, period, datetime.now(deps.tz).date())


@router.post("", status_code=201)
async def create_appointment(
    payload: dict[str, Any] = Body(...),
    owner_id: str = Depends(get_owner_id),
    deps: AppDependencies = Depends(get_dependencies),
) -> dict:
    """Salva um agendamento (edição se o corpo trouxer `id`).

    Returns:
        ID do agendamento principal.
    """
    appointment_id = await _save(payload, owner_id, deps)
    return {
        "status": "success",
        "appointment_id": appointment_id,
        "message": "Agendamento salvo com sucesso!",
    }


@router.put("/{appointment_id}")
async def update_appointment(
    appointment_id: str,
    payload: dict[str, Any] = Body(...),
    owner_id: str = Depends(get_owner_id),
    deps: AppDependencies = Depends(get_dependencies),
) -> dict:
    """Edita um agendamento; se ele não existir mais, é recriado."""
    saved_id = await _save({**payload, "id": appointment_id}, owner_id, deps)
    return {
        "status": "success",
        "appointment_id": saved_id,
        "message": "Agendamento atualizado com sucesso!",
    }


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    permanent: bool = Query(False, description="Remover definitivamente"),
    owner_id: str = Depends(get_owner_id),
    deps: AppDependencies = Depends(get_dependencies),
) -> dict:
    """Exclui um agendamento (cancelamento, ou remoção com `permanent`)."""
    with tracer.start_as_current_span("delete_appointment") as span:
        span.set_attribute("appointment_id", appointment_id)
        span.set_attribute("permanent", permanent)
        try:
            await deps.scheduling.delete_appointment(
                appointment_id, owner_id=owner_id, permanent=permanent
            )
        except SchedulingError as e:
            mark_span_error(span, e)
            raise _to_http_error(e) from e

    return {
        "status": "success",
        "appointment_id": appointment_id,
        "message": "Agendamento excluído com sucesso!",
    }
