"""Resumo financeiro - Receita diária e por período a partir dos agendamentos."""

import calendar
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Literal

from pydantic import BaseModel, Field

from src.contracts.appointment import Appointment, AppointmentStatus
from src.contracts.entities import Professional

ReportPeriod = Literal["weekly", "biweekly", "monthly"]


class ProfessionalRevenue(BaseModel):
    """Receita de um profissional no dia."""

    professional_id: str
    name: str
    revenue: float = 0.0


class DailySummary(BaseModel):
    """Resumo financeiro de um dia."""

    day: date
    total_revenue: float = Field(0.0, description="Soma dos custos do dia")
    unique_clients: int = Field(0, description="Clientes distintos atendidos")
    by_professional: list[ProfessionalRevenue] = Field(default_factory=list)


class PeriodReport(BaseModel):
    """Receita e quantidade de agendamentos num período."""

    period: ReportPeriod
    start: date
    end: date
    total_revenue: float = 0.0
    appointments: int = 0


def _active(appointments: Iterable[Appointment]) -> list[Appointment]:
    return [a for a in appointments if a.status != AppointmentStatus.CANCELLED]


def daily_summary(
    appointments: Iterable[Appointment],
    professionals: Sequence[Professional],
    day: date,
) -> DailySummary:
    """Calcula o resumo financeiro de um dia.

    Args:
        appointments: Agendamentos do salão.
        professionals: Profissionais a listar (mesmo sem receita).
        day: Dia do resumo.

    Returns:
        Receita total, clientes únicos e receita por profissional.
    """
    of_day = [a for a in _active(appointments) if a.day == day]
    by_professional = [
        ProfessionalRevenue(
            professional_id=p.id,
            name=p.name,
            revenue=sum(a.cost for a in of_day if a.professional_id == p.id),
        )
        for p in professionals
    ]
    return DailySummary(
        day=day,
        total_revenue=sum(a.cost for a in of_day),
        unique_clients=len({a.client_id for a in of_day}),
        by_professional=by_professional,
    )


def period_bounds(period: ReportPeriod, today: date) -> tuple[date, date]:
    """Limites (inclusivos) do período que contém `today`.

    Semanas começam no domingo; o período quinzenal cobre a semana atual e
    a seguinte.
    """
    if period == "monthly":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)

    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    weeks = 2 if period == "biweekly" else 1
    return week_start, week_start + timedelta(days=7 * weeks - 1)


def period_report(
    appointments: Iterable[Appointment],
    period: ReportPeriod,
    today: date,
) -> PeriodReport:
    """Receita dos agendamentos ativos no período que contém `today`."""
    start, end = period_bounds(period, today)
    in_period = [a for a in _active(appointments) if start <= a.day <= end]
    return PeriodReport(
        period=period,
        start=start,
        end=end,
        total_revenue=sum(a.cost for a in in_period),
        appointments=len(in_period),
    )
