"""Availability Checker - Is a slot free of pending appointments?"""

from enum import Enum

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from src.contracts.appointment import AppointmentStatus
from src.utils.logger import get_logger

logger = get_logger(__name__)

APPOINTMENTS_TABLE = "appointments"


class Availability(str, Enum):
    """Resultado de uma consulta de disponibilidade."""

    AVAILABLE = "available"
    TAKEN = "taken"
    UNKNOWN = "unknown"


class AvailabilityChecker:
    """Consulta se um horário (data, hora) já tem agendamento pendente.

    A resposta é um retrato do momento da consulta: o horário não fica
    reservado entre a verificação e a gravação.
    """

    def __init__(self, client: Client, fail_closed: bool = False) -> None:
        """Inicializa o verificador.

        Args:
            client: Cliente Supabase.
            fail_closed: Se True, falha de consulta conta como indisponível.
                O padrão (False) considera o horário livre.
        """
        self.client = client
        self.fail_closed = fail_closed

    async def pending_in_slot(
        self,
        scheduled_date: str,
        scheduled_time: str,
        owner_id: str,
    ) -> list[dict]:
        """Busca agendamentos pendentes no horário.

        Args:
            scheduled_date: Data no formato YYYY-MM-DD.
            scheduled_time: Hora no formato HH:mm.
            owner_id: ID do salão dono da agenda.

        Returns:
            Registros pendentes no horário (normalmente zero ou um).
        """
        result = (
            self.client.table(APPOINTMENTS_TABLE)
            .select("id")
            .eq("owner_id", owner_id)
            .eq("scheduled_date", scheduled_date)
            .eq("scheduled_time", scheduled_time)
            .eq("status", AppointmentStatus.PENDING.value)
            .execute()
        )
        return result.data

    async def check(
        self,
        scheduled_date: str,
        scheduled_time: str,
        owner_id: str,
        ignore_id: str | None = None,
    ) -> Availability:
        """Verifica disponibilidade sem decidir o que fazer em caso de erro.

        Args:
            scheduled_date: Data no formato YYYY-MM-DD.
            scheduled_time: Hora no formato HH:mm.
            owner_id: ID do salão dono da agenda.
            ignore_id: Agendamento que não conta como ocupante (edição).

        Returns:
            AVAILABLE, TAKEN ou UNKNOWN quando a consulta falha.
        """
        try:
            rows = await self.pending_in_slot(scheduled_date, scheduled_time, owner_id)
        except (APIError, httpx.HTTPError) as e:
            logger.error(
                "availability_lookup_failed",
                date=scheduled_date,
                time=scheduled_time,
                error=str(e),
            )
            return Availability.UNKNOWN

        occupants = [row for row in rows if row["id"] != ignore_id]
        return Availability.TAKEN if occupants else Availability.AVAILABLE

    async def is_available(
        self,
        scheduled_date: str,
        scheduled_time: str,
        owner_id: str,
        ignore_id: str | None = None,
    ) -> bool:
        """Retorna True se nenhum agendamento pendente ocupa o horário.

        Returns:
            Disponibilidade; UNKNOWN segue a política `fail_closed`.
        """
        availability = await self.check(
            scheduled_date, scheduled_time, owner_id, ignore_id=ignore_id
        )
        if availability == Availability.UNKNOWN:
            if self.fail_closed:
                logger.warning(
                    "availability_unknown_fail_closed",
                    date=scheduled_date,
                    time=scheduled_time,
                )
                return False
            # Fail-open: a failed lookup does not block booking
            logger.warning(
                "availability_unknown_fail_open",
                date=scheduled_date,
                time=scheduled_time,
            )
            return True
        return availability == Availability.AVAILABLE
