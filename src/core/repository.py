"""Appointment Repository - Persistência de agendamentos no Supabase."""

from datetime import datetime
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import Client

from src.contracts.appointment import Appointment, AppointmentStatus
from src.core.availability import APPOINTMENTS_TABLE, AvailabilityChecker
from src.core.errors import (
    DEFAULT_STORE_HINT,
    AppointmentValidationError,
    NotFound,
    SlotConflict,
    StoreUnavailable,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)

# Postgres unique_violation, raised by the partial index on pending slots
UNIQUE_VIOLATION = "23505"


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


class AppointmentRepository:
    """Operações de escrita e leitura na tabela `appointments`.

    Toda mutação lê o estado atual imediatamente antes de gravar e falha se
    o registro alvo não existir.
    """

    def __init__(
        self,
        client: Client,
        availability: AvailabilityChecker,
        tz: ZoneInfo,
    ) -> None:
        """Inicializa o repositório.

        Args:
            client: Cliente Supabase.
            availability: Verificador de disponibilidade de horários.
            tz: Fuso horário local fixo usado nos timestamps.
        """
        self.client = client
        self.availability = availability
        self.tz = tz

    def _table(self) -> Any:
        return self.client.table(APPOINTMENTS_TABLE)

    def _now(self) -> str:
        return datetime.now(self.tz).isoformat()

    def _execute(
        self,
        query: Any,
        operation: str,
        slot: tuple[str, str] | None = None,
    ) -> Any:
        """Executa a query traduzindo falhas do banco para erros de domínio.

        Args:
            query: Query PostgREST pronta para `execute()`.
            operation: Nome da operação, usado em logs e mensagens.
            slot: Horário gravado; violação de unicidade vira SlotConflict.

        Raises:
            SlotConflict: Se o índice único de horários pendentes rejeitar a escrita.
            StoreUnavailable: Para qualquer outra falha do banco.
        """
        try:
            return query.execute()
        except APIError as e:
            if slot is not None and e.code == UNIQUE_VIOLATION:
                logger.warning(
                    "slot_conflict_detected_by_store",
                    operation=operation,
                    date=slot[0],
                    time=slot[1],
                )
                raise SlotConflict(*slot) from e
            logger.error(
                "appointment_store_error",
                operation=operation,
                code=e.code,
                error=e.message,
            )
            raise StoreUnavailable(
                f"Erro ao {operation} agendamento: {e.message}",
                hint=e.hint or DEFAULT_STORE_HINT,
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "appointment_store_unreachable",
                operation=operation,
                error=str(e),
            )
            raise StoreUnavailable(
                f"Erro ao {operation} agendamento: banco indisponível"
            ) from e

    @staticmethod
    def _validated(appointment: Appointment) -> Appointment:
        try:
            return Appointment.model_validate(appointment.model_dump())
        except ValidationError as e:
            raise AppointmentValidationError.from_pydantic(e) from e

    async def get(self, appointment_id: str, owner_id: str) -> Appointment | None:
        """Busca agendamento pelo ID dentro da agenda do salão.

        Args:
            appointment_id: ID do agendamento.
            owner_id: ID do salão dono da agenda.

        Returns:
            Agendamento ou None se não encontrado, de outro salão ou com ID
            que não é UUID (a coluna `id` rejeitaria a consulta).
        """
        if not _is_uuid(appointment_id):
            return None
        result = self._execute(
            self._table()
            .select("*")
            .eq("id", appointment_id)
            .eq("owner_id", owner_id)
            .limit(1),
            "buscar",
        )
        if not result.data:
            return None
        return Appointment.model_validate(result.data[0])

    async def _require(self, appointment_id: str | None, owner_id: str) -> Appointment:
        if not appointment_id:
            raise NotFound("(sem id)")
        existing = await self.get(appointment_id, owner_id)
        if existing is None:
            logger.info(
                "appointment_not_found",
                appointment_id=appointment_id,
                owner_id=owner_id,
            )
            raise NotFound(appointment_id)
        return existing

    async def create(self, appointment: Appointment) -> Appointment:
        """Cria agendamento após verificar o horário.

        Args:
            appointment: Agendamento a persistir (id é ignorado).

        Returns:
            Registro criado, com id e created_at atribuídos pelo banco.

        Raises:
            SlotConflict: Se já houver agendamento pendente no horário.
        """
        appointment = self._validated(appointment)

        available = await self.availability.is_available(
            appointment.scheduled_date,
            appointment.scheduled_time,
            appointment.owner_id,
        )
        if not available:
            logger.info(
                "slot_conflict",
                date=appointment.scheduled_date,
                time=appointment.scheduled_time,
                owner_id=appointment.owner_id,
            )
            raise SlotConflict(appointment.scheduled_date, appointment.scheduled_time)

        row = appointment.to_row()
        row.pop("updated_at", None)
        result = self._execute(
            self._table().insert(row),
            "criar",
            slot=appointment.slot,
        )
        created = Appointment.model_validate(result.data[0])

        logger.info(
            "appointment_created",
            appointment_id=created.id,
            starts_at=created.starts_at(self.tz).isoformat(),
            ends_at=created.ends_at(self.tz).isoformat(),
        )
        return created

    async def list_by_owner(self, owner_id: str) -> list[Appointment]:
        """Lista agendamentos não cancelados do salão.

        A ordem é por criação, do mais recente ao mais antigo, e não pela
        data do agendamento.

        Args:
            owner_id: ID do salão.

        Returns:
            Lista de agendamentos.
        """
        result = self._execute(
            self._table()
            .select("*")
            .eq("owner_id", owner_id)
            .neq("status", AppointmentStatus.CANCELLED.value)
            .order("created_at", desc=True),
            "listar",
        )

        logger.info(
            "appointments_fetched_for_owner",
            owner_id=owner_id,
            count=len(result.data),
        )
        return [Appointment.model_validate(row) for row in result.data]

    async def update(self, appointment: Appointment) -> Appointment:
        """Atualiza um agendamento existente.

        Status e data de criação gravados são preservados; um agendamento
        cancelado continua cancelado e, por não ocupar horário, não passa
        pela verificação de disponibilidade.

        Args:
            appointment: Agendamento com id; a busca usa seu `owner_id`.

        Returns:
            Registro atualizado.

        Raises:
            NotFound: Se o agendamento não existir na agenda do salão.
            SlotConflict: Se o novo horário estiver ocupado por outro agendamento.
        """
        existing = await self._require(appointment.id, appointment.owner_id)
        appointment = self._validated(appointment)

        moves_pending = (
            existing.status == AppointmentStatus.PENDING
            and appointment.slot != existing.slot
        )
        if moves_pending:
            available = await self.availability.is_available(
                appointment.scheduled_date,
                appointment.scheduled_time,
                appointment.owner_id,
                ignore_id=appointment.id,
            )
            if not available:
                logger.info(
                    "slot_conflict",
                    appointment_id=appointment.id,
                    date=appointment.scheduled_date,
                    time=appointment.scheduled_time,
                )
                raise SlotConflict(
                    appointment.scheduled_date, appointment.scheduled_time
                )

        row = appointment.to_row()
        row["status"] = existing.status.value
        row["updated_at"] = self._now()

        result = self._execute(
            self._table()
            .update(row)
            .eq("id", appointment.id)
            .eq("owner_id", appointment.owner_id),
            "atualizar",
            slot=appointment.slot,
        )

        logger.info("appointment_updated", appointment_id=appointment.id)
        return Appointment.model_validate(result.data[0])

    async def cancel(self, appointment_id: str, owner_id: str) -> Appointment:
        """Cancela agendamento (exclusão lógica).

        Args:
            appointment_id: ID do agendamento.
            owner_id: ID do salão dono da agenda.

        Returns:
            Registro cancelado.

        Raises:
            NotFound: Se o agendamento não existir na agenda do salão.
        """
        await self._require(appointment_id, owner_id)

        result = self._execute(
            self._table()
            .update(
                {
                    "status": AppointmentStatus.CANCELLED.value,
                    "updated_at": self._now(),
                }
            )
            .eq("id", appointment_id)
            .eq("owner_id", owner_id),
            "cancelar",
        )

        logger.info("appointment_cancelled", appointment_id=appointment_id)
        return Appointment.model_validate(result.data[0])

    async def delete(self, appointment_id: str, owner_id: str) -> None:
        """Remove o agendamento definitivamente.

        Args:
            appointment_id: ID do agendamento.
            owner_id: ID do salão dono da agenda.

        Raises:
            NotFound: Se o agendamento não existir na agenda do salão.
        """
        await self._require(appointment_id, owner_id)

        self._execute(
            self._table().delete().eq("id", appointment_id).eq("owner_id", owner_id),
            "excluir",
        )

        logger.info("appointment_deleted", appointment_id=appointment_id)
