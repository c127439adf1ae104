"""Scheduling Orchestrator - Casos de uso de agendamento.

Ponto único de entrada para a camada de apresentação: salvar (criar ou
editar), excluir e listar agendamentos. Clientes, serviços e profissionais
chegam como parâmetro a cada chamada; o orquestrador não guarda estado.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import ValidationError

from src.contracts.appointment import Appointment, AppointmentInput, Recurrence
from src.contracts.entities import Client, Professional, Service
from src.core.errors import (
    AppointmentValidationError,
    NotFound,
    ReferenceNotFound,
    SchedulingError,
    SeriesIncomplete,
)
from src.core.recurrence import add_months, expand
from src.core.repository import AppointmentRepository
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EntityLookup:
    """Conjuntos já carregados usados para resolver referências.

    Attributes:
        clients: Clientes do salão.
        services: Serviços do salão.
        professionals: Profissionais do salão.
    """

    clients: Sequence[Client] = field(default_factory=list)
    services: Sequence[Service] = field(default_factory=list)
    professionals: Sequence[Professional] = field(default_factory=list)

    def client(self, client_id: str) -> Client | None:
        return next((c for c in self.clients if c.id == client_id), None)

    def service(self, service_id: str) -> Service | None:
        return next((s for s in self.services if s.id == service_id), None)

    def professional(self, professional_id: str) -> Professional | None:
        return next((p for p in self.professionals if p.id == professional_id), None)


def resolve_references(
    data: AppointmentInput,
    lookups: EntityLookup,
) -> tuple[Client, Service, Professional]:
    """Resolve cliente, serviço e profissional pelos IDs informados.

    Args:
        data: Entrada já validada.
        lookups: Conjuntos fornecidos pelo chamador.

    Returns:
        Tupla (cliente, serviço, profissional).

    Raises:
        ReferenceNotFound: Se qualquer um dos três não existir.
    """
    client = lookups.client(data.client_id)
    service = lookups.service(data.service_id)
    professional = lookups.professional(data.professional_id)

    if client is None or service is None or professional is None:
        logger.warning(
            "appointment_reference_not_found",
            client_found=client is not None,
            service_found=service is not None,
            professional_found=professional is not None,
        )
        raise ReferenceNotFound("Cliente, serviço ou profissional não encontrado.")
    return client, service, professional


class SchedulingService:
    """Orquestra validação, resolução de entidades, gravação e recorrência."""

    def __init__(
        self,
        repository: AppointmentRepository,
        default_recurrence_months: int = 3,
        default_professional_color: str = "#3788d8",
    ) -> None:
        """Inicializa o serviço.

        Args:
            repository: Repositório de agendamentos.
            default_recurrence_months: Meses até a data final padrão da série.
            default_professional_color: Cor usada se o profissional não tiver uma.
        """
        self.repository = repository
        self.default_recurrence_months = default_recurrence_months
        self.default_professional_color = default_professional_color

    def parse_input(self, data: AppointmentInput | dict[str, Any]) -> AppointmentInput:
        """Valida a estrutura da entrada e aplica a data final padrão.

        Raises:
            AppointmentValidationError: Com um erro por campo inválido.
        """
        try:
            parsed = (
                data
                if isinstance(data, AppointmentInput)
                else AppointmentInput.model_validate(data)
            )
        except ValidationError as e:
            error = AppointmentValidationError.from_pydantic(e)
            logger.info(
                "appointment_input_invalid",
                fields=[item.field for item in error.errors],
            )
            raise error from e

        recurrence = parsed.recurrence
        if recurrence.is_recurring and recurrence.end_date is None:
            end_date = add_months(
                date.fromisoformat(parsed.scheduled_date),
                self.default_recurrence_months,
            )
            parsed = parsed.model_copy(
                update={
                    "recurrence": Recurrence(
                        frequency=recurrence.frequency,
                        end_date=end_date.isoformat(),
                    )
                }
            )
        return parsed

    def build_appointment(
        self,
        data: AppointmentInput,
        owner_id: str,
        client: Client,
        service: Service,
        professional: Professional,
    ) -> Appointment:
        """Monta o registro copiando nomes e cores das entidades resolvidas."""
        try:
            return Appointment(
                id=data.id,
                client_id=client.id,
                service_id=service.id,
                professional_id=professional.id,
                owner_id=owner_id,
                client_name=client.name,
                service_name=service.name,
                professional_name=professional.name,
                client_color=client.color or "",
                professional_color=professional.color or self.default_professional_color,
                scheduled_date=data.scheduled_date,
                scheduled_time=data.scheduled_time,
                duration_minutes=data.duration_minutes or service.duration_minutes,
                cost=data.cost if data.cost is not None else service.price,
                recurrence=data.recurrence,
            )
        except ValidationError as e:
            raise AppointmentValidationError.from_pydantic(e) from e

    async def save_appointment(
        self,
        data: AppointmentInput | dict[str, Any],
        *,
        owner_id: str,
        lookups: EntityLookup,
    ) -> str:
        """Cria ou edita um agendamento.

        Uma edição cujo alvo não existe mais vira criação. Criações
        recorrentes geram uma ocorrência independente por data da série.

        Args:
            data: Dados do formulário.
            owner_id: ID do salão da sessão atual.
            lookups: Clientes, serviços e profissionais já carregados.

        Returns:
            ID do agendamento principal.
        """
        parsed = self.parse_input(data)
        client, service, professional = resolve_references(parsed, lookups)
        appointment = self.build_appointment(
            parsed, owner_id, client, service, professional
        )

        if appointment.id:
            try:
                updated = await self.repository.update(appointment)
                return updated.id
            except NotFound:
                # Record removed concurrently: save it as a new appointment
                logger.warning(
                    "appointment_update_fell_back_to_create",
                    appointment_id=appointment.id,
                )
                appointment = appointment.model_copy(update={"id": None})

        return await self._create_series(appointment)

    async def _create_series(self, appointment: Appointment) -> str:
        primary = await self.repository.create(appointment)
        if not appointment.recurrence.is_recurring:
            return primary.id

        created_ids = [primary.id]
        follow_ups = expand(
            primary.day,
            date.fromisoformat(appointment.recurrence.end_date),
            appointment.recurrence.frequency,
        )
        for occurrence_date in follow_ups:
            occurrence = appointment.model_copy(
                update={"scheduled_date": occurrence_date.isoformat()}
            )
            try:
                created = await self.repository.create(occurrence)
            except SchedulingError as e:
                logger.error(
                    "recurrence_series_interrupted",
                    primary_id=primary.id,
                    failed_date=occurrence_date.isoformat(),
                    created=len(created_ids),
                    error=e.message,
                )
                raise SeriesIncomplete(
                    primary_id=primary.id,
                    created_ids=created_ids,
                    failed_date=occurrence_date.isoformat(),
                    reason=e.message,
                ) from e
            created_ids.append(created.id)

        logger.info(
            "recurrence_series_created",
            primary_id=primary.id,
            frequency=appointment.recurrence.frequency.value,
            occurrences=len(created_ids),
        )
        return primary.id

    async def delete_appointment(
        self,
        appointment_id: str,
        *,
        owner_id: str,
        permanent: bool = False,
    ) -> None:
        """Exclui um agendamento do salão.

        Por padrão cancela (exclusão lógica); `permanent=True` remove o
        registro do banco.

        Raises:
            NotFound: Se o agendamento não existir na agenda do salão.
        """
        if permanent:
            await self.repository.delete(appointment_id, owner_id)
        else:
            await self.repository.cancel(appointment_id, owner_id)

    async def list_appointments(self, owner_id: str) -> list[Appointment]:
        """Lista agendamentos ativos do salão, mais recentes primeiro."""
        return await self.repository.list_by_owner(owner_id)
