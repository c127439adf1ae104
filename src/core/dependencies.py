"""Dependências do Aplicativo.

Este módulo monta os objetos injetados nos handlers HTTP a cada requisição.
Isso permite um melhor isolamento para testes e desacoplamento da infraestrutura.
"""

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from supabase import Client

from src.config.settings import Settings
from src.core.availability import AvailabilityChecker
from src.core.repository import AppointmentRepository
from src.core.scheduler import SchedulingService
from src.services.supabase import SupabaseService


@dataclass
class AppDependencies:
    """Dependências injetadas nos handlers de agendamento.

    Attributes:
        supabase: Serviço de leitura de clientes, serviços e profissionais.
        scheduling: Orquestrador de agendamentos.
        tz: Fuso horário local fixo do salão.
    """

    supabase: SupabaseService
    scheduling: SchedulingService
    tz: ZoneInfo


def build_dependencies(client: Client, settings: Settings) -> AppDependencies:
    """Monta o grafo de dependências sobre um único cliente Supabase.

    Args:
        client: Cliente Supabase compartilhado.
        settings: Configurações da aplicação.

    Returns:
        AppDependencies pronto para uso.
    """
    tz = ZoneInfo(settings.timezone)
    availability = AvailabilityChecker(
        client, fail_closed=settings.availability_fail_closed
    )
    repository = AppointmentRepository(client, availability, tz)
    scheduling = SchedulingService(
        repository,
        default_recurrence_months=settings.default_recurrence_months,
        default_professional_color=settings.default_professional_color,
    )
    return AppDependencies(
        supabase=SupabaseService(client),
        scheduling=scheduling,
        tz=tz,
    )
