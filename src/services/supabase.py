"""Serviço do Supabase - Cliente e leitura de entidades do salão."""

from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from src.config.settings import get_settings
from src.contracts.entities import Client as SalonClient
from src.contracts.entities import Professional, Service
from src.core.errors import DEFAULT_STORE_HINT, StoreUnavailable
from src.core.scheduler import EntityLookup
from src.utils.logger import get_logger

logger = get_logger(__name__)


def create_supabase_client() -> Client:
    """Cria um novo cliente Supabase a partir das configurações."""
    settings = get_settings()

    # Prioriza a service key para operações de backend para ignorar RLS (Row Level Security)
    key = settings.supabase_service_key or settings.supabase_key

    if not key:
        logger.warning(
            "supabase_not_configured",
            message="Credenciais do Supabase não configuradas. Operações de banco falharão.",
        )
        if not settings.is_development:
            raise ValueError("Credenciais do Supabase são obrigatórias em produção")

    new_client = create_client(settings.supabase_url, key)

    logger.info(
        "supabase_client_created",
        using_service_key=key == settings.supabase_service_key,
        key_preview=key[:5] + "..." if key else "None",
    )
    return new_client


class SupabaseService:
    """Leitura de clientes, serviços e profissionais de um salão.

    O cadastro dessas entidades fica fora do núcleo; aqui apenas carregamos
    os conjuntos usados para resolver referências dos agendamentos.
    """

    def __init__(self, client: Client | None = None) -> None:
        """Inicializa o serviço com um cliente Supabase.

        Args:
            client: Cliente Supabase opcional. Se não fornecido, cria um novo base nas settings.
        """
        self.client = client or create_supabase_client()

    def _rows(self, table: str, owner_id: str) -> list[dict[str, Any]]:
        try:
            result = (
                self.client.table(table).select("*").eq("owner_id", owner_id).execute()
            )
        except APIError as e:
            logger.error("entities_fetch_failed", table=table, error=e.message)
            raise StoreUnavailable(
                f"Erro ao carregar {table}: {e.message}",
                hint=e.hint or DEFAULT_STORE_HINT,
            ) from e
        except httpx.HTTPError as e:
            logger.error("entities_fetch_failed", table=table, error=str(e))
            raise StoreUnavailable(f"Erro ao carregar {table}: banco indisponível") from e

        logger.info(
            "entities_fetched",
            table=table,
            owner_id=owner_id,
            count=len(result.data),
        )
        return result.data

    async def list_clients(self, owner_id: str) -> list[SalonClient]:
        """Lista clientes do salão."""
        return [SalonClient.model_validate(r) for r in self._rows("clients", owner_id)]

    async def list_services(self, owner_id: str) -> list[Service]:
        """Lista serviços do salão."""
        return [Service.model_validate(r) for r in self._rows("services", owner_id)]

    async def list_professionals(self, owner_id: str) -> list[Professional]:
        """Lista profissionais do salão."""
        return [
            Professional.model_validate(r)
            for r in self._rows("professionals", owner_id)
        ]

    async def load_lookups(self, owner_id: str) -> EntityLookup:
        """Carrega os três conjuntos usados na resolução de referências.

        Args:
            owner_id: ID do salão.

        Returns:
            EntityLookup pronto para ser passado ao orquestrador.
        """
        return EntityLookup(
            clients=await self.list_clients(owner_id),
            services=await self.list_services(owner_id),
            professionals=await self.list_professionals(owner_id),
        )

