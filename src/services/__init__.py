"""Services package - External service integrations."""

from src.services.supabase import (
    SupabaseService,
    create_supabase_client,
)

__all__ = [
    "SupabaseService",
    "create_supabase_client",
]
