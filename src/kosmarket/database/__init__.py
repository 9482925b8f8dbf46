"""
Módulo de base de datos.

Provee acceso a Supabase y operaciones sobre las tablas del marketplace.
"""

from kosmarket.database.supabase_client import (
    create_supabase_client,
    SupabaseClient,
    Predicate,
    eq,
    in_,
)
from kosmarket.database.repositories import (
    PropertyRepository,
    RoomTypeRepository,
    SavedPropertyRepository,
)

__all__ = [
    "create_supabase_client",
    "SupabaseClient",
    "Predicate",
    "eq",
    "in_",
    "PropertyRepository",
    "RoomTypeRepository",
    "SavedPropertyRepository",
]
