"""
Repositorios para operaciones sobre las tablas de Supabase.

Cada repositorio maneja una tabla/entidad específica y devuelve modelos
validados. Las fallas del store se propagan como StoreError.
"""

import structlog

from kosmarket.config import (
    PROPERTIES_TABLE,
    PUBLISHED_STATUS,
    ROOM_TYPES_TABLE,
    SAVED_PROPERTIES_TABLE,
)
from kosmarket.database.supabase_client import SupabaseClient, eq, in_
from kosmarket.models import Property, RoomListing, SavedMark

logger = structlog.get_logger()


class BaseRepository:
    """Clase base para repositorios."""

    TABLE: str = ""

    def __init__(self, client: SupabaseClient):
        self._client = client

    @property
    def client(self) -> SupabaseClient:
        return self._client


class PropertyRepository(BaseRepository):
    """Repositorio para propiedades (properties)."""

    TABLE = PROPERTIES_TABLE

    _PUBLISHED = (
        eq("marketplace_enabled", True),
        eq("marketplace_status", PUBLISHED_STATUS),
    )

    async def get_published(self) -> list[Property]:
        """Obtiene las propiedades habilitadas y publicadas en el marketplace."""
        rows = await self.client.query(self.TABLE, self._PUBLISHED)
        logger.debug("Propiedades publicadas leídas", count=len(rows))
        return self._only_published(rows)

    async def get_published_by_ids(self, property_ids: list[str]) -> list[Property]:
        """Obtiene las propiedades publicadas cuyo id está en la lista."""
        if not property_ids:
            return []
        rows = await self.client.query(
            self.TABLE,
            [in_("id", property_ids), *self._PUBLISHED],
        )
        return self._only_published(rows)

    @staticmethod
    def _only_published(rows: list[dict]) -> list[Property]:
        properties = [Property.model_validate(row) for row in rows]
        published = [p for p in properties if p.is_published]
        if len(published) < len(properties):
            # El filtro del store no se respetó (p. ej. una vista mal definida)
            logger.warning(
                "Propiedades no publicadas descartadas",
                count=len(properties) - len(published),
            )
        return published


class RoomTypeRepository(BaseRepository):
    """Repositorio para habitaciones (room_types)."""

    TABLE = ROOM_TYPES_TABLE

    async def get_by_property(self, property_id: str) -> list[RoomListing]:
        """Obtiene las habitaciones de una propiedad."""
        rows = await self.client.query(self.TABLE, [eq("property_id", property_id)])
        return [RoomListing.model_validate(row) for row in rows]


class SavedPropertyRepository(BaseRepository):
    """Repositorio para propiedades guardadas (saved_properties)."""

    TABLE = SAVED_PROPERTIES_TABLE

    async def get_property_ids(self, user_id: str) -> set[str]:
        """Obtiene los ids de propiedades guardadas por el usuario."""
        rows = await self.client.query(
            self.TABLE,
            [eq("user_id", user_id)],
            columns="property_id",
        )
        return {row["property_id"] for row in rows}

    async def create(self, mark: SavedMark) -> dict:
        """Registra un guardado."""
        data = await self.client.insert(self.TABLE, [mark.to_db_dict()])
        logger.info(
            "Propiedad guardada",
            user_id=mark.user_id,
            property_id=mark.property_id,
        )
        return data[0] if data else {}

    async def delete(self, mark: SavedMark) -> int:
        """
        Borra el guardado de (user_id, property_id).

        Returns:
            Cantidad de filas borradas
        """
        data = await self.client.delete(
            self.TABLE,
            [eq("property_id", mark.property_id), eq("user_id", mark.user_id)],
        )
        logger.info(
            "Guardado eliminado",
            user_id=mark.user_id,
            property_id=mark.property_id,
            deleted=len(data),
        )
        return len(data)
