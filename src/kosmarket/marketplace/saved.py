"""
Propiedades guardadas del usuario.

Lista las propiedades que el usuario guardó y que siguen publicadas.
"""

from typing import Optional

import structlog

from kosmarket.database import PropertyRepository, SavedPropertyRepository, SupabaseClient
from kosmarket.errors import AuthRequiredError, FetchError, StoreError
from kosmarket.models import Property, User

logger = structlog.get_logger()


class SavedPropertiesService:
    """Consulta de la vista de guardados."""

    def __init__(self, client: SupabaseClient):
        self.saved_repo = SavedPropertyRepository(client)
        self.property_repo = PropertyRepository(client)

    async def list_saved_properties(self, current_user: Optional[User]) -> list[Property]:
        """
        Obtiene las propiedades guardadas y todavía publicadas.

        Raises:
            AuthRequiredError: Sin usuario
            FetchError: Si falla cualquier lectura
        """
        if current_user is None:
            raise AuthRequiredError("Se requiere iniciar sesión para ver guardados")

        try:
            saved_ids = await self.saved_repo.get_property_ids(current_user.id)
            if not saved_ids:
                return []
            properties = await self.property_repo.get_published_by_ids(sorted(saved_ids))
        except StoreError as e:
            logger.error(
                "Error cargando propiedades guardadas",
                user_id=current_user.id,
                error=str(e),
            )
            raise FetchError("Failed to load saved properties") from e

        logger.info(
            "Propiedades guardadas cargadas",
            user_id=current_user.id,
            saved=len(saved_ids),
            published=len(properties),
        )
        return properties
