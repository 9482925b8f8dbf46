"""
Resolución del estado de guardado.

Marca cada listing con is_saved según los guardados del usuario actual.
El guardado es secundario: si falla la lectura, los listings se muestran
igual, sin marcar.
"""

from typing import Optional, Sequence

import structlog

from kosmarket.database import SavedPropertyRepository, SupabaseClient
from kosmarket.errors import SaveResolutionError, StoreError
from kosmarket.models import AnnotatedListing, User

logger = structlog.get_logger()


class SaveStateResolver:
    """Cruza los listings con el set de propiedades guardadas del usuario."""

    def __init__(self, client: SupabaseClient):
        self.saved_repo = SavedPropertyRepository(client)

    async def fetch_saved_ids(self, user: User) -> set[str]:
        """
        Lee los ids de propiedades guardadas del usuario.

        Raises:
            SaveResolutionError: Si falla la lectura
        """
        try:
            return await self.saved_repo.get_property_ids(user.id)
        except StoreError as e:
            raise SaveResolutionError(
                f"No se pudieron leer los guardados de {user.id}"
            ) from e

    async def resolve(
        self,
        listings: Sequence[AnnotatedListing],
        current_user: Optional[User],
    ) -> Sequence[AnnotatedListing]:
        """
        Actualiza is_saved en los mismos objetos recibidos.

        Sin usuario, todos quedan en False. Dos habitaciones de una misma
        propiedad guardada quedan ambas marcadas.

        Returns:
            Los mismos listings, anotados
        """
        saved_ids: set[str] = set()
        if current_user is not None:
            try:
                saved_ids = await self.fetch_saved_ids(current_user)
            except SaveResolutionError as e:
                logger.warning(
                    "Guardados no disponibles, se muestran sin marcar",
                    user_id=current_user.id,
                    error=str(e.__cause__ or e),
                )

        for listing in listings:
            listing.is_saved = listing.property.id in saved_ids

        logger.debug(
            "Estado de guardado resuelto",
            user_id=current_user.id if current_user else None,
            saved=sum(1 for listing in listings if listing.is_saved),
        )
        return listings
