"""
Sesión del marketplace.

Orquesta el pipeline (fuente -> agregación -> guardados -> filtros) y
mantiene el estado de un usuario: listings anotados, filtros, orden y
toggles en curso.
"""

from typing import Optional

import structlog

from kosmarket.database import SupabaseClient
from kosmarket.errors import FetchError, SaveError, StoreError
from kosmarket.marketplace.engine import FilterSortEngine
from kosmarket.marketplace.mutator import SaveState, SaveStateMutator
from kosmarket.marketplace.saved import SavedPropertiesService
from kosmarket.marketplace.saved_state import SaveStateResolver
from kosmarket.marketplace.source import ListingSource
from kosmarket.models import AnnotatedListing, FilterCriteria, Property, SortMode, User

logger = structlog.get_logger()


class MarketplaceSession:
    """
    Estado del marketplace para una sesión de usuario.

    La colección de listings es de esta sesión; sólo el mutator cambia
    is_saved después de la carga y el motor de filtros sólo la lee.
    """

    def __init__(
        self,
        client: SupabaseClient,
        source: Optional[ListingSource] = None,
    ):
        self.client = client
        self.source = source or ListingSource(client)
        self.resolver = SaveStateResolver(client)
        self.engine = FilterSortEngine()
        self.save_state = SaveState()
        self.mutator = SaveStateMutator(client, self.save_state)
        self.saved_service = SavedPropertiesService(client)

        self.criteria = FilterCriteria()
        self.sort_mode = SortMode.NEWEST
        self.listings: list[AnnotatedListing] = []
        self.cities: list[str] = []
        self.error: Optional[str] = None
        self.is_loading = False

        self._generation = 0

    async def _current_user_or_none(self) -> Optional[User]:
        try:
            return await self.client.get_current_user()
        except StoreError as e:
            logger.warning("Usuario actual no disponible", error=str(e))
            return None

    async def load(self) -> list[AnnotatedListing]:
        """
        Carga (o recarga) los listings y su estado de guardado.

        Si otra carga empezó después de ésta, su resultado se descarta.

        Returns:
            Listings visibles con los filtros actuales

        Raises:
            FetchError: Si falla la carga; no se muestran listings parciales
        """
        self._generation += 1
        generation = self._generation
        self.is_loading = True

        try:
            aggregated = await self.source.fetch_published_listings()
            user = await self._current_user_or_none()
            await self.resolver.resolve(aggregated.listings, user)
        except FetchError as e:
            if generation == self._generation:
                self.listings = []
                self.cities = []
                self.error = str(e)
                self.is_loading = False
            raise

        if generation != self._generation:
            logger.info("Carga descartada por una más reciente", generation=generation)
            return self.visible_listings()

        self.listings = aggregated.listings
        self.cities = aggregated.cities
        self.error = None
        self.is_loading = False
        return self.visible_listings()

    def visible_listings(self) -> list[AnnotatedListing]:
        """Listings filtrados y ordenados con los criterios actuales."""
        return self.engine.apply(self.listings, self.criteria, self.sort_mode)

    def set_sort_mode(self, sort_mode: SortMode) -> None:
        self.sort_mode = SortMode(sort_mode)

    def room_types(self) -> list[str]:
        """Tipos de habitación disponibles para el selector."""
        return self.engine.available_room_types(self.listings)

    def is_saving(self, room_id: str) -> bool:
        return self.save_state.is_saving(room_id)

    async def toggle_save(
        self,
        property_id: str,
        room_id: str,
        propagate_to_property: bool = True,
    ) -> list[AnnotatedListing]:
        """
        Guarda o quita la propiedad del listing para el usuario actual.

        Raises:
            AuthRequiredError: Sin usuario
            ToggleInProgressError: Toggle en curso para esa habitación
            SaveError: Falló el store o la lectura del usuario
        """
        try:
            user = await self.client.get_current_user()
        except StoreError as e:
            raise SaveError(
                "No se pudo verificar el usuario",
                property_id=property_id,
                room_id=room_id,
            ) from e

        await self.mutator.toggle_save(
            self.listings,
            property_id,
            room_id,
            user,
            propagate_to_property=propagate_to_property,
        )
        return self.visible_listings()

    async def saved_properties(self) -> list[Property]:
        """
        Propiedades guardadas por el usuario actual.

        Raises:
            AuthRequiredError: Sin usuario
            FetchError: Si falla la lectura
        """
        user = await self._current_user_or_none()
        return await self.saved_service.list_saved_properties(user)
