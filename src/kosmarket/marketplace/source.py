"""
Fuente de listings del marketplace.

Lee las propiedades publicadas y, por cada una, sus habitaciones.
Cualquier falla de lectura aborta la carga completa.
"""

import asyncio
from typing import Optional

import structlog
from pydantic import ValidationError

from kosmarket.config import get_settings
from kosmarket.database import PropertyRepository, RoomTypeRepository, SupabaseClient
from kosmarket.errors import FetchError, StoreError
from kosmarket.marketplace.aggregator import AggregatedListings, aggregate
from kosmarket.models import Property, RoomListing

logger = structlog.get_logger()


class ListingSource:
    """
    Adaptador de lectura sobre el store.

    Flujo:
    1. Una consulta de propiedades habilitadas y publicadas
    2. Una consulta de room_types por propiedad (concurrentes, acotadas)
    3. Agregación en listings anotados + ciudades
    """

    def __init__(
        self,
        client: SupabaseClient,
        concurrency: Optional[int] = None,
        only_listed_cities: Optional[bool] = None,
    ):
        settings = get_settings()
        self.property_repo = PropertyRepository(client)
        self.room_repo = RoomTypeRepository(client)
        self.concurrency = concurrency or settings.room_fetch_concurrency
        self.only_listed_cities = (
            settings.cities_from_listed_only
            if only_listed_cities is None
            else only_listed_cities
        )

    async def fetch_published(
        self,
    ) -> tuple[list[Property], dict[str, list[RoomListing]]]:
        """
        Lee propiedades publicadas y sus habitaciones, sin agregar.

        Returns:
            (propiedades, habitaciones agrupadas por id de propiedad)

        Raises:
            FetchError: Si falla cualquier lectura
        """
        try:
            properties = await self.property_repo.get_published()

            semaphore = asyncio.Semaphore(self.concurrency)

            async def _rooms_for(prop: Property) -> tuple[str, list[RoomListing]]:
                async with semaphore:
                    return prop.id, await self.room_repo.get_by_property(prop.id)

            tasks = [asyncio.create_task(_rooms_for(p)) for p in properties]
            try:
                # gather propaga la primera excepción; no hay resultado parcial
                pairs = await asyncio.gather(*tasks)
            except BaseException:
                # No dejar lecturas (ni sus reintentos) corriendo tras la falla
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        except (StoreError, ValidationError) as e:
            logger.error("Error cargando listings", error=str(e))
            raise FetchError("Failed to load rooms") from e

        return properties, dict(pairs)

    async def fetch_published_listings(self) -> AggregatedListings:
        """
        Carga los listings del marketplace.

        Returns:
            AggregatedListings con is_saved=False

        Raises:
            FetchError: Si falla cualquier lectura
        """
        properties, rooms_by_property = await self.fetch_published()
        result = aggregate(
            properties,
            rooms_by_property,
            only_listed_cities=self.only_listed_cities,
        )
        logger.info(
            "Listings cargados",
            properties=len(properties),
            listings=len(result.listings),
            cities=len(result.cities),
        )
        return result
