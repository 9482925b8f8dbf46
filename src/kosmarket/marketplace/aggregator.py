"""
Agregador: une habitaciones con su propiedad y deriva las ciudades.

Función pura, sin I/O y sin mutar las entradas.
"""

from dataclasses import dataclass, field
from typing import Mapping, Sequence

import structlog

from kosmarket.models import AnnotatedListing, Property, RoomListing

logger = structlog.get_logger()


@dataclass
class AggregatedListings:
    """Resultado de la agregación."""

    listings: list[AnnotatedListing] = field(default_factory=list)
    cities: list[str] = field(default_factory=list)  # sin duplicados, orden de aparición


def aggregate(
    properties: Sequence[Property],
    rooms_by_property: Mapping[str, Sequence[RoomListing]],
    only_listed_cities: bool = False,
) -> AggregatedListings:
    """
    Produce un AnnotatedListing por cada par (habitación, propiedad).

    Args:
        properties: Propiedades publicadas
        rooms_by_property: Habitaciones agrupadas por id de propiedad
        only_listed_cities: Si es True, sólo cuentan las ciudades de
            propiedades que aportaron al menos una habitación

    Returns:
        AggregatedListings con is_saved=False en todos los listings
    """
    listings: list[AnnotatedListing] = []
    cities: dict[str, None] = {}

    for prop in properties:
        contributed = 0
        for room in rooms_by_property.get(prop.id, ()):
            if room.property_id != prop.id:
                logger.warning(
                    "Habitación agrupada bajo otra propiedad, se descarta",
                    room_id=room.id,
                    room_property_id=room.property_id,
                    property_id=prop.id,
                )
                continue
            listings.append(AnnotatedListing(room=room, property=prop, is_saved=False))
            contributed += 1

        if prop.city and (contributed or not only_listed_cities):
            cities.setdefault(prop.city, None)

    return AggregatedListings(listings=listings, cities=list(cities))
