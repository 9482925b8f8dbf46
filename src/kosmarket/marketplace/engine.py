"""
Motor de filtrado y orden del marketplace.

Implementa:
- Filtros combinados con AND: texto, ciudad, precio, ocupación, género, tipo
- Orden estable: precio ascendente/descendente o más recientes primero
"""

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

import structlog

from kosmarket.config import ANY
from kosmarket.models import AnnotatedListing, FilterCriteria, SortMode

logger = structlog.get_logger()

# Timestamps ausentes o ilegibles cuentan como el inicio de la época
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parsea un timestamp ISO-8601; devuelve EPOCH si no se puede."""
    if not value:
        return EPOCH
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _matches_query(listing: AnnotatedListing, query: str) -> bool:
    if not query:
        return True
    needle = query.lower()
    haystacks = (
        listing.room.name,
        listing.property.name,
        listing.property.city,
        listing.property.address,
    )
    return any(needle in (text or "").lower() for text in haystacks)


class FilterSortEngine:
    """
    Aplica FilterCriteria y SortMode sobre listings anotados.

    Sólo lee los listings: la salida es una lista nueva y ningún objeto
    de entrada se modifica.
    """

    def matches(self, listing: AnnotatedListing, criteria: FilterCriteria) -> bool:
        """True si el listing cumple todos los filtros activos."""
        room = listing.room

        if not _matches_query(listing, criteria.query):
            return False
        if criteria.city != ANY and listing.property.city != criteria.city:
            return False
        if not criteria.price_min <= room.price <= criteria.price_max:
            return False
        if criteria.occupancy != ANY and room.max_occupancy != criteria.occupancy:
            return False
        if criteria.gender != ANY and room.renter_gender != criteria.gender:
            return False
        if (
            criteria.room_type != ANY
            and room.name.lower() != criteria.room_type.lower()
        ):
            return False
        return True

    def sort(
        self,
        listings: Iterable[AnnotatedListing],
        sort_mode: SortMode,
    ) -> list[AnnotatedListing]:
        """Ordena de forma estable según el modo."""
        sort_mode = SortMode(sort_mode)
        if sort_mode is SortMode.PRICE_ASC:
            return sorted(listings, key=lambda item: item.room.price)
        if sort_mode is SortMode.PRICE_DESC:
            # reverse=True mantiene el orden relativo de los empates
            return sorted(listings, key=lambda item: item.room.price, reverse=True)
        return sorted(
            listings,
            key=lambda item: parse_timestamp(item.room.created_at),
            reverse=True,
        )

    def apply(
        self,
        listings: Sequence[AnnotatedListing],
        criteria: FilterCriteria,
        sort_mode: SortMode = SortMode.NEWEST,
    ) -> list[AnnotatedListing]:
        """
        Filtra y ordena.

        Args:
            listings: Listings anotados
            criteria: Filtros activos
            sort_mode: Orden de salida

        Returns:
            Subconjunto de listings en el orden pedido
        """
        filtered = [listing for listing in listings if self.matches(listing, criteria)]
        result = self.sort(filtered, sort_mode)
        logger.debug(
            "Filtros aplicados",
            total=len(listings),
            visible=len(result),
            sort=sort_mode.value if isinstance(sort_mode, SortMode) else sort_mode,
        )
        return result

    @staticmethod
    def available_room_types(listings: Iterable[AnnotatedListing]) -> list[str]:
        """Nombres de habitación distintos (sin distinguir mayúsculas), en orden de aparición."""
        seen: dict[str, str] = {}
        for listing in listings:
            seen.setdefault(listing.room.name.lower(), listing.room.name)
        return list(seen.values())
