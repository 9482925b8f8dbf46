"""
Errores del dominio del marketplace.

Cada etapa del pipeline traduce las fallas del store a una de estas
excepciones para que el consumidor decida cómo mostrarlas.
"""

from typing import Optional


class MarketplaceError(Exception):
    """Error base de kosmarket."""


class StoreError(MarketplaceError):
    """Falla de transporte o de la API del store (lectura o escritura)."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class FetchError(MarketplaceError):
    """No se pudieron cargar los listings. La carga se aborta completa."""


class SaveResolutionError(MarketplaceError):
    """No se pudo leer el set de guardados del usuario. No es fatal."""


class AuthRequiredError(MarketplaceError):
    """La operación requiere un usuario autenticado."""


class SaveError(MarketplaceError):
    """Falló el toggle de guardado; el estado local no cambió."""

    def __init__(self, message: str, property_id: str, room_id: str):
        super().__init__(message)
        self.property_id = property_id
        self.room_id = room_id


class ToggleInProgressError(SaveError):
    """Ya hay un toggle en curso para esa habitación o propiedad."""
