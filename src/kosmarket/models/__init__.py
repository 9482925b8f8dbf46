"""
Modelos de datos del sistema.

- Store: Property, RoomListing, SavedMark (filas de Supabase)
- Sesión: AnnotatedListing, FilterCriteria, SortMode (no se persisten)
"""

from kosmarket.models.property import Property
from kosmarket.models.room import RoomListing, RenterGender
from kosmarket.models.listing import AnnotatedListing
from kosmarket.models.user import User, SavedMark
from kosmarket.models.filters import FilterCriteria, SortMode

__all__ = [
    # Store
    "Property",
    "RoomListing",
    "RenterGender",
    "SavedMark",
    # Sesión
    "AnnotatedListing",
    "FilterCriteria",
    "SortMode",
    # Usuario
    "User",
]
