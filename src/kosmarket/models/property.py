"""
Modelo de Propiedad (kos / edificio).

Cada propiedad agrupa una o más habitaciones (room_types) y sólo aparece
en el marketplace cuando está habilitada y publicada.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kosmarket.config import PUBLISHED_STATUS


class Property(BaseModel):
    """Propiedad tal como vive en la tabla 'properties' de Supabase."""

    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    # Identificación
    id: str = Field(..., description="UUID generado por Supabase")
    name: str = Field(..., description="Nombre visible de la propiedad")

    # Ubicación
    address: str = Field(default="", description="Dirección completa")
    city: str = Field(default="", description="Ciudad")

    # Estado en el marketplace
    marketplace_enabled: bool = Field(default=False)
    marketplace_status: Optional[str] = Field(
        None, description="draft, published, ..."
    )

    # Media
    photos: list[str] = Field(default_factory=list, description="URLs de fotos en orden")

    @field_validator("address", "city", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @field_validator("photos", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return value or []

    @property
    def is_published(self) -> bool:
        """True si la propiedad es visible en el marketplace."""
        return self.marketplace_enabled and self.marketplace_status == PUBLISHED_STATUS
