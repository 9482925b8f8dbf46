"""
Modelo de Habitación (room_types).

Un RoomListing es un tipo de habitación ofrecido dentro de una propiedad,
con su precio, ocupación máxima y restricción de género.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RenterGender(str, Enum):
    """Género admitido para los inquilinos de la habitación."""

    MALE = "male"
    FEMALE = "female"
    MIXED = "mixed"


class RoomListing(BaseModel):
    """Habitación tal como vive en la tabla 'room_types' de Supabase."""

    model_config = ConfigDict(from_attributes=True, frozen=True, extra="ignore")

    # Identificadores
    id: str = Field(..., description="UUID generado por Supabase")
    property_id: str = Field(..., description="FK a la Property dueña")

    # Datos de la habitación
    name: str = Field(..., description="Nombre / tipo de habitación")
    price: int = Field(..., ge=0, description="Precio en unidades enteras de moneda")
    max_occupancy: int = Field(..., ge=1, description="Ocupación máxima")
    renter_gender: RenterGender = Field(..., description="male, female o mixed")

    # Modalidades de precio habilitadas
    enable_daily_price: Optional[bool] = Field(None)
    enable_weekly_price: Optional[bool] = Field(None)
    enable_yearly_price: Optional[bool] = Field(None)

    # Media
    photos: list[str] = Field(default_factory=list, description="URLs de fotos en orden")

    # Metadatos (string crudo del store, puede faltar o venir mal formado)
    created_at: Optional[str] = Field(None, description="Timestamp de creación ISO")

    @field_validator("photos", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return value or []
