"""
Criterios de búsqueda y modos de orden del marketplace.

FilterCriteria pertenece a la sesión del usuario y se modifica sólo
mediante setters discretos; no se persiste.
"""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from kosmarket.config import ANY, get_settings
from kosmarket.models.room import RenterGender


class SortMode(str, Enum):
    """Orden de la lista final."""

    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NEWEST = "newest"


def _default_price_max() -> int:
    return get_settings().max_price_filter


class FilterCriteria(BaseModel):
    """
    Filtros activos de la búsqueda. Todos se combinan con AND.

    Un selector en "any" (o un query vacío) no filtra nada.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Rango de precio inclusivo
    price_min: int = Field(default=0, ge=0)
    price_max: int = Field(default_factory=_default_price_max, ge=0)

    # Selectores
    occupancy: Union[Literal["any"], int] = Field(default=ANY)
    gender: Union[Literal["any"], RenterGender] = Field(default=ANY)
    room_type: str = Field(default=ANY, description="'any' o nombre exacto de habitación")
    city: str = Field(default=ANY, description="'any' o ciudad exacta")

    # Texto libre
    query: str = Field(default="")

    @field_validator("occupancy")
    @classmethod
    def _check_occupancy(cls, value):
        if value != ANY and value < 1:
            raise ValueError("occupancy debe ser 'any' o un entero positivo")
        return value

    @field_validator("gender")
    @classmethod
    def _check_gender(cls, value):
        # "mixed" describe habitaciones, no es un selector válido
        if value == RenterGender.MIXED:
            raise ValueError("gender debe ser 'any', 'male' o 'female'")
        return value

    @model_validator(mode="after")
    def _check_price_range(self) -> "FilterCriteria":
        if self.price_min > self.price_max:
            raise ValueError(
                f"price_min ({self.price_min}) no puede superar price_max ({self.price_max})"
            )
        return self

    # Setters discretos

    def set_price_range(self, price_min: int, price_max: int) -> None:
        # Se valida el par completo antes de asignar para no quedar a medias
        validated = self.model_validate(
            {**self.model_dump(), "price_min": price_min, "price_max": price_max}
        )
        self.__dict__.update(price_min=validated.price_min, price_max=validated.price_max)

    def set_occupancy(self, occupancy: Union[str, int]) -> None:
        self.occupancy = occupancy

    def set_gender(self, gender: Union[str, RenterGender]) -> None:
        self.gender = gender

    def set_room_type(self, room_type: Optional[str]) -> None:
        self.room_type = room_type or ANY

    def set_query(self, query: Optional[str]) -> None:
        self.query = query or ""

    def set_city(self, city: Optional[str]) -> None:
        self.city = city or ANY

    def reset(self) -> None:
        """Vuelve todos los filtros a su valor por defecto."""
        defaults = type(self)()
        for name in type(self).model_fields:
            self.__dict__[name] = getattr(defaults, name)
