"""
Listing anotado: habitación + propiedad + estado de guardado.

Es la unidad que consume la capa de presentación. No se persiste:
se reconstruye en cada carga del marketplace.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from kosmarket.models.property import Property
from kosmarket.models.room import RenterGender, RoomListing


class AnnotatedListing(BaseModel):
    """
    Habitación unida a su propiedad, con el flag is_saved del usuario actual.

    room y property son inmutables; sólo is_saved cambia después de la
    resolución, y sólo desde el SaveStateMutator.
    """

    model_config = ConfigDict(validate_assignment=True)

    room: RoomListing
    property: Property
    is_saved: bool = Field(default=False, description="Propiedad guardada por el usuario")

    @model_validator(mode="after")
    def _check_property_matches_room(self) -> "AnnotatedListing":
        if self.property.id != self.room.property_id:
            raise ValueError(
                f"La habitación {self.room.id} pertenece a {self.room.property_id}, "
                f"no a {self.property.id}"
            )
        return self

    @property
    def id(self) -> str:
        return self.room.id

    @property
    def property_id(self) -> str:
        return self.property.id

    @property
    def price(self) -> int:
        return self.room.price

    @property
    def max_occupancy(self) -> int:
        return self.room.max_occupancy

    @property
    def renter_gender(self) -> RenterGender:
        return self.room.renter_gender

    @property
    def city(self) -> str:
        return self.property.city
