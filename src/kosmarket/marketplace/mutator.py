"""
Toggle de guardado de un listing.

Escribe en el store (insert/delete en saved_properties) y sólo después de
la confirmación actualiza el estado local. Un toggle en curso bloquea otro
sobre la misma habitación (o la misma propiedad, porque el guardado se
registra por propiedad).
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import structlog

from kosmarket.database import SavedPropertyRepository, SupabaseClient
from kosmarket.errors import (
    AuthRequiredError,
    SaveError,
    StoreError,
    ToggleInProgressError,
)
from kosmarket.models import AnnotatedListing, SavedMark, User

logger = structlog.get_logger()


@dataclass
class SaveState:
    """Toggles en curso de una sesión. Nunca se comparte entre sesiones."""

    saving_rooms: set[str] = field(default_factory=set)
    saving_properties: set[str] = field(default_factory=set)

    def is_saving(self, room_id: str, property_id: Optional[str] = None) -> bool:
        return room_id in self.saving_rooms or (
            property_id is not None and property_id in self.saving_properties
        )

    def claim(self, room_id: str, property_id: str) -> None:
        self.saving_rooms.add(room_id)
        self.saving_properties.add(property_id)

    def release(self, room_id: str, property_id: str) -> None:
        self.saving_rooms.discard(room_id)
        self.saving_properties.discard(property_id)


class SaveStateMutator:
    """
    Guarda o quita una propiedad de los guardados del usuario.

    Estados por habitación: idle -> in-flight(room_id) -> idle.
    """

    def __init__(self, client: SupabaseClient, state: Optional[SaveState] = None):
        self.saved_repo = SavedPropertyRepository(client)
        self.state = state if state is not None else SaveState()

    async def _currently_saved(
        self,
        listings: Sequence[AnnotatedListing],
        property_id: str,
        room_id: str,
        user: User,
    ) -> bool:
        # El guardado es por propiedad: basta con que una habitación lo marque
        siblings = [l for l in listings if l.property.id == property_id]
        if siblings:
            return any(l.is_saved for l in siblings)
        # Ningún listing local: se consulta el store
        saved_ids = await self.saved_repo.get_property_ids(user.id)
        return property_id in saved_ids

    async def toggle_save(
        self,
        listings: Sequence[AnnotatedListing],
        property_id: str,
        room_id: str,
        current_user: Optional[User],
        propagate_to_property: bool = True,
    ) -> list[AnnotatedListing]:
        """
        Invierte el guardado de la propiedad del listing.

        Args:
            listings: Colección anotada que tiene la sesión
            property_id: Propiedad a guardar / quitar
            room_id: Habitación sobre la que actuó el usuario
            current_user: Usuario actual o None
            propagate_to_property: Si es True (default), las demás habitaciones
                de la misma propiedad quedan con el mismo estado; con False
                sólo cambia la habitación tocada

        Returns:
            La colección con is_saved actualizado

        Raises:
            AuthRequiredError: Sin usuario (no se toca el store)
            ToggleInProgressError: Ya hay un toggle en curso para la habitación
                o la propiedad
            SaveError: Falló el store; el estado local no cambia
        """
        if current_user is None:
            logger.info("Toggle sin usuario, se requiere login", room_id=room_id)
            raise AuthRequiredError("Se requiere iniciar sesión para guardar")

        if self.state.is_saving(room_id, property_id):
            logger.info(
                "Toggle rechazado, hay uno en curso",
                room_id=room_id,
                property_id=property_id,
            )
            raise ToggleInProgressError(
                "Ya hay un guardado en curso", property_id=property_id, room_id=room_id
            )

        self.state.claim(room_id, property_id)
        try:
            mark = SavedMark(user_id=current_user.id, property_id=property_id)
            was_saved = await self._currently_saved(
                listings, property_id, room_id, current_user
            )
            if was_saved:
                await self.saved_repo.delete(mark)
            else:
                await self.saved_repo.create(mark)
        except StoreError as e:
            logger.error(
                "Error guardando propiedad",
                room_id=room_id,
                property_id=property_id,
                error=str(e),
            )
            raise SaveError(
                "No se pudo actualizar el guardado",
                property_id=property_id,
                room_id=room_id,
            ) from e
        finally:
            self.state.release(room_id, property_id)

        updated = 0
        for listing in listings:
            same_room = listing.room.id == room_id
            sibling = propagate_to_property and listing.property.id == property_id
            if same_room or sibling:
                listing.is_saved = not was_saved
                updated += 1

        logger.info(
            "Guardado actualizado",
            room_id=room_id,
            property_id=property_id,
            saved=not was_saved,
            updated=updated,
        )
        return list(listings)
