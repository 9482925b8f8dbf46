"""
Modelo de Usuario y marcas de guardado.

El usuario viene de Supabase Auth; los guardados viven en la tabla
'saved_properties' con una fila por (user_id, property_id).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Usuario autenticado del marketplace."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="UUID de Supabase Auth")
    email: Optional[str] = Field(None, description="Email del usuario")

    @classmethod
    def from_auth_user(cls, auth_user: Any) -> "User":
        """Construye un User a partir del objeto de gotrue."""
        return cls(id=str(auth_user.id), email=getattr(auth_user, "email", None))


class SavedMark(BaseModel):
    """Marca de guardado: a lo sumo una por (user_id, property_id)."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="FK al User")
    property_id: str = Field(..., description="FK a la Property guardada")

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump()
