"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> kosmarket/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(..., description="URL del proyecto Supabase")
    supabase_key: str = Field(..., description="Anon key de Supabase")

    # Store
    store_read_attempts: int = Field(
        3, ge=1, description="Intentos por lectura antes de reportar StoreError"
    )
    room_fetch_concurrency: int = Field(
        8, ge=1, description="Consultas de room_types simultáneas al cargar el marketplace"
    )

    # Marketplace
    max_price_filter: int = Field(
        10_000_000, ge=0, description="Tope por defecto del rango de precio del filtro"
    )
    cities_from_listed_only: bool = Field(
        False,
        description="Derivar ciudades solo de propiedades con al menos una habitación",
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
PUBLISHED_STATUS = "published"

# Valor del selector que desactiva un filtro
ANY = "any"

PROPERTIES_TABLE = "properties"
ROOM_TYPES_TABLE = "room_types"
SAVED_PROPERTIES_TABLE = "saved_properties"
