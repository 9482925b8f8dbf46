"""
Cliente de Supabase.

Wrapper async sobre el cliente oficial que expone lecturas, inserciones y
borrados con predicados simples (eq / in) y el usuario autenticado.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import structlog
from supabase import AsyncClient, acreate_client
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from kosmarket.config import get_settings
from kosmarket.errors import StoreError
from kosmarket.models import User

logger = structlog.get_logger()


@dataclass(frozen=True)
class Predicate:
    """Condición sobre una columna. Una lista de predicados se combina con AND."""

    field: str
    op: str  # "eq" o "in"
    value: Any

    def __post_init__(self):
        if self.op not in ("eq", "in"):
            raise ValueError(f"Operador no soportado: {self.op}")


def eq(field: str, value: Any) -> Predicate:
    return Predicate(field, "eq", value)


def in_(field: str, values: Iterable[Any]) -> Predicate:
    return Predicate(field, "in", list(values))


def _apply_predicates(builder, predicates: Iterable[Predicate]):
    for predicate in predicates:
        if predicate.op == "eq":
            builder = builder.eq(predicate.field, predicate.value)
        else:
            builder = builder.in_(predicate.field, predicate.value)
    return builder


class SupabaseClient:
    """Wrapper del cliente async de Supabase con métodos de utilidad."""

    def __init__(
        self,
        client: AsyncClient,
        read_attempts: Optional[int] = None,
        retry_wait=None,
    ):
        self._client = client
        self._read_attempts = read_attempts or get_settings().store_read_attempts
        self._retry_wait = (
            retry_wait if retry_wait is not None
            else wait_exponential(multiplier=1, min=2, max=10)
        )

    @property
    def client(self) -> AsyncClient:
        """Acceso directo al cliente de Supabase."""
        return self._client

    def table(self, name: str):
        """Acceso a una tabla específica."""
        return self._client.table(name)

    async def query(
        self,
        table: str,
        predicates: Iterable[Predicate] = (),
        columns: str = "*",
    ) -> list[dict]:
        """
        Lee filas de una tabla.

        Las lecturas se reintentan con backoff exponencial; si todos los
        intentos fallan se lanza StoreError.

        Args:
            table: Nombre de la tabla
            predicates: Condiciones combinadas con AND
            columns: Columnas a seleccionar

        Returns:
            Lista de filas como diccionarios
        """
        predicates = list(predicates)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._read_attempts),
                wait=self._retry_wait,
                reraise=True,
            ):
                with attempt:
                    builder = _apply_predicates(self.table(table).select(columns), predicates)
                    response = await builder.execute()
        except Exception as e:
            logger.error("Error leyendo tabla", table=table, error=str(e))
            raise StoreError(f"Error leyendo '{table}': {e}", table=table) from e
        return response.data or []

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        """Inserta filas. No se reintenta."""
        try:
            response = await self.table(table).insert(rows).execute()
        except Exception as e:
            logger.error("Error insertando filas", table=table, error=str(e))
            raise StoreError(f"Error insertando en '{table}': {e}", table=table) from e
        return response.data or []

    async def delete(self, table: str, predicates: Iterable[Predicate]) -> list[dict]:
        """Borra las filas que cumplen todos los predicados. No se reintenta."""
        predicates = list(predicates)
        if not predicates:
            # PostgREST rechaza un DELETE sin filtros; nunca borramos la tabla entera
            raise ValueError("delete requiere al menos un predicado")
        try:
            builder = _apply_predicates(self.table(table).delete(), predicates)
            response = await builder.execute()
        except Exception as e:
            logger.error("Error borrando filas", table=table, error=str(e))
            raise StoreError(f"Error borrando en '{table}': {e}", table=table) from e
        return response.data or []

    async def get_current_user(self) -> Optional[User]:
        """
        Obtiene el usuario autenticado de la sesión actual.

        Returns:
            User o None si no hay sesión
        """
        try:
            session = await self._client.auth.get_session()
            if not session:
                return None
            response = await self._client.auth.get_user()
        except Exception as e:
            logger.error("Error obteniendo usuario actual", error=str(e))
            raise StoreError(f"Error obteniendo usuario actual: {e}") from e

        if not response or not response.user:
            return None
        return User.from_auth_user(response.user)

    async def sign_in(self, email: str, password: str) -> User:
        """Inicia sesión con email y password (Supabase Auth)."""
        try:
            response = await self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.error("Error iniciando sesión", email=email, error=str(e))
            raise StoreError(f"Error iniciando sesión: {e}") from e
        logger.info("Sesión iniciada", user_id=response.user.id)
        return User.from_auth_user(response.user)


async def create_supabase_client(
    url: Optional[str] = None,
    key: Optional[str] = None,
) -> SupabaseClient:
    """
    Crea un cliente de Supabase para una sesión.

    Returns:
        SupabaseClient configurado

    Raises:
        ValueError: Si las credenciales no están configuradas
    """
    settings = get_settings()
    url = url or settings.supabase_url
    key = key or settings.supabase_key

    if not url or not key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos. "
            "Configura las variables de entorno."
        )

    client = await acreate_client(url, key)
    logger.info("Cliente de Supabase inicializado", url=url)

    return SupabaseClient(client)
