"""
Script para consultar el marketplace desde la terminal.

Carga los listings publicados, aplica filtros y orden, y los imprime.
Con --saved muestra las propiedades guardadas del usuario.

Uso:
    python -m kosmarket.scripts.run_marketplace --city Jakarta --sort price_asc
    python -m kosmarket.scripts.run_marketplace --query bandung --gender female
    python -m kosmarket.scripts.run_marketplace --saved --email yo@mail.com --password ...
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import structlog

from kosmarket.config import ANY, get_settings
from kosmarket.database import create_supabase_client
from kosmarket.errors import AuthRequiredError, MarketplaceError
from kosmarket.marketplace import MarketplaceSession
from kosmarket.models import AnnotatedListing, SortMode

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def _format_listing(listing: AnnotatedListing) -> str:
    heart = "♥" if listing.is_saved else " "
    room = listing.room
    return (
        f"{heart} {room.name} @ {listing.property.name} ({listing.property.city}) "
        f"- {room.price:,} - {room.max_occupancy} org - {room.renter_gender.value}"
    )


async def run_marketplace(args: argparse.Namespace) -> int:
    """Carga el marketplace con los filtros pedidos e imprime el resultado."""
    client = await create_supabase_client()
    if args.email and args.password:
        await client.sign_in(args.email, args.password)

    session = MarketplaceSession(client)

    if args.saved:
        properties = await session.saved_properties()
        print(f"\n=== GUARDADOS ({len(properties)}) ===")
        for prop in properties:
            print(f"♥ {prop.name} - {prop.address}, {prop.city}")
        return 0

    criteria = session.criteria
    criteria.set_query(args.query)
    criteria.set_city(args.city)
    criteria.set_occupancy(args.occupancy)
    criteria.set_gender(args.gender)
    criteria.set_room_type(args.room_type)
    criteria.set_price_range(
        args.min_price if args.min_price is not None else criteria.price_min,
        args.max_price if args.max_price is not None else criteria.price_max,
    )
    session.set_sort_mode(SortMode(args.sort))

    visible = await session.load()

    print(f"\n=== CIUDADES ===\n{', '.join(session.cities) or '-'}")
    print(f"\n=== HABITACIONES ({len(visible)} de {len(session.listings)}) ===")
    for listing in visible:
        print(_format_listing(listing))
    return 0


def _occupancy(value: str):
    return value if value == ANY else int(value)


def main(argv: Optional[list[str]] = None):
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Consulta el marketplace de habitaciones")
    parser.add_argument("--query", default="", help="Texto libre")
    parser.add_argument("--city", default=ANY, help="Ciudad exacta o 'any'")
    parser.add_argument("--min-price", type=int, default=None)
    parser.add_argument("--max-price", type=int, default=None)
    parser.add_argument("--occupancy", type=_occupancy, default=ANY, help="Entero o 'any'")
    parser.add_argument("--gender", default=ANY, choices=[ANY, "male", "female"])
    parser.add_argument("--room-type", default=ANY, help="Tipo de habitación o 'any'")
    parser.add_argument(
        "--sort",
        default=SortMode.NEWEST.value,
        choices=[mode.value for mode in SortMode],
    )
    parser.add_argument("--saved", action="store_true", help="Muestra las propiedades guardadas")
    parser.add_argument("--email", default=None, help="Email para iniciar sesión")
    parser.add_argument("--password", default=None, help="Password para iniciar sesión")

    args = parser.parse_args(argv)

    try:
        exit_code = asyncio.run(run_marketplace(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Consulta interrumpida por usuario")
        sys.exit(130)
    except AuthRequiredError:
        logger.error("Se requiere iniciar sesión (--email y --password)")
        sys.exit(1)
    except MarketplaceError as e:
        logger.error("Error en el marketplace", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.error("Error fatal en marketplace", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
