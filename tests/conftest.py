import asyncio
import os
from typing import Optional

import pytest

# Settings exige credenciales; en tests nunca se conecta a Supabase
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

from kosmarket.config import get_settings  # noqa: E402
from kosmarket.errors import StoreError  # noqa: E402
from kosmarket.models import (  # noqa: E402
    AnnotatedListing,
    Property,
    RoomListing,
    User,
)

get_settings.cache_clear()


def _matches(row: dict, predicates) -> bool:
    for predicate in predicates:
        value = row.get(predicate.field)
        if predicate.op == "eq" and value != predicate.value:
            return False
        if predicate.op == "in" and value not in predicate.value:
            return False
    return True


class InMemoryStore:
    """
    Doble del SupabaseClient sobre tablas en memoria.

    - fail_on: {(operación, tabla)} que lanzan StoreError
    - write_gate: si está seteado, insert/delete esperan al evento
    """

    def __init__(self, user: Optional[User] = None):
        self.tables: dict[str, list[dict]] = {
            "properties": [],
            "room_types": [],
            "saved_properties": [],
        }
        self.user = user
        self.fail_on: set[tuple[str, str]] = set()
        self.fail_auth = False
        self.write_gate: Optional[asyncio.Event] = None
        self.calls: list[tuple[str, str]] = []

    def _check(self, op: str, table: str):
        self.calls.append((op, table))
        if (op, table) in self.fail_on:
            raise StoreError(f"{op} falló en {table}", table=table)

    async def query(self, table, predicates=(), columns="*"):
        await asyncio.sleep(0)
        self._check("query", table)
        predicates = list(predicates)
        rows = [dict(row) for row in self.tables[table] if _matches(row, predicates)]
        if columns != "*":
            keep = [c.strip() for c in columns.split(",")]
            rows = [{k: row.get(k) for k in keep} for row in rows]
        return rows

    async def insert(self, table, rows):
        if self.write_gate is not None:
            await self.write_gate.wait()
        self._check("insert", table)
        self.tables[table].extend(dict(row) for row in rows)
        return [dict(row) for row in rows]

    async def delete(self, table, predicates):
        if self.write_gate is not None:
            await self.write_gate.wait()
        self._check("delete", table)
        predicates = list(predicates)
        removed = [row for row in self.tables[table] if _matches(row, predicates)]
        self.tables[table] = [
            row for row in self.tables[table] if not _matches(row, predicates)
        ]
        return removed

    async def get_current_user(self):
        if self.fail_auth:
            raise StoreError("auth no disponible")
        return self.user

    # Helpers de seed

    def add_property(self, **fields) -> dict:
        row = {
            "id": fields.pop("id"),
            "name": fields.pop("name", "Kos Melati"),
            "address": fields.pop("address", "Jl. Merdeka 1"),
            "city": fields.pop("city", "Jakarta"),
            "marketplace_enabled": fields.pop("marketplace_enabled", True),
            "marketplace_status": fields.pop("marketplace_status", "published"),
            "photos": fields.pop("photos", []),
            **fields,
        }
        self.tables["properties"].append(row)
        return row

    def add_room(self, **fields) -> dict:
        row = {
            "id": fields.pop("id"),
            "property_id": fields.pop("property_id"),
            "name": fields.pop("name", "Standard"),
            "price": fields.pop("price", 1_000_000),
            "max_occupancy": fields.pop("max_occupancy", 1),
            "renter_gender": fields.pop("renter_gender", "mixed"),
            "photos": fields.pop("photos", []),
            "created_at": fields.pop("created_at", "2024-01-01T00:00:00+00:00"),
            **fields,
        }
        self.tables["room_types"].append(row)
        return row

    def saved_marks(self, user_id: str, property_id: str) -> list[dict]:
        return [
            row
            for row in self.tables["saved_properties"]
            if row["user_id"] == user_id and row["property_id"] == property_id
        ]


@pytest.fixture
def user():
    return User(id="user-1", email="penyewa@example.com")


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def make_listing():
    """Construye AnnotatedListings sin pasar por el store."""

    def _make(
        room_id: str,
        price: int = 1_000_000,
        max_occupancy: int = 1,
        gender: str = "mixed",
        city: str = "Jakarta",
        created_at: Optional[str] = "2024-01-01",
        room_name: str = "Standard",
        property_id: Optional[str] = None,
        property_name: str = "Kos Melati",
        address: str = "Jl. Merdeka 1",
        is_saved: bool = False,
    ) -> AnnotatedListing:
        property_id = property_id or f"p-{room_id}"
        prop = Property(
            id=property_id,
            name=property_name,
            address=address,
            city=city,
            marketplace_enabled=True,
            marketplace_status="published",
        )
        room = RoomListing(
            id=room_id,
            property_id=property_id,
            name=room_name,
            price=price,
            max_occupancy=max_occupancy,
            renter_gender=gender,
            created_at=created_at,
        )
        return AnnotatedListing(room=room, property=prop, is_saved=is_saved)

    return _make


@pytest.fixture
def scenario_listings(make_listing):
    """Los dos listings de referencia: r1 en Jakarta y r2 en Bandung."""
    return [
        make_listing(
            "r1",
            price=500000,
            max_occupancy=2,
            gender="male",
            city="Jakarta",
            created_at="2024-01-01",
            room_name="Deluxe",
            property_name="Kos Melati",
        ),
        make_listing(
            "r2",
            price=300000,
            max_occupancy=1,
            gender="female",
            city="Bandung",
            created_at="2024-02-01",
            room_name="Ekonomi",
            property_name="Kos Mawar",
            address="Jl. Dago 10",
        ),
    ]
