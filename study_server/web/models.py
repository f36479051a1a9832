"""
Model layer of the web demo.

Records are immutable and served by a read-only `FixtureStore`, built once at
start-up and handed to the controllers. A real application would put a
database behind the same three methods.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    role: str
    department: str


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price: int = Field(description="Price in yen.")
    category: str
    stock: int


RecordT = TypeVar("RecordT", User, Product)


class FixtureStore(Generic[RecordT]):
    def __init__(self, name: str, records: Sequence[RecordT]) -> None:
        self.name = name
        self._records = tuple(records)
        self._by_id = {record.id: record for record in self._records}
        if len(self._by_id) != len(self._records):
            raise ValueError(f"Duplicate ids in {name} fixtures")

    def list(self) -> List[RecordT]:
        logger.debug("[Model] Fetching all %s", self.name)
        return list(self._records)

    def get_by_id(self, record_id: Any) -> Optional[RecordT]:
        """Look up one record; `record_id` may be an int or a numeric string."""
        logger.debug("[Model] Looking up %s id=%s", self.name, record_id)
        try:
            return self._by_id.get(int(record_id))
        except (TypeError, ValueError):
            return None

    def filter_by(self, field: str, value: Any) -> List[RecordT]:
        logger.debug("[Model] Filtering %s by %s=%s", self.name, field, value)
        return [r for r in self._records if getattr(r, field) == value]


USERS: List[User] = [
    User(id=1, name="Taro Tanaka", email="tanaka@example.com", role="Engineer", department="Development"),
    User(id=2, name="Hanako Suzuki", email="suzuki@example.com", role="Designer", department="Design"),
    User(id=3, name="Jiro Sato", email="sato@example.com", role="Manager", department="Sales"),
    User(id=4, name="Misaki Takahashi", email="takahashi@example.com", role="Engineer", department="Development"),
]

PRODUCTS: List[Product] = [
    Product(id=1, name="Laptop", price=120000, category="Electronics", stock=15),
    Product(id=2, name="Mouse", price=2500, category="Peripherals", stock=50),
    Product(id=3, name="Keyboard", price=8000, category="Peripherals", stock=30),
    Product(id=4, name="Monitor", price=35000, category="Electronics", stock=20),
    Product(id=5, name="Webcam", price=5500, category="Peripherals", stock=25),
]


def user_store() -> FixtureStore[User]:
    return FixtureStore("users", USERS)


def product_store() -> FixtureStore[Product]:
    return FixtureStore("products", PRODUCTS)
