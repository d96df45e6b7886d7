"""In-memory entity store.

Every entity kind lives in its own ``Table``: a plain mapping from a generated
identifier to an immutable record. Tables are independent; there are no
cross-table transactions. The store is created once per application and handed
to request handlers through ``get_storage``.
"""
from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Generic, TypeVar

from fastapi import Request

from db.models import Record


R = TypeVar("R", bound=Record)

IdFactory = Callable[[], str]
Clock = Callable[[], datetime]

TABLE_NAMES = (
    "users",
    "connected_tools",
    "canned_responses",
    "action_items",
    "action_item_outputs",
    "automations",
    "time_saved",
    "user_achievements",
    "accessibility_preferences",
)


class DuplicateIdentifierError(RuntimeError):
    """Raised when an id factory hands out an identifier a table already issued."""


def new_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Table(Generic[R]):
    def __init__(self, name: str):
        self.name = name
        self._rows: dict[str, R] = {}
        self._issued: set[str] = set()

    def insert(self, record: R) -> R:
        if record.id in self._issued:
            raise DuplicateIdentifierError(f"{self.name}: identifier already issued: {record.id}")
        self._issued.add(record.id)
        self._rows[record.id] = record
        return record

    def get(self, record_id: str) -> R | None:
        return self._rows.get(record_id)

    def scan(self) -> Iterator[R]:
        # Snapshot so callers may mutate the table while iterating results.
        return iter(list(self._rows.values()))

    def replace(self, record: R) -> R:
        if record.id not in self._rows:
            raise KeyError(record.id)
        self._rows[record.id] = record
        return record

    def remove(self, record_id: str) -> bool:
        return self._rows.pop(record_id, None) is not None

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._rows


class MemoryDatabase:
    def __init__(self, id_factory: IdFactory | None = None, clock: Clock | None = None):
        self.id_factory: IdFactory = id_factory or new_uuid
        self.clock: Clock = clock or utc_now
        self.tables: dict[str, Table] = {name: Table(name) for name in TABLE_NAMES}

    def table(self, name: str) -> Table:
        return self.tables[name]


def get_storage(request: Request):
    return request.app.state.storage
