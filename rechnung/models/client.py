from __future__ import annotations

from pydantic import Field
from ulid import ULID

from rechnung.models.base import Record


def new_id() -> str:
    return str(ULID())


class Client(Record):
    id: str = Field(default_factory=new_id)
    name: str
    street: str = ""
    postal_code: str = ""
    city: str = ""
    email: str | None = None
    total_invoiced: float = 0
