from __future__ import annotations

from datetime import date as date_, datetime

from pydantic import Field

from app.api.schemas.commun import SchemaApi
from app.domaine.enums.types import StatutReservation


class RequeteTable(SchemaApi):
    name: str = Field(min_length=1, max_length=100)
    seats: int = Field(ge=1, le=20)
    available: bool = True


class RequeteDisponibiliteTable(SchemaApi):
    available: bool


class TableLecture(SchemaApi):
    id: int
    name: str
    seats: int
    available: bool


class ReservationDuJour(SchemaApi):
    id: int
    name: str
    date: datetime
    status: StatutReservation
    guests: int | None = None


class TableDisponibiliteLecture(TableLecture):
    day: date_
    available_today: bool
    has_reservation_today: bool
    reservations: list[ReservationDuJour] = Field(default_factory=list)
