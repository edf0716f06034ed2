from __future__ import annotations

from datetime import date as date_, datetime

from pydantic import Field

from app.api.schemas.commun import SchemaApi, UserResume
from app.domaine.enums.types import StatutReservation, TypeReservation


class RequeteReservation(SchemaApi):
    name: str | None = Field(default=None, max_length=200)
    date: datetime
    type: TypeReservation
    table_id: int | None = None
    guests: int | None = Field(default=None, gt=0)


class TableResume(SchemaApi):
    id: int
    name: str
    seats: int
    available: bool


class ReservationLecture(SchemaApi):
    id: int
    name: str
    date: datetime
    day: date_
    type: TypeReservation
    table_id: int | None = None
    user_id: int | None = None
    guests: int | None = None
    status: StatutReservation
    table: TableResume | None = None
    user: UserResume | None = None
