from __future__ import annotations

from app.api.schemas.commun import SchemaApi


class ComptesTables(SchemaApi):
    total: int
    available: int


class VueGenerale(SchemaApi):
    dishes: int
    reservations: int
    orders: int
    tables: ComptesTables
    revenue: float
    recent_orders: int


class ReponseStatistiques(SchemaApi):
    overview: VueGenerale
    orders_by_status: dict[str, int]
    reservations_by_status: dict[str, int]
