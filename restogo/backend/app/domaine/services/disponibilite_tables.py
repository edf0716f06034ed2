from __future__ import annotations

"""Disponibilité des tables pour un jour donné.

Règles :
- Une table est disponible ce jour-là si son interrupteur administratif est
  actif ET si aucune réservation PENDING/CONFIRMED ne porte sur ce jour (UTC).
- Plusieurs réservations actives le même jour (anomalie) : une seule suffit
  à rendre la table indisponible.

Contraintes :
- `projeter_disponibilites` est pure : lecture seule, aucun effet de bord.
- Jamais stockée ni mise en cache : recalculée à chaque lecture.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.erreurs import Introuvable
from app.domaine.enums.types import STATUTS_RESERVATION_ACTIFS
from app.domaine.modeles.reservation import Reservation, TableRestaurant


@dataclass(frozen=True)
class DisponibiliteTable:
    table: TableRestaurant
    jour: date
    disponible_ce_jour: bool
    a_reservation_ce_jour: bool
    reservations: list[Reservation] = field(default_factory=list)


def projeter_disponibilites(
    tables: Iterable[TableRestaurant],
    reservations: Iterable[Reservation],
    jour: date,
) -> list[DisponibiliteTable]:
    """Joint tables et réservations du jour ; tri par nom de table."""

    par_table: dict[int, list[Reservation]] = {}
    for r in reservations:
        if r.table_id is None or r.statut not in STATUTS_RESERVATION_ACTIFS or r.jour != jour:
            continue
        par_table.setdefault(r.table_id, []).append(r)

    resultat: list[DisponibiliteTable] = []
    for t in sorted(tables, key=lambda t: (t.nom, t.id)):
        du_jour = sorted(par_table.get(t.id, []), key=lambda r: (r.date_reservation, r.id))
        resultat.append(
            DisponibiliteTable(
                table=t,
                jour=jour,
                disponible_ce_jour=bool(t.disponible) and not du_jour,
                a_reservation_ce_jour=bool(du_jour),
                reservations=du_jour,
            )
        )

    return resultat


class ServiceDisponibiliteTables:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def lister(self, *, jour: date, disponible: bool | None = None) -> list[DisponibiliteTable]:
        stmt = select(TableRestaurant)
        if disponible is not None:
            stmt = stmt.where(TableRestaurant.disponible == disponible)
        tables = list((await self._session.execute(stmt)).scalars().all())

        reservations = await self._reservations_actives_du_jour(jour, [t.id for t in tables])
        return projeter_disponibilites(tables, reservations, jour)

    async def obtenir(self, *, table_id: int, jour: date) -> DisponibiliteTable:
        table = await self._session.get(TableRestaurant, table_id)
        if table is None:
            raise Introuvable("Table non trouvée.")

        reservations = await self._reservations_actives_du_jour(jour, [table.id])
        return projeter_disponibilites([table], reservations, jour)[0]

    async def _reservations_actives_du_jour(self, jour: date, table_ids: list[int]) -> list[Reservation]:
        if not table_ids:
            return []

        res = await self._session.execute(
            select(Reservation)
            .where(Reservation.table_id.in_(table_ids))
            .where(Reservation.jour == jour)
            .where(Reservation.statut.in_(STATUTS_RESERVATION_ACTIFS))
        )
        return list(res.scalars().all())
