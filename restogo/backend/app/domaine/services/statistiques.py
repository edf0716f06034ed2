from __future__ import annotations

"""Statistiques du tableau de bord (READ-ONLY).

Contraintes:
- Ne modifie aucune donnée.
- Le chiffre d’affaires additionne le `total` stocké des commandes LIVREE ;
  il n’est jamais recalculé à partir des lignes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domaine.enums.types import StatutCommande
from app.domaine.modeles.base import maintenant_utc
from app.domaine.modeles.catalogue import Plat
from app.domaine.modeles.commande import Commande
from app.domaine.modeles.reservation import Reservation, TableRestaurant
from app.domaine.services.commandes import arrondir_total


@dataclass(frozen=True)
class Statistiques:
    nb_plats: int
    nb_reservations: int
    nb_commandes: int
    nb_tables: int
    nb_tables_disponibles: int
    chiffre_affaires: Decimal
    nb_commandes_recentes: int
    commandes_par_statut: dict[str, int]
    reservations_par_statut: dict[str, int]


class ServiceStatistiques:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def calculer(
        self,
        *,
        debut: datetime | None = None,
        fin: datetime | None = None,
        maintenant: datetime | None = None,
    ) -> Statistiques:
        filtres = []
        if debut is not None:
            filtres.append(Commande.cree_le >= debut)
        if fin is not None:
            filtres.append(Commande.cree_le <= fin)

        nb_plats = await self._scalaire(select(func.count(Plat.id)))
        nb_reservations = await self._scalaire(select(func.count(Reservation.id)))
        nb_commandes = await self._scalaire(select(func.count(Commande.id)).where(*filtres))
        nb_tables = await self._scalaire(select(func.count(TableRestaurant.id)))
        nb_tables_disponibles = await self._scalaire(
            select(func.count(TableRestaurant.id)).where(TableRestaurant.disponible.is_(True))
        )

        res_ca = await self._session.execute(
            select(Commande.total).where(Commande.statut == StatutCommande.LIVREE).where(*filtres)
        )
        chiffre_affaires = arrondir_total(sum((Decimal(t) for t in res_ca.scalars().all()), start=Decimal("0")))

        il_y_a_7_jours = (maintenant or maintenant_utc()) - timedelta(days=7)
        nb_recentes = await self._scalaire(select(func.count(Commande.id)).where(Commande.cree_le >= il_y_a_7_jours))

        res_cmd = await self._session.execute(
            select(Commande.statut, func.count(Commande.id)).where(*filtres).group_by(Commande.statut)
        )
        res_resa = await self._session.execute(
            select(Reservation.statut, func.count(Reservation.id)).group_by(Reservation.statut)
        )

        return Statistiques(
            nb_plats=nb_plats,
            nb_reservations=nb_reservations,
            nb_commandes=nb_commandes,
            nb_tables=nb_tables,
            nb_tables_disponibles=nb_tables_disponibles,
            chiffre_affaires=chiffre_affaires,
            nb_commandes_recentes=nb_recentes,
            commandes_par_statut={s.value: n for s, n in res_cmd.all()},
            reservations_par_statut={s.value: n for s, n in res_resa.all()},
        )

    async def _scalaire(self, stmt) -> int:
        return int((await self._session.execute(stmt)).scalar_one() or 0)
