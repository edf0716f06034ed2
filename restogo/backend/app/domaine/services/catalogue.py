from __future__ import annotations

"""Règles d’intégrité du catalogue (plats, catégories) et des tables.

Aucune suppression physique d’une ligne encore référencée : l’historique des
commandes et les réservations actives restent cohérents.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.erreurs import Conflit, Introuvable
from app.core.transactions import executer_transaction
from app.domaine.enums.types import STATUTS_RESERVATION_ACTIFS
from app.domaine.modeles.catalogue import Categorie, Plat
from app.domaine.modeles.commande import LigneCommande
from app.domaine.modeles.reservation import Reservation, TableRestaurant


logger = logging.getLogger(__name__)


class ServiceCatalogue:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def supprimer_plat(self, *, plat_id: int) -> None:
        plat = await self._session.get(Plat, plat_id)
        if plat is None:
            raise Introuvable("Plat non trouvé.")

        nb_lignes = await self._compter(select(func.count(LigneCommande.id)).where(LigneCommande.plat_id == plat_id))
        if nb_lignes > 0:
            logger.info("catalogue_suppression_plat_refusee plat_id=%s lignes=%s", plat_id, nb_lignes)
            raise Conflit(
                "Impossible de supprimer ce plat car il figure dans des commandes. Rendez-le indisponible.",
                details={"commandes": nb_lignes},
            )

        await self._supprimer(plat)

    async def supprimer_categorie(self, *, categorie_id: int) -> None:
        categorie = await self._session.get(Categorie, categorie_id)
        if categorie is None:
            raise Introuvable("Catégorie non trouvée.")

        nb_plats = await self._compter(select(func.count(Plat.id)).where(Plat.categorie_id == categorie_id))
        if nb_plats > 0:
            raise Conflit(f"Impossible de supprimer cette catégorie car elle contient {nb_plats} plat(s).")

        await self._supprimer(categorie)

    async def supprimer_table(self, *, table_id: int) -> None:
        table = await self._session.get(TableRestaurant, table_id)
        if table is None:
            raise Introuvable("Table non trouvée.")

        nb_actives = await self._compter(
            select(func.count(Reservation.id))
            .where(Reservation.table_id == table_id)
            .where(Reservation.statut.in_(STATUTS_RESERVATION_ACTIFS))
        )
        if nb_actives > 0:
            raise Conflit("Impossible de supprimer cette table car elle a des réservations actives.")

        # Les réservations annulées gardent leur historique, sans table.
        res = await self._session.execute(select(Reservation).where(Reservation.table_id == table_id))
        for reservation in res.scalars().all():
            reservation.table_id = None

        await self._supprimer(table)

    async def _compter(self, stmt) -> int:
        return int((await self._session.execute(stmt)).scalar_one())

    async def _supprimer(self, objet: object) -> None:
        async def _ecrire() -> None:
            await self._session.delete(objet)
            await self._session.flush()

        await executer_transaction(self._session, action=_ecrire)
        logger.info("catalogue_suppression type=%s id=%s", type(objet).__name__, getattr(objet, "id", None))
