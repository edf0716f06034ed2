from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.erreurs import (
    CapaciteDepassee,
    Conflit,
    ErreurValidation,
    Interdit,
    Introuvable,
    StatutInvalide,
    TableIndisponible,
)
from app.core.transactions import executer_transaction
from app.domaine.calendrier import en_utc, jour_calendaire
from app.domaine.enums.types import (
    STATUTS_RESERVATION_ACTIFS,
    Role,
    StatutReservation,
    TypeReservation,
)
from app.domaine.identite import Identite
from app.domaine.modeles.base import maintenant_utc
from app.domaine.modeles.reservation import Reservation, TableRestaurant


logger = logging.getLogger(__name__)


NOM_PAR_DEFAUT = "Client"

MESSAGE_CONFLIT_JOUR = "Cette table a déjà une réservation pour cette journée."

# Transitions de statut (ADMIN uniquement). CANCELLED est terminal.
TRANSITIONS_RESERVATION: dict[StatutReservation, frozenset[StatutReservation]] = {
    StatutReservation.PENDING: frozenset({StatutReservation.CONFIRMED, StatutReservation.CANCELLED}),
    StatutReservation.CONFIRMED: frozenset({StatutReservation.CANCELLED}),
    StatutReservation.CANCELLED: frozenset(),
}


def _options_projection():
    return (selectinload(Reservation.table), selectinload(Reservation.user))


class ServiceReservation:
    """Moteur de réservations.

    Règles :
    - Une table (SUR_PLACE) n’a qu’une réservation PENDING/CONFIRMED par jour calendaire UTC.
      Contrôle applicatif + index unique partiel (`uq_reservation_table_jour_active`).
    - Toute réservation naît PENDING, même créée par un ADMIN.
    - Les réservations LIVRAISON ne consomment aucune table.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        horloge: Callable[[], datetime] = maintenant_utc,
    ) -> None:
        self._session = session
        self._horloge = horloge

    async def creer(
        self,
        *,
        date_reservation: datetime,
        type_reservation: TypeReservation,
        acteur: Identite | None,
        nom: str | None = None,
        table_id: int | None = None,
        convives: int | None = None,
    ) -> Reservation:
        instant = en_utc(date_reservation)
        if instant < self._horloge():
            raise ErreurValidation("La date ne peut pas être dans le passé.")

        if convives is not None and convives <= 0:
            raise ErreurValidation("Le nombre de convives doit être positif.")

        jour = jour_calendaire(instant)

        if type_reservation is TypeReservation.SUR_PLACE and table_id is not None:
            await self._verifier_table_reservable(table_id=table_id, jour=jour, convives=convives)
        else:
            # Livraison : aucune table, aucun contrôle de conflit.
            table_id = None

        nom_final = (nom or "").strip() or self._nom_par_defaut(acteur)

        async def _ecrire() -> int:
            reservation = Reservation(
                nom=nom_final,
                date_reservation=instant,
                jour=jour,
                type_reservation=type_reservation,
                table_id=table_id,
                user_id=acteur.user_id if acteur is not None else None,
                convives=convives,
                statut=StatutReservation.PENDING,
            )
            self._session.add(reservation)
            await self._session.flush()
            return reservation.id

        reservation_id = await executer_transaction(
            self._session,
            action=_ecrire,
            message_conflit=MESSAGE_CONFLIT_JOUR,
        )

        logger.info(
            "reservation_creee reservation_id=%s table_id=%s jour=%s type=%s",
            reservation_id,
            table_id,
            jour.isoformat(),
            type_reservation.value,
        )
        return await self._charger(reservation_id)

    async def changer_statut(
        self,
        *,
        reservation_id: int,
        nouveau_statut: str,
        acteur: Identite | None,
    ) -> Reservation:
        cible = self._parser_statut(nouveau_statut)

        if acteur is None or not acteur.est_admin:
            raise Interdit("Seul un administrateur peut modifier le statut d'une réservation.")

        reservation = await self._session.get(Reservation, reservation_id)
        if reservation is None:
            raise Introuvable("Réservation non trouvée.")

        statut_courant = reservation.statut
        if cible not in TRANSITIONS_RESERVATION[statut_courant]:
            logger.info(
                "reservation_transition_refusee reservation_id=%s de=%s vers=%s",
                reservation_id,
                statut_courant.value,
                cible.value,
            )
            raise Interdit(f"Transition interdite : {statut_courant.value} -> {cible.value}.")

        if cible in STATUTS_RESERVATION_ACTIFS and reservation.table_id is not None:
            # Revérification au moment de confirmer (réservations antérieures à l’index, course...).
            if await self._existe_reservation_active(
                table_id=reservation.table_id,
                jour=reservation.jour,
                sauf_id=reservation.id,
            ):
                raise Conflit(MESSAGE_CONFLIT_JOUR)

        async def _ecrire() -> None:
            reservation.statut = cible
            await self._session.flush()

        await executer_transaction(self._session, action=_ecrire, message_conflit=MESSAGE_CONFLIT_JOUR)

        logger.info(
            "reservation_transition reservation_id=%s de=%s vers=%s",
            reservation_id,
            statut_courant.value,
            cible.value,
        )
        return await self._charger(reservation_id)

    async def supprimer(self, *, reservation_id: int, acteur: Identite | None) -> None:
        """Suppression physique : ADMIN, ou CLIENT propriétaire. Aucune restriction de statut."""

        reservation = await self._session.get(Reservation, reservation_id)
        if reservation is None:
            raise Introuvable("Réservation non trouvée.")

        if acteur is None:
            raise Interdit("Authentification requise.")

        autorise = acteur.est_admin or (acteur.role is Role.CLIENT and acteur.possede(reservation.user_id))
        if not autorise:
            raise Interdit("Vous ne pouvez supprimer que vos propres réservations.")

        async def _ecrire() -> None:
            await self._session.delete(reservation)
            await self._session.flush()

        await executer_transaction(self._session, action=_ecrire)
        logger.info("reservation_supprimee reservation_id=%s par=%s", reservation_id, acteur.user_id)

    async def lister(
        self,
        *,
        acteur: Identite,
        statut: str | None = None,
        type_reservation: TypeReservation | None = None,
        jour: date | None = None,
    ) -> list[Reservation]:
        stmt = select(Reservation).options(*_options_projection())

        if acteur.role is Role.CLIENT:
            stmt = stmt.where(Reservation.user_id == acteur.user_id)
        if statut is not None:
            stmt = stmt.where(Reservation.statut == self._parser_statut(statut))
        if type_reservation is not None:
            stmt = stmt.where(Reservation.type_reservation == type_reservation)
        if jour is not None:
            stmt = stmt.where(Reservation.jour == jour)

        stmt = stmt.order_by(Reservation.date_reservation.desc(), Reservation.id.desc())
        res = await self._session.execute(stmt)
        return list(res.scalars().all())

    async def obtenir(self, *, reservation_id: int, acteur: Identite) -> Reservation:
        reservation = await self._charger(reservation_id)
        if acteur.role is Role.CLIENT and not acteur.possede(reservation.user_id):
            raise Interdit("Accès interdit.")
        return reservation

    async def _verifier_table_reservable(self, *, table_id: int, jour: date, convives: int | None) -> None:
        table = await self._session.get(TableRestaurant, table_id)
        if table is None:
            raise Introuvable("Table non trouvée.")

        if not table.disponible:
            raise TableIndisponible("Cette table n'est pas disponible.")

        if convives is not None and convives > table.places:
            raise CapaciteDepassee(f"Cette table ne peut accueillir que {table.places} personnes.")

        if await self._existe_reservation_active(table_id=table_id, jour=jour):
            logger.info("reservation_conflit table_id=%s jour=%s", table_id, jour.isoformat())
            raise Conflit(MESSAGE_CONFLIT_JOUR)

    async def _existe_reservation_active(
        self,
        *,
        table_id: int,
        jour: date,
        sauf_id: int | None = None,
    ) -> bool:
        stmt = (
            select(Reservation.id)
            .where(Reservation.table_id == table_id)
            .where(Reservation.jour == jour)
            .where(Reservation.statut.in_(STATUTS_RESERVATION_ACTIFS))
        )
        if sauf_id is not None:
            stmt = stmt.where(Reservation.id != sauf_id)

        res = await self._session.execute(stmt.limit(1))
        return res.scalar_one_or_none() is not None

    async def _charger(self, reservation_id: int) -> Reservation:
        res = await self._session.execute(
            select(Reservation)
            .where(Reservation.id == reservation_id)
            .options(*_options_projection())
            .execution_options(populate_existing=True)
        )
        reservation = res.scalar_one_or_none()
        if reservation is None:
            raise Introuvable("Réservation non trouvée.")
        return reservation

    @staticmethod
    def _nom_par_defaut(acteur: Identite | None) -> str:
        if acteur is None:
            return NOM_PAR_DEFAUT
        return acteur.nom or acteur.email

    @staticmethod
    def _parser_statut(valeur: str) -> StatutReservation:
        try:
            return StatutReservation(valeur)
        except ValueError:
            raise StatutInvalide(
                "Statut invalide.",
                statuts_valides=[s.value for s in StatutReservation],
            ) from None
