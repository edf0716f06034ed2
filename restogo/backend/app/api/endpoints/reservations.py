from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependances import fournir_session
from app.api.dependances_auth import fournir_identite, fournir_identite_optionnelle, verifier_roles_requis
from app.api.schemas.commun import ReponseMessage, UserResume
from app.api.schemas.commandes import RequeteStatut
from app.api.schemas.reservations import RequeteReservation, ReservationLecture, TableResume
from app.domaine.calendrier import jour_depuis_parametre
from app.domaine.enums.types import Role, TypeReservation
from app.domaine.identite import Identite
from app.domaine.modeles.reservation import Reservation
from app.domaine.services.reservations import ServiceReservation


routeur_reservations = APIRouter(prefix="/api/reservations", tags=["reservations"])


def vers_reservation_lecture(reservation: Reservation) -> ReservationLecture:
    table = reservation.table
    user = reservation.user
    return ReservationLecture(
        id=reservation.id,
        name=reservation.nom,
        date=reservation.date_reservation,
        day=reservation.jour,
        type=reservation.type_reservation,
        table_id=reservation.table_id,
        user_id=reservation.user_id,
        guests=reservation.convives,
        status=reservation.statut,
        table=(
            TableResume(id=table.id, name=table.nom, seats=table.places, available=table.disponible)
            if table is not None
            else None
        ),
        user=UserResume(id=user.id, email=user.email, name=user.nom_affiche) if user is not None else None,
    )


@routeur_reservations.get("", response_model=list[ReservationLecture])
async def lister_reservations(
    status_filtre: str | None = Query(default=None, alias="status"),
    type_filtre: TypeReservation | None = Query(default=None, alias="type"),
    date: str | None = Query(default=None),
    identite: Identite = Depends(fournir_identite),
    session: AsyncSession = Depends(fournir_session),
) -> list[ReservationLecture]:
    jour = jour_depuis_parametre(date) if date else None
    reservations = await ServiceReservation(session).lister(
        acteur=identite,
        statut=status_filtre,
        type_reservation=type_filtre,
        jour=jour,
    )
    return [vers_reservation_lecture(r) for r in reservations]


@routeur_reservations.get("/{reservation_id}", response_model=ReservationLecture)
async def obtenir_reservation(
    reservation_id: int,
    identite: Identite = Depends(fournir_identite),
    session: AsyncSession = Depends(fournir_session),
) -> ReservationLecture:
    reservation = await ServiceReservation(session).obtenir(reservation_id=reservation_id, acteur=identite)
    return vers_reservation_lecture(reservation)


@routeur_reservations.post("", response_model=ReservationLecture, status_code=status.HTTP_201_CREATED)
async def creer_reservation(
    requete: RequeteReservation,
    identite: Identite | None = Depends(fournir_identite_optionnelle),
    session: AsyncSession = Depends(fournir_session),
) -> ReservationLecture:
    """Crée une réservation, toujours PENDING (validation par un administrateur)."""

    reservation = await ServiceReservation(session).creer(
        nom=requete.name,
        date_reservation=requete.date,
        type_reservation=requete.type,
        table_id=requete.table_id,
        convives=requete.guests,
        acteur=identite,
    )
    return vers_reservation_lecture(reservation)


@routeur_reservations.put("/{reservation_id}/status", response_model=ReservationLecture)
async def changer_statut_reservation(
    reservation_id: int,
    requete: RequeteStatut,
    identite: Identite = Depends(verifier_roles_requis(Role.ADMIN)),
    session: AsyncSession = Depends(fournir_session),
) -> ReservationLecture:
    reservation = await ServiceReservation(session).changer_statut(
        reservation_id=reservation_id,
        nouveau_statut=requete.status,
        acteur=identite,
    )
    return vers_reservation_lecture(reservation)


@routeur_reservations.delete("/{reservation_id}", response_model=ReponseMessage)
async def supprimer_reservation(
    reservation_id: int,
    identite: Identite = Depends(fournir_identite),
    session: AsyncSession = Depends(fournir_session),
) -> ReponseMessage:
    await ServiceReservation(session).supprimer(reservation_id=reservation_id, acteur=identite)
    return ReponseMessage(message="Réservation supprimée avec succès.")
