from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependances import fournir_session
from app.api.dependances_auth import verifier_roles_requis
from app.api.schemas.commun import ReponseMessage
from app.api.schemas.tables import (
    RequeteDisponibiliteTable,
    RequeteTable,
    ReservationDuJour,
    TableDisponibiliteLecture,
    TableLecture,
)
from app.core.erreurs import Introuvable
from app.core.transactions import executer_transaction
from app.domaine.calendrier import jour_depuis_parametre
from app.domaine.enums.types import Role
from app.domaine.modeles.reservation import TableRestaurant
from app.domaine.services.catalogue import ServiceCatalogue
from app.domaine.services.disponibilite_tables import DisponibiliteTable, ServiceDisponibiliteTables


routeur_tables = APIRouter(prefix="/api/tables", tags=["tables"])

_admin = verifier_roles_requis(Role.ADMIN)

MESSAGE_NOM_DEJA_UTILISE = "Conflit - une table porte déjà ce nom."


def vers_table_lecture(table: TableRestaurant) -> TableLecture:
    return TableLecture(id=table.id, name=table.nom, seats=table.places, available=table.disponible)


def vers_disponibilite_lecture(dispo: DisponibiliteTable) -> TableDisponibiliteLecture:
    t = dispo.table
    return TableDisponibiliteLecture(
        id=t.id,
        name=t.nom,
        seats=t.places,
        available=t.disponible,
        day=dispo.jour,
        available_today=dispo.disponible_ce_jour,
        has_reservation_today=dispo.a_reservation_ce_jour,
        reservations=[
            ReservationDuJour(
                id=r.id,
                name=r.nom,
                date=r.date_reservation,
                status=r.statut,
                guests=r.convives,
            )
            for r in dispo.reservations
        ],
    )


async def _charger_table(session: AsyncSession, table_id: int) -> TableRestaurant:
    table = await session.get(TableRestaurant, table_id)
    if table is None:
        raise Introuvable("Table non trouvée.")
    return table


@routeur_tables.get("", response_model=list[TableDisponibiliteLecture])
async def lister_tables(
    date: str | None = Query(default=None, description="YYYY-MM-DD ou instant ISO ; défaut : aujourd’hui (UTC)"),
    available: bool | None = Query(default=None),
    session: AsyncSession = Depends(fournir_session),
) -> list[TableDisponibiliteLecture]:
    """Tables triées par nom, avec `availableToday` / `hasReservationToday` pour le jour demandé."""

    jour = jour_depuis_parametre(date)
    dispos = await ServiceDisponibiliteTables(session).lister(jour=jour, disponible=available)
    return [vers_disponibilite_lecture(d) for d in dispos]


@routeur_tables.get("/{table_id}", response_model=TableDisponibiliteLecture)
async def obtenir_table(
    table_id: int,
    date: str | None = Query(default=None),
    session: AsyncSession = Depends(fournir_session),
) -> TableDisponibiliteLecture:
    dispo = await ServiceDisponibiliteTables(session).obtenir(table_id=table_id, jour=jour_depuis_parametre(date))
    return vers_disponibilite_lecture(dispo)


@routeur_tables.post(
    "",
    response_model=TableLecture,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_admin)],
)
async def creer_table(body: RequeteTable, session: AsyncSession = Depends(fournir_session)) -> TableLecture:
    async def _ecrire() -> TableRestaurant:
        table = TableRestaurant(nom=body.name.strip(), places=body.seats, disponible=body.available)
        session.add(table)
        await session.flush()
        return table

    table = await executer_transaction(session, action=_ecrire, message_conflit=MESSAGE_NOM_DEJA_UTILISE)
    return vers_table_lecture(table)


@routeur_tables.put("/{table_id}", response_model=TableLecture, dependencies=[Depends(_admin)])
async def modifier_table(
    table_id: int,
    body: RequeteTable,
    session: AsyncSession = Depends(fournir_session),
) -> TableLecture:
    table = await _charger_table(session, table_id)

    async def _ecrire() -> None:
        table.nom = body.name.strip()
        table.places = body.seats
        table.disponible = body.available
        await session.flush()

    await executer_transaction(session, action=_ecrire, message_conflit=MESSAGE_NOM_DEJA_UTILISE)
    return vers_table_lecture(table)


@routeur_tables.put("/{table_id}/availability", response_model=TableLecture, dependencies=[Depends(_admin)])
async def modifier_disponibilite_table(
    table_id: int,
    body: RequeteDisponibiliteTable,
    session: AsyncSession = Depends(fournir_session),
) -> TableLecture:
    """Interrupteur administratif ; n’affecte pas les réservations existantes."""

    table = await _charger_table(session, table_id)

    async def _ecrire() -> None:
        table.disponible = body.available
        await session.flush()

    await executer_transaction(session, action=_ecrire)
    return vers_table_lecture(table)


@routeur_tables.delete("/{table_id}", response_model=ReponseMessage, dependencies=[Depends(_admin)])
async def supprimer_table(table_id: int, session: AsyncSession = Depends(fournir_session)) -> ReponseMessage:
    await ServiceCatalogue(session).supprimer_table(table_id=table_id)
    return ReponseMessage(message="Table supprimée avec succès.")
