from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.erreurs import (
    CapaciteDepassee,
    Conflit,
    ErreurValidation,
    Interdit,
    Introuvable,
    StatutInvalide,
    TableIndisponible,
)
from app.domaine.enums.types import Role, StatutReservation, TypeReservation
from app.domaine.modeles import Reservation
from app.domaine.services.reservations import NOM_PAR_DEFAUT, ServiceReservation
from tests._auth_helpers import creer_table, creer_user, identite


MAINTENANT = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _service(session: AsyncSession) -> ServiceReservation:
    return ServiceReservation(session, horloge=lambda: MAINTENANT)


def _utc(texte: str) -> datetime:
    return datetime.fromisoformat(texte).replace(tzinfo=timezone.utc)


async def _inserer_reservation(session: AsyncSession, *, table_id: int, jour: date, statut: StatutReservation) -> Reservation:
    """Insère directement (sans passer par le service) une réservation sur une table."""

    reservation = Reservation(
        nom="Existant",
        date_reservation=datetime(jour.year, jour.month, jour.day, 20, 0, tzinfo=timezone.utc),
        jour=jour,
        type_reservation=TypeReservation.SUR_PLACE,
        table_id=table_id,
        statut=statut,
    )
    session.add(reservation)
    await session.commit()
    return reservation


@pytest.mark.asyncio
async def test_scenario_conflit_sur_la_journee(session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com")
    t1 = await creer_table(session_test, nom="T1", places=4)
    service = _service(session_test)

    premiere = await service.creer(
        table_id=t1.id,
        convives=4,
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=identite(client),
    )
    assert premiere.statut is StatutReservation.PENDING
    assert premiere.jour == date(2024, 6, 1)

    with pytest.raises(Conflit):
        await service.creer(
            table_id=t1.id,
            date_reservation=_utc("2024-06-01T12:00:00"),
            type_reservation=TypeReservation.SUR_PLACE,
            acteur=identite(client),
        )

    lendemain = await service.creer(
        table_id=t1.id,
        date_reservation=_utc("2024-06-02T19:00:00"),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=identite(client),
    )
    assert lendemain.jour == date(2024, 6, 2)

    nb = (await session_test.execute(select(func.count(Reservation.id)))).scalar_one()
    assert nb == 2


@pytest.mark.asyncio
async def test_jour_calcule_en_utc(session_test: AsyncSession) -> None:
    t1 = await creer_table(session_test, nom="T1")
    service = _service(session_test)

    # 23:30 à Paris (UTC+2) le 1er juin = 21:30 UTC le 1er juin.
    paris = timezone(timedelta(hours=2))
    reservation = await service.creer(
        table_id=t1.id,
        date_reservation=datetime(2024, 6, 1, 23, 30, tzinfo=paris),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=None,
    )
    assert reservation.jour == date(2024, 6, 1)

    # 01:00 à Paris le 3 juin = 23:00 UTC le 2 juin : même jour UTC que la suivante.
    await service.creer(
        table_id=t1.id,
        date_reservation=datetime(2024, 6, 3, 1, 0, tzinfo=paris),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=None,
    )
    with pytest.raises(Conflit):
        await service.creer(
            table_id=t1.id,
            date_reservation=_utc("2024-06-02T10:00:00"),
            type_reservation=TypeReservation.SUR_PLACE,
            acteur=None,
        )


@pytest.mark.asyncio
async def test_capacite(session_test: AsyncSession) -> None:
    table = await creer_table(session_test, nom="T2", places=4)
    service = _service(session_test)

    with pytest.raises(CapaciteDepassee):
        await service.creer(
            table_id=table.id,
            convives=5,
            date_reservation=_utc("2024-06-01T19:00:00"),
            type_reservation=TypeReservation.SUR_PLACE,
            acteur=None,
        )

    reservation = await service.creer(
        table_id=table.id,
        convives=4,
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=None,
    )
    assert reservation.convives == 4


@pytest.mark.asyncio
async def test_table_absente_ou_desactivee(session_test: AsyncSession) -> None:
    fermee = await creer_table(session_test, nom="Terrasse", disponible=False)
    service = _service(session_test)

    with pytest.raises(Introuvable):
        await service.creer(
            table_id=999,
            date_reservation=_utc("2024-06-01T19:00:00"),
            type_reservation=TypeReservation.SUR_PLACE,
            acteur=None,
        )

    with pytest.raises(TableIndisponible):
        await service.creer(
            table_id=fermee.id,
            date_reservation=_utc("2024-06-01T19:00:00"),
            type_reservation=TypeReservation.SUR_PLACE,
            acteur=None,
        )


@pytest.mark.asyncio
async def test_date_passee_refusee(session_test: AsyncSession) -> None:
    with pytest.raises(ErreurValidation):
        await _service(session_test).creer(
            date_reservation=_utc("2024-04-30T19:00:00"),
            type_reservation=TypeReservation.LIVRAISON,
            acteur=None,
        )


@pytest.mark.asyncio
async def test_livraison_sans_table_ni_conflit(session_test: AsyncSession) -> None:
    table = await creer_table(session_test, nom="T1", places=2)
    await _inserer_reservation(session_test, table_id=table.id, jour=date(2024, 6, 1), statut=StatutReservation.CONFIRMED)
    service = _service(session_test)

    reservation = await service.creer(
        table_id=table.id,
        convives=10,
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.LIVRAISON,
        acteur=None,
    )

    assert reservation.table_id is None
    assert reservation.table is None
    assert reservation.type_reservation is TypeReservation.LIVRAISON


@pytest.mark.asyncio
async def test_reservation_annulee_ne_bloque_pas(session_test: AsyncSession) -> None:
    table = await creer_table(session_test, nom="T1")
    await _inserer_reservation(session_test, table_id=table.id, jour=date(2024, 6, 1), statut=StatutReservation.CANCELLED)

    reservation = await _service(session_test).creer(
        table_id=table.id,
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=None,
    )
    assert reservation.statut is StatutReservation.PENDING


@pytest.mark.asyncio
async def test_nom_par_defaut(session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="amina@example.com", nom="Amina")
    service = _service(session_test)

    def _creer(**kwargs):
        return service.creer(
            date_reservation=_utc("2024-06-01T19:00:00"),
            type_reservation=TypeReservation.LIVRAISON,
            **kwargs,
        )

    assert (await _creer(acteur=identite(client))).nom == "Amina"
    assert (await _creer(acteur=identite(client), nom="Anniversaire Amina")).nom == "Anniversaire Amina"
    assert (await _creer(acteur=None)).nom == NOM_PAR_DEFAUT
    assert (await _creer(acteur=None, nom="   ")).nom == NOM_PAR_DEFAUT


@pytest.mark.asyncio
async def test_toujours_pending_meme_pour_un_admin(session_test: AsyncSession) -> None:
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    reservation = await _service(session_test).creer(
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.LIVRAISON,
        acteur=identite(admin),
    )
    assert reservation.statut is StatutReservation.PENDING
    assert reservation.user_id == admin.id


@pytest.mark.asyncio
async def test_transitions_admin(session_test: AsyncSession) -> None:
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    table = await creer_table(session_test, nom="T1")
    service = _service(session_test)

    reservation = await service.creer(
        table_id=table.id,
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=None,
    )

    confirmee = await service.changer_statut(
        reservation_id=reservation.id,
        nouveau_statut="CONFIRMED",
        acteur=identite(admin),
    )
    assert confirmee.statut is StatutReservation.CONFIRMED

    with pytest.raises(Interdit):
        await service.changer_statut(reservation_id=reservation.id, nouveau_statut="PENDING", acteur=identite(admin))

    annulee = await service.changer_statut(
        reservation_id=reservation.id,
        nouveau_statut="CANCELLED",
        acteur=identite(admin),
    )
    assert annulee.statut is StatutReservation.CANCELLED

    # CANCELLED est terminal.
    for cible in ("PENDING", "CONFIRMED", "CANCELLED"):
        with pytest.raises(Interdit):
            await service.changer_statut(reservation_id=reservation.id, nouveau_statut=cible, acteur=identite(admin))

    with pytest.raises(StatutInvalide):
        await service.changer_statut(reservation_id=reservation.id, nouveau_statut="DONE", acteur=identite(admin))

    with pytest.raises(Introuvable):
        await service.changer_statut(reservation_id=404, nouveau_statut="CONFIRMED", acteur=identite(admin))


@pytest.mark.asyncio
@pytest.mark.parametrize("role", [Role.CLIENT, Role.LIVREUR])
async def test_transitions_reservees_admin(session_test: AsyncSession, role: Role) -> None:
    acteur = await creer_user(session_test, email="acteur@example.com", role=role)
    service = _service(session_test)
    reservation = await service.creer(
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.LIVRAISON,
        acteur=identite(acteur),
    )

    with pytest.raises(Interdit):
        await service.changer_statut(
            reservation_id=reservation.id,
            nouveau_statut="CANCELLED",
            acteur=identite(acteur),
        )


@pytest.mark.asyncio
async def test_confirmation_reverifie_le_conflit(session_test: AsyncSession) -> None:
    """Base sans index partiel (données héritées) : confirmer une seconde réservation active est refusé."""

    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    table = await creer_table(session_test, nom="T1")
    service = _service(session_test)

    await session_test.execute(text("DROP INDEX uq_reservation_table_jour_active"))
    await session_test.commit()

    confirmee = await _inserer_reservation(
        session_test,
        table_id=table.id,
        jour=date(2024, 6, 1),
        statut=StatutReservation.CONFIRMED,
    )
    doublon = await _inserer_reservation(
        session_test,
        table_id=table.id,
        jour=date(2024, 6, 1),
        statut=StatutReservation.PENDING,
    )

    with pytest.raises(Conflit):
        await service.changer_statut(reservation_id=doublon.id, nouveau_statut="CONFIRMED", acteur=identite(admin))

    await session_test.refresh(doublon)
    assert doublon.statut is StatutReservation.PENDING

    await service.changer_statut(reservation_id=doublon.id, nouveau_statut="CANCELLED", acteur=identite(admin))
    await service.changer_statut(reservation_id=confirmee.id, nouveau_statut="CANCELLED", acteur=identite(admin))

    autre = await service.creer(
        table_id=table.id,
        date_reservation=_utc("2024-06-01T12:00:00"),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=None,
    )
    confirmee_bis = await service.changer_statut(
        reservation_id=autre.id,
        nouveau_statut="CONFIRMED",
        acteur=identite(admin),
    )
    assert confirmee_bis.statut is StatutReservation.CONFIRMED


@pytest.mark.asyncio
async def test_index_unique_partiel_ferme_la_course(session_test: AsyncSession) -> None:
    """Même si le pré-contrôle est contourné, la base refuse la seconde réservation active."""

    table = await creer_table(session_test, nom="T1")
    await _inserer_reservation(session_test, table_id=table.id, jour=date(2024, 6, 1), statut=StatutReservation.PENDING)

    service = _service(session_test)

    async def _aucun_conflit(**_kwargs) -> bool:
        return False

    service._existe_reservation_active = _aucun_conflit  # simule deux créations simultanées

    with pytest.raises(Conflit):
        await service.creer(
            table_id=table.id,
            date_reservation=_utc("2024-06-01T13:00:00"),
            type_reservation=TypeReservation.SUR_PLACE,
            acteur=None,
        )

    nb = (await session_test.execute(select(func.count(Reservation.id)))).scalar_one()
    assert nb == 1


@pytest.mark.asyncio
async def test_suppression_droits(session_test: AsyncSession) -> None:
    proprietaire = await creer_user(session_test, email="a@example.com")
    intrus = await creer_user(session_test, email="b@example.com")
    livreur = await creer_user(session_test, email="l@example.com", role=Role.LIVREUR)
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    service = _service(session_test)

    async def _nouvelle(acteur) -> Reservation:
        return await service.creer(
            date_reservation=_utc("2024-06-01T19:00:00"),
            type_reservation=TypeReservation.LIVRAISON,
            acteur=identite(acteur),
        )

    r1 = await _nouvelle(proprietaire)

    for refuse in (intrus, livreur):
        with pytest.raises(Interdit):
            await service.supprimer(reservation_id=r1.id, acteur=identite(refuse))

    await service.supprimer(reservation_id=r1.id, acteur=identite(proprietaire))

    r2 = await _nouvelle(proprietaire)
    await service.changer_statut(reservation_id=r2.id, nouveau_statut="CONFIRMED", acteur=identite(admin))
    await service.supprimer(reservation_id=r2.id, acteur=identite(admin))

    with pytest.raises(Introuvable):
        await service.supprimer(reservation_id=r2.id, acteur=identite(admin))

    nb = (await session_test.execute(select(func.count(Reservation.id)))).scalar_one()
    assert nb == 0


@pytest.mark.asyncio
async def test_lister_et_obtenir(session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com")
    autre = await creer_user(session_test, email="autre@example.com")
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    table = await creer_table(session_test, nom="T1")
    service = _service(session_test)

    sur_place = await service.creer(
        table_id=table.id,
        date_reservation=_utc("2024-06-01T19:00:00"),
        type_reservation=TypeReservation.SUR_PLACE,
        acteur=identite(client),
    )
    livraison = await service.creer(
        date_reservation=_utc("2024-06-02T12:00:00"),
        type_reservation=TypeReservation.LIVRAISON,
        acteur=identite(autre),
    )

    assert [r.id for r in await service.lister(acteur=identite(client))] == [sur_place.id]
    assert [r.id for r in await service.lister(acteur=identite(admin))] == [livraison.id, sur_place.id]
    assert [r.id for r in await service.lister(acteur=identite(admin), type_reservation=TypeReservation.LIVRAISON)] == [
        livraison.id
    ]
    assert [r.id for r in await service.lister(acteur=identite(admin), jour=date(2024, 6, 1))] == [sur_place.id]
    assert await service.lister(acteur=identite(admin), statut="CONFIRMED") == []

    with pytest.raises(StatutInvalide):
        await service.lister(acteur=identite(admin), statut="FINI")

    obtenue = await service.obtenir(reservation_id=sur_place.id, acteur=identite(client))
    assert obtenue.table is not None and obtenue.table.nom == "T1"
    assert obtenue.user is not None and obtenue.user.email == "client@example.com"

    with pytest.raises(Interdit):
        await service.obtenir(reservation_id=livraison.id, acteur=identite(client))
