from __future__ import annotations

import httpx
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domaine.enums.types import Role
from app.domaine.modeles import Commande
from tests._auth_helpers import creer_plat, creer_user, entetes_auth


@pytest.mark.asyncio
async def test_scenario_commande_de_bout_en_bout(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com", nom="Amina")
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    livreur = await creer_user(session_test, email="livreur@example.com", role=Role.LIVREUR)
    plat = await creer_plat(session_test, nom="Couscous royal", prix="9.50")

    res = await client_api.post(
        "/api/orders",
        json={"items": [{"dishId": plat.id, "qty": 2}], "address": "12 rue des Lilas", "phone": "0600000000"},
        headers=entetes_auth(client),
    )
    assert res.status_code == 201, res.text
    commande = res.json()
    assert commande["status"] == "PENDING"
    assert commande["total"] == 19.0
    assert commande["userId"] == client.id
    assert commande["address"] == "12 rue des Lilas"
    assert commande["items"][0]["dish"] == {"id": plat.id, "name": "Couscous royal", "price": 9.5}
    assert commande["user"] == {"id": client.id, "email": "client@example.com", "name": "Amina"}
    assert "createdAt" in commande

    url_statut = f"/api/orders/{commande['id']}/status"

    res = await client_api.put(url_statut, json={"status": "ACCEPTED"}, headers=entetes_auth(admin))
    assert res.status_code == 200, res.text
    assert res.json()["status"] == "ACCEPTED"
    assert res.json()["total"] == 19.0

    res = await client_api.put(url_statut, json={"status": "LIVREE"}, headers=entetes_auth(livreur))
    assert res.status_code == 403
    assert res.json()["code"] == "INTERDIT"

    res = await client_api.put(url_statut, json={"status": "EN_COURS"}, headers=entetes_auth(livreur))
    assert res.status_code == 200
    res = await client_api.put(url_statut, json={"status": "LIVREE"}, headers=entetes_auth(livreur))
    assert res.status_code == 200
    assert res.json()["status"] == "LIVREE"
    assert res.json()["total"] == 19.0


@pytest.mark.asyncio
async def test_plat_invalide_signale_le_plat(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com")
    ok = await creer_plat(session_test, nom="Burger", prix="13.00")
    rupture = await creer_plat(session_test, nom="Tiramisu", prix="6.50", disponible=False)

    res = await client_api.post(
        "/api/orders",
        json={"items": [{"dishId": ok.id, "qty": 1}, {"dishId": rupture.id, "qty": 1}]},
        headers=entetes_auth(client),
    )

    assert res.status_code == 400
    corps = res.json()
    assert corps["code"] == "PLAT_INVALIDE"
    assert corps["details"] == {"dishId": rupture.id}
    assert "Tiramisu" in corps["erreur"]
    assert (await session_test.execute(select(func.count(Commande.id)))).scalar_one() == 0


@pytest.mark.asyncio
async def test_creation_payload_invalide(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com")
    plat = await creer_plat(session_test, nom="Burger", prix="13.00")

    for payload in (
        {"items": []},
        {"items": [{"dishId": plat.id, "qty": 0}]},
        {"items": [{"dishId": plat.id}]},
        {},
    ):
        res = await client_api.post("/api/orders", json=payload, headers=entetes_auth(client))
        assert res.status_code == 400, payload
        assert res.json()["code"] == "VALIDATION"


@pytest.mark.asyncio
async def test_commande_anonyme_refusee_par_defaut(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    plat = await creer_plat(session_test, nom="Burger", prix="13.00")

    res = await client_api.post("/api/orders", json={"items": [{"dishId": plat.id, "qty": 1}]})
    assert res.status_code == 403

    res = await client_api.post(
        "/api/orders",
        json={"items": [{"dishId": plat.id, "qty": 1}]},
        headers={"Authorization": "Bearer invalide"},
    )
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_statut_invalide_et_commande_inconnue(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com")
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    plat = await creer_plat(session_test, nom="Burger", prix="13.00")

    res = await client_api.post(
        "/api/orders",
        json={"items": [{"dishId": plat.id, "qty": 1}]},
        headers=entetes_auth(client),
    )
    commande_id = res.json()["id"]

    res = await client_api.put(
        f"/api/orders/{commande_id}/status",
        json={"status": "SHIPPED"},
        headers=entetes_auth(admin),
    )
    assert res.status_code == 400
    assert res.json()["code"] == "STATUT_INVALIDE"
    assert res.json()["details"]["statutsValides"] == ["PENDING", "ACCEPTED", "EN_COURS", "LIVREE", "CANCELLED"]

    res = await client_api.put("/api/orders/9999/status", json={"status": "ACCEPTED"}, headers=entetes_auth(admin))
    assert res.status_code == 404

    res = await client_api.put(f"/api/orders/{commande_id}/status", json={"status": "ACCEPTED"})
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_client_annule_sa_commande_en_attente(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com")
    autre = await creer_user(session_test, email="autre@example.com")
    plat = await creer_plat(session_test, nom="Burger", prix="13.00")

    res = await client_api.post(
        "/api/orders",
        json={"items": [{"dishId": plat.id, "qty": 1}]},
        headers=entetes_auth(client),
    )
    url_statut = f"/api/orders/{res.json()['id']}/status"

    res = await client_api.put(url_statut, json={"status": "CANCELLED"}, headers=entetes_auth(autre))
    assert res.status_code == 403

    res = await client_api.put(url_statut, json={"status": "ACCEPTED"}, headers=entetes_auth(client))
    assert res.status_code == 403

    res = await client_api.put(url_statut, json={"status": "CANCELLED"}, headers=entetes_auth(client))
    assert res.status_code == 200
    assert res.json()["status"] == "CANCELLED"


@pytest.mark.asyncio
async def test_listes_par_role(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    client = await creer_user(session_test, email="client@example.com")
    autre = await creer_user(session_test, email="autre@example.com")
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    livreur = await creer_user(session_test, email="livreur@example.com", role=Role.LIVREUR)
    plat = await creer_plat(session_test, nom="Burger", prix="13.00")

    ids = {}
    for proprietaire in (client, autre):
        res = await client_api.post(
            "/api/orders",
            json={"items": [{"dishId": plat.id, "qty": 1}]},
            headers=entetes_auth(proprietaire),
        )
        ids[proprietaire.email] = res.json()["id"]

    await client_api.put(
        f"/api/orders/{ids['autre@example.com']}/status",
        json={"status": "ACCEPTED"},
        headers=entetes_auth(admin),
    )

    res = await client_api.get("/api/orders", headers=entetes_auth(client))
    assert [c["id"] for c in res.json()] == [ids["client@example.com"]]

    res = await client_api.get("/api/orders", headers=entetes_auth(livreur))
    assert [c["id"] for c in res.json()] == [ids["autre@example.com"]]

    res = await client_api.get("/api/orders", headers=entetes_auth(admin))
    assert [c["id"] for c in res.json()] == [ids["autre@example.com"], ids["client@example.com"]]

    res = await client_api.get("/api/orders?status=ACCEPTED", headers=entetes_auth(admin))
    assert [c["id"] for c in res.json()] == [ids["autre@example.com"]]

    res = await client_api.get(f"/api/orders/{ids['autre@example.com']}", headers=entetes_auth(client))
    assert res.status_code == 403

    res = await client_api.get(f"/api/orders/{ids['client@example.com']}", headers=entetes_auth(client))
    assert res.status_code == 200

    premiere = (await client_api.get("/api/orders", headers=entetes_auth(admin))).json()
    seconde = (await client_api.get("/api/orders", headers=entetes_auth(admin))).json()
    assert premiere == seconde

    res = await client_api.get("/api/orders")
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_admin_annule_une_commande_en_livraison(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    client = await creer_user(session_test, email="client@example.com")
    plat = await creer_plat(session_test, nom="Burger", prix="9.50")

    res = await client_api.post(
        "/api/orders",
        json={"items": [{"dishId": plat.id, "qty": 1}]},
        headers=entetes_auth(client),
    )
    url_statut = f"/api/orders/{res.json()['id']}/status"
    for statut in ("ACCEPTED", "EN_COURS"):
        res = await client_api.put(url_statut, json={"status": statut}, headers=entetes_auth(admin))
        assert res.status_code == 200

    res = await client_api.put(url_statut, json={"status": "CANCELLED"}, headers=entetes_auth(admin))
    assert res.status_code == 200
    assert res.json()["status"] == "CANCELLED"
    assert res.json()["total"] == 9.5


@pytest.mark.asyncio
async def test_commande_pour_un_client_inconnu(client_api: httpx.AsyncClient, session_test: AsyncSession) -> None:
    admin = await creer_user(session_test, email="admin@example.com", role=Role.ADMIN)
    plat = await creer_plat(session_test, nom="Burger", prix="9.50")

    res = await client_api.post(
        "/api/orders",
        json={"items": [{"dishId": plat.id, "qty": 1}], "userId": 424242},
        headers=entetes_auth(admin),
    )
    assert res.status_code == 404
    assert res.json() == {"erreur": "Client non trouvé.", "code": "INTROUVABLE"}
    assert (await session_test.execute(select(func.count(Commande.id)))).scalar_one() == 0
