from __future__ import annotations

import asyncio
from decimal import Decimal

from sqlalchemy import select

from app.core.base_donnees import obtenir_fabrique_session
from app.domaine.modeles.catalogue import Categorie, Plat
from app.domaine.modeles.reservation import TableRestaurant


CATEGORIES = [
    ("Entrées", "Pour commencer", "leaf"),
    ("Plats", "Nos plats du jour", "restaurant"),
    ("Desserts", "Pour finir", "ice-cream"),
    ("Boissons", None, "cafe"),
]

PLATS = [
    ("Entrées", "Salade César", "8.50"),
    ("Entrées", "Soupe à l'oignon", "7.00"),
    ("Plats", "Couscous royal", "16.90"),
    ("Plats", "Tajine poulet citron", "15.50"),
    ("Plats", "Burger maison", "13.00"),
    ("Desserts", "Tiramisu", "6.50"),
    ("Desserts", "Fondant chocolat", "6.00"),
    ("Boissons", "Thé à la menthe", "3.00"),
    ("Boissons", "Jus d'orange pressé", "4.50"),
]

TABLES = [
    ("Table 1", 2),
    ("Table 2", 2),
    ("Table 3", 4),
    ("Table 4", 4),
    ("Table 5", 6),
    ("Terrasse", 8),
]


async def seed_demo() -> None:
    """Seed de démonstration (idempotent).

    Objectif : une carte et une salle immédiatement utilisables par l'app mobile :
    - 4 catégories
    - 9 plats disponibles
    - 6 tables (2 à 8 places)

    Les comptes du personnel se créent avec `scripts.creer_admin`.
    """

    fabrique = obtenir_fabrique_session()

    async with fabrique() as session:
        categories: dict[str, Categorie] = {}
        for nom, description, icone in CATEGORIES:
            res = await session.execute(select(Categorie).where(Categorie.nom == nom))
            categorie = res.scalar_one_or_none()
            if categorie is None:
                categorie = Categorie(nom=nom, description=description, icone=icone)
                session.add(categorie)
                await session.flush()
            categories[nom] = categorie

        for nom_categorie, nom, prix in PLATS:
            res = await session.execute(select(Plat).where(Plat.nom == nom))
            if res.scalar_one_or_none() is None:
                session.add(
                    Plat(
                        nom=nom,
                        prix=Decimal(prix),
                        categorie_id=categories[nom_categorie].id,
                        disponible=True,
                    )
                )

        for nom, places in TABLES:
            res = await session.execute(select(TableRestaurant).where(TableRestaurant.nom == nom))
            if res.scalar_one_or_none() is None:
                session.add(TableRestaurant(nom=nom, places=places, disponible=True))

        await session.commit()

    print(f"[seed_demo][OK] categories={len(CATEGORIES)} plats={len(PLATS)} tables={len(TABLES)}")


if __name__ == "__main__":
    asyncio.run(seed_demo())
