from __future__ import annotations

from fastapi import APIRouter

from app.api.endpoints.auth import routeur_auth
from app.api.endpoints.categories import routeur_categories
from app.api.endpoints.commandes import routeur_commandes
from app.api.endpoints.plats import routeur_plats
from app.api.endpoints.reservations import routeur_reservations
from app.api.endpoints.statistiques import routeur_statistiques
from app.api.endpoints.tables import routeur_tables


# ==============================
# ROUTEUR PRINCIPAL
# ==============================
router = APIRouter()

# Auth
router.include_router(routeur_auth)

# Catalogue (lecture publique, écriture ADMIN)
router.include_router(routeur_categories)
router.include_router(routeur_plats)

# Commandes & réservations
router.include_router(routeur_commandes)
router.include_router(routeur_reservations)
router.include_router(routeur_tables)

# Tableau de bord ADMIN
router.include_router(routeur_statistiques)
