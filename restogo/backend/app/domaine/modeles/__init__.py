"""Modèles SQLAlchemy.

Aucune logique métier ici : uniquement la structure des tables.
"""

from app.domaine.modeles.base import BaseModele, ModeleHorodate
from app.domaine.modeles.auth import User
from app.domaine.modeles.catalogue import Categorie, Plat
from app.domaine.modeles.commande import Commande, LigneCommande
from app.domaine.modeles.reservation import Reservation, TableRestaurant

__all__ = [
    "BaseModele",
    "ModeleHorodate",
    # Auth
    "User",
    # Catalogue
    "Categorie",
    "Plat",
    # Commandes
    "Commande",
    "LigneCommande",
    # Réservations
    "TableRestaurant",
    "Reservation",
]
