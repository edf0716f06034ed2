from __future__ import annotations

import enum


class Role(str, enum.Enum):
    """Rôle d’un utilisateur (fixé à l’inscription)."""

    ADMIN = "ADMIN"
    CLIENT = "CLIENT"
    LIVREUR = "LIVREUR"


class StatutCommande(str, enum.Enum):
    """Cycle de vie d’une commande.

    PENDING -> ACCEPTED -> EN_COURS -> LIVREE
    PENDING / ACCEPTED -> CANCELLED
    LIVREE et CANCELLED sont terminaux.
    """

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EN_COURS = "EN_COURS"
    LIVREE = "LIVREE"
    CANCELLED = "CANCELLED"


class StatutReservation(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


# Statuts qui occupent une table pour la journée.
STATUTS_RESERVATION_ACTIFS: frozenset[StatutReservation] = frozenset(
    {StatutReservation.PENDING, StatutReservation.CONFIRMED}
)


class TypeReservation(str, enum.Enum):
    SUR_PLACE = "SUR_PLACE"
    LIVRAISON = "LIVRAISON"
