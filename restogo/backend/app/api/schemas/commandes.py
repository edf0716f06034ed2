from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.api.schemas.commun import SchemaApi, UserResume
from app.domaine.enums.types import StatutCommande


class LigneCommandeRequete(SchemaApi):
    """Ligne envoyée par le client."""

    dish_id: int
    qty: int = Field(gt=0)


class RequeteCommande(SchemaApi):
    """Payload de création de commande."""

    items: list[LigneCommandeRequete] = Field(min_length=1)
    address: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=1000)
    # Commande pour le compte d’un client (ADMIN uniquement).
    user_id: int | None = None


class RequeteStatut(SchemaApi):
    # Chaîne libre : la validation (et le 400 "Statut invalide") est faite par le service.
    status: str


class PlatResume(SchemaApi):
    id: int
    name: str
    price: float


class LigneCommandeLecture(SchemaApi):
    id: int
    dish_id: int
    qty: int
    dish: PlatResume | None = None


class CommandeLecture(SchemaApi):
    id: int
    user_id: int | None
    status: StatutCommande
    total: float
    address: str | None = None
    phone: str | None = None
    notes: str | None = None
    created_at: datetime
    items: list[LigneCommandeLecture]
    user: UserResume | None = None
