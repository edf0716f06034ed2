from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependances import fournir_session
from app.api.dependances_auth import fournir_identite, fournir_identite_optionnelle
from app.api.schemas.commandes import (
    CommandeLecture,
    LigneCommandeLecture,
    PlatResume,
    RequeteCommande,
    RequeteStatut,
)
from app.api.schemas.commun import UserResume
from app.domaine.identite import Identite
from app.domaine.modeles.commande import Commande
from app.domaine.services.commandes import LigneDemandee, ServiceCommande


routeur_commandes = APIRouter(prefix="/api/orders", tags=["commandes"])


def vers_commande_lecture(commande: Commande) -> CommandeLecture:
    """Projection dénormalisée (plats + client), calculée à la lecture."""

    return CommandeLecture(
        id=commande.id,
        user_id=commande.user_id,
        status=commande.statut,
        total=float(commande.total),
        address=commande.adresse,
        phone=commande.telephone,
        notes=commande.notes,
        created_at=commande.cree_le,
        items=[
            LigneCommandeLecture(
                id=l.id,
                dish_id=l.plat_id,
                qty=l.quantite,
                dish=PlatResume(id=l.plat.id, name=l.plat.nom, price=float(l.plat.prix)) if l.plat else None,
            )
            for l in commande.lignes
        ],
        user=(
            UserResume(id=commande.user.id, email=commande.user.email, name=commande.user.nom_affiche)
            if commande.user is not None
            else None
        ),
    )


@routeur_commandes.get("", response_model=list[CommandeLecture])
async def lister_commandes(
    status_filtre: str | None = Query(default=None, alias="status"),
    identite: Identite = Depends(fournir_identite),
    session: AsyncSession = Depends(fournir_session),
) -> list[CommandeLecture]:
    """Liste selon le rôle : CLIENT ses commandes, LIVREUR ACCEPTED/EN_COURS, ADMIN tout."""

    commandes = await ServiceCommande(session).lister(acteur=identite, statut=status_filtre)
    return [vers_commande_lecture(c) for c in commandes]


@routeur_commandes.get("/{commande_id}", response_model=CommandeLecture)
async def obtenir_commande(
    commande_id: int,
    identite: Identite = Depends(fournir_identite),
    session: AsyncSession = Depends(fournir_session),
) -> CommandeLecture:
    commande = await ServiceCommande(session).obtenir(commande_id=commande_id, acteur=identite)
    return vers_commande_lecture(commande)


@routeur_commandes.post("", response_model=CommandeLecture, status_code=status.HTTP_201_CREATED)
async def creer_commande(
    requete: RequeteCommande,
    identite: Identite | None = Depends(fournir_identite_optionnelle),
    session: AsyncSession = Depends(fournir_session),
) -> CommandeLecture:
    """Passe une commande (statut PENDING, total figé)."""

    commande = await ServiceCommande(session).creer(
        lignes=[LigneDemandee(plat_id=i.dish_id, quantite=i.qty) for i in requete.items],
        acteur=identite,
        adresse=requete.address,
        telephone=requete.phone,
        notes=requete.notes,
        pour_user_id=requete.user_id,
    )
    return vers_commande_lecture(commande)


@routeur_commandes.put("/{commande_id}/status", response_model=CommandeLecture)
async def changer_statut_commande(
    commande_id: int,
    requete: RequeteStatut,
    identite: Identite = Depends(fournir_identite),
    session: AsyncSession = Depends(fournir_session),
) -> CommandeLecture:
    commande = await ServiceCommande(session).changer_statut(
        commande_id=commande_id,
        nouveau_statut=requete.status,
        acteur=identite,
    )
    return vers_commande_lecture(commande)
