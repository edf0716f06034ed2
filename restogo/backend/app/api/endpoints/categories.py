from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.dependances import fournir_session
from app.api.dependances_auth import verifier_roles_requis
from app.api.endpoints.plats import vers_plat_lecture
from app.api.schemas.catalogue import CategorieCreation, CategorieDetail, CategorieLecture, CategorieMiseAJour
from app.api.schemas.commun import ReponseMessage
from app.core.erreurs import Introuvable
from app.core.transactions import executer_transaction
from app.domaine.enums.types import Role
from app.domaine.modeles.catalogue import Categorie, Plat
from app.domaine.services.catalogue import ServiceCatalogue


routeur_categories = APIRouter(prefix="/api/categories", tags=["categories"])

_admin = verifier_roles_requis(Role.ADMIN)

MESSAGE_NOM_DEJA_UTILISE = "Conflit - une catégorie porte déjà ce nom."


def vers_categorie_lecture(categorie: Categorie, nb_plats: int = 0) -> CategorieLecture:
    return CategorieLecture(
        id=categorie.id,
        name=categorie.nom,
        description=categorie.description,
        icon=categorie.icone,
        dish_count=nb_plats,
    )


async def _charger_categorie(session: AsyncSession, categorie_id: int) -> Categorie:
    categorie = await session.get(Categorie, categorie_id)
    if categorie is None:
        raise Introuvable("Catégorie non trouvée.")
    return categorie


@routeur_categories.get("", response_model=list[CategorieLecture])
async def lister_categories(session: AsyncSession = Depends(fournir_session)) -> list[CategorieLecture]:
    res = await session.execute(
        select(Categorie, func.count(Plat.id))
        .outerjoin(Plat, Plat.categorie_id == Categorie.id)
        .group_by(Categorie.id)
        .order_by(Categorie.nom.asc())
    )
    return [vers_categorie_lecture(c, n) for c, n in res.all()]


@routeur_categories.get("/{categorie_id}", response_model=CategorieDetail)
async def obtenir_categorie(categorie_id: int, session: AsyncSession = Depends(fournir_session)) -> CategorieDetail:
    res = await session.execute(
        select(Categorie)
        .where(Categorie.id == categorie_id)
        .options(selectinload(Categorie.plats).selectinload(Plat.categorie))
    )
    categorie = res.scalar_one_or_none()
    if categorie is None:
        raise Introuvable("Catégorie non trouvée.")

    plats = sorted(categorie.plats, key=lambda p: p.nom)
    return CategorieDetail(
        **vers_categorie_lecture(categorie, len(plats)).model_dump(),
        dishes=[vers_plat_lecture(p) for p in plats],
    )


@routeur_categories.post(
    "",
    response_model=CategorieLecture,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_admin)],
)
async def creer_categorie(body: CategorieCreation, session: AsyncSession = Depends(fournir_session)) -> CategorieLecture:
    async def _ecrire() -> Categorie:
        categorie = Categorie(
            nom=body.name.strip(),
            description=(body.description or "").strip() or None,
            icone=body.icon or None,
        )
        session.add(categorie)
        await session.flush()
        return categorie

    categorie = await executer_transaction(session, action=_ecrire, message_conflit=MESSAGE_NOM_DEJA_UTILISE)
    return vers_categorie_lecture(categorie)


@routeur_categories.put("/{categorie_id}", response_model=CategorieLecture, dependencies=[Depends(_admin)])
async def modifier_categorie(
    categorie_id: int,
    body: CategorieMiseAJour,
    session: AsyncSession = Depends(fournir_session),
) -> CategorieLecture:
    categorie = await _charger_categorie(session, categorie_id)
    champs = body.model_fields_set

    async def _ecrire() -> None:
        if body.name is not None:
            categorie.nom = body.name.strip()
        if "description" in champs:
            categorie.description = body.description
        if "icon" in champs:
            categorie.icone = body.icon
        await session.flush()

    await executer_transaction(session, action=_ecrire, message_conflit=MESSAGE_NOM_DEJA_UTILISE)

    nb_plats = (await session.execute(select(func.count(Plat.id)).where(Plat.categorie_id == categorie_id))).scalar_one()
    return vers_categorie_lecture(categorie, nb_plats)


@routeur_categories.delete("/{categorie_id}", response_model=ReponseMessage, dependencies=[Depends(_admin)])
async def supprimer_categorie(categorie_id: int, session: AsyncSession = Depends(fournir_session)) -> ReponseMessage:
    await ServiceCatalogue(session).supprimer_categorie(categorie_id=categorie_id)
    return ReponseMessage(message="Catégorie supprimée avec succès.")
