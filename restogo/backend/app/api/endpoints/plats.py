from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.dependances import fournir_session
from app.api.dependances_auth import verifier_roles_requis
from app.api.schemas.catalogue import CategorieMini, PlatCreation, PlatLecture, PlatMiseAJour
from app.api.schemas.commun import ReponseMessage
from app.core.erreurs import Introuvable
from app.core.transactions import executer_transaction
from app.domaine.enums.types import Role
from app.domaine.modeles.catalogue import Categorie, Plat
from app.domaine.services.catalogue import ServiceCatalogue


routeur_plats = APIRouter(prefix="/api/dishes", tags=["plats"])

_admin = verifier_roles_requis(Role.ADMIN)


def vers_plat_lecture(plat: Plat) -> PlatLecture:
    categorie = plat.categorie
    return PlatLecture(
        id=plat.id,
        name=plat.nom,
        price=float(plat.prix),
        description=plat.description,
        photo=plat.photo,
        category_id=plat.categorie_id,
        available=plat.disponible,
        created_at=plat.cree_le,
        category=CategorieMini(id=categorie.id, name=categorie.nom) if categorie is not None else None,
    )


async def _charger_plat(session: AsyncSession, plat_id: int) -> Plat:
    res = await session.execute(
        select(Plat)
        .where(Plat.id == plat_id)
        .options(selectinload(Plat.categorie))
        .execution_options(populate_existing=True)
    )
    plat = res.scalar_one_or_none()
    if plat is None:
        raise Introuvable("Plat non trouvé.")
    return plat


async def _verifier_categorie(session: AsyncSession, categorie_id: int | None) -> None:
    if categorie_id is not None and await session.get(Categorie, categorie_id) is None:
        raise Introuvable("Catégorie non trouvée.")


@routeur_plats.get("", response_model=list[PlatLecture])
async def lister_plats(
    category_id: int | None = Query(default=None, alias="categoryId"),
    available: bool | None = Query(default=None),
    session: AsyncSession = Depends(fournir_session),
) -> list[PlatLecture]:
    stmt = select(Plat).options(selectinload(Plat.categorie)).order_by(Plat.cree_le.desc(), Plat.id.desc())
    if category_id is not None:
        stmt = stmt.where(Plat.categorie_id == category_id)
    if available is not None:
        stmt = stmt.where(Plat.disponible == available)

    res = await session.execute(stmt)
    return [vers_plat_lecture(p) for p in res.scalars().all()]


@routeur_plats.get("/{plat_id}", response_model=PlatLecture)
async def obtenir_plat(plat_id: int, session: AsyncSession = Depends(fournir_session)) -> PlatLecture:
    return vers_plat_lecture(await _charger_plat(session, plat_id))


@routeur_plats.post(
    "",
    response_model=PlatLecture,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_admin)],
)
async def creer_plat(body: PlatCreation, session: AsyncSession = Depends(fournir_session)) -> PlatLecture:
    await _verifier_categorie(session, body.category_id)

    async def _ecrire() -> int:
        plat = Plat(
            nom=body.name.strip(),
            prix=body.price,
            description=body.description,
            photo=body.photo,
            categorie_id=body.category_id,
            disponible=body.available,
        )
        session.add(plat)
        await session.flush()
        return plat.id

    plat_id = await executer_transaction(session, action=_ecrire)
    return vers_plat_lecture(await _charger_plat(session, plat_id))


@routeur_plats.put("/{plat_id}", response_model=PlatLecture, dependencies=[Depends(_admin)])
async def modifier_plat(
    plat_id: int,
    body: PlatMiseAJour,
    session: AsyncSession = Depends(fournir_session),
) -> PlatLecture:
    plat = await _charger_plat(session, plat_id)
    champs = body.model_fields_set
    if "category_id" in champs:
        await _verifier_categorie(session, body.category_id)

    async def _ecrire() -> None:
        if body.name is not None:
            plat.nom = body.name.strip()
        if body.price is not None:
            plat.prix = body.price
        if "description" in champs:
            plat.description = body.description
        if "photo" in champs:
            plat.photo = body.photo
        if "category_id" in champs:
            plat.categorie_id = body.category_id
        if body.available is not None:
            plat.disponible = body.available
        await session.flush()

    await executer_transaction(session, action=_ecrire)
    return vers_plat_lecture(await _charger_plat(session, plat_id))


@routeur_plats.delete("/{plat_id}", response_model=ReponseMessage, dependencies=[Depends(_admin)])
async def supprimer_plat(plat_id: int, session: AsyncSession = Depends(fournir_session)) -> ReponseMessage:
    await ServiceCatalogue(session).supprimer_plat(plat_id=plat_id)
    return ReponseMessage(message="Plat supprimé avec succès.")
