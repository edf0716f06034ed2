from __future__ import annotations

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependances import fournir_session
from app.core.configuration import parametres_application
from app.core.erreurs import Interdit, NonAuthentifie
from app.core.securite import TokenExpire, TokenInvalide, decoder_token_acces
from app.domaine.enums.types import Role
from app.domaine.identite import Identite
from app.domaine.modeles.auth import User


def extraire_bearer(authorization: str | None) -> str | None:
    if authorization is None:
        return None
    prefix = "bearer "
    if authorization.lower().startswith(prefix):
        return authorization[len(prefix) :].strip()
    return None


def identite_depuis_user(user: User) -> Identite:
    return Identite(user_id=user.id, role=user.role, email=user.email, nom=user.nom_affiche)


async def fournir_identite_optionnelle(
    session: AsyncSession = Depends(fournir_session),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Identite | None:
    """Identité de l’appelant, ou None sans header Authorization.

    Un header présent mais invalide est toujours refusé (401).
    """

    if authorization is None:
        return None

    token = extraire_bearer(authorization)
    if not token:
        raise NonAuthentifie("Token manquant.")

    try:
        payload = decoder_token_acces(token, secret=parametres_application.jwt_secret)
    except TokenExpire as e:
        raise NonAuthentifie("Token expiré.") from e
    except TokenInvalide as e:
        raise NonAuthentifie("Token invalide.") from e

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError) as e:
        raise NonAuthentifie("Token invalide (sub).") from e

    res = await session.execute(select(User).where(User.id == user_id))
    user = res.scalar_one_or_none()
    if user is None or not user.actif:
        raise NonAuthentifie("Utilisateur inactif.")

    return identite_depuis_user(user)


async def fournir_identite(
    identite: Identite | None = Depends(fournir_identite_optionnelle),
) -> Identite:
    """Exige un appelant authentifié."""

    if identite is None:
        raise NonAuthentifie("Unauthorized - Token manquant.")
    return identite


def verifier_roles_requis(*roles_requis: Role):
    async def _dep(identite: Identite = Depends(fournir_identite)) -> Identite:
        if identite.role not in roles_requis:
            raise Interdit(
                "Forbidden - Permissions insuffisantes.",
                details={"requis": [r.value for r in roles_requis], "actuel": identite.role.value},
            )
        return identite

    return _dep
