from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependances import fournir_session
from app.api.dependances_auth import fournir_identite
from app.api.schemas.auth import ReponseAuth, RequeteInscription, RequeteLogin, UserLecture
from app.core.configuration import parametres_application
from app.core.erreurs import NonAuthentifie
from app.core.securite import creer_token_acces, hasher_mot_de_passe, verifier_mot_de_passe
from app.core.transactions import executer_transaction
from app.domaine.enums.types import Role
from app.domaine.identite import Identite
from app.domaine.modeles.auth import User


logger = logging.getLogger(__name__)

routeur_auth = APIRouter(prefix="/api/auth", tags=["auth"])


def _reponse_auth(user: User) -> ReponseAuth:
    token = creer_token_acces(
        secret=parametres_application.jwt_secret,
        sujet=str(user.id),
        duree_minutes=parametres_application.jwt_duree_minutes,
        role=user.role.value,
        email=user.email,
    )
    return ReponseAuth(
        token=token,
        role=user.role,
        user=UserLecture(id=user.id, email=user.email, name=user.nom_affiche, role=user.role),
    )


@routeur_auth.post("/login", response_model=ReponseAuth)
async def login(requete: RequeteLogin, session: AsyncSession = Depends(fournir_session)) -> ReponseAuth:
    res = await session.execute(select(User).where(User.email == requete.email.lower()))
    user = res.scalar_one_or_none()
    if user is None or not user.actif:
        raise NonAuthentifie("Email ou mot de passe incorrect.")

    if not verifier_mot_de_passe(requete.password, user.mot_de_passe_hash):
        logger.info("auth_login_refuse user_id=%s", user.id)
        raise NonAuthentifie("Email ou mot de passe incorrect.")

    user.dernier_login_le = datetime.now(tz=timezone.utc)
    await session.commit()

    return _reponse_auth(user)


@routeur_auth.post("/register", response_model=ReponseAuth, status_code=status.HTTP_201_CREATED)
async def register(
    requete: RequeteInscription,
    session: AsyncSession = Depends(fournir_session),
) -> ReponseAuth:
    email = requete.email.lower()
    nom = (requete.name or "").strip() or email.split("@")[0]

    async def _ecrire() -> User:
        user = User(
            email=email,
            nom_affiche=nom,
            mot_de_passe_hash=hasher_mot_de_passe(requete.password),
            role=Role.CLIENT,
            actif=True,
        )
        session.add(user)
        await session.flush()
        return user

    # L’unicité de l’email est garantie par la base : IntegrityError -> 409.
    user = await executer_transaction(session, action=_ecrire, message_conflit="Cet email est déjà utilisé.")
    logger.info("auth_inscription user_id=%s", user.id)

    return _reponse_auth(user)


@routeur_auth.get("/me", response_model=UserLecture)
async def me(identite: Identite = Depends(fournir_identite)) -> UserLecture:
    return UserLecture(
        id=identite.user_id,
        email=identite.email,
        name=identite.nom or identite.email,
        role=identite.role,
    )
