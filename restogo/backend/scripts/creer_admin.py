"""Crée (ou promeut) un compte ADMIN ou LIVREUR.

L'inscription publique ne crée que des CLIENT : les comptes du personnel
passent par ce script.

Usage:
    python -m scripts.creer_admin --email admin@restogo.fr --mot-de-passe 'ChangeMe123!'
    python -m scripts.creer_admin --email livreur@restogo.fr --mot-de-passe '...' --role LIVREUR --nom "Karim"
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from sqlalchemy import select

from app.core.base_donnees import obtenir_fabrique_session
from app.core.securite import hasher_mot_de_passe
from app.domaine.enums.types import Role
from app.domaine.modeles.auth import User


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Crée un compte du personnel (ADMIN ou LIVREUR)")
    p.add_argument("--email", required=True)
    p.add_argument("--mot-de-passe", required=True, dest="mot_de_passe")
    p.add_argument("--nom", default=None, help="Nom affiché (défaut: partie locale de l'email)")
    p.add_argument(
        "--role",
        default=Role.ADMIN.value,
        choices=[Role.ADMIN.value, Role.LIVREUR.value],
    )
    return p


async def creer_compte(*, email: str, mot_de_passe: str, nom: str | None, role: Role) -> tuple[User, bool]:
    """Retourne (user, cree). Un compte existant est réactivé et reçoit le rôle demandé."""

    email = email.strip().lower()
    fabrique = obtenir_fabrique_session()

    async with fabrique() as session:
        res = await session.execute(select(User).where(User.email == email))
        user = res.scalar_one_or_none()
        cree = user is None

        if user is None:
            user = User(
                email=email,
                nom_affiche=nom or email.split("@", 1)[0],
                mot_de_passe_hash=hasher_mot_de_passe(mot_de_passe),
                role=role,
                actif=True,
            )
            session.add(user)
        else:
            user.role = role
            user.actif = True
            user.mot_de_passe_hash = hasher_mot_de_passe(mot_de_passe)
            if nom:
                user.nom_affiche = nom

        await session.commit()
        return user, cree


async def main() -> int:
    args = _parser().parse_args()

    if len(args.mot_de_passe) < 6:
        print("[creer_admin][ERROR] Le mot de passe doit contenir au moins 6 caractères", file=sys.stderr)
        return 2

    user, cree = await creer_compte(
        email=args.email,
        mot_de_passe=args.mot_de_passe,
        nom=args.nom,
        role=Role(args.role),
    )
    action = "créé" if cree else "mis à jour"
    print(f"[creer_admin][OK] {user.role.value} {user.email} {action} (id={user.id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
