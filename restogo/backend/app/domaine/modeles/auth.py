from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domaine.enums.types import Role
from app.domaine.modeles.base import ModeleHorodate


class User(ModeleHorodate):
    """Compte utilisateur.

    Le rôle est unique et fixé à la création (l’inscription crée toujours un CLIENT).
    """

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    nom_affiche: Mapped[str] = mapped_column(String(200), nullable=False)

    mot_de_passe_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role_utilisateur", native_enum=False, length=20),
        nullable=False,
        default=Role.CLIENT,
    )

    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    dernier_login_le: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
