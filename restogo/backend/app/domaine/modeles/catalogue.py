from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domaine.modeles.base import ModeleHorodate


class Categorie(ModeleHorodate):
    __tablename__ = "categorie"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nom: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    icone: Mapped[str | None] = mapped_column(String(100), nullable=True)

    plats: Mapped[list["Plat"]] = relationship("Plat", back_populates="categorie")


class Plat(ModeleHorodate):
    """Plat de la carte.

    `disponible` n’est vérifié qu’à la création d’une commande : le passer à
    False n’invalide pas les commandes déjà passées.
    """

    __tablename__ = "plat"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nom: Mapped[str] = mapped_column(String(100), nullable=False)
    prix: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    photo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    categorie_id: Mapped[int | None] = mapped_column(ForeignKey("categorie.id"), nullable=True)

    disponible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    categorie: Mapped[Categorie | None] = relationship("Categorie", back_populates="plats")


Index("ix_plat_categorie", Plat.categorie_id)
