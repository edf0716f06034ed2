from __future__ import annotations

from decimal import Decimal

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domaine.enums.types import StatutCommande
from app.domaine.modeles.auth import User
from app.domaine.modeles.base import ModeleHorodate
from app.domaine.modeles.catalogue import Plat


class Commande(ModeleHorodate):
    """Commande client.

    IMPORTANT :
    - `total` est calculé une seule fois à la création, puis figé.
    - `statut` n’est modifié que par `ServiceCommande.changer_statut`.
    """

    __tablename__ = "commande"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id"), nullable=True)

    statut: Mapped[StatutCommande] = mapped_column(
        Enum(StatutCommande, name="statut_commande", native_enum=False, length=20),
        nullable=False,
        default=StatutCommande.PENDING,
    )

    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    adresse: Mapped[str | None] = mapped_column(String(500), nullable=True)
    telephone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    lignes: Mapped[list["LigneCommande"]] = relationship(
        "LigneCommande",
        back_populates="commande",
        cascade="all, delete-orphan",
        order_by="LigneCommande.id",
    )
    user: Mapped[User | None] = relationship("User")


class LigneCommande(ModeleHorodate):
    """Ligne de commande : un plat et une quantité (immuable)."""

    __tablename__ = "ligne_commande"
    __table_args__ = (CheckConstraint("quantite > 0", name="ck_ligne_commande_quantite_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    commande_id: Mapped[int] = mapped_column(ForeignKey("commande.id"), nullable=False)
    plat_id: Mapped[int] = mapped_column(ForeignKey("plat.id"), nullable=False)
    quantite: Mapped[int] = mapped_column(nullable=False)

    commande: Mapped[Commande] = relationship("Commande", back_populates="lignes")
    plat: Mapped[Plat] = relationship("Plat")


Index("ix_commande_cree_le", Commande.cree_le)
Index("ix_commande_user", Commande.user_id)
Index("ix_ligne_commande_commande", LigneCommande.commande_id)
Index("ix_ligne_commande_plat", LigneCommande.plat_id)
