from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Enum, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.domaine.enums.types import StatutReservation, TypeReservation
from app.domaine.modeles.auth import User
from app.domaine.modeles.base import ModeleHorodate


class TableRestaurant(ModeleHorodate):
    """Table physique.

    `disponible` est un interrupteur administratif, indépendant des réservations.
    L’occupation d’un jour donné est calculée à la lecture (voir
    `disponibilite_tables`), jamais stockée.
    """

    __tablename__ = "table_restaurant"
    __table_args__ = (CheckConstraint("places BETWEEN 1 AND 20", name="ck_table_restaurant_places"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nom: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    places: Mapped[int] = mapped_column(nullable=False)
    disponible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    reservations: Mapped[list["Reservation"]] = relationship("Reservation", back_populates="table")


class Reservation(ModeleHorodate):
    """Réservation (sur place ou livraison).

    `jour` = jour calendaire UTC de `date_reservation`, calculé une fois à la création.
    C’est la clé de conflit : une table n’a qu’une réservation active par jour.
    """

    __tablename__ = "reservation"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    date_reservation: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    jour: Mapped[date] = mapped_column(Date, nullable=False)

    type_reservation: Mapped[TypeReservation] = mapped_column(
        Enum(TypeReservation, name="type_reservation", native_enum=False, length=20),
        nullable=False,
    )

    table_id: Mapped[int | None] = mapped_column(ForeignKey("table_restaurant.id"), nullable=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id"), nullable=True)

    convives: Mapped[int | None] = mapped_column(nullable=True)

    statut: Mapped[StatutReservation] = mapped_column(
        Enum(StatutReservation, name="statut_reservation", native_enum=False, length=20),
        nullable=False,
        default=StatutReservation.PENDING,
    )

    table: Mapped[TableRestaurant | None] = relationship("TableRestaurant", back_populates="reservations")
    user: Mapped[User | None] = relationship("User")


_FILTRE_ACTIF = text("statut IN ('PENDING', 'CONFIRMED')")

# Ferme la course "deux créations simultanées passent le pré-contrôle".
Index(
    "uq_reservation_table_jour_active",
    Reservation.table_id,
    Reservation.jour,
    unique=True,
    postgresql_where=_FILTRE_ACTIF,
    sqlite_where=_FILTRE_ACTIF,
)
Index("ix_reservation_jour", Reservation.jour)
Index("ix_reservation_user", Reservation.user_id)
