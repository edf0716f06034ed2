"""schema initial : utilisateurs, catalogue, commandes, tables, reservations

Revision ID: 0001_schema_initial
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision = "0001_schema_initial"
down_revision = None
branch_labels = None
depends_on = None


FILTRE_RESERVATION_ACTIVE = "statut IN ('PENDING', 'CONFIRMED')"


def _colonnes_horodatage() -> list[sa.Column]:
    return [
        sa.Column("cree_le", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("mis_a_jour_le", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("nom_affiche", sa.String(length=200), nullable=False),
        sa.Column("mot_de_passe_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="CLIENT"),
        sa.Column("actif", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("dernier_login_le", sa.DateTime(timezone=True), nullable=True),
        *_colonnes_horodatage(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "categorie",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nom", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("icone", sa.String(length=100), nullable=True),
        *_colonnes_horodatage(),
    )

    op.create_table(
        "plat",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nom", sa.String(length=100), nullable=False),
        sa.Column("prix", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("photo", sa.String(length=500), nullable=True),
        sa.Column("categorie_id", sa.Integer(), sa.ForeignKey("categorie.id"), nullable=True),
        sa.Column("disponible", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_colonnes_horodatage(),
    )
    op.create_index("ix_plat_categorie", "plat", ["categorie_id"])

    op.create_table(
        "commande",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("statut", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("adresse", sa.String(length=500), nullable=True),
        sa.Column("telephone", sa.String(length=50), nullable=True),
        sa.Column("notes", sa.String(length=1000), nullable=True),
        *_colonnes_horodatage(),
    )
    op.create_index("ix_commande_cree_le", "commande", ["cree_le"])
    op.create_index("ix_commande_user", "commande", ["user_id"])

    op.create_table(
        "ligne_commande",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("commande_id", sa.Integer(), sa.ForeignKey("commande.id"), nullable=False),
        sa.Column("plat_id", sa.Integer(), sa.ForeignKey("plat.id"), nullable=False),
        sa.Column("quantite", sa.Integer(), nullable=False),
        *_colonnes_horodatage(),
        sa.CheckConstraint("quantite > 0", name="ck_ligne_commande_quantite_positive"),
    )
    op.create_index("ix_ligne_commande_commande", "ligne_commande", ["commande_id"])
    op.create_index("ix_ligne_commande_plat", "ligne_commande", ["plat_id"])

    op.create_table(
        "table_restaurant",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nom", sa.String(length=100), nullable=False, unique=True),
        sa.Column("places", sa.Integer(), nullable=False),
        sa.Column("disponible", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_colonnes_horodatage(),
        sa.CheckConstraint("places BETWEEN 1 AND 20", name="ck_table_restaurant_places"),
    )

    op.create_table(
        "reservation",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("date_reservation", sa.DateTime(timezone=True), nullable=False),
        sa.Column("jour", sa.Date(), nullable=False),
        sa.Column("type_reservation", sa.String(length=20), nullable=False),
        sa.Column("table_id", sa.Integer(), sa.ForeignKey("table_restaurant.id"), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("convives", sa.Integer(), nullable=True),
        sa.Column("statut", sa.String(length=20), nullable=False, server_default="PENDING"),
        *_colonnes_horodatage(),
    )
    op.create_index("ix_reservation_jour", "reservation", ["jour"])
    op.create_index("ix_reservation_user", "reservation", ["user_id"])

    # Une seule réservation active (PENDING/CONFIRMED) par table et par jour.
    op.create_index(
        "uq_reservation_table_jour_active",
        "reservation",
        ["table_id", "jour"],
        unique=True,
        postgresql_where=sa.text(FILTRE_RESERVATION_ACTIVE),
        sqlite_where=sa.text(FILTRE_RESERVATION_ACTIVE),
    )


def downgrade() -> None:
    op.drop_index("uq_reservation_table_jour_active", table_name="reservation")
    op.drop_index("ix_reservation_user", table_name="reservation")
    op.drop_index("ix_reservation_jour", table_name="reservation")
    op.drop_table("reservation")
    op.drop_table("table_restaurant")
    op.drop_index("ix_ligne_commande_plat", table_name="ligne_commande")
    op.drop_index("ix_ligne_commande_commande", table_name="ligne_commande")
    op.drop_table("ligne_commande")
    op.drop_index("ix_commande_user", table_name="commande")
    op.drop_index("ix_commande_cree_le", table_name="commande")
    op.drop_table("commande")
    op.drop_index("ix_plat_categorie", table_name="plat")
    op.drop_table("plat")
    op.drop_table("categorie")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
