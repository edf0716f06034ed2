from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependances import fournir_session
from app.api.dependances_auth import verifier_roles_requis
from app.api.schemas.statistiques import ComptesTables, ReponseStatistiques, VueGenerale
from app.domaine.enums.types import Role
from app.domaine.services.statistiques import ServiceStatistiques


routeur_statistiques = APIRouter(
    prefix="/api/stats",
    tags=["statistiques"],
    dependencies=[Depends(verifier_roles_requis(Role.ADMIN))],
)


@routeur_statistiques.get("", response_model=ReponseStatistiques)
async def statistiques(
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    session: AsyncSession = Depends(fournir_session),
) -> ReponseStatistiques:
    """Tableau de bord admin (lecture seule)."""

    stats = await ServiceStatistiques(session).calculer(debut=start_date, fin=end_date)

    return ReponseStatistiques(
        overview=VueGenerale(
            dishes=stats.nb_plats,
            reservations=stats.nb_reservations,
            orders=stats.nb_commandes,
            tables=ComptesTables(total=stats.nb_tables, available=stats.nb_tables_disponibles),
            revenue=float(stats.chiffre_affaires),
            recent_orders=stats.nb_commandes_recentes,
        ),
        orders_by_status=stats.commandes_par_statut,
        reservations_by_status=stats.reservations_par_statut,
    )
