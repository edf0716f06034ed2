from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependances import fournir_session

routeur_sante = APIRouter(tags=["sante"])


@routeur_sante.get("/health")
async def health() -> dict[str, str]:
    """Endpoint minimal pour valider que l’application démarre."""

    return {"statut": "ok"}


@routeur_sante.get("/health/db")
async def health_db(session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    """Vérifie que la base répond (un SELECT 1)."""

    await session.execute(text("SELECT 1"))
    return {"statut": "ok", "base_donnees": "ok"}
