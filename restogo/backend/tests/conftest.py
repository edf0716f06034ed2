from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.api.dependances import fournir_session
from app.domaine.modeles import BaseModele  # importe aussi tous les modèles
from app.main import creer_application


@pytest_asyncio.fixture
async def moteur_test(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Moteur de base de données pour les tests.

    Un fichier SQLite par test : schéma propre, et la session du test et celles
    de l’API utilisent des connexions distinctes (comme en production).
    Scope function : un moteur async ne doit jamais être partagé entre plusieurs event loops.
    """

    moteur = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'restogo_test.db'}")

    async with moteur.begin() as connexion:
        await connexion.run_sync(BaseModele.metadata.create_all)

    try:
        yield moteur
    finally:
        await moteur.dispose()


@pytest_asyncio.fixture
async def session_test(moteur_test: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Session SQLAlchemy async isolée par test."""

    fabrique = async_sessionmaker(
        bind=moteur_test,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with fabrique() as session:
        try:
            yield session
        finally:
            # Sécurité : rollback si le test a oublié de commit
            await session.rollback()


@pytest_asyncio.fixture
async def client_api(moteur_test: AsyncEngine) -> AsyncIterator[httpx.AsyncClient]:
    """Client HTTP branché sur l’application, `fournir_session` pointant sur la base de test.

    IMPORTANT : commit les données de seed avant d’appeler l’API (SQLite verrouille
    la base tant qu’une écriture est en cours dans la session du test).
    """

    app = creer_application()
    fabrique = async_sessionmaker(bind=moteur_test, class_=AsyncSession, expire_on_commit=False)

    async def _fournir_session_override() -> AsyncIterator[AsyncSession]:
        async with fabrique() as s:
            yield s

    app.dependency_overrides[fournir_session] = _fournir_session_override

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
