from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.erreurs import Conflit


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def executer_transaction(
    session: AsyncSession,
    *,
    action: Callable[[], Awaitable[T]],
    message_conflit: str = "Conflit - cette ressource existe déjà.",
) -> T:
    """Exécute `action` puis commit ; rollback complet en cas d’erreur.

    Une violation de contrainte (unicité, index partiel...) remonte en
    `Conflit` : c’est la base qui tranche en dernier ressort.

    Utilisation typique dans un service:

        commande = await executer_transaction(session, action=lambda: self._ecrire(...))
    """

    try:
        resultat = await action()
        await session.commit()
        return resultat
    except IntegrityError as e:
        await session.rollback()
        logger.info("transaction_conflit erreur=%s", e.orig)
        raise Conflit(message_conflit) from e
    except BaseException:
        await session.rollback()
        raise
