from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.api.dependances_auth import extraire_bearer
from app.core.configuration import parametres_application
from app.core.securite import TokenExpire, TokenInvalide, decoder_token_acces


logger = logging.getLogger(__name__)


class MiddlewareJournalisation(BaseHTTPMiddleware):
    """Journalise chaque requête (hors /health) : méthode, chemin, statut, durée, utilisateur.

    Ajoute un header `X-Request-ID` à la réponse.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        debut = time.perf_counter()
        statut: int | None = None
        try:
            response = await call_next(request)
            statut = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            duree_ms = (time.perf_counter() - debut) * 1000
            niveau = logging.WARNING if statut is None or statut >= 500 else logging.INFO
            logger.log(
                niveau,
                "http_requete request_id=%s methode=%s chemin=%s statut=%s duree_ms=%.1f user_id=%s",
                request_id,
                request.method,
                request.url.path,
                statut,
                duree_ms,
                self._user_id(request),
            )

    @staticmethod
    def _user_id(request: Request) -> str | None:
        token = extraire_bearer(request.headers.get("authorization"))
        if not token:
            return None
        try:
            payload = decoder_token_acces(token, secret=parametres_application.jwt_secret)
        except (TokenExpire, TokenInvalide):
            return None
        return payload.get("sub")
