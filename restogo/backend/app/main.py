from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from app.api.middleware_journalisation import MiddlewareJournalisation
from app.api.routeur import router
from app.api.sante import routeur_sante
from app.core.configuration import parametres_application
from app.core.erreurs import Conflit, ErreurMetier
from app.core.logging_config import configurer_logging


logger = logging.getLogger(__name__)


def _corps_erreur(message: str, code: str, details: object | None = None) -> dict:
    corps: dict = {"erreur": message, "code": code}
    if details is not None:
        corps["details"] = details
    return corps


async def _gerer_erreur_metier(request: Request, exc: ErreurMetier) -> JSONResponse:
    niveau = logging.WARNING if exc.statut_http >= 500 else logging.INFO
    logger.log(niveau, "erreur_metier code=%s chemin=%s message=%s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.statut_http, content=_corps_erreur(exc.message, exc.code, exc.details))


async def _gerer_erreur_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"champ": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(_corps_erreur("Erreur de validation.", "VALIDATION", details)),
    )


async def _gerer_erreur_integrite(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.info("erreur_integrite chemin=%s erreur=%s", request.url.path, exc.orig)
    return JSONResponse(
        status_code=Conflit.statut_http,
        content=_corps_erreur("Conflit - cette ressource existe déjà.", Conflit.code),
    )


async def _gerer_erreur_inattendue(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("erreur_interne chemin=%s", request.url.path)
    corps = _corps_erreur("Erreur serveur interne.", "ERREUR_INTERNE")
    if parametres_application.mode_developpement:
        corps["trace"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=corps)


def creer_application() -> FastAPI:
    configurer_logging()

    application = FastAPI(title="RestoGo")

    application.add_exception_handler(ErreurMetier, _gerer_erreur_metier)
    application.add_exception_handler(RequestValidationError, _gerer_erreur_validation)
    application.add_exception_handler(IntegrityError, _gerer_erreur_integrite)
    application.add_exception_handler(Exception, _gerer_erreur_inattendue)

    # Journalisation des requêtes
    application.add_middleware(MiddlewareJournalisation)

    # Routes
    application.include_router(router)

    # Santé
    application.include_router(routeur_sante)

    return application


app = creer_application()
