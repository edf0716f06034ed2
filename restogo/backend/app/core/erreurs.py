from __future__ import annotations

"""Erreurs métier.

Les services lèvent ces exceptions ; la couche HTTP (voir `app.main`) les
traduit en code de statut + corps JSON `{"erreur", "code", "details"}`.
"""

from typing import Any


class ErreurMetier(Exception):
    """Erreur métier générique."""

    code = "ERREUR"
    statut_http = 400

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ErreurValidation(ErreurMetier):
    """Entrée manquante ou mal formée."""

    code = "VALIDATION"
    statut_http = 400


class PlatInvalide(ErreurValidation):
    """Un plat de la commande est introuvable ou indisponible."""

    code = "PLAT_INVALIDE"

    def __init__(self, message: str, *, plat_id: int) -> None:
        super().__init__(message, details={"dishId": plat_id})
        self.plat_id = plat_id


class StatutInvalide(ErreurValidation):
    code = "STATUT_INVALIDE"

    def __init__(self, message: str, *, statuts_valides: list[str]) -> None:
        super().__init__(message, details={"statutsValides": statuts_valides})


class CapaciteDepassee(ErreurValidation):
    code = "CAPACITE_DEPASSEE"


class TableIndisponible(ErreurValidation):
    code = "TABLE_INDISPONIBLE"


class NonAuthentifie(ErreurMetier):
    code = "NON_AUTHENTIFIE"
    statut_http = 401


class Interdit(ErreurMetier):
    code = "INTERDIT"
    statut_http = 403


class Introuvable(ErreurMetier):
    code = "INTROUVABLE"
    statut_http = 404


class Conflit(ErreurMetier):
    code = "CONFLIT"
    statut_http = 409
