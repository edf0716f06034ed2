from __future__ import annotations

"""Jour calendaire (UTC) : unité de détection des conflits de réservation.

Le jour est calculé une seule fois, ici, à partir de l’instant reçu.
Un instant sans fuseau est interprété comme UTC.
"""

from datetime import date, datetime, timezone

from app.core.erreurs import ErreurValidation


def en_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def jour_calendaire(instant: datetime) -> date:
    return en_utc(instant).date()


def aujourd_hui_utc() -> date:
    return datetime.now(tz=timezone.utc).date()


def jour_depuis_parametre(valeur: str | None) -> date:
    """Interprète `?date=` : `YYYY-MM-DD` ou un instant ISO 8601.

    Absent -> aujourd’hui (UTC).
    """

    if valeur is None or not valeur.strip():
        return aujourd_hui_utc()

    texte = valeur.strip()
    try:
        return date.fromisoformat(texte)
    except ValueError:
        pass

    try:
        # "Z" n’est accepté par fromisoformat qu’à partir de Python 3.11.
        return jour_calendaire(datetime.fromisoformat(texte.replace("Z", "+00:00")))
    except ValueError as e:
        raise ErreurValidation("Date invalide.", details={"date": valeur}) from e
