from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext


_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenExpire(Exception):
    pass


class TokenInvalide(Exception):
    pass


def hasher_mot_de_passe(mot_de_passe: str) -> str:
    return _pwd_context.hash(mot_de_passe)


def verifier_mot_de_passe(mot_de_passe: str, mot_de_passe_hash: str) -> bool:
    try:
        return _pwd_context.verify(mot_de_passe, mot_de_passe_hash)
    except ValueError:
        # Hash illisible (compte importé, hash tronqué...) : refus simple.
        return False


def creer_token_acces(
    *,
    secret: str,
    sujet: str,
    duree_minutes: int,
    role: str,
    email: str,
) -> str:
    maintenant = datetime.now(tz=timezone.utc)
    expire_le = maintenant + timedelta(minutes=duree_minutes)

    payload = {
        "sub": sujet,
        "iat": int(maintenant.timestamp()),
        "exp": int(expire_le.timestamp()),
        "role": role,
        "email": email,
    }

    return jwt.encode(payload, secret, algorithm="HS256")


def decoder_token_acces(token: str, *, secret: str) -> dict:
    try:
        return jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as e:
        raise TokenExpire("Token expiré.") from e
    except jwt.InvalidTokenError as e:
        raise TokenInvalide("Token invalide.") from e
