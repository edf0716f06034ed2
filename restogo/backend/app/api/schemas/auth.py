from __future__ import annotations

from pydantic import EmailStr, Field

from app.api.schemas.commun import SchemaApi, UserResume
from app.domaine.enums.types import Role


class RequeteLogin(SchemaApi):
    email: EmailStr
    password: str = Field(min_length=1)


class RequeteInscription(SchemaApi):
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    name: str | None = Field(default=None, max_length=200)


class UserLecture(UserResume):
    role: Role


class ReponseAuth(SchemaApi):
    token: str
    role: Role
    user: UserLecture
