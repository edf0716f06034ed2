from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SchemaApi(BaseModel):
    """Base des schémas exposés : JSON en camelCase (contrat de l’application mobile)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResume(SchemaApi):
    id: int
    email: str
    name: str


class ReponseMessage(SchemaApi):
    message: str
