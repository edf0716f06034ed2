from __future__ import annotations

from dataclasses import dataclass

from app.domaine.enums.types import Role


@dataclass(frozen=True)
class Identite:
    """Appelant authentifié, résolu à partir du token.

    Un appelant anonyme est représenté par `None` côté services.
    """

    user_id: int
    role: Role
    email: str
    nom: str | None = None

    @property
    def est_admin(self) -> bool:
        return self.role is Role.ADMIN

    def possede(self, user_id: int | None) -> bool:
        return user_id is not None and user_id == self.user_id
