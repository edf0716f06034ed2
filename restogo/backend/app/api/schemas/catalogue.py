from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from app.api.schemas.commun import SchemaApi


class CategorieCreation(SchemaApi):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    icon: str | None = Field(default=None, max_length=100)


class CategorieMiseAJour(SchemaApi):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    icon: str | None = Field(default=None, max_length=100)


class CategorieLecture(SchemaApi):
    id: int
    name: str
    description: str | None = None
    icon: str | None = None
    dish_count: int = 0


class PlatCreation(SchemaApi):
    name: str = Field(..., min_length=2, max_length=100)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    description: str | None = Field(default=None, max_length=1000)
    photo: str | None = Field(default=None, max_length=500)
    category_id: int | None = None
    available: bool = True


class PlatMiseAJour(SchemaApi):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: str | None = Field(default=None, max_length=1000)
    photo: str | None = Field(default=None, max_length=500)
    category_id: int | None = None
    available: bool | None = None


class CategorieMini(SchemaApi):
    id: int
    name: str


class PlatLecture(SchemaApi):
    id: int
    name: str
    price: float
    description: str | None = None
    photo: str | None = None
    category_id: int | None = None
    available: bool
    created_at: datetime
    category: CategorieMini | None = None


class CategorieDetail(CategorieLecture):
    dishes: list[PlatLecture] = Field(default_factory=list)
