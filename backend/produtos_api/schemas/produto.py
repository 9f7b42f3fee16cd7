from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

SortField = Literal["name", "price", "rating", "createdAt", "category"]
SortOrder = Literal["asc", "desc"]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True


class ProdutoCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    available: bool = True
    preparation_time: int = Field(0, ge=0)
    ingredients: str | None = None
    allergens: str | None = None
    calories: int = Field(0, ge=0)
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    store_id: str | None = Field(None, max_length=100)


class ProdutoUpdate(CamelModel):
    """Partial update. Only fields that were explicitly set are applied."""
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    category: str | None = Field(None, min_length=1, max_length=100)
    available: bool | None = None
    preparation_time: int | None = Field(None, ge=0)
    ingredients: str | None = None
    allergens: str | None = None
    calories: int | None = Field(None, ge=0)
    rating: float | None = Field(None, ge=0, le=5)
    review_count: int | None = Field(None, ge=0)
    store_id: str | None = Field(None, max_length=100)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Produto(CamelModel):
    id: int
    name: str
    description: str
    slug: str
    image_path: str | None = None
    price: float
    category: str
    available: bool
    preparation_time: int
    ingredients: str | None = None
    allergens: str | None = None
    calories: int
    rating: float
    review_count: int
    store_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ProdutoList(BaseModel):
    produtos: list[Produto]
    total: int
    pages: int


class ProdutoFilter(CamelModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)
    category: str | None = None
    store_id: str | None = None
    available: bool | None = None
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"

    @field_validator("category")
    @classmethod
    def lowercase_category(cls, v: str | None) -> str | None:
        return v.lower() if v else v

    @field_validator("available", mode="before")
    @classmethod
    def parse_available(cls, v):
        # Query strings arrive as text; only "true"/"false" are accepted
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, str) and v.strip().lower() in ("true", "false"):
            return v.strip().lower() == "true"
        raise ValueError("available must be 'true' or 'false'")
