from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Numeric, Float, Index, UniqueConstraint,
)
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
from produtos_api.database import Base


class Produto(Base):
    __tablename__ = "produtos"
    __table_args__ = (
        # Name (case-insensitive) and slug are unique per store
        UniqueConstraint("name_key", "scope_key", name="uq_produtos_name_scope"),
        UniqueConstraint("slug", "scope_key", name="uq_produtos_slug_scope"),
        Index("ix_produtos_category_available", "category", "available"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    name_key = Column(String(255), nullable=False)  # lower(name)
    description = Column(Text, nullable=False)
    slug = Column(String(255), nullable=False)
    image_path = Column(String(500))  # Public path under /static
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    preparation_time = Column(Integer, nullable=False, default=0)  # minutes
    ingredients = Column(Text)
    allergens = Column(Text)
    calories = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    store_id = Column(String(100), index=True)
    # NULLs never collide in unique constraints, so "no store" is stored as ""
    scope_key = Column(String(100), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @validates("name")
    def _set_name_key(self, key, value):
        self.name_key = value.lower() if value is not None else None
        return value

    @validates("store_id")
    def _set_scope_key(self, key, value):
        self.scope_key = value or ""
        return value

    @validates("category")
    def _lowercase_category(self, key, value):
        return value.lower() if value is not None else value

    def __repr__(self):
        return f"<Produto {self.id} {self.slug!r} store={self.store_id!r}>"


# Supports the rating-ordered listing
Index("ix_produtos_rating_reviews", Produto.rating.desc(), Produto.review_count.desc())
