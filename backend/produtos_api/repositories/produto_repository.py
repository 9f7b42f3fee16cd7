import logging
from typing import Optional

from sqlalchemy import asc, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from produtos_api.exceptions import DuplicateRecordError
from produtos_api.models import Produto

logger = logging.getLogger(__name__)

# Public sort keys -> columns
SORT_COLUMNS = {
    "name": Produto.name,
    "price": Produto.price,
    "rating": Produto.rating,
    "createdAt": Produto.created_at,
    "category": Produto.category,
}


class ProdutoRepository:
    """Persistence for Produto records, one session per instance."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, produto_id: int) -> Optional[Produto]:
        return self.db.query(Produto).filter(Produto.id == produto_id).first()

    def _in_scope(self, query, store_id: Optional[str], exclude_id: Optional[int]):
        query = query.filter(Produto.scope_key == (store_id or ""))
        if exclude_id is not None:
            query = query.filter(Produto.id != exclude_id)
        return query

    def name_exists(self, name: str, store_id: Optional[str], exclude_id: Optional[int] = None) -> bool:
        """Case-insensitive name lookup within a store scope."""
        query = self.db.query(Produto.id).filter(Produto.name_key == name.lower())
        return self._in_scope(query, store_id, exclude_id).first() is not None

    def slug_exists(self, slug: str, store_id: Optional[str], exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Produto.id).filter(Produto.slug == slug)
        return self._in_scope(query, store_id, exclude_id).first() is not None

    def _commit(self):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Unique constraint rejected write: {e.orig}")
            raise DuplicateRecordError(str(e.orig)) from e

    def add(self, produto: Produto) -> Produto:
        self.db.add(produto)
        self._commit()
        self.db.refresh(produto)
        return produto

    def update(self, produto: Produto, changes: dict) -> Produto:
        """Apply only the given fields and persist."""
        for field, value in changes.items():
            setattr(produto, field, value)
        self._commit()
        self.db.refresh(produto)
        return produto

    def delete(self, produto_id: int) -> bool:
        """Delete by id. Returns False when no row was removed."""
        deleted = self.db.query(Produto).filter(Produto.id == produto_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        return deleted > 0

    def list(
        self,
        category: Optional[str] = None,
        store_id: Optional[str] = None,
        available: Optional[bool] = None,
        sort_by: str = "createdAt",
        descending: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Produto], int]:
        """Filtered, sorted page of products plus the unpaged total."""
        query = self.db.query(Produto)

        if category:
            query = query.filter(Produto.category == category)

        if store_id:
            query = query.filter(Produto.store_id == store_id)

        if available is not None:
            query = query.filter(Produto.available == available)

        total = query.count()

        direction = desc if descending else asc
        # id as tie-breaker keeps pages stable
        query = query.order_by(direction(SORT_COLUMNS[sort_by]), direction(Produto.id))

        return query.offset(offset).limit(limit).all(), total
