"""
Produto Service

Create/update/delete/list for products. Name and slug uniqueness are
pre-checked per store, but the database constraints are authoritative:
when a write is rejected, any image stored for that write is removed
again so no orphan file is left behind.
"""
import logging
import math
from typing import Optional

from produtos_api.exceptions import ConflictError, DuplicateRecordError, NotFoundError
from produtos_api.models import Produto
from produtos_api.repositories import ProdutoRepository
from produtos_api.schemas import ProdutoCreate, ProdutoFilter, ProdutoUpdate
from produtos_api.services.duplicate_guard import assert_name_available
from produtos_api.services.image_storage import ImageStorageService, ImageUpload
from produtos_api.services.slug import generate_slug

logger = logging.getLogger(__name__)


class ProdutoService:

    def __init__(self, repository: ProdutoRepository, images: ImageStorageService):
        self.repository = repository
        self.images = images

    def get(self, produto_id: int) -> Produto:
        produto = self.repository.get(produto_id)
        if not produto:
            raise NotFoundError("Produto", produto_id)
        return produto

    def list(self, filters: ProdutoFilter) -> dict:
        produtos, total = self.repository.list(
            category=filters.category,
            store_id=filters.store_id,
            available=filters.available,
            sort_by=filters.sort_by,
            descending=filters.sort_order == "desc",
            offset=(filters.page - 1) * filters.limit,
            limit=filters.limit,
        )
        return {
            "produtos": produtos,
            "total": total,
            "pages": math.ceil(total / filters.limit),
        }

    def create(self, data: ProdutoCreate, image: Optional[ImageUpload] = None) -> Produto:
        assert_name_available(self.repository, data.name, data.store_id)
        slug = generate_slug(self.repository, data.name, data.store_id)

        # Nothing is written yet, so a failed store needs no cleanup
        image_path = self.images.store(image) if image else None

        produto = Produto(**data.model_dump(), slug=slug, image_path=image_path)
        produto = self._write(lambda: self.repository.add(produto), image_path)

        logger.info(f"Created produto {produto.id} ({produto.slug}) store={produto.store_id}")
        return produto

    def update(self, produto_id: int, data: ProdutoUpdate, image: Optional[ImageUpload] = None) -> Produto:
        produto = self.get(produto_id)
        changes = data.changes()

        store_id = changes["store_id"] if "store_id" in changes else produto.store_id
        name = changes.get("name", produto.name)
        scope_changed = (store_id or "") != (produto.store_id or "")

        if name != produto.name or scope_changed:
            assert_name_available(self.repository, name, store_id, exclude_id=produto.id)

        if "name" in changes:
            changes["slug"] = generate_slug(self.repository, name, store_id, exclude_id=produto.id)

        new_image_path = None
        if image:
            # Decode before the old file goes, so a bad upload leaves it in place
            content = self.images.prepare(image)
            self.images.delete(produto.image_path)
            new_image_path = self.images.write(content, source=image.filename)
            changes["image_path"] = new_image_path

        produto = self._write(lambda: self.repository.update(produto, changes), new_image_path)

        logger.info(f"Updated produto {produto.id}: {sorted(changes)}")
        return produto

    def delete(self, produto_id: int):
        produto = self.get(produto_id)
        image_path = produto.image_path

        if not self.repository.delete(produto_id):
            # Removed by someone else between lookup and delete
            raise NotFoundError("Produto", produto_id)

        self.images.delete(image_path)
        logger.info(f"Deleted produto {produto_id}")

    def _write(self, write, image_path: Optional[str]) -> Produto:
        """Run a repository write, removing image_path again if it fails."""
        try:
            return write()
        except Exception as e:
            if image_path:
                logger.warning(f"Write failed, removing stored image {image_path}")
                self.images.delete(image_path)
            if isinstance(e, DuplicateRecordError):
                raise ConflictError("Produto with this name or slug already exists in this store") from e
            raise
