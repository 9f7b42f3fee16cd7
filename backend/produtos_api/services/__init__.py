from produtos_api.services.image_storage import ImageStorageService, ImageUpload, get_image_storage
from produtos_api.services.produto_service import ProdutoService

__all__ = ["ImageStorageService", "ImageUpload", "get_image_storage", "ProdutoService"]
