from produtos_api.models.produto import Produto

__all__ = [
    "Produto",
]
