from produtos_api.schemas.produto import (
    Produto, ProdutoCreate, ProdutoUpdate, ProdutoList, ProdutoFilter,
)

__all__ = [
    "Produto", "ProdutoCreate", "ProdutoUpdate", "ProdutoList", "ProdutoFilter",
]
