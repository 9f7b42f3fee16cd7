from produtos_api.repositories.produto_repository import ProdutoRepository

__all__ = ["ProdutoRepository"]
