from typing import Optional

from produtos_api.exceptions import ConflictError


def assert_name_available(repository, name: str, store_id: Optional[str], exclude_id: Optional[int] = None):
    """Raise ConflictError if the name (any casing) is taken in the store scope."""
    if repository.name_exists(name, store_id, exclude_id):
        scope = f"store '{store_id}'" if store_id else "the catalog"
        raise ConflictError(
            f"Produto named '{name}' already exists in {scope}",
            details={"field": "name", "storeId": store_id},
        )
