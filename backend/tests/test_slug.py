"""
Tests for slug generation and the duplicate-name guard.
"""
import pytest

from produtos_api.exceptions import ConflictError
from produtos_api.models import Produto
from produtos_api.services.duplicate_guard import assert_name_available
from produtos_api.services.slug import generate_slug, slugify


def _add(db_session, name, slug, store_id=None):
    produto = Produto(
        name=name, description="desc", slug=slug, price=10,
        category="pizzas", store_id=store_id,
    )
    db_session.add(produto)
    db_session.commit()
    return produto


class TestSlugify:

    @pytest.mark.parametrize("name,expected", [
        ("Test Product", "test-product"),
        ("  Pizza   Margherita!! ", "pizza-margherita"),
        ("X-Burger (Duplo)", "x-burger-duplo"),
        ("Pão de Queijo", "pao-de-queijo"),
        ("Açaí 500ml", "acai-500ml"),
        ("---", "produto"),
    ])
    def test_slugify(self, name, expected):
        assert slugify(name) == expected


class TestGenerateSlug:

    def test_free_slug_is_base(self, repository):
        assert generate_slug(repository, "Test Product", None) == "test-product"

    def test_collision_appends_counter(self, repository, db_session):
        _add(db_session, "X", "x")
        assert generate_slug(repository, "x!", None) == "x-1"

        _add(db_session, "X 1", "x-1")
        assert generate_slug(repository, "x?", None) == "x-2"

    def test_collision_is_scoped_by_store(self, repository, db_session):
        _add(db_session, "Pizza", "pizza", store_id="loja-a")

        assert generate_slug(repository, "Pizza", "loja-b") == "pizza"
        assert generate_slug(repository, "Pizza", None) == "pizza"
        assert generate_slug(repository, "Pizza", "loja-a") == "pizza-1"

    def test_excluded_id_does_not_collide(self, repository, db_session):
        produto = _add(db_session, "Pizza", "pizza")
        assert generate_slug(repository, "Pizza", None, exclude_id=produto.id) == "pizza"


class TestDuplicateGuard:

    def test_same_name_any_casing_conflicts(self, repository, db_session):
        _add(db_session, "Pizza Margherita", "pizza-margherita", store_id="loja-a")

        with pytest.raises(ConflictError):
            assert_name_available(repository, "PIZZA margherita", "loja-a")

    def test_other_scope_is_free(self, repository, db_session):
        _add(db_session, "Pizza", "pizza", store_id="loja-a")

        assert_name_available(repository, "Pizza", "loja-b")
        assert_name_available(repository, "Pizza", None)

    def test_no_store_is_its_own_scope(self, repository, db_session):
        _add(db_session, "Pizza", "pizza")

        with pytest.raises(ConflictError):
            assert_name_available(repository, "pizza", None)

    def test_excluded_id_is_ignored(self, repository, db_session):
        produto = _add(db_session, "Pizza", "pizza")
        assert_name_available(repository, "Pizza", None, exclude_id=produto.id)
