"""Tests for CatalogService stock side effects and lookups."""

import uuid

import pytest

from catalog.models import Product, ProductType
from catalog.services import CatalogService
from catalog.tests.factories import ProductFactory
from core.exceptions import NotFoundError


@pytest.mark.django_db
class TestApplyDeliverySideEffect:
    def test_single_unit_product_is_deactivated(self):
        product = ProductFactory()

        result = CatalogService.apply_delivery_side_effect(product.id)

        assert result.active is False
        assert result.out_of_stock is False
        assert Product.objects.get(pk=product.pk).active is False

    def test_multi_unit_product_loses_one_unit(self):
        product = ProductFactory(product_type=ProductType.MULTI_UNIT, quantity=5)

        result = CatalogService.apply_delivery_side_effect(product.id)

        assert result.quantity == 4
        assert result.active is True
        assert result.out_of_stock is False

    def test_last_unit_marks_product_out_of_stock(self):
        product = ProductFactory(product_type=ProductType.MULTI_UNIT, quantity=1)

        result = CatalogService.apply_delivery_side_effect(product.id)

        assert result.quantity == 0
        assert result.active is False
        assert result.out_of_stock is True

    def test_quantity_never_goes_negative(self):
        product = ProductFactory(
            product_type=ProductType.MULTI_UNIT,
            quantity=0,
            active=False,
            out_of_stock=True,
        )

        result = CatalogService.apply_delivery_side_effect(product.id)

        assert result.quantity == 0

    def test_unknown_product_raises(self):
        with pytest.raises(NotFoundError):
            CatalogService.apply_delivery_side_effect(uuid.uuid4())


@pytest.mark.django_db
class TestGetProduct:
    def test_returns_product(self):
        product = ProductFactory()

        assert CatalogService.get_product(product.id) == product

    def test_missing_product(self):
        with pytest.raises(NotFoundError) as exc_info:
            CatalogService.get_product(uuid.uuid4())

        assert exc_info.value.error_code == "PRODUCT_NOT_FOUND"
