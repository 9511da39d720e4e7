"""
Catalog service layer.

The order lifecycle consumes two operations from the catalog:

- get_product / get_product_for_update: lookup with NotFoundError
- apply_delivery_side_effect: deactivate or decrement on delivery

Stock changes use conditional F() updates so concurrent deliveries of a
multi-unit product never push quantity below zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db.models import F
from django.utils import timezone

from catalog.models import Product, ProductType
from core.exceptions import NotFoundError
from core.services import BaseService

if TYPE_CHECKING:
    from uuid import UUID


class CatalogService(BaseService):
    """
    Product lookups and stock side effects.

    Methods:
        get_product: Fetch a product or raise NotFoundError
        get_product_for_update: Same, with a row lock (inside a transaction)
        apply_delivery_side_effect: Deactivate or decrement after delivery
    """

    @classmethod
    def get_product(cls, product_id: UUID | str) -> Product:
        product = Product.objects.filter(pk=product_id).first()
        if product is None:
            raise NotFoundError(
                f"Product {product_id} not found",
                error_code="PRODUCT_NOT_FOUND",
                details={"product_id": str(product_id)},
            )
        return product

    @classmethod
    def get_product_for_update(cls, product_id: UUID | str) -> Product:
        """Fetch and row-lock a product. Must be called inside atomic()."""
        product = Product.objects.select_for_update().filter(pk=product_id).first()
        if product is None:
            raise NotFoundError(
                f"Product {product_id} not found",
                error_code="PRODUCT_NOT_FOUND",
                details={"product_id": str(product_id)},
            )
        return product

    @classmethod
    def apply_delivery_side_effect(cls, product_id: UUID | str) -> Product:
        """
        Update stock after an order for this product is delivered.

        Single-unit products are deactivated permanently. Multi-unit
        products lose one unit; when the last unit goes the product is
        marked inactive and out of stock.

        Args:
            product_id: Product the delivered order was placed against

        Returns:
            The product as stored after the update

        Raises:
            NotFoundError: If the product does not exist
        """
        now = timezone.now()

        with cls.atomic():
            product = cls.get_product_for_update(product_id)

            if product.product_type == ProductType.SINGLE_UNIT:
                Product.objects.filter(pk=product.pk).update(
                    active=False,
                    updated_at=now,
                )
            else:
                Product.objects.filter(pk=product.pk, quantity__gt=0).update(
                    quantity=F("quantity") - 1,
                    updated_at=now,
                )
                Product.objects.filter(pk=product.pk, quantity=0).update(
                    active=False,
                    out_of_stock=True,
                    updated_at=now,
                )

            product = Product.objects.get(pk=product.pk)

        cls.get_logger().info(
            "Applied delivery side effect",
            extra={
                "product_id": str(product.pk),
                "product_type": product.product_type,
                "quantity": product.quantity,
                "active": product.active,
            },
        )
        return product
