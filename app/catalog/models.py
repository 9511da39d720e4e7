"""
Catalog models.

Product:
    A listing a buyer can order. Two stock models exist:

    - SINGLE_UNIT: a unique item (e.g. a decluttered second-hand good).
      Deactivated permanently once one order for it is delivered.
    - MULTI_UNIT: a stocked item. Each delivered order decrements quantity
      by one; at zero the product becomes inactive and out of stock.

Prices are stored in major currency units (e.g. Naira). Conversion to
minor units happens only at the payment gateway boundary.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class ProductType(models.TextChoices):
    SINGLE_UNIT = "single_unit", "Single unit"
    MULTI_UNIT = "multi_unit", "Multi unit"


class Product(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchasable listing owned by a seller.

    Fields:
        seller: User who receives the escrowed funds
        name: Display name
        price: Unit price in major currency units
        delivery_fee: Flat delivery fee in major currency units
        product_type: Stock model (single unit or multi unit)
        quantity: Units left (always 1 for single-unit listings)
        active: Whether the listing accepts new orders
        out_of_stock: Set when a multi-unit listing sells its last unit
    """

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="products",
        help_text="User selling this product",
    )

    name = models.CharField(max_length=200)

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Unit price in major currency units",
    )
    delivery_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Delivery fee in major currency units",
    )

    product_type = models.CharField(
        max_length=20,
        choices=ProductType.choices,
        default=ProductType.SINGLE_UNIT,
    )
    quantity = models.PositiveIntegerField(default=1)

    active = models.BooleanField(default=True, db_index=True)
    out_of_stock = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Product"
        verbose_name_plural = "Products"
        indexes = [
            models.Index(fields=["seller", "active"], name="catalog_product_seller_active"),
        ]

    def __str__(self) -> str:
        return f"Product({self.id}, {self.name})"

    @property
    def is_available(self) -> bool:
        """Whether new orders may be placed against this product."""
        return self.active and not self.out_of_stock

    @property
    def is_single_unit(self) -> bool:
        return self.product_type == ProductType.SINGLE_UNIT
