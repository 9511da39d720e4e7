"""
Catalog application.

Owns the Product record that orders are placed against. Product CRUD is
done through the Django admin; the order lifecycle only reads products and
applies the delivery side effect (deactivate or decrement stock).

Usage:
    from catalog.services import CatalogService

    product = CatalogService.get_product(product_id)
    CatalogService.apply_delivery_side_effect(product_id)
"""
