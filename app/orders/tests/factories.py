"""
Factory Boy factories for order test data.

Orders can be built directly in any state (the FSM field only rejects
assignment after load), which lets tests start mid-lifecycle:

    order = OrderFactory(status=OrderStatus.SHIPPED)
    EscrowFactory(order=order)
"""

import factory
from django.utils import timezone

from authentication.tests.factories import UserFactory
from catalog.tests.factories import ProductFactory
from orders.models import Escrow, Order
from orders.states import EscrowStatus, OrderStatus


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    product = factory.SubFactory(ProductFactory)
    buyer = factory.SubFactory(UserFactory)
    seller = factory.SelfAttribute("product.seller")
    price = factory.SelfAttribute("product.price")
    delivery_fee = factory.SelfAttribute("product.delivery_fee")
    status = OrderStatus.PENDING


class EscrowFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Escrow

    order = factory.SubFactory(OrderFactory, status=OrderStatus.PAID)
    amount = factory.LazyAttribute(lambda o: o.order.price + o.order.delivery_fee)
    currency = "NGN"
    status = EscrowStatus.HELD
    gateway_transaction_id = factory.SelfAttribute("order.reference")


def paid_order(**kwargs) -> Order:
    """A PAID order with its HELD escrow, as mark_paid leaves it."""
    kwargs.setdefault("status", OrderStatus.PAID)
    kwargs.setdefault("paid_at", timezone.now())
    order = OrderFactory(**kwargs)
    EscrowFactory(order=order)
    return order


def delivered_order(received_at=None, **kwargs) -> Order:
    """A DELIVERED order with a HELD escrow."""
    kwargs["status"] = OrderStatus.DELIVERED
    kwargs["received_at"] = received_at or timezone.now()
    return paid_order(**kwargs)

