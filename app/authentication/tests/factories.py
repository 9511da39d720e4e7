"""
Factory Boy factories for authentication test data.

Usage:
    from authentication.tests.factories import UserFactory

    buyer = UserFactory()
    admin = UserFactory(is_staff=True)
"""

import factory


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = "authentication.User"

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password = factory.django.Password("testpass123")
    is_active = True
