"""
Factories for audit app models.

Used in tests to create test data.
"""

from typing import Any

import factory
from factory.django import DjangoModelFactory

from apps.audit.models import AuditLog


class AuditLogFactory(DjangoModelFactory[AuditLog]):
    """Factory for AuditLog model."""

    class Meta:
        model = AuditLog

    action = AuditLog.Action.LOOKUP
    actor_type = AuditLog.ActorType.API_KEY
    actor_id: Any = factory.Sequence(lambda n: str(n))
    actor_name = "Partner"
    details: Any = factory.LazyFunction(lambda: {"found": True})
