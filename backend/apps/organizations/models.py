"""
Organizations models - owners of member lists.
"""

from django.db import models

from apps.core.models import TimestampedModel


class Organization(TimestampedModel):
    """
    An organization whose member list can be checked through the API.

    Members are replaced wholesale by sync imports; the organization row
    doubles as the per-organization import lock.
    """

    name = models.CharField(max_length=255, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name
