"""Persistence models: ORM entities and mixins."""

from pkgsearch.infrastructure.persistence.models.mixins import TimestampMixin, UuidMixin
from pkgsearch.infrastructure.persistence.models.package import Package
from pkgsearch.infrastructure.persistence.models.product import Product
from pkgsearch.infrastructure.persistence.models.repository import Repository

__all__ = [
    "Package",
    "Product",
    "Repository",
    "TimestampMixin",
    "UuidMixin",
]
