"""Product ORM model. Products (library, executable, plugin, macro) declared by a package."""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from pkgsearch.domain.enums import ProductType
from pkgsearch.infrastructure.persistence.database import Base
from pkgsearch.infrastructure.persistence.models.mixins import TimestampMixin, UuidMixin


class Product(UuidMixin, TimestampMixin, Base):
    """Declared product. Table: product."""

    __tablename__ = "product"

    package_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("package.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "type IN ({})".format(
                ", ".join("'{}'".format(v) for v in ProductType.values())
            ),
            name="product_type_check",
        ),
    )
