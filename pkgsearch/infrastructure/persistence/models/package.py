"""Package ORM model. One row per indexed package URL."""

from sqlalchemy import Integer, String, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from pkgsearch.infrastructure.persistence.database import Base
from pkgsearch.infrastructure.persistence.models.mixins import TimestampMixin, UuidMixin


class Package(UuidMixin, TimestampMixin, Base):
    """Indexed package. Table: package. score is the precomputed popularity score."""

    __tablename__ = "package"

    url: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    # Name declared in the package manifest; null until the package is analyzed.
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    platform_compatibility: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default=text("'{}'")
    )
