"""Repository ORM model. Source-hosting metadata of a package (owner, name, keywords)."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from pkgsearch.infrastructure.persistence.database import Base
from pkgsearch.infrastructure.persistence.models.mixins import TimestampMixin, UuidMixin


class Repository(UuidMixin, TimestampMixin, Base):
    """Repository of a package. Table: repository. keywords are repository topics."""

    __tablename__ = "repository"

    package_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("package.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    owner: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    summary: Mapped[str | None] = mapped_column(String, nullable=True)
    stars: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    license: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'none'"))
    keywords: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default=text("'{}'")
    )
    last_commit_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_activity_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
