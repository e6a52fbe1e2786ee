"""create package, repository, product tables and the search materialized view

Revision ID: a3f1c9e27b10
Revises:
Create Date: 2026-09-28

The search view flattens package + repository (+ product types) into one
row per package. Search statements read only from this view; it is rebuilt
by REFRESH MATERIALIZED VIEW (scripts/refresh_search_view.py). The unique
index on package_id allows REFRESH ... CONCURRENTLY.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "a3f1c9e27b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # levenshtein() for keyword and author ranking
    op.execute("CREATE EXTENSION IF NOT EXISTS fuzzystrmatch")

    op.create_table(
        "package",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column(
            "platform_compatibility",
            postgresql.ARRAY(sa.String()),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("url"),
    )

    op.create_table(
        "repository",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("package_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("owner", sa.String(), nullable=True),
        sa.Column("summary", sa.String(), nullable=True),
        sa.Column("stars", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("license", sa.String(), server_default=sa.text("'none'"), nullable=False),
        sa.Column(
            "keywords",
            postgresql.ARRAY(sa.String()),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        sa.Column("last_commit_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["package_id"], ["package.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("package_id"),
    )
    op.create_index("ix_repository_owner", "repository", ["owner"], unique=False)

    op.create_table(
        "product",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("package_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('executable', 'library', 'macro', 'plugin')",
            name="product_type_check",
        ),
        sa.ForeignKeyConstraint(["package_id"], ["package.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_product_package_id", "product", ["package_id"], unique=False)

    op.execute(
        """
        CREATE MATERIALIZED VIEW search AS
        SELECT
            p.id AS package_id,
            p.name AS package_name,
            r.name AS repo_name,
            r.owner AS repo_owner,
            p.score,
            r.summary,
            r.stars,
            r.license,
            r.last_commit_date,
            r.last_activity_at,
            r.keywords::TEXT[] AS keywords,
            p.platform_compatibility::TEXT[] AS platform_compatibility,
            ARRAY(
                SELECT DISTINCT pr.type FROM product pr
                WHERE pr.package_id = p.id
                ORDER BY pr.type
            )::TEXT[] AS product_types
        FROM package p
        JOIN repository r ON r.package_id = p.id
        """
    )
    op.create_index("ix_search_package_id", "search", ["package_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_search_package_id", table_name="search")
    op.execute("DROP MATERIALIZED VIEW IF EXISTS search")
    op.drop_index("ix_product_package_id", table_name="product")
    op.drop_table("product")
    op.drop_index("ix_repository_owner", table_name="repository")
    op.drop_table("repository")
    op.drop_table("package")
