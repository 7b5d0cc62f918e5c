"""Create users, jams and jam_attendants tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Enables PostGIS and creates the initial schema.
How:   jams.coordinates is geometry(POINT, 4326) with a GiST index on
       coordinates::geography for ST_DWithin proximity queries. Deleting a
       user cascades to the jams they authored and to their attendance rows.

Rollback: downgrade() drops the three tables (the postgis extension stays).
"""

from typing import Sequence, Union

from alembic import op
import geoalchemy2
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nickname", sa.String(80), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("is_available", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "instruments",
            postgresql.JSONB(),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
            comment="Instruments the user can bring to a jam",
        ),
        sa.Column("availability_description", sa.Text(), nullable=True),
        sa.Column(
            "availability_expires_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="When the availability flag stops being meaningful (UTC)",
        ),
        sa.Column(
            "auth_id",
            sa.String(255),
            nullable=True,
            comment="Subject of the identity provider's tokens",
        ),
        sa.Column("is_admin", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("auth_id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "jams",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column(
            "coordinates",
            geoalchemy2.Geometry(geometry_type="POINT", srid=4326, spatial_index=False),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_jams_author_id", "jams", ["author_id"])
    # Proximity queries cast to geography; the index must cover that expression
    op.create_index(
        "idx_jams_coordinates_geography",
        "jams",
        [sa.text("(coordinates::geography)")],
        postgresql_using="gist",
    )

    op.create_table(
        "jam_attendants",
        sa.Column("jam_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["jam_id"], ["jams.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("jam_id", "user_id"),
    )


def downgrade() -> None:
    op.drop_table("jam_attendants")
    op.drop_index("idx_jams_coordinates_geography", table_name="jams")
    op.drop_index("ix_jams_author_id", table_name="jams")
    op.drop_table("jams")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
