"""Initial schema: consignments and media.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-12

Data roots written by earlier proxy releases already hold these tables
(without alembic bookkeeping); they are adopted as-is.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    existing = set(sa.inspect(op.get_bind()).get_table_names())

    if "consignments" not in existing:
        op.create_table(
            "consignments",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("recipient_id", sa.Text, nullable=False, unique=True),
            sa.Column("filename", sa.Text, nullable=False),
            sa.Column("txid", sa.Text, nullable=False),
            sa.Column("vout", sa.BigInteger, nullable=True),
            sa.Column("ack", sa.Integer, nullable=True),
        )

    if "media" not in existing:
        op.create_table(
            "media",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("attachment_id", sa.Text, nullable=False, unique=True),
            sa.Column("filename", sa.Text, nullable=False),
        )


def downgrade() -> None:
    raise NotImplementedError("Downgrade not supported")
