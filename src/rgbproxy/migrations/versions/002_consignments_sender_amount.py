"""Add consignments.sender_amount (JSON text).

Revision ID: 002_consignments_sender_amount
Revises: 001_initial_schema
Create Date: 2026-10-12
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision = "002_consignments_sender_amount"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    columns = {c["name"] for c in sa.inspect(op.get_bind()).get_columns("consignments")}
    if "sender_amount" not in columns:
        op.add_column("consignments", sa.Column("sender_amount", sa.Text, nullable=True))


def downgrade() -> None:
    raise NotImplementedError("Downgrade not supported")
