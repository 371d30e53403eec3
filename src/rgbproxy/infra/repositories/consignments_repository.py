"""Consignments repository - persistence for consignment records.

Uses raw SQL through SQLAlchemy text() (no ORM).
Uniqueness of recipient_id and ack settlement are enforced by the
statements themselves, not by a prior read.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection

from rgbproxy.infra.db import fetchone


@dataclass(frozen=True)
class ConsignmentRecord:
    recipient_id: str
    filename: str
    txid: str
    vout: int | None = None
    sender_amount: dict[str, Any] | None = None
    ack: bool | None = None


def _to_record(row) -> ConsignmentRecord:
    return ConsignmentRecord(
        recipient_id=row["recipient_id"],
        filename=row["filename"],
        txid=row["txid"],
        vout=row["vout"],
        sender_amount=json.loads(row["sender_amount"]) if row["sender_amount"] else None,
        ack=None if row["ack"] is None else bool(row["ack"]),
    )


def get_consignment(conn: Connection, recipient_id: str) -> ConsignmentRecord | None:
    """Fetch the consignment bound to recipient_id, or None."""
    row = fetchone(
        conn,
        """
        SELECT recipient_id, filename, txid, vout, sender_amount, ack
        FROM consignments
        WHERE recipient_id = :recipient_id
        """,
        {"recipient_id": recipient_id},
    )
    return _to_record(row) if row is not None else None


def insert_consignment(
    conn: Connection,
    *,
    recipient_id: str,
    filename: str,
    txid: str,
    vout: int | None = None,
    sender_amount: dict[str, Any] | None = None,
) -> bool:
    """Insert a consignment unless recipient_id is already taken.

    Uses ON CONFLICT DO NOTHING so concurrent inserts for the same
    recipient_id resolve to exactly one row.

    Returns:
        True if the row was inserted, False if recipient_id already existed.
    """
    result = conn.execute(
        text(
            """
            INSERT INTO consignments (recipient_id, filename, txid, vout, sender_amount, ack)
            VALUES (:recipient_id, :filename, :txid, :vout, :sender_amount, NULL)
            ON CONFLICT (recipient_id) DO NOTHING
            """
        ),
        {
            "recipient_id": recipient_id,
            "filename": filename,
            "txid": txid,
            "vout": vout,
            "sender_amount": json.dumps(sender_amount) if sender_amount is not None else None,
        },
    )
    return result.rowcount == 1


def set_ack_if_unset(conn: Connection, recipient_id: str, ack: bool) -> bool:
    """Settle the ack of a consignment whose ack is still unset.

    Compare-and-set: the WHERE clause only matches an unset ack, so at most
    one caller ever settles it.

    Returns:
        True if this call settled the ack, False otherwise (already settled
        or no such consignment).
    """
    result = conn.execute(
        text(
            """
            UPDATE consignments
            SET ack = :ack
            WHERE recipient_id = :recipient_id AND ack IS NULL
            """
        ),
        {"ack": 1 if ack else 0, "recipient_id": recipient_id},
    )
    return result.rowcount == 1
