"""Acknowledgment state machine for consignments.

States: unset (NULL) -> acked (true) | nacked (false). Both outcomes are
terminal. Settlement is a compare-and-set in the database, so the first
writer wins even across processes.
"""

from __future__ import annotations

from rgbproxy.domain.consignments import find_consignment
from rgbproxy.errors import CannotChangeAck, NotFoundConsignment
from rgbproxy.infra.db import txn
from rgbproxy.infra.repositories.consignments_repository import (
    get_consignment,
    set_ack_if_unset,
)
from rgbproxy.service import RelayService


def set_ack(service: RelayService, recipient_id: str, ack: bool) -> bool:
    """Settle the ack of a consignment.

    Returns:
        True if this call settled the ack, False if it was already settled
        to the same value.

    Raises:
        NotFoundConsignment: If recipient_id has no consignment.
        CannotChangeAck: If the ack was already settled to the other value.
    """
    with txn(service.engine) as conn:
        if set_ack_if_unset(conn, recipient_id, ack):
            return True
        record = get_consignment(conn, recipient_id)

    if record is None:
        raise NotFoundConsignment()
    if record.ack != ack:
        raise CannotChangeAck()
    return False


def get_ack(service: RelayService, recipient_id: str) -> bool | None:
    """Current ack of a consignment: None while unset.

    Raises:
        NotFoundConsignment: If recipient_id has no consignment.
    """
    return find_consignment(service, recipient_id).ack
