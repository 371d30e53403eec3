"""Typed params for each RPC method.

Each method declares a pydantic model; parse_params() runs one validation
pass and turns the first failure into the field's Missing*/Invalid* error.
Fields are declared in the order their errors take precedence.
"""

from __future__ import annotations

import re
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StringConstraints,
    ValidationError,
    field_validator,
)

from rgbproxy.errors import (
    InvalidAck,
    InvalidAttachmentID,
    InvalidParam,
    InvalidRecipientID,
    InvalidSenderAmount,
    InvalidTxid,
    InvalidVout,
    MissingAck,
    MissingAttachmentID,
    MissingParam,
    MissingRecipientID,
    MissingTxid,
)

_INTEGER_STRING = re.compile(r"^-?\d+$")

# consignments.vout is a signed 64-bit column
VOUT_MIN = -(2**63)
VOUT_MAX = 2**63 - 1

NonEmptyStr = Annotated[str, StringConstraints(strict=True, min_length=1)]


# field name -> (missing error, invalid error)
FIELD_ERRORS: dict[str, tuple[type[MissingParam] | None, type[InvalidParam]]] = {
    "recipient_id": (MissingRecipientID, InvalidRecipientID),
    "attachment_id": (MissingAttachmentID, InvalidAttachmentID),
    "txid": (MissingTxid, InvalidTxid),
    "vout": (None, InvalidVout),
    "sender_amount": (None, InvalidSenderAmount),
    "ack": (MissingAck, InvalidAck),
}


class RpcParams(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class RecipientParams(RpcParams):
    recipient_id: NonEmptyStr


class AttachmentParams(RpcParams):
    attachment_id: NonEmptyStr


class ConsignmentPostParams(RpcParams):
    recipient_id: NonEmptyStr
    txid: NonEmptyStr
    vout: int | None = None
    sender_amount: dict[str, Any] | None = None

    @field_validator("vout", mode="before")
    @classmethod
    def _coerce_vout(cls, value: Any) -> int:
        """Accept an output index as int, integral float or digit string."""
        if isinstance(value, bool) or value is None:
            raise ValueError("vout must be an integer")
        if isinstance(value, int):
            number = value
        elif isinstance(value, float) and value.is_integer():
            number = int(value)
        elif isinstance(value, str) and _INTEGER_STRING.match(value):
            number = int(value)
        else:
            raise ValueError("vout must be an integer")
        if not VOUT_MIN <= number <= VOUT_MAX:
            raise ValueError("vout out of range")
        return number


class AckPostParams(RpcParams):
    recipient_id: NonEmptyStr
    ack: StrictBool


def _first_required_field(model: type[RpcParams]) -> str:
    for name, field in model.model_fields.items():
        if field.is_required():
            return name
    raise LookupError(f"{model.__name__} has no required field")


def parse_params(model: type[RpcParams], params: Any) -> RpcParams:
    """Validate raw JSON-RPC params against a method's model.

    Args:
        model: The method's params model.
        params: Raw params from the request (any JSON value, or None).

    Returns:
        A validated, immutable params instance.

    Raises:
        MissingParam: If params is not an object or a required field is absent.
        InvalidParam: If a field is present with the wrong shape.
    """
    if not isinstance(params, dict):
        missing, _ = FIELD_ERRORS[_first_required_field(model)]
        raise missing()

    try:
        return model.model_validate(params)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0])
        missing, invalid = FIELD_ERRORS[field]
        if error["type"] == "missing" and missing is not None:
            raise missing() from None
        raise invalid() from None
