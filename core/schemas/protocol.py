"""
Module 01 - Schemas & Canonicalization
File: protocol.py

Purpose: Messages exchanged between the requester and oracle roles.

Requests:  heartbeat | query(index) | attest(view)
Responses: heartbeat_ack | query_result | attestation | rejection | exchange_failed

``rejection`` carries a semantic refusal (bad index, failed validation);
``exchange_failed`` signals a transient fault the requester may retry.
Messages travel as canonical JSON and are decoded through discriminated
unions keyed on ``type``.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from core.crypto.attestation import Attestation
from core.merkle.partial_tree import PartialView

from .canonical import dumps_canonical, loads_canonical
from .errors import OracleError, SchemaValidationException
from .versioning import PROTOCOL_VERSION


class _Message(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    protocol_version: str = Field(default=PROTOCOL_VERSION)


# =============================================================================
# Requests
# =============================================================================

class HeartbeatRequest(_Message):
    type: Literal["heartbeat"] = "heartbeat"


class QueryRequest(_Message):
    type: Literal["query"] = "query"
    index: int


class AttestRequest(_Message):
    type: Literal["attest"] = "attest"
    view: PartialView


OracleRequest = Annotated[
    Union[HeartbeatRequest, QueryRequest, AttestRequest],
    Field(discriminator="type"),
]


# =============================================================================
# Responses
# =============================================================================

class HeartbeatResponse(_Message):
    type: Literal["heartbeat_ack"] = "heartbeat_ack"
    alive: bool = True


class QueryResponse(_Message):
    type: Literal["query_result"] = "query_result"
    index: int
    value: int


class AttestResponse(_Message):
    type: Literal["attestation"] = "attestation"
    attestation: Attestation


class Rejection(_Message):
    type: Literal["rejection"] = "rejection"
    error: OracleError

    @property
    def code(self) -> str:
        return self.error.code


class ExchangeFailed(_Message):
    type: Literal["exchange_failed"] = "exchange_failed"
    message: str = "exchange failed"
    retryable: bool = True


OracleResponse = Annotated[
    Union[HeartbeatResponse, QueryResponse, AttestResponse, Rejection, ExchangeFailed],
    Field(discriminator="type"),
]


_REQUEST_ADAPTER: TypeAdapter = TypeAdapter(OracleRequest)
_RESPONSE_ADAPTER: TypeAdapter = TypeAdapter(OracleResponse)


def encode_message(message: BaseModel) -> str:
    """Serialize a request or response to canonical JSON."""
    return dumps_canonical(message)


# Decoding goes through json.loads so fact values keep full integer precision
def _decode(adapter: TypeAdapter, raw: str, direction: str):
    try:
        return adapter.validate_python(loads_canonical(raw))
    except ValidationError as e:
        errors = e.errors()
        field_path = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
        raise SchemaValidationException(
            f"Invalid {direction} message: {e.error_count()} validation error(s)",
            field_path=field_path or None,
            details={"errors": [err["msg"] for err in errors]},
        ) from e


def decode_request(raw: str) -> Union[HeartbeatRequest, QueryRequest, AttestRequest]:
    """
    Raises:
        SchemaValidationException: If ``raw`` is not a valid request
    """
    return _decode(_REQUEST_ADAPTER, raw, "request")


def decode_response(
    raw: str,
) -> Union[HeartbeatResponse, QueryResponse, AttestResponse, Rejection, ExchangeFailed]:
    """
    Raises:
        SchemaValidationException: If ``raw`` is not a valid response
    """
    return _decode(_RESPONSE_ADAPTER, raw, "response")
