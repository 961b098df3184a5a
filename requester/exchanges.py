"""
Module 09 - Protocol Exchanges
Requester-side state machines for the heartbeat, query and attest
exchanges.

Owner: Protocol Engineer
Module ID: M09

Each exchange is single-use:

    CREATED -> SENT -> AWAITING_RESPONSE -> COMPLETED
                                         -> REJECTED  (semantic refusal)
                                         -> FAILED    (transport fault)

No retries happen here. A rejection is terminal for the attempt; a
failure raises ExchangeFailedException so the caller can decide to
run a fresh exchange.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from core.crypto.attestation import Attestation, verify_attestation
from core.merkle.partial_tree import PartialView
from core.schemas.errors import (
    AttestationRejectedException,
    ErrorCodes,
    ExchangeFailedException,
    InvalidArgumentException,
    OracleError,
    OracleProtocolException,
    SignatureInvalidException,
)
from core.schemas.protocol import (
    AttestRequest,
    AttestResponse,
    ExchangeFailed,
    HeartbeatRequest,
    HeartbeatResponse,
    QueryRequest,
    QueryResponse,
    Rejection,
)

from .session import Request, Response, SessionChannel


logger = logging.getLogger(__name__)


class ExchangeState(str, Enum):
    """Lifecycle of a single request/response exchange."""
    CREATED = "created"
    SENT = "sent"
    AWAITING_RESPONSE = "awaiting_response"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExchangeState.COMPLETED, ExchangeState.REJECTED, ExchangeState.FAILED)


class _Exchange:
    """Shared send/receive bookkeeping for the concrete exchanges."""

    kind: str = "exchange"

    def __init__(self, session: SessionChannel) -> None:
        self.session = session
        self.state = ExchangeState.CREATED
        self.history: list[ExchangeState] = [ExchangeState.CREATED]
        self.error: Optional[OracleError] = None

    def _transition(self, state: ExchangeState) -> None:
        logger.debug(f"{self.kind} exchange: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _fail(self, exc: OracleProtocolException) -> OracleProtocolException:
        self.error = exc.to_error_model()
        self._transition(ExchangeState.FAILED)
        return exc

    def _reject(self, rejection: Rejection) -> None:
        self.error = rejection.error
        self._transition(ExchangeState.REJECTED)
        logger.warning(
            f"{self.kind} exchange rejected by {self.session.counterparty}: "
            f"{rejection.error.code}: {rejection.error.message}"
        )

    def _exchange(self, request: Request) -> Response:
        if self.state is not ExchangeState.CREATED:
            raise RuntimeError(f"{self.kind} exchange already ran (state={self.state.value})")

        self._transition(ExchangeState.SENT)
        self._transition(ExchangeState.AWAITING_RESPONSE)
        try:
            response = self.session.send_and_receive(request)
        except ExchangeFailedException as e:
            raise self._fail(e)
        except Exception as e:
            logger.exception(f"{self.kind} exchange transport fault")
            raise self._fail(ExchangeFailedException(stage=self.kind)) from e

        if isinstance(response, ExchangeFailed):
            raise self._fail(ExchangeFailedException(
                response.message,
                stage=self.kind,
                retryable=response.retryable,
            ))
        return response

    def _unexpected(self, response: Any) -> OracleProtocolException:
        return self._fail(ExchangeFailedException(
            f"Unexpected response to {self.kind}: {type(response).__name__}",
            stage=self.kind,
            retryable=False,
        ))


class HeartbeatExchange(_Exchange):
    """Checks the oracle is reachable before a query."""

    kind = "heartbeat"

    def run(self) -> bool:
        response = self._exchange(HeartbeatRequest())
        if isinstance(response, Rejection):
            self._reject(response)
            return False
        if not isinstance(response, HeartbeatResponse):
            raise self._unexpected(response)
        self._transition(ExchangeState.COMPLETED)
        return response.alive


class QueryExchange(_Exchange):
    """Asks the oracle for the fact at ``index``."""

    kind = "query"

    def __init__(self, session: SessionChannel, index: int) -> None:
        super().__init__(session)
        self.index = index
        self.value: Optional[int] = None

    def run(self) -> int:
        """
        Returns:
            The fact value computed by the oracle

        Raises:
            InvalidArgumentException: If the oracle refused the index
            OracleProtocolException: For any other rejection
            ExchangeFailedException: On transport faults
        """
        response = self._exchange(QueryRequest(index=self.index))

        if isinstance(response, Rejection):
            self._reject(response)
            if response.code == ErrorCodes.INVALID_ARGUMENT:
                raise InvalidArgumentException(response.error.message, index=self.index)
            raise response.error.to_exception()

        if not isinstance(response, QueryResponse) or response.index != self.index:
            raise self._unexpected(response)

        self.value = response.value
        self._transition(ExchangeState.COMPLETED)
        return response.value


class AttestExchange(_Exchange):
    """Asks the oracle to attest to a filtered view."""

    kind = "attest"

    def __init__(self, session: SessionChannel, view: PartialView) -> None:
        super().__init__(session)
        self.view = view
        self.attestation: Optional[Attestation] = None

    def run(self) -> Attestation:
        """
        Returns:
            The oracle's attestation, checked against the view's root
            and the session counterparty's key

        Raises:
            AttestationRejectedException: If the oracle refused to sign
            SignatureInvalidException: If the returned signature is bad
            ExchangeFailedException: On transport faults
        """
        response = self._exchange(AttestRequest(view=self.view))

        if isinstance(response, Rejection):
            self._reject(response)
            raise AttestationRejectedException(
                response.error.message,
                code=response.error.code,
                details=response.error.details,
            )

        if not isinstance(response, AttestResponse):
            raise self._unexpected(response)

        attestation = response.attestation
        oracle = self.session.counterparty
        if attestation.oracle.owning_key != oracle.owning_key or not verify_attestation(
            attestation, self.view.root
        ):
            raise self._fail(SignatureInvalidException(
                f"Attestation from {oracle} does not verify over {self.view.root}",
                signer=attestation.signature.by,
            ))

        self.attestation = attestation
        self._transition(ExchangeState.COMPLETED)
        return attestation


__all__ = [
    "ExchangeState",
    "HeartbeatExchange",
    "QueryExchange",
    "AttestExchange",
]
