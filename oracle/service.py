"""
Module 08 - Oracle Service
The oracle role: answers queries and signs validated partial views.

Owner: Oracle Engineer
Module ID: M08

An OracleService is an explicitly constructed bundle of the oracle's
identity, its fact oracle, its signing service and its validator. It
keeps no per-exchange state, so any number of query and attest
exchanges may run against one instance concurrently.

Handlers never raise across the channel:
- semantic failures become a Rejection carrying the error code
- anything else becomes ExchangeFailed, and the detail stays in the log
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from core.config.runtime import RuntimeConfig
from core.crypto.attestation import Attestation
from core.crypto.hashing import to_hex
from core.crypto.signatures import SigningService
from core.merkle.partial_tree import PartialView
from core.schemas.errors import (
    REJECTION_CODES,
    ErrorCodes,
    OracleError,
    OracleProtocolException,
)
from core.schemas.ledger import Party
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
from core.schemas.versioning import UnsupportedProtocolVersionError, assert_supported_protocol_version

from .fact_oracle import FactOracle, PrimeOracle
from .validator import AttestationValidator


logger = logging.getLogger(__name__)


class OracleService:
    """
    The oracle role.

    Args:
        identity: The oracle's public identity
        fact_oracle: Computes the facts the oracle vouches for
        signing_service: Must hold the private key for ``identity``
        passthrough_kinds: Forwarded to the AttestationValidator
    """

    def __init__(
        self,
        identity: Party,
        fact_oracle: FactOracle,
        signing_service: SigningService,
        passthrough_kinds: Iterable[str] = (),
    ) -> None:
        if not signing_service.holds(identity.owning_key):
            raise ValueError(
                f"Signing service does not hold the key for oracle '{identity.name}'"
            )
        self.identity = identity
        self.fact_oracle = fact_oracle
        self._signing_service = signing_service
        self.validator = AttestationValidator(
            identity.owning_key,
            fact_oracle,
            passthrough_kinds=passthrough_kinds,
        )

    @classmethod
    def create(
        cls,
        name: str = "Oracle",
        fact_oracle: Optional[FactOracle] = None,
        signing_service: Optional[SigningService] = None,
        passthrough_kinds: Iterable[str] = (),
    ) -> "OracleService":
        """Build a service, generating a key and a PrimeOracle where not given."""
        signing_service = signing_service or SigningService.generate()
        identity = Party(name=name, owning_key=signing_service.default_key)
        return cls(
            identity,
            fact_oracle or PrimeOracle(),
            signing_service,
            passthrough_kinds=passthrough_kinds,
        )

    @classmethod
    def from_config(cls, config: RuntimeConfig) -> "OracleService":
        signing_service = None
        if config.oracle.signing_key_hex:
            signing_service = SigningService.from_hex(config.oracle.signing_key_hex)
        return cls.create(
            name=config.oracle.name,
            fact_oracle=PrimeOracle(max_index=config.oracle.max_index),
            signing_service=signing_service,
            passthrough_kinds=config.validator.passthrough_kinds,
        )

    # -------------------------------------------------------------------------
    # Direct API
    # -------------------------------------------------------------------------

    def query(self, index: int) -> int:
        """
        Raises:
            InvalidArgumentException: If ``index`` is out of domain
        """
        return self.fact_oracle.query(index)

    def attest(self, view: PartialView) -> Attestation:
        """
        Validate ``view`` and sign its root.

        Raises:
            OracleProtocolException: Carrying the validation error code
                if the view does not pass; nothing is signed in that case
        """
        result = self.validator.validate(view)
        if not result.ok:
            raise result.error.to_exception()

        digest = view.root_bytes
        signature = self._signing_service.sign(self.identity.owning_key, digest)
        logger.info(f"Oracle '{self.identity.name}' attested to {to_hex(digest)}")
        return Attestation(
            oracle=self.identity,
            signature=signature,
            signed_digest=to_hex(digest),
        )

    # -------------------------------------------------------------------------
    # Protocol handlers
    # -------------------------------------------------------------------------

    def handle(
        self,
        request: Union[HeartbeatRequest, QueryRequest, AttestRequest],
    ) -> Union[HeartbeatResponse, QueryResponse, AttestResponse, Rejection, ExchangeFailed]:
        """Dispatch a request to its handler."""
        try:
            assert_supported_protocol_version(request.protocol_version)
        except UnsupportedProtocolVersionError as e:
            logger.warning(str(e))
            return Rejection(error=OracleError(
                code=ErrorCodes.UNSUPPORTED_VERSION,
                message=str(e),
                details={"version": e.version},
            ))
        if isinstance(request, HeartbeatRequest):
            return self.handle_heartbeat(request)
        if isinstance(request, QueryRequest):
            return self.handle_query(request)
        if isinstance(request, AttestRequest):
            return self.handle_attest(request)
        logger.error(f"Unhandled request type: {type(request).__name__}")
        return ExchangeFailed(retryable=False)

    def handle_heartbeat(self, request: HeartbeatRequest) -> HeartbeatResponse:
        return HeartbeatResponse(alive=True)

    def handle_query(self, request: QueryRequest) -> Union[QueryResponse, Rejection, ExchangeFailed]:
        logger.info(f"Received query request for index {request.index}")
        try:
            value = self.query(request.index)
        except OracleProtocolException as e:
            return self._reject_or_fail(e, "query")
        except Exception:
            logger.exception("Query handler failed")
            return ExchangeFailed()
        logger.info(f"Sending query response for index {request.index}")
        return QueryResponse(index=request.index, value=value)

    def handle_attest(self, request: AttestRequest) -> Union[AttestResponse, Rejection, ExchangeFailed]:
        logger.info(f"Received sign request for {request.view.root}")
        try:
            attestation = self.attest(request.view)
        except OracleProtocolException as e:
            return self._reject_or_fail(e, "attest")
        except Exception:
            logger.exception("Attest handler failed")
            return ExchangeFailed()
        return AttestResponse(attestation=attestation)

    def _reject_or_fail(
        self,
        exc: OracleProtocolException,
        stage: str,
    ) -> Union[Rejection, ExchangeFailed]:
        if exc.code in REJECTION_CODES:
            logger.warning(f"Rejecting {stage} request: {exc.code}: {exc.message}")
            return Rejection(error=exc.to_error_model())
        logger.exception(f"{stage} handler failed with {exc.code}")
        return ExchangeFailed()


__all__ = [
    "OracleService",
]
