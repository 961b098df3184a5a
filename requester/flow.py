"""
Module 10 - Create Prime Flow
Requester-side flow that obtains a fact from the oracle and the
oracle's signature over a transaction recording it.

Owner: Protocol Engineer
Module ID: M10

Steps:
1. INITIALISING   - heartbeat the oracle (optional)
2. QUERYING       - ask the oracle for the fact at ``index``
3. BUILDING       - command (signers: oracle + requester) and state
4. VERIFYING      - run the prime contract
5. SIGNING        - requester signs the transaction id
6. ORACLE_SIGNING - disclose only the oracle's commands and attest
7. ASSEMBLING     - append the attestation and check all signatures

Broadcasting the result is left to the caller.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from core.config.runtime import RuntimeConfig
from core.crypto.signatures import SigningService
from core.ledger.contract import PrimeContract, oracle_command_filter
from core.ledger.transaction import SignedTransaction, WireTransaction
from core.schemas.errors import ExchangeFailedException
from core.schemas.ledger import CreateCommand, LedgerComponent, Party, PrimeState

from .exchanges import AttestExchange, HeartbeatExchange, QueryExchange
from .session import SessionChannel


logger = logging.getLogger(__name__)


class FlowStep(str, Enum):
    INITIALISING = "Initialising flow."
    QUERYING = "Querying Oracle for an nth prime."
    BUILDING = "Building transaction."
    VERIFYING = "Verifying transaction."
    SIGNING = "Signing transaction."
    ORACLE_SIGNING = "Requesting Oracle signature."
    ASSEMBLING = "Assembling signed transaction."


class CreatePrimeFlow:
    """
    Record the ``index``-th prime on a transaction attested by the oracle.

    Args:
        index: The N in 'Nth prime'
        identity: The requester's identity
        signing_service: Must hold the requester's key
        session: Channel to the oracle
        heartbeat: Check the oracle is alive before querying
        extra_components: Further components for the transaction; they
            are never disclosed to the oracle
        privacy_salt: Fixed salt for the transaction tree (random if None)
    """

    def __init__(
        self,
        index: int,
        identity: Party,
        signing_service: SigningService,
        session: SessionChannel,
        heartbeat: bool = True,
        extra_components: Sequence[LedgerComponent] = (),
        privacy_salt: Optional[bytes] = None,
    ) -> None:
        if not signing_service.holds(identity.owning_key):
            raise ValueError(f"Signing service does not hold the key for '{identity.name}'")
        self.index = index
        self.identity = identity
        self.signing_service = signing_service
        self.session = session
        self.heartbeat = heartbeat
        self.extra_components = tuple(extra_components)
        self.privacy_salt = privacy_salt
        self.steps: list[FlowStep] = []

    @classmethod
    def from_config(
        cls,
        config: RuntimeConfig,
        index: int,
        identity: Party,
        signing_service: SigningService,
        session: SessionChannel,
        **kwargs,
    ) -> "CreatePrimeFlow":
        """Build a flow whose heartbeat follows ``config.protocol.heartbeat``."""
        return cls(
            index,
            identity,
            signing_service,
            session,
            heartbeat=config.protocol.heartbeat,
            **kwargs,
        )

    @property
    def oracle(self) -> Party:
        return self.session.counterparty

    def _step(self, step: FlowStep) -> None:
        self.steps.append(step)
        logger.info(step.value)

    def call(self) -> SignedTransaction:
        """
        Run the flow.

        Raises:
            InvalidArgumentException: If the oracle refused the index
            AttestationRejectedException: If the oracle refused to sign
            ContractViolationException: If the built transaction is invalid
            ExchangeFailedException: On heartbeat or transport failure
        """
        self._step(FlowStep.INITIALISING)
        if self.heartbeat and not HeartbeatExchange(self.session).run():
            raise ExchangeFailedException("Unsuccessful heartbeat", stage="heartbeat")

        self._step(FlowStep.QUERYING)
        value = QueryExchange(self.session, self.index).run()

        self._step(FlowStep.BUILDING)
        command = CreateCommand(
            index=self.index,
            value=value,
            signers=[self.oracle.owning_key, self.identity.owning_key],
        )
        state = PrimeState(index=self.index, value=value, requester=self.identity)
        tx = WireTransaction(
            [command, state, *self.extra_components],
            privacy_salt=self.privacy_salt,
        )

        self._step(FlowStep.VERIFYING)
        PrimeContract.verify(tx)

        self._step(FlowStep.SIGNING)
        stx = SignedTransaction(tx).with_additional_signature(
            self.signing_service.sign(self.identity.owning_key, tx.id_bytes)
        )

        self._step(FlowStep.ORACLE_SIGNING)
        view = tx.build_filtered_transaction(oracle_command_filter(self.oracle.owning_key))
        attestation = AttestExchange(self.session, view).run()

        self._step(FlowStep.ASSEMBLING)
        stx = stx.with_additional_signature(attestation.signature)
        stx.verify_required_signatures()
        logger.info(f"{state.describe()} Transaction {stx.id} carries {len(stx.signatures)} signatures")
        return stx


__all__ = [
    "FlowStep",
    "CreatePrimeFlow",
]
