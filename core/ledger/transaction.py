"""
Module 05 - Transactions
Ordered component lists committed to by a selective disclosure tree,
and the signatures collected over their root.

Owner: Protocol/Crypto Engineer
Module ID: M05

The transaction id is the Merkle root of its components. Every party,
the oracle included, signs that id, so a signature made over a filtered
view is valid for the full transaction.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from core.crypto.signatures import Signature, verify
from core.merkle.partial_tree import ComponentPredicate, PartialView, SelectiveDisclosureTree
from core.schemas.errors import SignatureInvalidException
from core.schemas.ledger import CreateCommand, LedgerComponent, PrimeState


class WireTransaction:
    """An ordered, immutable list of components and its disclosure tree."""

    def __init__(
        self,
        components: Sequence[LedgerComponent],
        privacy_salt: bytes | None = None,
    ) -> None:
        self._tree = SelectiveDisclosureTree.build(components, privacy_salt)

    @property
    def components(self) -> tuple[LedgerComponent, ...]:
        return self._tree.components

    @property
    def privacy_salt(self) -> bytes:
        return self._tree.privacy_salt

    @property
    def id(self) -> str:
        return self._tree.id

    @property
    def id_bytes(self) -> bytes:
        return self._tree.root

    @property
    def commands(self) -> list[CreateCommand]:
        return [c for c in self.components if isinstance(c, CreateCommand)]

    @property
    def outputs(self) -> list[PrimeState]:
        return [c for c in self.components if isinstance(c, PrimeState)]

    @property
    def required_signers(self) -> list[str]:
        """Union of every command's signers, sorted."""
        keys: set[str] = set()
        for command in self.commands:
            keys.update(command.signers)
        return sorted(keys)

    def build_filtered_transaction(self, predicate: ComponentPredicate) -> PartialView:
        return self._tree.filter(predicate)


@dataclass(frozen=True)
class SignedTransaction:
    """A transaction plus the signatures gathered over its id so far."""

    tx: WireTransaction
    signatures: tuple[Signature, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.tx.id

    @property
    def signers(self) -> list[str]:
        return [s.by for s in self.signatures]

    def with_additional_signature(self, signature: Signature) -> "SignedTransaction":
        return SignedTransaction(tx=self.tx, signatures=self.signatures + (signature,))

    def verify_signatures(self) -> None:
        """
        Check every attached signature is valid over the transaction id.

        Raises:
            SignatureInvalidException: On the first signature that fails
        """
        for signature in self.signatures:
            if not verify(self.tx.id_bytes, signature):
                raise SignatureInvalidException(
                    f"Signature by {signature.by} does not verify over {self.id}",
                    signer=signature.by,
                )

    def missing_signers(self) -> list[str]:
        """Required signers with no valid signature attached."""
        valid = {s.by for s in self.signatures if verify(self.tx.id_bytes, s)}
        return [key for key in self.tx.required_signers if key not in valid]

    def verify_required_signatures(self) -> None:
        """
        Raises:
            SignatureInvalidException: If any signature is invalid or a
                required signer has not signed
        """
        self.verify_signatures()
        missing = self.missing_signers()
        if missing:
            raise SignatureInvalidException(
                f"Transaction {self.id} is missing {len(missing)} required signature(s)",
                details={"missing": missing},
            )
