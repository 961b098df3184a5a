"""
Common test fixtures shared by all modules.

Provides factory functions for the protocol's core data structures:
- Party / SigningService
- CreateCommand / PrimeState / GenericComponent
- WireTransaction and filtered views
- OracleService wired to a LocalSession

Also provides ``tamper_first_visible`` for building forged views.
"""

from typing import Optional, Sequence

from core.crypto.signatures import SigningService
from core.ledger.contract import oracle_command_filter
from core.ledger.transaction import WireTransaction
from core.merkle.partial_tree import BranchNode, PartialView, VisibleLeaf
from core.schemas.ledger import CreateCommand, GenericComponent, LedgerComponent, Party, PrimeState
from oracle.service import OracleService
from requester.session import LocalSession


FIXED_SALT = bytes(range(32))


# =============================================================================
# Identity Factories
# =============================================================================

def make_party(name: str = "PartyA") -> tuple[Party, SigningService]:
    """Create an identity together with the service holding its key."""
    signing_service = SigningService.generate()
    party = Party(name=name, owning_key=signing_service.default_key)
    return party, signing_service


def make_oracle_service(
    name: str = "Oracle",
    passthrough_kinds: Sequence[str] = (),
) -> OracleService:
    return OracleService.create(name=name, passthrough_kinds=passthrough_kinds)


def make_session(
    service: Optional[OracleService] = None,
    serialize_messages: bool = True,
) -> LocalSession:
    return LocalSession(service or make_oracle_service(), serialize_messages=serialize_messages)


# =============================================================================
# Component Factories
# =============================================================================

def make_command(
    oracle_key: str,
    index: int = 10,
    value: int = 29,
    extra_signers: Sequence[str] = (),
) -> CreateCommand:
    return CreateCommand(index=index, value=value, signers=[oracle_key, *extra_signers])


def make_state(
    requester: Party,
    index: int = 10,
    value: int = 29,
) -> PrimeState:
    return PrimeState(index=index, value=value, requester=requester)


def make_notary(name: str = "Notary") -> GenericComponent:
    return GenericComponent(kind="notary", data={"name": name})


# =============================================================================
# Transaction Factories
# =============================================================================

def make_transaction(
    oracle_key: str,
    requester: Party,
    index: int = 10,
    value: int = 29,
    extra_components: Sequence[LedgerComponent] = (),
) -> WireTransaction:
    """A command + state transaction, optionally with extra components."""
    command = make_command(oracle_key, index=index, value=value, extra_signers=[requester.owning_key])
    state = make_state(requester, index=index, value=value)
    return WireTransaction([command, state, *extra_components], privacy_salt=FIXED_SALT)


def make_oracle_view(
    oracle_key: str,
    requester: Party,
    index: int = 10,
    value: int = 29,
) -> PartialView:
    """Filtered view exposing only the oracle's create command."""
    tx = make_transaction(oracle_key, requester, index=index, value=value)
    return tx.build_filtered_transaction(oracle_command_filter(oracle_key))


# =============================================================================
# Tampering
# =============================================================================

def tamper_first_visible(view: PartialView, component: LedgerComponent) -> PartialView:
    """Return a copy of ``view`` with its first disclosed component replaced."""
    replaced = False

    def rewrite(node):
        nonlocal replaced
        if isinstance(node, VisibleLeaf) and not replaced:
            replaced = True
            return node.model_copy(update={"component": component})
        if isinstance(node, BranchNode):
            left = rewrite(node.left)
            right = rewrite(node.right) if node.right is not None else None
            return node.model_copy(update={"left": left, "right": right})
        return node

    tree = rewrite(view.tree) if view.tree is not None else None
    if not replaced:
        raise ValueError("View has no disclosed leaf to tamper with")
    return view.model_copy(update={"tree": tree})
