"""
Module 01 - Schemas & Canonicalization
File: ledger.py

Purpose: Transaction components the oracle can be shown.

- Party: a named identity bound to an Ed25519 public key
- CreateCommand: the authorization unit the oracle inspects
- PrimeState: the commitment binding a fact to its requester
- GenericComponent: any other component kind (notary, time window, ...)

Every component carries a ``kind`` tag so disclosed leaves can be
classified after crossing the session channel.
"""

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


CREATE_COMMAND_KIND = "create_command"
PRIME_STATE_KIND = "prime_state"


def ordinal(n: int) -> str:
    """Render ``n`` with its English ordinal suffix (1st, 2nd, 11th, 23rd)."""
    if 10 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


class Party(BaseModel):
    """A protocol participant: a display name and its owning key."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    owning_key: str = Field(
        ...,
        description="Ed25519 public key (0x hex)",
        pattern=r"^0x[0-9a-f]{64}$",
    )

    def __str__(self) -> str:
        return self.name


class CreateCommand(BaseModel):
    """
    Command asserting that ``value`` is the fact for ``index``.

    The oracle only considers itself obligated to act when its own
    key appears in ``signers``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["create_command"] = CREATE_COMMAND_KIND
    index: int = Field(..., description="Fact index (the N in 'Nth prime')")
    value: int = Field(..., description="Claimed fact value, arbitrary precision")
    signers: list[str] = Field(
        ...,
        description="Identity keys required to sign the transaction",
        min_length=1,
    )

    @field_validator("signers")
    @classmethod
    def _normalize_signers(cls, v: list[str]) -> list[str]:
        # Signers are a set; keep one canonical order for hashing
        return sorted(set(v))

    def requires(self, key: str) -> bool:
        return key in self.signers


class PrimeState(BaseModel):
    """The commitment: the fact for ``index`` is ``value``, held by ``requester``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["prime_state"] = PRIME_STATE_KIND
    index: int
    value: int
    requester: Party

    @property
    def participants(self) -> list[Party]:
        return [self.requester]

    def describe(self) -> str:
        return f"The {ordinal(self.index)} prime number is {self.value}."


class GenericComponent(BaseModel):
    """Any transaction component outside the prime vocabulary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("kind")
    @classmethod
    def _reject_reserved_kinds(cls, v: str) -> str:
        if v in (CREATE_COMMAND_KIND, PRIME_STATE_KIND):
            raise ValueError(f"Kind '{v}' is reserved for its typed component")
        return v


# Typed components first so a reserved kind never lands in GenericComponent
LedgerComponent = Union[CreateCommand, PrimeState, GenericComponent]
