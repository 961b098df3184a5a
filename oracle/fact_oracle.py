"""
Module 06 - Fact Oracle
Pure, deterministic functions from an index to a fact value.

Owner: Oracle Engineer
Module ID: M06

The attestation logic only depends on the FactOracle contract:
- query(index) is deterministic and side-effect free
- indices below MIN_INDEX or above the ceiling are out of domain and
  raise InvalidArgumentException
- values are arbitrary-precision Python ints

PrimeOracle answers "the Nth prime" with a sieve of Eratosthenes sized
from the Rosser bound p_n < n (ln n + ln ln n) for n >= 6.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional

from core.schemas.errors import InvalidArgumentException


MIN_INDEX = 2

# Largest index answered when no ceiling is configured; keeps the sieve
# within interactive latency and bounded memory
DEFAULT_MAX_INDEX = 10**6


class FactOracle(ABC):
    """
    Abstract base class for fact oracles.

    Subclasses implement ``_compute`` for indices already known to be
    in domain; ``query`` performs the domain checks. Without an explicit
    ``max_index`` the ceiling is DEFAULT_MAX_INDEX.
    """

    name: str = "fact-oracle"

    def __init__(self, max_index: Optional[int] = None) -> None:
        if max_index is None:
            max_index = DEFAULT_MAX_INDEX
        if max_index < MIN_INDEX:
            raise ValueError(f"max_index must be at least {MIN_INDEX}, got {max_index}")
        self.max_index = max_index

    def query(self, index: int) -> int:
        """
        Return the fact for ``index``.

        Raises:
            InvalidArgumentException: If ``index`` is not an integer,
                is below MIN_INDEX, or exceeds ``max_index``
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidArgumentException(
                f"N must be an integer, got {type(index).__name__}",
            )
        if index < MIN_INDEX:
            raise InvalidArgumentException("N must be greater than one.", index=index)
        if index > self.max_index:
            raise InvalidArgumentException(
                f"N must not exceed {self.max_index}.",
                index=index,
            )
        return self._compute(index)

    @abstractmethod
    def _compute(self, index: int) -> int:
        ...


def _sieve_limit(n: int) -> int:
    if n < 6:
        return 13
    log_n = math.log(n)
    return int(n * (log_n + math.log(log_n))) + 1


@lru_cache(maxsize=4096)
def nth_prime(n: int) -> int:
    """
    The nth prime, counting 2 as the first.

    Example:
        >>> nth_prime(10)
        29
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    limit = _sieve_limit(n)
    sieve = bytearray([1]) * (limit + 1)
    sieve[0] = sieve[1] = 0
    for p in range(2, math.isqrt(limit) + 1):
        if sieve[p]:
            sieve[p * p::p] = bytes(len(range(p * p, limit + 1, p)))
    count = 0
    for candidate, is_prime in enumerate(sieve):
        if is_prime:
            count += 1
            if count == n:
                return candidate
    # The Rosser bound guarantees the loop above returns
    raise AssertionError(f"Sieve limit {limit} too small for n={n}")


class PrimeOracle(FactOracle):
    """Answers 'what is the Nth prime number?'."""

    name = "nth-prime"

    def _compute(self, index: int) -> int:
        return nth_prime(index)


__all__ = [
    "MIN_INDEX",
    "DEFAULT_MAX_INDEX",
    "FactOracle",
    "PrimeOracle",
    "nth_prime",
]
