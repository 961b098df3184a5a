"""
Ledger primitives used by the requester role: transactions, signed
transactions and the prime contract rules.
"""
from .transaction import SignedTransaction, WireTransaction
from .contract import PrimeContract, oracle_command_filter

__all__ = [
    "SignedTransaction",
    "WireTransaction",
    "PrimeContract",
    "oracle_command_filter",
]
