"""
Requester role: session channels, protocol exchanges and the flow that
builds an oracle-attested prime transaction.
"""
from .session import LocalSession, SessionChannel
from .exchanges import AttestExchange, ExchangeState, HeartbeatExchange, QueryExchange
from .flow import CreatePrimeFlow, FlowStep

__all__ = [
    "LocalSession",
    "SessionChannel",
    "AttestExchange",
    "ExchangeState",
    "HeartbeatExchange",
    "QueryExchange",
    "CreatePrimeFlow",
    "FlowStep",
]
