"""
Module 09 - Session Channels
Point-to-point channels carrying one request and its response.

Owner: Protocol Engineer
Module ID: M09

The core only needs ``send_and_receive``; reliability and ordering are
the transport's concern. LocalSession connects a requester to an
in-process OracleService and, by default, pushes every message through
canonical JSON so only wire data crosses the role boundary.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

from core.config.runtime import RuntimeConfig, configure_logging
from core.schemas.errors import (
    CanonicalizationException,
    ExchangeFailedException,
    SchemaValidationException,
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
    decode_request,
    decode_response,
    encode_message,
)
from oracle.service import OracleService


logger = logging.getLogger(__name__)

Request = Union[HeartbeatRequest, QueryRequest, AttestRequest]
Response = Union[HeartbeatResponse, QueryResponse, AttestResponse, Rejection, ExchangeFailed]


class SessionChannel(ABC):
    """A channel to one identified counterparty."""

    @property
    @abstractmethod
    def counterparty(self) -> Party:
        ...

    @abstractmethod
    def send_and_receive(self, request: Request) -> Response:
        """
        Deliver ``request`` and wait for the response.

        Raises:
            ExchangeFailedException: If the transport cannot deliver
                the request or decode the response
        """
        ...


class LocalSession(SessionChannel):
    """In-process channel to an OracleService."""

    def __init__(self, service: OracleService, serialize_messages: bool = True) -> None:
        self._service = service
        self.serialize_messages = serialize_messages

    @classmethod
    def from_config(
        cls,
        config: RuntimeConfig,
        service: Optional[OracleService] = None,
    ) -> "LocalSession":
        """
        Host both roles in this process as ``config`` describes.

        Configures logging, builds the oracle from ``config`` unless one
        is given, and honours ``protocol.serialize_messages``.
        """
        configure_logging(config.debug)
        service = service or OracleService.from_config(config)
        return cls(service, serialize_messages=config.protocol.serialize_messages)

    @property
    def counterparty(self) -> Party:
        return self._service.identity

    def send_and_receive(self, request: Request) -> Response:
        logger.debug(f"Delivering {type(request).__name__} to {self.counterparty}")
        if not self.serialize_messages:
            return self._service.handle(request)

        try:
            delivered = decode_request(encode_message(request))
        except (CanonicalizationException, SchemaValidationException) as e:
            raise ExchangeFailedException(
                f"Could not deliver {type(request).__name__}: {e}",
                stage="send",
            ) from e

        response = self._service.handle(delivered)

        try:
            return decode_response(encode_message(response))
        except (CanonicalizationException, SchemaValidationException) as e:
            raise ExchangeFailedException(
                f"Could not decode response: {e}",
                stage="receive",
            ) from e


__all__ = [
    "Request",
    "Response",
    "SessionChannel",
    "LocalSession",
]
