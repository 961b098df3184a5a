"""
Module 01 - Protocol Message Unit Tests
Tests for core/schemas/protocol.py and core/schemas/versioning.py
"""
import pytest
from core.schemas.errors import ErrorCodes, OracleError, SchemaValidationException
from core.schemas.protocol import (
    AttestRequest,
    ExchangeFailed,
    HeartbeatRequest,
    QueryRequest,
    QueryResponse,
    Rejection,
    decode_request,
    decode_response,
    encode_message,
)
from core.schemas.versioning import (
    PROTOCOL_VERSION,
    UnsupportedProtocolVersionError,
    assert_supported_protocol_version,
    is_compatible_protocol_version,
)

from fixtures import make_oracle_view


class TestEncoding:
    """Messages serialize to canonical JSON tagged by type."""

    def test_query_request(self):
        assert encode_message(QueryRequest(index=10)) == (
            '{"index":10,"protocol_version":"v1","type":"query"}'
        )

    def test_heartbeat_decodes_by_type(self):
        decoded = decode_request(encode_message(HeartbeatRequest()))

        assert isinstance(decoded, HeartbeatRequest)
        assert decoded.protocol_version == PROTOCOL_VERSION

    def test_big_value_keeps_precision(self):
        value = 2**200 + 1
        decoded = decode_response(encode_message(QueryResponse(index=10, value=value)))

        assert isinstance(decoded, QueryResponse)
        assert decoded.value == value

    def test_attest_request_carries_view(self, oracle_key, requester):
        party, _ = requester
        view = make_oracle_view(oracle_key, party)

        decoded = decode_request(encode_message(AttestRequest(view=view)))

        assert isinstance(decoded, AttestRequest)
        assert decoded.view == view

    def test_rejection_code(self):
        rejection = Rejection(error=OracleError(code=ErrorCodes.FACT_MISMATCH, message="nope"))
        decoded = decode_response(encode_message(rejection))

        assert isinstance(decoded, Rejection)
        assert decoded.code == ErrorCodes.FACT_MISMATCH

    def test_exchange_failed_defaults(self):
        decoded = decode_response(encode_message(ExchangeFailed()))

        assert isinstance(decoded, ExchangeFailed)
        assert decoded.retryable


class TestDecodingErrors:
    """Malformed messages fail validation."""

    def test_unknown_type(self):
        with pytest.raises(SchemaValidationException):
            decode_request('{"type":"subscribe"}')

    def test_response_type_is_not_a_request(self):
        with pytest.raises(SchemaValidationException):
            decode_request(encode_message(ExchangeFailed()))

    def test_extra_fields_forbidden(self):
        with pytest.raises(SchemaValidationException) as exc_info:
            decode_request('{"type":"query","index":10,"debug":true}')

        assert exc_info.value.code == ErrorCodes.SCHEMA_VALIDATION_ERROR
        assert "debug" in exc_info.value.details["field_path"]

    def test_bad_response_field(self):
        with pytest.raises(SchemaValidationException, match="response"):
            decode_response('{"type":"query_result","index":"ten","value":29}')


class TestVersioning:
    """Tests for protocol version helpers."""

    def test_current_version_supported(self):
        assert is_compatible_protocol_version(PROTOCOL_VERSION)
        assert_supported_protocol_version(PROTOCOL_VERSION)

    def test_unknown_version(self):
        assert not is_compatible_protocol_version("v0")
        with pytest.raises(UnsupportedProtocolVersionError, match="v0"):
            assert_supported_protocol_version("v0")
