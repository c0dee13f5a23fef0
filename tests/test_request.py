"""
Unit tests for request assembly and header negotiation.
"""

import datetime
import hashlib
import hmac
import json
from unittest.mock import Mock

import pytest
from pydantic import BaseModel, Field

from gridy_client import (
    ApiRequestType,
    Configuration,
    FixedClock,
    HeaderSelector,
    InvalidArgumentError,
    OPERATIONS,
    RequestAssembler,
)

NONCE = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
INSTANT = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc) + datetime.timedelta(
    seconds=1700000000, milliseconds=7
)


class FixedNonces:
    def __init__(self, nonce=NONCE):
        self.nonce = nonce
        self.calls = 0

    def next(self):
        self.calls += 1
        return self.nonce


class VerifyRequest(BaseModel):
    id: str
    api_user: str = Field(alias="apiUser")
    type: int
    body: str = None


@pytest.fixture
def config():
    return Configuration(api_user="u1", api_secret="s1", host="https://api.example.test/prod/")


@pytest.fixture
def assembler(config):
    return RequestAssembler(config, clock=FixedClock(INSTANT), nonces=FixedNonces())


class TestRequestAssembler:
    """Test signed request construction."""

    def test_verify_end_to_end(self, assembler):
        """Test a verify request carries the exact nonce, timestamp and signature."""
        request = assembler.build(OPERATIONS["verify"], {"id": "abc", "type": 170})

        message = f"x-gridy-utctime: 1700000000007\nx-gridy-cnonce: {NONCE}"
        signature = hmac.new(b"s1", message.encode('utf-8'), hashlib.sha512).hexdigest()

        assert request.method == "POST"
        assert request.url == "https://api.example.test/prod/v1/svc/verify"
        assert request.headers["x-gridy-apiuser"] == "u1"
        assert request.headers["x-gridy-utctime"] == "1700000000007"
        assert request.headers["x-gridy-cnonce"] == NONCE
        assert request.headers["Authorization"] == (
            "gridy-hmac: apiuser=u1,signedheaders=x-gridy-utctime;x-gridy-cnonce,"
            f"algorithm=gridy-hmac512,signature={signature}"
        )

    def test_json_body(self, assembler):
        payload = {"id": "abc", "type": ApiRequestType.VERIFY_AUTHCODE}
        request = assembler.build(OPERATIONS["verify"], payload)

        assert request.headers["Content-Type"] == "application/json; charset=utf-8"
        assert request.headers["Accept"] == "application/json; charset=utf-8"
        assert request.body == b'{"id":"abc","type":170}'

    def test_pydantic_payload(self, assembler):
        payload = VerifyRequest(id="1", apiUser="u1", type=ApiRequestType.CHALLENGE_NEW)
        request = assembler.build(OPERATIONS["challenge"], payload)

        assert json.loads(request.body) == {"id": "1", "apiUser": "u1", "type": 150}

    def test_non_json_content_type_passes_through(self, assembler):
        request = assembler.build(OPERATIONS["status"], "raw=1", content_type="text/plain")

        assert request.headers["Content-Type"] == "text/plain"
        assert request.body == b"raw=1"

    def test_bytes_passthrough(self, assembler):
        request = assembler.build(OPERATIONS["status"], b"\x00\x01", content_type="application/octet-stream")

        assert request.body == b"\x00\x01"

    @pytest.mark.parametrize("payload", [{"id": "1"}, ["a"], 42])
    def test_non_json_content_type_rejects_structured_payload(self, assembler, payload):
        with pytest.raises(InvalidArgumentError, match="str or bytes"):
            assembler.build(OPERATIONS["status"], payload, content_type="text/plain")

    def test_time_has_no_body(self, assembler):
        request = assembler.build(OPERATIONS["time"])

        assert request.method == "GET"
        assert request.url.endswith("/v1/svc/time")
        assert request.body == b""
        assert request.headers["Content-Type"] == "application/json"
        assert "Authorization" in request.headers

    @pytest.mark.parametrize("payload", [None, {}, [], "", b""])
    def test_missing_payload_rejected_before_headers(self, config, payload):
        """Test an empty payload fails before any header is built."""
        clock = Mock()
        nonces = Mock()
        selector = Mock()
        assembler = RequestAssembler(config, clock=clock, nonces=nonces, header_selector=selector)

        with pytest.raises(InvalidArgumentError, match="challenge"):
            assembler.build(OPERATIONS["challenge"], payload)

        clock.now.assert_not_called()
        nonces.next.assert_not_called()
        selector.select_headers.assert_not_called()

    def test_invalid_argument_is_value_error(self, assembler):
        with pytest.raises(ValueError):
            assembler.build(OPERATIONS["blocked"], None)

    def test_one_nonce_per_request(self, config):
        nonces = FixedNonces()
        assembler = RequestAssembler(config, clock=FixedClock(INSTANT), nonces=nonces)

        assembler.build(OPERATIONS["status"], {"id": "1"})
        assembler.build(OPERATIONS["status"], {"id": "2"})

        assert nonces.calls == 2

    def test_fresh_nonce_each_request(self, config):
        assembler = RequestAssembler(config, clock=FixedClock(INSTANT))

        first = assembler.build(OPERATIONS["status"], {"id": "1"})
        second = assembler.build(OPERATIONS["status"], {"id": "1"})

        assert first.headers["x-gridy-cnonce"] != second.headers["x-gridy-cnonce"]
        assert first.headers["Authorization"] != second.headers["Authorization"]

    def test_user_agent_default(self, assembler, config):
        request = assembler.build(OPERATIONS["time"])

        assert request.headers["User-Agent"] == config.user_agent

    def test_user_agent_omitted_when_not_configured(self):
        config = Configuration(api_user="u1", api_secret="s1", user_agent="")
        request = RequestAssembler(config).build(OPERATIONS["time"])

        assert "User-Agent" not in request.headers

    def test_caller_headers_win_over_user_agent(self, assembler):
        request = assembler.build(OPERATIONS["time"], extra_headers={"User-Agent": "custom/1.0"})

        assert request.headers["User-Agent"] == "custom/1.0"

    def test_caller_headers_cannot_replace_signing_headers(self, assembler):
        request = assembler.build(
            OPERATIONS["time"],
            extra_headers={"x-gridy-cnonce": "forged", "Authorization": "forged"},
        )

        assert request.headers["x-gridy-cnonce"] == NONCE
        assert request.headers["Authorization"].startswith("gridy-hmac: apiuser=u1,")

    @pytest.mark.parametrize("name", ["authorization", "AUTHORIZATION", "X-Gridy-Cnonce", "X-GRIDY-UTCTIME", "x-Gridy-ApiUser"])
    def test_caller_headers_any_case_cannot_replace_signing_headers(self, assembler, name):
        """Test a caller header differing only in case is dropped, not sent twice."""
        request = assembler.build(OPERATIONS["verify"], {"a": 1}, extra_headers={name: "forged"})

        matching = [k for k in request.headers if k.lower() == name.lower()]
        assert len(matching) == 1
        assert "forged" not in request.headers.values()

    def test_caller_user_agent_any_case_replaces_default(self, assembler):
        request = assembler.build(OPERATIONS["time"], extra_headers={"user-agent": "custom/2.0"})

        assert [k for k in request.headers if k.lower() == "user-agent"] == ["user-agent"]
        assert request.headers["user-agent"] == "custom/2.0"

    def test_caller_extra_header_kept(self, assembler):
        request = assembler.build(OPERATIONS["time"], extra_headers={"X-Request-Id": "r1"})

        assert request.headers["X-Request-Id"] == "r1"

    def test_query_string(self, assembler):
        request = assembler.build(OPERATIONS["time"], query={"a": "1", "b": "x y"})

        assert request.url == "https://api.example.test/prod/v1/svc/time?a=1&b=x+y"

    def test_custom_templates_used(self):
        config = Configuration(
            api_user="u1",
            api_secret="s1",
            auth_header_template="HMAC {} {}",
            signed_headers_template="{}:{}",
        )
        request = RequestAssembler(config, clock=FixedClock(INSTANT), nonces=FixedNonces()).build(
            OPERATIONS["time"]
        )
        mac = hmac.new(b"s1", f"1700000000007:{NONCE}".encode('utf-8'), hashlib.sha512).hexdigest()

        assert request.headers["Authorization"] == f"HMAC u1 {mac}"


class TestHeaderSelector:
    """Test Accept / Content-Type negotiation."""

    @pytest.fixture
    def selector(self):
        return HeaderSelector()

    def test_default_content_type(self, selector):
        headers = selector.select_headers(["application/json"], None)

        assert headers["Content-Type"] == "application/json"

    def test_preferred_content_type(self, selector):
        headers = selector.select_headers([], "text/plain")

        assert headers == {"Content-Type": "text/plain"}

    def test_accept_prefers_json(self, selector):
        headers = selector.select_headers(["text/xml", "application/json", "application/problem+json"], None)

        assert headers["Accept"] == "application/json,application/problem+json"

    def test_accept_without_json(self, selector):
        headers = selector.select_headers(["text/xml", "text/plain"], None)

        assert headers["Accept"] == "text/xml,text/plain"

    def test_multipart(self, selector):
        headers = selector.select_headers([], "application/json", multipart=True)

        assert headers["Content-Type"] == "multipart/form-data"
