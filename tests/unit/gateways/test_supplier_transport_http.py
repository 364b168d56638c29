import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from hotel_booking.application.dtos.booking_dto import RequestContext
from hotel_booking.application.error_classifier import ErrorKind, classify_error
from hotel_booking.domain.errors import RateLimitedError, SupplierTransportError
from hotel_booking.infrastructure.circuit_breaker import reset_supplier_breaker, supplier_breaker
from hotel_booking.infrastructure.gateways.supplier_transport_http import (
    SupplierTransportHTTP,
    parse_retry_after,
)


def _response(status_code: int, body=None, headers=None, invalid_json: bool = False):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    if invalid_json:
        response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
    else:
        response.json.return_value = body
    return response


def _client_with(mock_client_cls, *, response=None, side_effect=None):
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = response
    mock_client_cls.return_value = mock_client
    return mock_client


class TestSupplierTransportHTTP(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        reset_supplier_breaker()
        self.transport = SupplierTransportHTTP(base_url="http://backend.test/", timeout_seconds=5)
        self.context = RequestContext(user_id="user-42", user_ip="203.0.113.7")

    def tearDown(self):
        reset_supplier_breaker()

    @patch("httpx.AsyncClient")
    async def test_success_returns_data_and_adds_user_id(self, mock_client_cls):
        mock_client = _client_with(
            mock_client_cls,
            response=_response(200, {"status": "ok", "data": {"booking_hash": "p-123"}}),
        )

        result = await self.transport.call(
            "/api/ratehawk/prebook", {"book_hash": "h-123"}, self.context
        )

        self.assertTrue(result.ok)
        self.assertEqual(result.data, {"booking_hash": "p-123"})
        call = mock_client.post.call_args
        self.assertEqual(call.args[0], "http://backend.test/api/ratehawk/prebook")
        self.assertEqual(call.kwargs["json"], {"book_hash": "h-123", "userId": "user-42"})
        mock_client_cls.assert_called_once_with(timeout=5)

    @patch("httpx.AsyncClient")
    async def test_429_raises_rate_limited_with_retry_after(self, mock_client_cls):
        response = _response(429, headers={"Retry-After": "45"}, invalid_json=True)
        mock_client = _client_with(mock_client_cls, response=response)

        with self.assertRaises(RateLimitedError) as ctx:
            await self.transport.call("/api/ratehawk/order/form", {}, self.context)

        self.assertEqual(ctx.exception.retry_after_seconds, 45)
        self.assertIn("45 seconds", ctx.exception.message)
        self.assertEqual(mock_client.post.await_count, 1)
        response.json.assert_not_called()

    @patch("httpx.AsyncClient")
    async def test_429_without_header_defaults_to_30_seconds(self, mock_client_cls):
        _client_with(mock_client_cls, response=_response(429))

        with self.assertRaises(RateLimitedError) as ctx:
            await self.transport.call("/api/ratehawk/prebook", {})

        self.assertEqual(ctx.exception.retry_after_seconds, 30)

    @patch("httpx.AsyncClient")
    async def test_supplier_error_body_keeps_code(self, mock_client_cls):
        _client_with(
            mock_client_cls,
            response=_response(
                200,
                {"status": "error", "error": {"code": "rate_not_found", "message": "Rate gone"}},
            ),
        )

        result = await self.transport.call("/api/ratehawk/order/form", {})

        self.assertFalse(result.ok)
        self.assertEqual(result.error.code, "rate_not_found")
        self.assertEqual(result.error.message, "Rate gone")

    @patch("httpx.AsyncClient")
    async def test_non_json_body_is_normalized(self, mock_client_cls):
        _client_with(mock_client_cls, response=_response(200, invalid_json=True))

        result = await self.transport.call("/api/ratehawk/order/status", {"order_id": "1"})

        self.assertEqual(result.error.code, "invalid_response")

    @patch("httpx.AsyncClient")
    async def test_non_2xx_uses_error_message(self, mock_client_cls):
        _client_with(
            mock_client_cls,
            response=_response(400, {"error": {"message": "Invalid book_hash"}}),
        )

        result = await self.transport.call("/api/ratehawk/prebook", {})

        self.assertEqual(result.error.code, "http_error")
        self.assertEqual(result.error.message, "Invalid book_hash")
        self.assertEqual(result.http_status, 400)

    @patch("httpx.AsyncClient")
    async def test_non_2xx_without_body_message(self, mock_client_cls):
        _client_with(mock_client_cls, response=_response(404, {}))

        result = await self.transport.call("/api/ratehawk/order/info", {})

        self.assertEqual(result.error.message, "API Error: 404")

    @patch("httpx.AsyncClient")
    async def test_5xx_is_a_transport_fault(self, mock_client_cls):
        _client_with(mock_client_cls, response=_response(503, {"error": {"message": "Down"}}))

        result = await self.transport.call("/api/ratehawk/order/form", {})

        self.assertEqual(result.http_status, 503)
        with self.assertRaises(SupplierTransportError) as ctx:
            result.raise_for_error()
        self.assertEqual(classify_error(ctx.exception), ErrorKind.TRANSPORT)

    @patch("httpx.AsyncClient")
    async def test_network_error_is_normalized(self, mock_client_cls):
        _client_with(mock_client_cls, side_effect=httpx.ConnectError("connection refused"))

        result = await self.transport.call("/api/ratehawk/order/form", {})

        self.assertEqual(result.error.code, "network_error")
        self.assertIn("Network error", result.error.message)

    @patch("httpx.AsyncClient")
    async def test_open_circuit_fails_fast(self, mock_client_cls):
        mock_client = _client_with(mock_client_cls, response=_response(200, {"data": {}}))
        supplier_breaker.open()

        result = await self.transport.call("/api/ratehawk/order/form", {})

        self.assertEqual(result.error.code, "circuit_open")
        mock_client.post.assert_not_called()


class TestParseRetryAfter(unittest.TestCase):
    def test_seconds(self):
        self.assertEqual(parse_retry_after("45"), 45)

    def test_missing_or_invalid(self):
        self.assertEqual(parse_retry_after(None), 30)
        self.assertEqual(parse_retry_after("soon"), 30)

    def test_http_date_in_the_past(self):
        self.assertEqual(parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT"), 0)
