# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Tests for the Airbrake forwarder."""

import asyncio

import httpx
import pytest

from airbrake_proxy.airbrake import AirbrakeForwarder, classify_airbrake_response
from airbrake_proxy.models import Classification
from proxy_store import CorrelationStoreError, InMemoryCorrelationStore
from conftest import AIRBRAKE_RATE_LIMITED_XML, AIRBRAKE_SUCCESS_XML, NOTICE_XML, mock_client

NOTICE_PATH = "/notifier_api/v2/notices"
IDENTIFIER = "9f1c2b7e-3d4a-4b5c-8d6e-7f8091a2b3c4"


def make_forwarder(client, store, metrics, logger, timeout_ms=1000):
    return AirbrakeForwarder(
        client=client,
        host="airbrake.test",
        port=443,
        protocol="https",
        timeout_ms=timeout_ms,
        store=store,
        metrics=metrics,
        logger=logger,
    )


class TestClassifyAirbrakeResponse:
    """Tests for classify_airbrake_response."""

    def test_success(self):
        assert classify_airbrake_response(AIRBRAKE_SUCCESS_XML) == (Classification.SUCCESS, "1234567890")

    def test_rate_limited(self):
        assert classify_airbrake_response(AIRBRAKE_RATE_LIMITED_XML) == (Classification.RATE_LIMITED, None)

    @pytest.mark.parametrize("body", [
        b"",
        b"<html><body>Bad Gateway</body></html>",
        b"<error>Invalid API key</error>",
        b"<notice><url>http://x</url></notice>",
        b"<notice><id>  </id></notice>",
        b"Service Unavailable",
    ])
    def test_malformed(self, body):
        assert classify_airbrake_response(body) == (Classification.MALFORMED, None)


class TestAirbrakeForwarder:
    """Tests for AirbrakeForwarder.forward."""

    @pytest.mark.asyncio
    async def test_success_records_notice_id(self, store, metrics, logger):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=AIRBRAKE_SUCCESS_XML)

        forwarder = make_forwarder(mock_client(handler), store, metrics, logger)

        outcome = await forwarder.forward(NOTICE_PATH, IDENTIFIER, NOTICE_XML)

        assert outcome is Classification.SUCCESS
        assert store.values[IDENTIFIER] == "1234567890"
        assert metrics.get_counter_total("airbrake.request.success") == 1
        assert len(metrics.get_timings("airbrake.request")) == 1

        request = seen[0]
        assert request.method == "POST"
        assert request.url.scheme == "https"
        assert request.url.host == "airbrake.test"
        assert request.url.path == NOTICE_PATH
        assert request.headers["content-type"] == "text/xml"
        assert request.headers["connection"] == "close"
        assert request.content == NOTICE_XML
        assert IDENTIFIER.encode() not in request.content

    @pytest.mark.asyncio
    async def test_query_string_is_forwarded(self, store, metrics, logger):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=AIRBRAKE_SUCCESS_XML)

        forwarder = make_forwarder(mock_client(handler), store, metrics, logger)

        await forwarder.forward(NOTICE_PATH + "?api_key=abc", IDENTIFIER, NOTICE_XML)

        assert seen[0].url.path == NOTICE_PATH
        assert seen[0].url.query == b"api_key=abc"

    @pytest.mark.asyncio
    async def test_rate_limited(self, store, metrics, logger):
        forwarder = make_forwarder(
            mock_client(lambda request: httpx.Response(503, content=AIRBRAKE_RATE_LIMITED_XML)),
            store, metrics, logger,
        )

        outcome = await forwarder.forward(NOTICE_PATH, IDENTIFIER, NOTICE_XML)

        assert outcome is Classification.RATE_LIMITED
        assert store.values == {}
        assert metrics.get_counter_names() == ["airbrake.request.fail.ratelimited"]

    @pytest.mark.asyncio
    async def test_malformed_response_has_no_store_write(self, store, metrics, logger):
        forwarder = make_forwarder(
            mock_client(lambda request: httpx.Response(502, content=b"<html>Bad Gateway</html>")),
            store, metrics, logger,
        )

        outcome = await forwarder.forward(NOTICE_PATH, IDENTIFIER, NOTICE_XML)

        assert outcome is Classification.MALFORMED
        assert store.values == {}
        assert metrics.get_counter_names() == ["airbrake.request.fail.xml"]
        errors = logger.get_logs("ERROR")
        assert len(errors) == 1
        assert "<html>Bad Gateway</html>" in errors[0]["message"]

    @pytest.mark.asyncio
    async def test_timeout_emits_exactly_one_metric(self, store, metrics, logger):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, content=AIRBRAKE_SUCCESS_XML)

        forwarder = make_forwarder(mock_client(handler), store, metrics, logger, timeout_ms=50)

        outcome = await forwarder.forward(NOTICE_PATH, IDENTIFIER, NOTICE_XML)

        assert outcome is Classification.TIMEOUT
        assert metrics.get_counter_names() == ["airbrake.request.fail.timeout"]
        assert metrics.get_timings("airbrake.request") == []
        assert store.values == {}

    @pytest.mark.asyncio
    async def test_transport_timeout_is_a_timeout(self, store, metrics, logger):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        forwarder = make_forwarder(mock_client(handler), store, metrics, logger)

        outcome = await forwarder.forward(NOTICE_PATH, IDENTIFIER, NOTICE_XML)

        assert outcome is Classification.TIMEOUT
        assert metrics.get_counter_names() == ["airbrake.request.fail.timeout"]

    @pytest.mark.asyncio
    async def test_connection_error(self, store, metrics, logger):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        forwarder = make_forwarder(mock_client(handler), store, metrics, logger)

        outcome = await forwarder.forward(NOTICE_PATH, IDENTIFIER, NOTICE_XML)

        assert outcome is Classification.CONNECTION_ERROR
        assert metrics.get_counter_names() == ["airbrake.request.fail.error"]
        assert store.values == {}

    @pytest.mark.asyncio
    async def test_store_failure_after_success_is_logged(self, metrics, logger):
        class FailingStore(InMemoryCorrelationStore):
            async def set(self, key, value):
                raise CorrelationStoreError("redis down")

        forwarder = make_forwarder(
            mock_client(lambda request: httpx.Response(200, content=AIRBRAKE_SUCCESS_XML)),
            FailingStore(), metrics, logger,
        )

        outcome = await forwarder.forward(NOTICE_PATH, IDENTIFIER, NOTICE_XML)

        assert outcome is Classification.SUCCESS
        assert metrics.get_counter_total("airbrake.request.success") == 1
        assert logger.has_log("Could not record Airbrake notice 1234567890", level="ERROR")
