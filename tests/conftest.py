# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Shared fixtures for airbrake-proxy tests."""

import httpx
import pytest

from airbrake_proxy.models import SentryProject
from proxy_error_reporting import SilentErrorReporter
from proxy_logging import SilentLogger
from proxy_metrics import NoOpMetricsCollector
from proxy_store import InMemoryCorrelationStore

API_KEY = "0123456789abcdef0123456789abcdef"

NOTICE_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<notice version="2.0">
  <api-key>0123456789abcdef0123456789abcdef</api-key>
  <notifier>
    <name>node-airbrake</name>
    <version>0.3.0</version>
    <url>https://github.com/felixge/node-airbrake</url>
  </notifier>
  <error>
    <class>TypeError</class>
    <message>TypeError: undefined is not a function</message>
    <backtrace>
      <line method="Object.handler" file="[PROJECT_ROOT]/lib/handler.js" number="42"/>
      <line method="Router.dispatch" file="[PROJECT_ROOT]/node_modules/router/index.js" number="7"/>
      <line method="Server.emit" file="[PROJECT_ROOT]/lib/server.js" number="98"/>
    </backtrace>
  </error>
  <server-environment>
    <project-root>/srv/app</project-root>
    <environment-name>production</environment-name>
    <hostname>web-1</hostname>
  </server-environment>
</notice>
"""

AIRBRAKE_SUCCESS_XML = (
    b'<?xml version="1.0" encoding="UTF-8"?>\n'
    b"<notice><id>1234567890</id><url>http://example.airbrake.io/locate/1234567890</url></notice>"
)
AIRBRAKE_RATE_LIMITED_XML = b'<?xml version="1.0" encoding="UTF-8"?>\n<error>Project is rate limited.</error>'


@pytest.fixture
def logger():
    return SilentLogger()


@pytest.fixture
def metrics():
    return NoOpMetricsCollector()


@pytest.fixture
def store():
    return InMemoryCorrelationStore()


@pytest.fixture
def error_reporter():
    return SilentErrorReporter()


@pytest.fixture
def projects():
    return {API_KEY: SentryProject(id="7", key="public-key", secret="secret-key", platform="node")}


def mock_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler`` instead of the network."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
