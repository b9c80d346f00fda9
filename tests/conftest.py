"""Test configuration ensuring local package import when editable install not active.

Also provides FakeTransport, which records requests and answers them from
canned responses instead of talking to Octane.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from octane_bugtracker.config.connection import ConnectionConfig  # noqa: E402


class FakeTransport:
    """Records requests; GET list responses are keyed by (path, query filter)."""

    def __init__(self, connection_config=None, credentials=None, proxy_config=None):
        self.connection_config = connection_config or ConnectionConfig(
            base_url="https://octane.example.com", shared_space_id="1001", workspace_id="1002"
        )
        self.credentials = credentials
        self.proxy_config = proxy_config
        self.calls: list[tuple] = []
        self.responses: dict = {}
        self.errors: dict = {}
        self.closed = False

    def add_names(self, path, query, names):
        self.responses[(path, query, "name")] = {"data": [{"name": n} for n in names]}

    def add_ids(self, path, query, ids):
        self.responses[(path, query, "id")] = {"data": [{"id": i} for i in ids]}

    def request(self, method, path, params=None, body=None):
        self.calls.append((method, path, params, body))
        params = params or {}
        query = params.get("query")
        if query is not None:
            query = query.strip('"')
        key = (path, query, params.get("fields"))
        if (method, path) in self.errors:
            raise self.errors[(method, path)]
        if method == "GET" and key in self.responses:
            return self.responses[key]
        return self.responses.get((method, path), {"data": []})

    def close(self):
        self.closed = True


@pytest.fixture
def transport():
    return FakeTransport()
