from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any, Dict, List
from urllib.parse import parse_qs

import pytest
from google.auth.exceptions import RefreshError

from gmail_dispatch.config import GOOGLE_TOKEN_URI, OAUTH_REDIRECT_URI
from gmail_dispatch.credentials import OAuth2Client


class FakeTokenEndpoint:
    """Stands in for google.auth.transport.requests.Request."""

    def __init__(self, status: int, body: Dict[str, Any]):
        self.status = status
        self.body = body
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url: str, method: str = "GET", body: Any = None, headers: Any = None, **kwargs: Any) -> Any:
        self.calls.append({"url": url, "method": method, "body": body})
        return SimpleNamespace(status=self.status, data=json.dumps(self.body).encode(), headers={})


def _form(call: Dict[str, Any]) -> Dict[str, List[str]]:
    body = call["body"]
    return parse_qs(body.decode() if isinstance(body, bytes) else body)


def test_get_access_token_refreshes_through_google_auth():
    endpoint = FakeTokenEndpoint(200, {"access_token": "fresh-token", "expires_in": 3599})
    client = OAuth2Client("cid", "secret", OAUTH_REDIRECT_URI, request_factory=lambda: endpoint)
    client.set_credentials(refresh_token="refresh")

    assert asyncio.run(client.get_access_token()) == "fresh-token"
    (call,) = endpoint.calls
    assert call["url"] == GOOGLE_TOKEN_URI
    assert call["method"] == "POST"
    form = _form(call)
    assert form["grant_type"] == ["refresh_token"]
    assert form["client_id"] == ["cid"]
    assert form["client_secret"] == ["secret"]
    assert form["refresh_token"] == ["refresh"]


def test_token_endpoint_error_propagates():
    endpoint = FakeTokenEndpoint(400, {"error": "invalid_grant", "error_description": "Token has been revoked."})
    client = OAuth2Client("cid", "secret", OAUTH_REDIRECT_URI, request_factory=lambda: endpoint)
    client.set_credentials(refresh_token="revoked")

    with pytest.raises(RefreshError, match="invalid_grant"):
        asyncio.run(client.get_access_token())


def test_refresh_token_required():
    client = OAuth2Client("cid", "secret", OAUTH_REDIRECT_URI)
    with pytest.raises(ValueError):
        asyncio.run(client.get_access_token())


def test_redirect_uri_is_carried_not_used():
    endpoint = FakeTokenEndpoint(200, {"access_token": "t", "expires_in": 60})
    client = OAuth2Client("cid", "secret", OAUTH_REDIRECT_URI, request_factory=lambda: endpoint)
    client.set_credentials(refresh_token="refresh")
    asyncio.run(client.get_access_token())
    assert client.redirect_uri == OAUTH_REDIRECT_URI
    assert all(OAUTH_REDIRECT_URI not in str(call) for call in endpoint.calls)
