"""Client address used by the request log."""

from starlette.requests import Request

from core.config import settings
from core.security import get_client_ip


def _request(forwarded=None, client=("10.0.0.9", 5123)):
    headers = []
    if forwarded is not None:
        headers.append((b"x-forwarded-for", forwarded.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers, "client": client})


def test_forwarded_header_ignored_by_default(monkeypatch):
    monkeypatch.setattr(settings, "trust_forwarded_for", False)
    assert get_client_ip(_request("203.0.113.7")) == "10.0.0.9"


def test_forwarded_header_used_behind_trusted_proxy(monkeypatch):
    monkeypatch.setattr(settings, "trust_forwarded_for", True)
    assert get_client_ip(_request("203.0.113.7, 10.0.0.1")) == "203.0.113.7"


def test_trusted_proxy_without_header_falls_back_to_peer(monkeypatch):
    monkeypatch.setattr(settings, "trust_forwarded_for", True)
    assert get_client_ip(_request()) == "10.0.0.9"


def test_no_peer_is_unknown(monkeypatch):
    monkeypatch.setattr(settings, "trust_forwarded_for", False)
    assert get_client_ip(_request(client=None)) == "unknown"
