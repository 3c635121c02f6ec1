import json
from typing import Dict, List, Optional

import pytest
import requests

from connectwise_api_client import ConnectWiseClient

SITE = "na.example.net"
COMPANY = "acme"
API_HOST = "api-na.example.net"
COMPANY_INFO_URL = f"https://{SITE}/login/companyinfo/{COMPANY}"
BASE_URL = f"https://{API_HOST}/v2020_3/apis/3.0"

COMPANY_INFO = {
    "CompanyName": "acme",
    "Codebase": "v2020_3/",
    "VersionCode": "v2020.3",
    "CompanyID": "acme",
    "IsCloud": True,
    "SiteUrl": "api-na.example.net",
}


class FakeResponse:
    """Stands in for a streamed ``requests.Response``."""

    def __init__(self, status_code: int = 200, body=b"", reason: str = "OK", read_error: Optional[Exception] = None):
        self.status_code = status_code
        self.reason = reason
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self._read_error = read_error
        self.closed = False

    @property
    def content(self) -> bytes:
        if self._read_error is not None:
            raise self._read_error
        return self._body

    def close(self) -> None:
        self.closed = True


def json_response(payload, status_code: int = 200, reason: str = "OK") -> FakeResponse:
    return FakeResponse(status_code, json.dumps(payload), reason)


class FakeTransport:
    """Records every request and answers from a table of routes.

    A route maps a URL (without query string) to a ``FakeResponse``,
    an exception to raise, or a callable ``(call) -> FakeResponse``.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, object] = {}
        self.calls: List[dict] = []

    def __call__(self, method, url, params=None, data=None, headers=None, stream=False, **kwargs):
        call = {
            "method": method,
            "url": url,
            "params": list(params or []),
            "data": data,
            "headers": dict(headers or {}),
            "stream": stream,
        }
        self.calls.append(call)
        if url not in self.routes:
            raise requests.exceptions.ConnectionError(f"no route to {url}")
        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(call)
        return route

    def calls_to(self, url: str) -> List[dict]:
        return [call for call in self.calls if call["url"] == url]


def page_param(call) -> Optional[str]:
    values = [value for key, value in call["params"] if key == "page"]
    return values[-1] if values else None


@pytest.fixture
def transport(monkeypatch):
    fake = FakeTransport()
    fake.routes[COMPANY_INFO_URL] = json_response(COMPANY_INFO)
    monkeypatch.setattr(requests, "request", fake)
    return fake


@pytest.fixture
def client(transport):
    return ConnectWiseClient(
        site=SITE,
        client_id="client-123",
        company=COMPANY,
        public_key="pub",
        private_key="priv",
        api_host=API_HOST,
    )
