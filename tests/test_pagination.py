import json

import pytest
import requests

from connectwise_api_client import (
    ConnectWiseAPIError,
    ConnectWiseConnectionError,
    ConnectWiseDecodeError,
    ConnectWisePaginationError,
    Option,
)

from conftest import BASE_URL, FakeResponse, page_param

MEMBERS_URL = BASE_URL + "/system/members"
MEMBERS = [{"id": n, "identifier": f"member{n}"} for n in range(1, 16)]


def members_endpoint(call):
    """A list endpoint that honours ``page`` and ``pagesize`` like ConnectWise does."""
    params = dict(call["params"])
    size = int(params.get("pagesize", 25))
    page = int(params.get("page", 1))
    chunk = MEMBERS[(page - 1) * size:page * size]
    return FakeResponse(200, json.dumps(chunk, separators=(",", ":")))


def test_get_all_stops_at_empty_page(client, transport):
    transport.routes[MEMBERS_URL] = members_endpoint

    pages = client.get_all("/system/members", [Option("pagesize", "5")])

    assert len(pages) == 3
    assert [page_param(call) for call in transport.calls_to(MEMBERS_URL)] == ["1", "2", "3", "4"]
    items = [item for page in pages for item in json.loads(page)]
    everything = json.loads(client.get("/system/members", [Option("pagesize", "1000")]))
    assert items == everything == MEMBERS


@pytest.mark.parametrize("real_pages", [0, 1, 4])
def test_get_all_issues_one_request_per_page_plus_one(client, transport, real_pages):
    bodies = [f'[{{"id":{n}}}]'.encode() for n in range(real_pages)]

    def endpoint(call):
        index = int(page_param(call)) - 1
        return FakeResponse(200, bodies[index] if index < len(bodies) else b"[]")

    transport.routes[MEMBERS_URL] = endpoint

    pages = client.get_all("system/members")

    assert pages == bodies
    assert len(transport.calls_to(MEMBERS_URL)) == real_pages + 1


def test_get_all_matches_manual_paging(client, transport):
    transport.routes[MEMBERS_URL] = members_endpoint
    options = [Option("pagesize", "4")]

    pages = client.get_all("system/members", options)

    manual = []
    page = 1
    while True:
        body = client.get("system/members", options + [Option("page", str(page))])
        if body == b"[]":
            break
        manual.append(body)
        page += 1
    assert b"".join(pages) == b"".join(manual)


def test_get_all_non_paginated_endpoint(client, transport):
    body = b'{"version":"v2020.3.75324","isCloud":true}'
    transport.routes[BASE_URL + "/system/info"] = FakeResponse(200, body)

    pages = client.get_all("system/info")

    assert pages == [body]
    assert len(transport.calls_to(BASE_URL + "/system/info")) == 2
    assert pages[0] == client.get("system/info", [Option("page", "1")])


def test_get_all_repeat_only_compares_first_page(client, transport):
    bodies = {"1": b"[1]", "2": b"[2]", "3": b"[2]", "4": b"[1]"}
    transport.routes[MEMBERS_URL] = lambda call: FakeResponse(200, bodies[page_param(call)])

    pages = client.get_all("system/members")

    assert pages == [b"[1]"]
    assert len(transport.calls_to(MEMBERS_URL)) == 4


def test_get_all_empty_sentinel_is_exact(client, transport):
    bodies = {"1": b"[ ]", "2": b"[]"}
    transport.routes[MEMBERS_URL] = lambda call: FakeResponse(200, bodies[page_param(call)])

    assert client.get_all("system/members") == [b"[ ]"]


def test_get_all_appends_page_after_caller_options(client, transport):
    transport.routes[MEMBERS_URL] = members_endpoint
    options = [Option("conditions", "inactiveFlag=false"), Option("pagesize", "10")]

    client.get_all("system/members", options)

    first = transport.calls_to(MEMBERS_URL)[0]
    assert first["params"] == [("conditions", "inactiveFlag=false"), ("pagesize", "10"), ("page", "1")]
    assert options == [Option("conditions", "inactiveFlag=false"), Option("pagesize", "10")]


def test_get_all_status_error_mid_listing(client, transport):
    def endpoint(call):
        if page_param(call) == "3":
            return FakeResponse(500, b'{"message":"boom"}', reason="Internal Server Error")
        return FakeResponse(200, f"[{page_param(call)}]")

    transport.routes[MEMBERS_URL] = endpoint

    with pytest.raises(ConnectWisePaginationError) as excinfo:
        client.get_all("system/members")

    error = excinfo.value
    assert error.page == 3
    assert error.pages == [b"[1]", b"[2]"]
    assert isinstance(error.cause, ConnectWiseAPIError)
    assert error.__cause__ is error.cause
    assert error.cause.status_code == 500
    assert "page 3" in str(error)
    assert "boom" in str(error)


def test_get_all_transport_error_on_first_page(client, transport):
    transport.routes[MEMBERS_URL] = requests.exceptions.ConnectionError("reset by peer")

    with pytest.raises(ConnectWisePaginationError) as excinfo:
        client.get_all("system/members")

    assert excinfo.value.page == 1
    assert excinfo.value.pages == []
    assert isinstance(excinfo.value.cause, ConnectWiseConnectionError)


def test_get_all_items(client, transport):
    transport.routes[MEMBERS_URL] = members_endpoint

    assert client.get_all_items("system/members", [Option("pagesize", "7")]) == MEMBERS


def test_get_all_items_rejects_non_array_pages(client, transport):
    bodies = {"1": b'{"id":1}', "2": b"[]"}
    transport.routes[MEMBERS_URL] = lambda call: FakeResponse(200, bodies[page_param(call)])

    with pytest.raises(ConnectWiseDecodeError, match="not a JSON array"):
        client.get_all_items("system/members")
