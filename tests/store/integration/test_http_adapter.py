"""Tests for the REST resource store against a mocked JSON-server API."""

import json

import httpx
import pytest
from storefront.shared.exceptions import ConcurrencyHazard, NetworkError, NotFound, ValidationError
from storefront.store.http_adapter import HttpResourceStore

BASE_URL = "http://store.test"


class FakeJsonServer:
    """Minimal json-server lookalike driven through httpx.MockTransport."""

    def __init__(self):
        self.records: dict[str, dict[str, dict]] = {}
        self.requests: list[httpx.Request] = []
        self.next_id = 1

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        bucket = self.records.setdefault(parts[0], {})
        identifier = parts[1] if len(parts) > 1 else None

        if identifier is None and request.method == "GET":
            params = dict(request.url.params)
            matches = [r for r in bucket.values() if all(str(r.get(k)).lower() == v for k, v in params.items())]
            return httpx.Response(200, json=matches)
        if identifier is None and request.method == "POST":
            body = json.loads(request.content)
            body.setdefault("id", self.next_id)
            self.next_id += 1
            bucket[str(body["id"])] = body
            return httpx.Response(201, json=body)
        if identifier not in bucket:
            return httpx.Response(404, json={})
        if request.method == "GET":
            return httpx.Response(200, json=bucket[identifier])
        if request.method == "PUT":
            bucket[identifier] = json.loads(request.content)
            return httpx.Response(200, json=bucket[identifier])
        if request.method == "PATCH":
            bucket[identifier] = {**bucket[identifier], **json.loads(request.content)}
            return httpx.Response(200, json=bucket[identifier])
        if request.method == "DELETE":
            del bucket[identifier]
            return httpx.Response(200, json={})
        return httpx.Response(405)


@pytest.fixture()
def server():
    return FakeJsonServer()


@pytest.fixture()
def http_store(server):
    store = HttpResourceStore(BASE_URL, transport=httpx.MockTransport(server))
    yield store
    store.close()


class TestRequests:
    def test_create_lets_backend_assign_id(self, http_store, server):
        record = http_store.create("products", {"id": None, "name": "Speaker"})
        assert record["id"] == 1
        assert record["version"] == 1
        assert "id" not in json.loads(server.requests[0].content)

    def test_list_sends_boolean_filters_as_lowercase(self, http_store, server):
        server.records["campaigns"] = {"1": {"id": 1, "active": True}, "2": {"id": 2, "active": False}}
        records = http_store.list("campaigns", active=True)
        assert server.requests[0].url.params["active"] == "true"
        assert [r["id"] for r in records] == [1]

    def test_records_without_version_default_to_zero(self, http_store, server):
        server.records["products"] = {"7": {"id": 7, "name": "Legacy"}}
        assert http_store.get("products", "7")["version"] == 0

    def test_patch_bumps_version(self, http_store, server):
        server.records["products"] = {"7": {"id": 7, "stock": 1, "version": 4}}
        record = http_store.patch("products", "7", {"stock": 3})
        assert record["stock"] == 3
        assert record["version"] == 5

    def test_delete(self, http_store, server):
        server.records["products"] = {"7": {"id": 7}}
        http_store.delete("products", "7")
        assert server.records["products"] == {}


class TestConditionalReplace:
    def test_replace_with_current_version(self, http_store, server):
        server.records["customers"] = {"3": {"id": 3, "loyalty_points": 0, "version": 2}}
        record = http_store.replace("customers", "3", {"loyalty_points": 10}, expected_version=2)
        assert record["version"] == 3
        assert server.records["customers"]["3"]["loyalty_points"] == 10

    def test_replace_refuses_stale_version(self, http_store, server):
        server.records["customers"] = {"3": {"id": 3, "loyalty_points": 0, "version": 5}}
        with pytest.raises(ConcurrencyHazard):
            http_store.replace("customers", "3", {"loyalty_points": 10}, expected_version=2)
        assert [r.method for r in server.requests] == ["GET"]


class TestErrorMapping:
    def test_404_is_not_found(self, http_store):
        with pytest.raises(NotFound) as exc:
            http_store.get("orders", "missing")
        assert exc.value.resource == "orders"

    def test_5xx_is_network_error(self):
        store = HttpResourceStore(BASE_URL, transport=httpx.MockTransport(lambda request: httpx.Response(502)))
        with pytest.raises(NetworkError) as exc:
            store.list("orders")
        assert exc.value.retryable

    def test_4xx_is_validation_error(self):
        store = HttpResourceStore(
            BASE_URL, transport=httpx.MockTransport(lambda request: httpx.Response(422, text="bad payload"))
        )
        with pytest.raises(ValidationError) as exc:
            store.create("orders", {"total": "x"})
        assert exc.value.messages == {"orders": ["bad payload"]}

    def test_connection_failure_is_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = HttpResourceStore(BASE_URL, transport=httpx.MockTransport(refuse))
        with pytest.raises(NetworkError) as exc:
            store.get("customers", "1")
        assert exc.value.operation == "get"
        assert exc.value.identifier == "1"
