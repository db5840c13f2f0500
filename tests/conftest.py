"""Shared fixtures: an in-memory Fakturoid account served to both clients."""

from __future__ import annotations

import base64
import json
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit

import httpx
import pytest
import requests
from requests.structures import CaseInsensitiveDict

from fakturoid_client import AsyncFakturoidClient, FakturoidClient

EMAIL = "me@example.com"
TOKEN = "secret-token"
SLUG = "acme"
API_ROOT = "https://app.fakturoid.cz/api/v2"
ACCOUNT_URL = f"{API_ROOT}/accounts/{SLUG}/"
PAGE_SIZE = 20

_ENTITY = re.compile(r"^(subjects|invoices)/(\d+)(\.json|/fire\.json|/download\.pdf)$")
_COLLECTION = re.compile(r"^(subjects|invoices)(/search)?\.json$")


class FakeFakturoid:
    """Just enough of the Fakturoid API to exercise the clients."""

    def __init__(self) -> None:
        self.store: Dict[str, Dict[int, Dict[str, Any]]] = {"subjects": {}, "invoices": {}}
        self.calls: List[Dict[str, Any]] = []
        self.pdf_pending: set = set()
        self.forced: Optional[Tuple[int, Any]] = None
        self._next_id = 1
        self.account = {
            "subdomain": SLUG,
            "plan": "Kopretina",
            "name": "ACME s.r.o.",
            "email": EMAIL,
            "currency": "CZK",
            "vat_rate": 21,
            "invoice_language": "cz",
            "url": f"{ACCOUNT_URL}account.json",
            "created_at": "2019-03-01T10:00:00.000+01:00",
        }

    # ------------------------------------------------------------------
    # Seeding helpers
    # ------------------------------------------------------------------
    def add(self, resource: str, **fields: Any) -> Dict[str, Any]:
        record = dict(fields)
        record["id"] = self._next_id
        record["url"] = f"{ACCOUNT_URL}{resource}/{self._next_id}.json"
        record["created_at"] = "2024-01-15T09:30:00.000+01:00"
        record["updated_at"] = record["created_at"]
        if resource == "invoices":
            record.setdefault("number", f"2024-{self._next_id:04d}")
            record.setdefault("status", "open")
        self.store[resource][self._next_id] = record
        self._next_id += 1
        return record

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def handle(
        self,
        method: str,
        url: str,
        params: Dict[str, str],
        body: Any,
        auth: Optional[Tuple[str, str]],
        headers: Dict[str, str],
    ) -> Tuple[int, Dict[str, str], Any]:
        split = urlsplit(url)
        query = dict(parse_qsl(split.query))
        query.update(params)
        self.calls.append(
            {"method": method, "path": split.path, "params": query, "json": body, "headers": headers}
        )
        if auth != (EMAIL, TOKEN):
            return 401, {}, {"error": "Unauthorized"}
        if self.forced is not None:
            status, payload = self.forced
            return status, {}, payload

        prefix = urlsplit(ACCOUNT_URL).path
        if not split.path.startswith(prefix):
            return 404, {}, {"error": "Not found"}
        route = split.path[len(prefix):]

        if route == "account.json" and method == "GET":
            return 200, {}, self.account

        match = _COLLECTION.match(route)
        if match:
            resource, search = match.groups()
            if method == "GET":
                return self._list(resource, query, bool(search), split.path)
            if method == "POST" and not search:
                return self._create(resource, body or {})

        match = _ENTITY.match(route)
        if match:
            resource, raw_id, suffix = match.groups()
            record = self.store[resource].get(int(raw_id))
            if record is None:
                return 404, {}, {"error": "Not found"}
            if suffix == ".json":
                return self._entity(resource, record, method, body or {})
            if suffix == "/fire.json" and method == "POST":
                return self._fire(record, query)
            if suffix == "/download.pdf" and method == "GET":
                if record["id"] in self.pdf_pending:
                    return 204, {}, None
                return 200, {"Content-Type": "application/pdf"}, b"%PDF-1.4 fake"

        return 404, {}, {"error": "Not found"}

    def _list(
        self, resource: str, query: Dict[str, str], search: bool, path: str
    ) -> Tuple[int, Dict[str, str], Any]:
        records = sorted(self.store[resource].values(), key=lambda r: r["id"])
        if search:
            needle = query.get("query", "").lower()
            records = [
                r
                for r in records
                if needle in str(r.get("name", "")).lower()
                or needle in str(r.get("number", "")).lower()
            ]
        for key in ("status", "custom_id", "subject_id"):
            if key in query:
                records = [r for r in records if str(r.get(key)) == query[key]]

        page = int(query.get("page", 1))
        last = max(1, -(-len(records) // PAGE_SIZE))
        items = records[(page - 1) * PAGE_SIZE : page * PAGE_SIZE]

        headers: Dict[str, str] = {}
        if last > 1:
            def link(number: int, rel: str) -> str:
                link_query = dict(query)
                link_query["page"] = str(number)
                return f'<https://app.fakturoid.cz{path}?{urlencode(link_query)}>; rel="{rel}"'

            links = [link(1, "first")]
            if page > 1:
                links.append(link(page - 1, "prev"))
            if page < last:
                links.append(link(page + 1, "next"))
            links.append(link(last, "last"))
            headers["Link"] = ", ".join(links)
        return 200, headers, items

    def _create(self, resource: str, body: Dict[str, Any]) -> Tuple[int, Dict[str, str], Any]:
        required = "name" if resource == "subjects" else "subject_id"
        if not body.get(required):
            return 422, {}, {"errors": {required: ["je povinná položka"]}}
        return 201, {}, self.add(resource, **body)

    def _entity(
        self, resource: str, record: Dict[str, Any], method: str, body: Dict[str, Any]
    ) -> Tuple[int, Dict[str, str], Any]:
        if method == "GET":
            return 200, {}, record
        if method == "PATCH":
            record.update(body)
            record["updated_at"] = "2024-02-01T12:00:00.000+01:00"
            return 200, {}, record
        if method == "DELETE":
            del self.store[resource][record["id"]]
            return 204, {}, None
        return 405, {}, {"error": "Method not allowed"}

    def _fire(self, record: Dict[str, Any], query: Dict[str, str]) -> Tuple[int, Dict[str, str], Any]:
        states = {"mark_as_sent": "sent", "pay": "paid", "cancel": "cancelled", "deliver": "sent"}
        event = query.get("event")
        if event not in states:
            return 422, {}, {"errors": {"event": ["neplatná akce"]}}
        record["status"] = states[event]
        if event == "pay":
            record["paid_at"] = query.get("paid_at", "2024-01-20T00:00:00.000+01:00")
        return 200, {}, None

    # ------------------------------------------------------------------
    # Transports
    # ------------------------------------------------------------------
    @staticmethod
    def _encode(payload: Any) -> bytes:
        if payload is None:
            return b""
        if isinstance(payload, bytes):
            return payload
        return json.dumps(payload).encode("utf-8")

    def httpx_handler(self, request: httpx.Request) -> httpx.Response:
        auth = None
        header = request.headers.get("Authorization", "")
        if header.startswith("Basic "):
            user, _, password = base64.b64decode(header[6:]).decode("utf-8").partition(":")
            auth = (user, password)
        body = json.loads(request.content) if request.content else None
        status, headers, payload = self.handle(
            request.method, str(request.url), {}, body, auth, dict(request.headers)
        )
        if payload is not None and not isinstance(payload, bytes):
            headers.setdefault("Content-Type", "application/json")
        return httpx.Response(status, headers=headers, content=self._encode(payload))


class FakeSession:
    """Stands in for :class:`requests.Session`, answering from a :class:`FakeFakturoid`."""

    def __init__(self, server: FakeFakturoid) -> None:
        self.server = server
        self.closed = False
        self.last_kwargs: Dict[str, Any] = {}

    def request(self, method, url, params=None, json=None, headers=None, auth=None, timeout=None):
        self.last_kwargs = {"params": params, "json": json, "headers": headers, "auth": auth, "timeout": timeout}
        status, resp_headers, payload = self.server.handle(
            method, url, dict(params or {}), json, auth, dict(headers or {})
        )
        response = requests.Response()
        response.status_code = status
        response.url = url
        response.encoding = "utf-8"
        response.headers = CaseInsensitiveDict(resp_headers)
        response._content = FakeFakturoid._encode(payload)
        return response

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def server() -> FakeFakturoid:
    return FakeFakturoid()


@pytest.fixture
def async_client(server: FakeFakturoid) -> AsyncFakturoidClient:
    transport = httpx.MockTransport(server.httpx_handler)
    return AsyncFakturoidClient(
        EMAIL, TOKEN, SLUG, "tests (me@example.com)", http_client=httpx.AsyncClient(transport=transport)
    )


@pytest.fixture
def session(server: FakeFakturoid) -> FakeSession:
    return FakeSession(server)


@pytest.fixture
def sync_client(session: FakeSession) -> FakturoidClient:
    return FakturoidClient(EMAIL, TOKEN, SLUG, session=session)
