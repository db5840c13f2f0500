"""
Client implementation for the Fakturoid REST API.

This module defines two clients sharing the same URL layout,
headers and error handling:

* :class:`AsyncFakturoidClient` performs requests through an
  :class:`httpx.AsyncClient` and returns coroutines;
* :class:`FakturoidClient` performs the same requests through a
  :class:`requests.Session` and blocks.

Both authenticate every request with HTTP Basic auth (login email and
API token) and address resources below
``https://app.fakturoid.cz/api/v2/accounts/<slug>/``.

Usage
-----

.. code-block:: python

    from fakturoid_client import AsyncFakturoidClient, Filter, Invoice, InvoiceState

    async with AsyncFakturoidClient("me@example.com", "token", "mycompany") as client:
        page = await client.list(Invoice, Filter().status(InvoiceState.OPEN))
        async for invoice in page.iter_items():
            print(invoice.number, invoice.total)

Every method performs exactly one HTTP request.  Nothing is retried
or cached; error statuses are raised as the exceptions defined in
:mod:`fakturoid_client.exceptions`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import httpx
import pydantic
import requests

from .config import DEFAULT_BASE_URL, FakturoidSettings
from .exceptions import ResponseDecodeError, TransportError, error_for_status
from .filters import Filter
from .models import Account, FakturoidModel, Invoice, InvoiceAction, InvoicePayData
from .paging import AsyncPagedResponse, PagedResponse

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=FakturoidModel)
C = TypeVar("C", bound="_BaseFakturoidClient")


class _BaseFakturoidClient:
    """URL building, headers and response evaluation shared by both clients.

    Parameters
    ----------
    email : str
        Login email of the API user.
    token : str
        API token of that user.
    slug : str
        Account slug.
    user_agent : str, optional
        Value of the ``User-Agent`` header.  Fakturoid asks integrations
        to identify themselves with an application name and a contact
        email; by default ``fakturoid-client Python (<email>)`` is sent.
    base_url : str, optional
        Override the API root.
    timeout : float, optional
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        email: str,
        token: str,
        slug: str,
        user_agent: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        self._email = email
        self._token = token
        self._slug = slug
        self._user_agent = user_agent
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_settings(cls: Type[C], settings: FakturoidSettings, **kwargs: Any) -> C:
        return cls(
            settings.email,
            settings.api_token,
            settings.slug,
            settings.user_agent,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            **kwargs,
        )

    @classmethod
    def from_env(cls: Type[C], **kwargs: Any) -> C:
        """Build a client from ``FAKTUROID_*`` environment variables."""
        return cls.from_settings(FakturoidSettings(), **kwargs)

    @property
    def email(self) -> str:
        return self._email

    @property
    def slug(self) -> str:
        return self._slug

    @property
    def user_agent(self) -> str:
        return self._user_agent or f"fakturoid-client Python ({self._email})"

    @property
    def account_url(self) -> str:
        return f"{self._base_url}/accounts/{self._slug}/"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} slug={self._slug!r} email={self._email!r}>"

    # ------------------------------------------------------------------
    # URL construction helpers
    # ------------------------------------------------------------------
    def _collection_url(self, model: Type[FakturoidModel], suffix: str = "") -> str:
        if model.resource_path == Account.resource_path:
            raise ValueError("account is a singleton resource, use account()")
        return f"{self.account_url}{model.resource_path}{suffix}.json"

    def _account_resource_url(self) -> str:
        return f"{self.account_url}{Account.resource_path}.json"

    def _entity_url(self, model: Type[FakturoidModel], entity_id: int, suffix: str = "") -> str:
        if model.resource_path == Account.resource_path:
            raise ValueError("account is a singleton resource, use account()")
        return f"{self.account_url}{model.resource_path}/{int(entity_id)}{suffix}"

    @staticmethod
    def _list_params(model: Type[FakturoidModel], flt: Optional[Filter]) -> Dict[str, str]:
        if flt is None or flt.is_empty():
            return {}
        return flt.build(model.allowed_filters)

    @staticmethod
    def _action_params(action: InvoiceAction, pay_data: Optional[InvoicePayData]) -> Dict[str, str]:
        params = {"event": InvoiceAction(action).value}
        if pay_data is not None:
            params.update(pay_data.to_query())
        return params

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------
    @property
    def _auth(self) -> Tuple[str, str]:
        return (self._email, self._token)

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": accept}

    @staticmethod
    def _raise_for_status(response: Any, method: str, url: str) -> None:
        """Raise the exception matching an error status.

        ``response`` is either a :class:`requests.Response` or an
        :class:`httpx.Response`; both expose the attributes used here.
        """
        logger.debug("%s %s -> %s", method, url, response.status_code)
        if response.status_code < 400:
            return
        try:
            body = response.json()
        except ValueError:
            body = response.text
        logger.warning("Fakturoid %s %s failed with status %s", method, url, response.status_code)
        raise error_for_status(response.status_code, url, body)

    @staticmethod
    def _decode(response: Any, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseDecodeError(f"Invalid JSON in response from {url}: {exc}") from exc

    @staticmethod
    def _validate(model: Type[M], payload: Any, url: str) -> M:
        try:
            return model.from_payload(payload)
        except pydantic.ValidationError as exc:
            raise ResponseDecodeError(
                f"Response from {url} does not match {model.__name__}: {exc}"
            ) from exc

    def _parse_model(self, model: Type[M], response: Any, url: str) -> M:
        return self._validate(model, self._decode(response, url), url)

    def _parse_collection(self, model: Type[M], response: Any, url: str) -> List[M]:
        payload = self._decode(response, url)
        if not isinstance(payload, list):
            raise ResponseDecodeError(f"Expected a JSON array from {url}, got {type(payload).__name__}")
        return [self._validate(model, item, url) for item in payload]


class FakturoidClient(_BaseFakturoidClient):
    """Blocking Fakturoid client backed by :mod:`requests`.

    Parameters
    ----------
    session : requests.Session, optional
        Session used for all requests.  When omitted the client creates
        and owns one; :meth:`close` closes only an owned session.

    See :class:`_BaseFakturoidClient` for the remaining parameters.
    """

    def __init__(
        self,
        email: str,
        token: str,
        slug: str,
        user_agent: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(email, token, slug, user_agent, base_url=base_url, timeout=timeout)
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "FakturoidClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Any] = None,
        accept: str = "application/json",
    ) -> requests.Response:
        """Send one request and raise on transport failures or error statuses."""
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(accept),
                auth=self._auth,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Failed to connect to {url}: {exc}") from exc
        self._raise_for_status(response, method, url)
        return response

    def _fetch_page(self, model: Type[M], url: str, params: Dict[str, str]) -> PagedResponse[M]:
        response = self._request("GET", url, params=params or None)
        items = self._parse_collection(model, response, url)
        return PagedResponse(self, model, url, params, items, response.links)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------
    def account(self) -> Account:
        """Details of the account."""
        url = self._account_resource_url()
        return self._parse_model(Account, self._request("GET", url), url)

    def detail(self, model: Type[M], entity_id: int) -> M:
        """Fetch one record of ``model`` by id."""
        url = self._entity_url(model, entity_id, ".json")
        return self._parse_model(model, self._request("GET", url), url)

    def list(self, model: Type[M], flt: Optional[Filter] = None) -> PagedResponse[M]:
        """First page (or the page set in ``flt``) of the records of ``model``."""
        return self._fetch_page(model, self._collection_url(model), self._list_params(model, flt))

    def fulltext(self, model: Type[M], query: str) -> PagedResponse[M]:
        """Fulltext search among the records of ``model``."""
        return self._fetch_page(model, self._collection_url(model, "/search"), {"query": query})

    def create(self, entity: M) -> M:
        """Create a record; only the fields set on ``entity`` are sent."""
        model = type(entity)
        url = self._collection_url(model)
        response = self._request("POST", url, json=entity.to_payload())
        return self._parse_model(model, response, url)

    def update(self, entity_id: int, entity: M) -> M:
        """Patch the record ``entity_id`` with the fields set on ``entity``."""
        model = type(entity)
        url = self._entity_url(model, entity_id, ".json")
        response = self._request("PATCH", url, json=entity.to_payload())
        return self._parse_model(model, response, url)

    def delete(self, model: Type[FakturoidModel], entity_id: int) -> None:
        self._request("DELETE", self._entity_url(model, entity_id, ".json"))

    # ------------------------------------------------------------------
    # Invoice actions
    # ------------------------------------------------------------------
    def fire_action(
        self,
        invoice_id: int,
        action: InvoiceAction,
        pay_data: Optional[InvoicePayData] = None,
    ) -> None:
        """Fire ``action`` on an invoice; ``pay_data`` only applies to payments."""
        url = self._entity_url(Invoice, invoice_id, "/fire.json")
        self._request("POST", url, params=self._action_params(action, pay_data))

    def mark_invoice_as_sent(self, invoice_id: int) -> None:
        self.fire_action(invoice_id, InvoiceAction.MARK_AS_SENT)

    def deliver_invoice(self, invoice_id: int) -> None:
        self.fire_action(invoice_id, InvoiceAction.DELIVER)

    def pay_invoice(self, invoice_id: int, pay_data: Optional[InvoicePayData] = None) -> None:
        self.fire_action(invoice_id, InvoiceAction.PAY, pay_data)

    def cancel_invoice(self, invoice_id: int) -> None:
        self.fire_action(invoice_id, InvoiceAction.CANCEL)

    def download_invoice_pdf(self, invoice_id: int) -> Optional[bytes]:
        """PDF of an invoice, or ``None`` while Fakturoid is still rendering it."""
        url = self._entity_url(Invoice, invoice_id, "/download.pdf")
        response = self._request("GET", url, accept="application/pdf")
        if response.status_code == 204:
            return None
        return response.content


class AsyncFakturoidClient(_BaseFakturoidClient):
    """Asynchronous Fakturoid client backed by :mod:`httpx`.

    Parameters
    ----------
    http_client : httpx.AsyncClient, optional
        Transport used for all requests.  When omitted the client
        creates and owns one with the configured ``timeout``;
        :meth:`aclose` closes only an owned transport.

    See :class:`_BaseFakturoidClient` for the remaining parameters.
    The client holds no per-call state, so a single instance can serve
    concurrent tasks.
    """

    def __init__(
        self,
        email: str,
        token: str,
        slug: str,
        user_agent: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(email, token, slug, user_agent, base_url=base_url, timeout=timeout)
        self._owns_http_client = http_client is None
        self._http = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        )

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "AsyncFakturoidClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Any] = None,
        accept: str = "application/json",
    ) -> httpx.Response:
        """Send one request and raise on transport failures or error statuses."""
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(accept),
                auth=self._auth,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to connect to {url}: {exc}") from exc
        self._raise_for_status(response, method, url)
        return response

    async def _fetch_page(
        self, model: Type[M], url: str, params: Dict[str, str]
    ) -> AsyncPagedResponse[M]:
        response = await self._request("GET", url, params=params or None)
        items = self._parse_collection(model, response, url)
        return AsyncPagedResponse(self, model, url, params, items, response.links)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------
    async def account(self) -> Account:
        """Details of the account."""
        url = self._account_resource_url()
        return self._parse_model(Account, await self._request("GET", url), url)

    async def detail(self, model: Type[M], entity_id: int) -> M:
        """Fetch one record of ``model`` by id."""
        url = self._entity_url(model, entity_id, ".json")
        return self._parse_model(model, await self._request("GET", url), url)

    async def list(self, model: Type[M], flt: Optional[Filter] = None) -> AsyncPagedResponse[M]:
        """First page (or the page set in ``flt``) of the records of ``model``."""
        return await self._fetch_page(
            model, self._collection_url(model), self._list_params(model, flt)
        )

    async def fulltext(self, model: Type[M], query: str) -> AsyncPagedResponse[M]:
        """Fulltext search among the records of ``model``."""
        return await self._fetch_page(
            model, self._collection_url(model, "/search"), {"query": query}
        )

    async def create(self, entity: M) -> M:
        """Create a record; only the fields set on ``entity`` are sent."""
        model = type(entity)
        url = self._collection_url(model)
        response = await self._request("POST", url, json=entity.to_payload())
        return self._parse_model(model, response, url)

    async def update(self, entity_id: int, entity: M) -> M:
        """Patch the record ``entity_id`` with the fields set on ``entity``."""
        model = type(entity)
        url = self._entity_url(model, entity_id, ".json")
        response = await self._request("PATCH", url, json=entity.to_payload())
        return self._parse_model(model, response, url)

    async def delete(self, model: Type[FakturoidModel], entity_id: int) -> None:
        await self._request("DELETE", self._entity_url(model, entity_id, ".json"))

    # ------------------------------------------------------------------
    # Invoice actions
    # ------------------------------------------------------------------
    async def fire_action(
        self,
        invoice_id: int,
        action: InvoiceAction,
        pay_data: Optional[InvoicePayData] = None,
    ) -> None:
        """Fire ``action`` on an invoice; ``pay_data`` only applies to payments."""
        url = self._entity_url(Invoice, invoice_id, "/fire.json")
        await self._request("POST", url, params=self._action_params(action, pay_data))

    async def mark_invoice_as_sent(self, invoice_id: int) -> None:
        await self.fire_action(invoice_id, InvoiceAction.MARK_AS_SENT)

    async def deliver_invoice(self, invoice_id: int) -> None:
        await self.fire_action(invoice_id, InvoiceAction.DELIVER)

    async def pay_invoice(self, invoice_id: int, pay_data: Optional[InvoicePayData] = None) -> None:
        await self.fire_action(invoice_id, InvoiceAction.PAY, pay_data)

    async def cancel_invoice(self, invoice_id: int) -> None:
        await self.fire_action(invoice_id, InvoiceAction.CANCEL)

    async def download_invoice_pdf(self, invoice_id: int) -> Optional[bytes]:
        """PDF of an invoice, or ``None`` while Fakturoid is still rendering it."""
        url = self._entity_url(Invoice, invoice_id, "/download.pdf")
        response = await self._request("GET", url, accept="application/pdf")
        if response.status_code == 204:
            return None
        return response.content
