"""
Python client for interacting with the Fakturoid REST API.

This package provides :class:`AsyncFakturoidClient` and its blocking
twin :class:`FakturoidClient`.  Both authenticate with the login email
and API token of a Fakturoid user, address a single account by its
slug, and map the account, subject and invoice resources onto typed
pydantic models.

Examples
--------

```python
import asyncio

from fakturoid_client import AsyncFakturoidClient, Subject


async def main():
    async with AsyncFakturoidClient("me@example.com", "API_TOKEN", "mycompany") as client:
        subject = await client.create(Subject(name="ACME s.r.o.", email="acme@example.com"))

        # Only the fields set on the model are sent
        subject = await client.update(subject.id, Subject(phone="+420 123 456 789"))

        page = await client.list(Subject)
        while page is not None:
            for item in page.data:
                print(item.id, item.name)
            page = await page.next_page()


asyncio.run(main())
```

The blocking client offers the same methods without ``await``:

```python
from fakturoid_client import FakturoidClient, Invoice

with FakturoidClient("me@example.com", "API_TOKEN", "mycompany") as client:
    invoice = client.detail(Invoice, 1234)
    client.pay_invoice(invoice.id)
```

See Also
--------
The Fakturoid API v2 documentation describes the available fields,
list filters and invoice actions.

References
----------
Fakturoid paginates lists by 20 records and describes the neighbouring
pages in the ``Link`` response header; the paged responses returned by
``list`` and ``fulltext`` follow that header.
"""

from .client import AsyncFakturoidClient, FakturoidClient
from .config import FakturoidSettings
from .exceptions import (
    AuthenticationError,
    FakturoidAPIError,
    FakturoidError,
    ForbiddenError,
    NotFoundError,
    PaymentRequiredError,
    RateLimitError,
    ResponseDecodeError,
    ServiceUnavailableError,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from .filters import Filter
from .models import (
    Account,
    EetRecord,
    EetStatus,
    FakturoidModel,
    Invoice,
    InvoiceAction,
    InvoiceLanguage,
    InvoiceLine,
    InvoicePayData,
    InvoiceState,
    PaymentMethod,
    RemoteAttachment,
    Subject,
    SubjectType,
    VatPriceMode,
)
from .paging import AsyncPagedResponse, PagedResponse

__all__ = [
    "Account",
    "AsyncFakturoidClient",
    "AsyncPagedResponse",
    "AuthenticationError",
    "EetRecord",
    "EetStatus",
    "FakturoidAPIError",
    "FakturoidClient",
    "FakturoidError",
    "FakturoidModel",
    "FakturoidSettings",
    "Filter",
    "ForbiddenError",
    "Invoice",
    "InvoiceAction",
    "InvoiceLanguage",
    "InvoiceLine",
    "InvoicePayData",
    "InvoiceState",
    "NotFoundError",
    "PagedResponse",
    "PaymentMethod",
    "PaymentRequiredError",
    "RateLimitError",
    "RemoteAttachment",
    "ResponseDecodeError",
    "ServiceUnavailableError",
    "Subject",
    "SubjectType",
    "TransportError",
    "UnexpectedStatusError",
    "ValidationError",
    "VatPriceMode",
]
