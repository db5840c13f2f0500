"""
Typed records for the resources exposed by the Fakturoid API.

Every field is optional.  Serialization through
:meth:`FakturoidModel.to_payload` skips fields that are ``None``, so
the same class describes a full record returned by the server, the
subset of fields required to create one, and a patch sent to update
one.

.. code-block:: python

    from fakturoid_client.models import Subject

    patch = Subject(email="billing@example.com")
    patch.to_payload()  # {"email": "billing@example.com"}
"""

from __future__ import annotations

import base64
import mimetypes
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound="FakturoidModel")


class SubjectType(str, Enum):
    CUSTOMER = "customer"
    SUPPLIER = "supplier"
    BOTH = "both"


class InvoiceState(str, Enum):
    OPEN = "open"
    SENT = "sent"
    OVERDUE = "overdue"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    BANK = "bank"
    CASH = "cash"
    COD = "cod"
    PAYPAL = "paypal"
    CARD = "card"


class InvoiceLanguage(str, Enum):
    CZ = "cz"
    SK = "sk"
    EN = "en"
    DE = "de"
    FR = "fr"
    IT = "it"
    ES = "es"
    RU = "ru"
    HU = "hu"
    PL = "pl"
    RO = "ro"


class VatPriceMode(str, Enum):
    WITHOUT_VAT = "without_vat"
    FROM_TOTAL_WITH_VAT = "from_total_with_vat"


class EetStatus(str, Enum):
    WAITING = "waiting"
    PKP = "pkp"
    FIK = "fik"


class InvoiceAction(str, Enum):
    """Events accepted by the ``invoices/<id>/fire.json`` endpoint."""

    MARK_AS_SENT = "mark_as_sent"
    DELIVER = "deliver"
    PAY = "pay"
    PAY_PROFORMA = "pay_proforma"
    PAY_PARTIAL_PROFORMA = "pay_partial_proforma"
    REMOVE_PAYMENT = "remove_payment"
    DELIVER_REMINDER = "deliver_reminder"
    CANCEL = "cancel"
    UNDO_CANCEL = "undo_cancel"
    LOCK = "lock"
    UNLOCK = "unlock"


class FakturoidRecord(BaseModel):
    """A record whose unset fields are left out of the JSON payload."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-ready dict of every field that is not ``None``."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class FakturoidModel(FakturoidRecord):
    """A record backed by its own API resource.

    Subclasses declare the resource path below
    ``/accounts/<slug>/`` and the list filters the endpoint accepts.
    """

    resource_path: ClassVar[str] = ""
    allowed_filters: ClassVar[FrozenSet[str]] = frozenset()

    id: Optional[int] = None

    @classmethod
    def from_payload(cls: Type[T], payload: Any) -> T:
        return cls.model_validate(payload)


class Account(FakturoidModel):
    """Details of the account the client's slug points to."""

    resource_path: ClassVar[str] = "account"

    subdomain: Optional[str] = None
    plan: Optional[str] = None
    plan_price: Optional[Decimal] = None
    email: Optional[str] = None
    invoice_email: Optional[str] = None
    phone: Optional[str] = None
    web: Optional[str] = None
    name: Optional[str] = None
    full_name: Optional[str] = None
    registration_no: Optional[str] = None
    vat_no: Optional[str] = None
    vat_mode: Optional[str] = None
    vat_price_mode: Optional[VatPriceMode] = None
    street: Optional[str] = None
    street2: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    bank_account: Optional[str] = None
    iban: Optional[str] = None
    swift_bic: Optional[str] = None
    currency: Optional[str] = None
    unit_name: Optional[str] = None
    vat_rate: Optional[Decimal] = None
    displayed_note: Optional[str] = None
    invoice_number_format: Optional[str] = None
    due: Optional[int] = None
    invoice_language: Optional[InvoiceLanguage] = None
    invoice_payment_method: Optional[PaymentMethod] = None
    invoice_proforma: Optional[bool] = None
    invoice_paypal: Optional[bool] = None
    invoice_gopay: Optional[bool] = None
    html_url: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Subject(FakturoidModel):
    """A contact: customer, supplier or both."""

    resource_path: ClassVar[str] = "subjects"
    allowed_filters: ClassVar[FrozenSet[str]] = frozenset(
        {"page", "since", "updated_since", "custom_id"}
    )

    custom_id: Optional[str] = None
    subject_type: Optional[SubjectType] = Field(default=None, alias="type")
    name: Optional[str] = None
    street: Optional[str] = None
    street2: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    registration_no: Optional[str] = None
    vat_no: Optional[str] = None
    local_vat_no: Optional[str] = None
    bank_account: Optional[str] = None
    iban: Optional[str] = None
    variable_symbol: Optional[str] = None
    enabled_reminders: Optional[bool] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    email_copy: Optional[str] = None
    phone: Optional[str] = None
    web: Optional[str] = None
    private_note: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InvoiceLine(FakturoidRecord):
    id: Optional[int] = None
    name: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit_name: Optional[str] = None
    unit_price: Optional[Decimal] = None
    vat_rate: Optional[Decimal] = None
    unit_price_without_vat: Optional[Decimal] = None
    unit_price_with_vat: Optional[Decimal] = None


class EetRecord(FakturoidRecord):
    """Electronic sales record attached to a cash invoice (read only)."""

    id: Optional[int] = None
    vat_no: Optional[str] = None
    number: Optional[str] = None
    store: Optional[int] = None
    cash_register: Optional[str] = None
    paid_at: Optional[datetime] = None
    vat_base0: Optional[Decimal] = None
    vat_base1: Optional[Decimal] = None
    vat1: Optional[Decimal] = None
    vat_base2: Optional[Decimal] = None
    vat2: Optional[Decimal] = None
    vat_base3: Optional[Decimal] = None
    vat3: Optional[Decimal] = None
    total: Optional[Decimal] = None
    fik: Optional[str] = None
    bkp: Optional[str] = None
    pkp: Optional[str] = None
    status: Optional[EetStatus] = None
    fik_received_at: Optional[datetime] = None
    external: Optional[bool] = None
    attempts: Optional[int] = None
    last_attempt_at: Optional[datetime] = None
    last_uuid: Optional[str] = None
    playground: Optional[bool] = None
    invoice_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RemoteAttachment(FakturoidRecord):
    file_name: Optional[str] = None
    content_type: Optional[str] = None
    download_url: Optional[str] = None


class Invoice(FakturoidModel):
    """An invoice or proforma invoice."""

    resource_path: ClassVar[str] = "invoices"
    allowed_filters: ClassVar[FrozenSet[str]] = frozenset(
        {
            "page",
            "since",
            "until",
            "updated_since",
            "updated_until",
            "custom_id",
            "number",
            "status",
            "subject_id",
        }
    )

    custom_id: Optional[str] = None
    proforma: Optional[bool] = None
    partial_proforma: Optional[bool] = None
    number: Optional[str] = None
    variable_symbol: Optional[str] = None
    your_name: Optional[str] = None
    your_street: Optional[str] = None
    your_street2: Optional[str] = None
    your_city: Optional[str] = None
    your_zip: Optional[str] = None
    your_country: Optional[str] = None
    your_registration_no: Optional[str] = None
    your_vat_no: Optional[str] = None
    your_local_vat_no: Optional[str] = None
    client_name: Optional[str] = None
    client_street: Optional[str] = None
    client_street2: Optional[str] = None
    client_city: Optional[str] = None
    client_zip: Optional[str] = None
    client_country: Optional[str] = None
    client_registration_no: Optional[str] = None
    client_vat_no: Optional[str] = None
    client_local_vat_no: Optional[str] = None
    subject_id: Optional[int] = None
    subject_custom_id: Optional[str] = None
    generator_id: Optional[int] = None
    related_id: Optional[int] = None
    correction: Optional[bool] = None
    correction_id: Optional[int] = None
    token: Optional[str] = None
    status: Optional[InvoiceState] = None
    order_number: Optional[str] = None
    issued_on: Optional[date] = None
    taxable_fulfillment_due: Optional[date] = None
    due: Optional[int] = None
    due_on: Optional[date] = None
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    reminder_sent_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    note: Optional[str] = None
    footer_note: Optional[str] = None
    private_note: Optional[str] = None
    tags: Optional[List[str]] = None
    bank_account_id: Optional[int] = None
    bank_account: Optional[str] = None
    iban: Optional[str] = None
    swift_bic: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    currency: Optional[str] = None
    exchange_rate: Optional[Decimal] = None
    paypal: Optional[bool] = None
    gopay: Optional[bool] = None
    language: Optional[InvoiceLanguage] = None
    transferred_tax_liability: Optional[bool] = None
    supply_code: Optional[int] = None
    eu_electronic_service: Optional[bool] = None
    vat_price_mode: Optional[VatPriceMode] = None
    round_total: Optional[bool] = None
    subtotal: Optional[Decimal] = None
    native_subtotal: Optional[Decimal] = None
    total: Optional[Decimal] = None
    native_total: Optional[Decimal] = None
    remaining_amount: Optional[Decimal] = None
    remaining_native_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    eet: Optional[bool] = None
    eet_cash_register: Optional[str] = None
    eet_store: Optional[int] = None
    eet_records: Optional[List[EetRecord]] = None
    # A data URI when uploading, the file metadata when read back.
    attachment: Optional[Union[RemoteAttachment, str]] = None
    html_url: Optional[str] = None
    public_html_url: Optional[str] = None
    url: Optional[str] = None
    pdf_url: Optional[str] = None
    subject_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lines: Optional[List[InvoiceLine]] = None

    def set_attachment(self, path: Union[str, Path]) -> None:
        """Attach a local file, encoded as a base64 data URI.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not point to a regular file.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Attachment {file_path} is not a file")
        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        encoded = base64.b64encode(file_path.read_bytes()).decode("ascii")
        self.attachment = f"data:{content_type};base64,{encoded}"

    @property
    def remote_attachment(self) -> Optional[RemoteAttachment]:
        """Attachment metadata returned by the server, if any."""
        if isinstance(self.attachment, RemoteAttachment):
            return self.attachment
        return None


class InvoicePayData(FakturoidRecord):
    """Optional payment details sent with the ``pay`` invoice action."""

    paid_at: Optional[datetime] = None
    paid_amount: Optional[Decimal] = None
    variable_symbol: Optional[str] = None
    bank_account_id: Optional[int] = None

    def to_query(self) -> Dict[str, str]:
        return {key: str(value) for key, value in self.to_payload().items()}
