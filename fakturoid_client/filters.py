"""
Query filters for list endpoints.

:class:`Filter` collects query parameters through chained calls::

    flt = Filter().since(datetime(2024, 1, 1, tzinfo=timezone.utc)).status(InvoiceState.PAID)

Each model declares which keys its endpoint understands;
:meth:`Filter.build` drops the rest.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, FrozenSet, Optional, Union

from .models import InvoiceState


class Filter:
    """Chainable builder of list query parameters."""

    def __init__(self) -> None:
        self._params: Dict[str, str] = {}

    def _set(self, key: str, value: str) -> "Filter":
        self._params[key] = value
        return self

    def page(self, page: int) -> "Filter":
        return self._set("page", str(int(page)))

    def since(self, since: datetime) -> "Filter":
        return self._set("since", since.isoformat())

    def until(self, until: datetime) -> "Filter":
        return self._set("until", until.isoformat())

    def updated_since(self, updated_since: datetime) -> "Filter":
        return self._set("updated_since", updated_since.isoformat())

    def updated_until(self, updated_until: datetime) -> "Filter":
        return self._set("updated_until", updated_until.isoformat())

    def custom_id(self, custom_id: str) -> "Filter":
        return self._set("custom_id", custom_id)

    def number(self, number: str) -> "Filter":
        return self._set("number", number)

    def status(self, status: Union[InvoiceState, str]) -> "Filter":
        return self._set("status", InvoiceState(status).value)

    def subject_id(self, subject_id: int) -> "Filter":
        return self._set("subject_id", str(int(subject_id)))

    def is_empty(self) -> bool:
        return not self._params

    def build(self, allowed: Optional[FrozenSet[str]] = None) -> Dict[str, str]:
        """Return the query parameters, restricted to ``allowed`` keys when given."""
        if allowed is None:
            return dict(self._params)
        return {key: value for key, value in self._params.items() if key in allowed}

    def __repr__(self) -> str:
        return f"Filter({self._params!r})"
