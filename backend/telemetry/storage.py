"""
Key-value storage used by the session service.

The interface is intentionally the same shape as the browser's
``localStorage``: string keys, string values, plus two JSON helpers.  The
only engine we ship writes to the ``StoredValue`` table, one namespace per
user.
"""
from __future__ import annotations

import abc
import contextlib
import json
from typing import Any, Optional

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Length

from .conf import get_setting
from .exceptions import StorageQuotaExceeded
from .models import StoredValue


class KeyValueStore(abc.ABC):
    @abc.abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text or ``None`` when the key is absent."""

    @abc.abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value``; may raise ``StorageQuotaExceeded``."""

    @abc.abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; deleting a missing key is not an error."""

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))

    def atomic(self):
        """Context manager grouping writes that must land together or not at all."""
        return contextlib.nullcontext()


class DatabaseKeyValueStore(KeyValueStore):
    """
    ``KeyValueStore`` backed by the ``StoredValue`` model.

    Writes are checked against a per-user quota measured in characters of
    key plus value, like browsers do for ``localStorage``.
    """

    def __init__(self, owner, quota: Optional[int] = None):
        self.owner = owner
        self.quota = get_setting("STORAGE_QUOTA_BYTES") if quota is None else quota

    def _entries(self):
        return StoredValue.objects.filter(owner=self.owner)

    def get(self, key: str) -> Optional[str]:
        entry = self._entries().filter(key=key).only("value").first()
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        used = (
            self._entries()
            .exclude(key=key)
            .aggregate(total=Sum(Length("key") + Length("value")))["total"]
            or 0
        )
        needed = used + len(key) + len(value)
        if needed > self.quota:
            raise StorageQuotaExceeded(
                f"Writing {key!r} needs {needed} characters, quota is {self.quota}."
            )
        StoredValue.objects.update_or_create(
            owner=self.owner, key=key, defaults={"value": value}
        )

    def remove(self, key: str) -> None:
        self._entries().filter(key=key).delete()

    def atomic(self):
        return transaction.atomic()
