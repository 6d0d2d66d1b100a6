"""Storage model behind the per-user key-value store."""
from __future__ import annotations

from django.conf import settings
from django.db import models


class StoredValue(models.Model):
    """
    One key/value pair in a user's store.

    The browser version of the dashboard kept everything in ``localStorage``.
    I kept the same idea (string keys, JSON text values) and simply scoped it
    by user, so every account gets its own little "browser storage".
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="stored_values",
    )
    key = models.CharField(max_length=255)
    value = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["owner", "key"], name="unique_owner_key"),
        ]

    def __str__(self) -> str:  # type: ignore[override]
        return f"{self.owner_id}:{self.key}"
