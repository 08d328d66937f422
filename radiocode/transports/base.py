"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol


class Transport(Protocol):
    def post_form(
        self,
        url: str,
        fields: Iterable[tuple[str, str]],
        *,
        timeout_s: float | None = None,
    ) -> Any:
        """POST form-encoded fields and return the decoded JSON response."""
