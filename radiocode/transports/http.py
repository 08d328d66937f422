"""HTTP transport implementation using urllib."""

from __future__ import annotations

import http.client
import json
import socket
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterable
from typing import Any

from radiocode import __version__
from radiocode.core.errors import TransportError

_USER_AGENT = f"radiocode/{__version__}"


class HTTPTransport:
    def post_form(
        self,
        url: str,
        fields: Iterable[tuple[str, str]],
        *,
        timeout_s: float | None = None,
    ) -> Any:
        body = urllib.parse.urlencode(list(fields)).encode("utf-8")
        request = urllib.request.Request(
            url,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
                "User-Agent": _USER_AGENT,
            },
        )

        kwargs: dict[str, Any] = {}
        if timeout_s is not None:
            kwargs["timeout"] = timeout_s

        status: int | None = None
        try:
            with urllib.request.urlopen(request, **kwargs) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            # Error statuses still carry a JSON body with the API error code.
            status = exc.code
            with exc:
                try:
                    raw = exc.read()
                except (OSError, http.client.HTTPException) as read_exc:
                    raise TransportError(f"HTTP {exc.code} from {url}: {exc.reason}") from read_exc
        except urllib.error.URLError as exc:
            raise TransportError(f"Could not reach {url}: {exc.reason}") from exc
        except (socket.timeout, TimeoutError) as exc:
            raise TransportError(f"Request to {url} timed out") from exc
        except OSError as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc
        except http.client.HTTPException as exc:
            raise TransportError(f"Request to {url} failed: {exc!r}") from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            where = f" (HTTP {status})" if status is not None else ""
            raise TransportError(f"Invalid JSON response from {url}{where}: {exc}") from exc
