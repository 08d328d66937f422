"""Stable public API for building tooling on top of radiocode.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import asyncio

from radiocode.config import DEFAULT_API_URL
from radiocode.core.catalog import RadioModels, load_models
from radiocode.core.errors import (
    ApiConnectionError,
    ApiError,
    ConfigError,
    ErrorCode,
    ModelDefinitionError,
    RadioCodeError,
    TransportError,
    describe_error,
)
from radiocode.core.model import (
    CalcResult,
    Command,
    InfoResult,
    LicenseInfo,
    LicenseType,
    ListResult,
    LoginResult,
    ModelRule,
    PatternDialect,
    PatternKind,
    RegexPattern,
    RequestParameters,
)
from radiocode.core.service import CalculatorService
from radiocode.transports.base import Transport
from radiocode.transports.http import HTTPTransport

__all__ = [
    "RadioCodeError",
    "ModelDefinitionError",
    "TransportError",
    "ConfigError",
    "ApiError",
    "ApiConnectionError",
    "ErrorCode",
    "describe_error",
    "CalcResult",
    "Command",
    "InfoResult",
    "LicenseInfo",
    "LicenseType",
    "ListResult",
    "LoginResult",
    "ModelRule",
    "PatternDialect",
    "PatternKind",
    "RegexPattern",
    "RequestParameters",
    "RadioModels",
    "load_models",
    "Transport",
    "HTTPTransport",
    "Client",
    "AsyncClient",
]


class Client:
    """Public client for the Radio Code Calculator web API.

    Every call sends exactly one request, authenticated with the activation
    key given here. Failed commands raise `ApiError`; its `error` attribute
    holds the `ErrorCode` reported by the server (or `INVALID_LICENSE` when no
    key was configured, or `CONNECTION_ERROR` when the server was unreachable).
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float | None = None,
        transport: Transport | None = None,
        dialect: PatternDialect = PatternDialect.PYTHON,
    ) -> None:
        self._service = CalculatorService(
            api_key,
            api_url=api_url,
            timeout_s=timeout_s,
            transport=transport,
            dialect=dialect,
        )

    def login(self) -> LoginResult:
        return self._service.login()

    def calc(self, radio_model: ModelRule | str, serial: str, extra: str = "") -> CalcResult:
        return self._service.calc(radio_model, serial, extra)

    def info(self, radio_model: ModelRule | str) -> InfoResult:
        return self._service.info(radio_model)

    def list(self) -> ListResult:
        return self._service.list()

    def post_request(self, params: RequestParameters) -> dict:
        return self._service.post_request(params)


class AsyncClient:
    """Coroutine flavour of `Client`; each call runs in a worker thread.

    Independent calls can be awaited concurrently, e.g. with `asyncio.gather`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float | None = None,
        transport: Transport | None = None,
        dialect: PatternDialect = PatternDialect.PYTHON,
    ) -> None:
        self._client = Client(
            api_key,
            api_url=api_url,
            timeout_s=timeout_s,
            transport=transport,
            dialect=dialect,
        )

    async def login(self) -> LoginResult:
        return await asyncio.to_thread(self._client.login)

    async def calc(self, radio_model: ModelRule | str, serial: str, extra: str = "") -> CalcResult:
        return await asyncio.to_thread(self._client.calc, radio_model, serial, extra)

    async def info(self, radio_model: ModelRule | str) -> InfoResult:
        return await asyncio.to_thread(self._client.info, radio_model)

    async def list(self) -> ListResult:
        return await asyncio.to_thread(self._client.list)
