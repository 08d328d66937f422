from __future__ import annotations

import asyncio
from typing import Any

import pytest

from radiocode.api import ApiError, AsyncClient, Client, ErrorCode, RadioModels


class FakeTransport:
    def __init__(self) -> None:
        self.calls: list[dict[str, str]] = []

    def post_form(self, url: str, fields, *, timeout_s: float | None = None) -> Any:
        params = dict(fields)
        self.calls.append(params)
        if params["command"] == "calc":
            codes = {"ford-m-series": "2487", "renault-dacia": "0060"}
            return {"error": 0, "code": codes[params["radio_model"]]}
        if params["command"] == "info":
            return {"error": 0, "serialMaxLen": 4, "serialRegexPattern": {"python": "/^([A-Z]{1}[0-9]{3})$/"}}
        return {"error": 2}


def test_public_client_calc() -> None:
    transport = FakeTransport()
    client = Client("ABCD-ABCD-ABCD-ABCD", transport=transport)

    assert RadioModels.FORD_M_SERIES.validate("123456") is ErrorCode.SUCCESS
    result = client.calc(RadioModels.FORD_M_SERIES, "123456")

    assert result.code == "2487"
    assert transport.calls[0]["key"] == "ABCD-ABCD-ABCD-ABCD"


def test_public_client_info() -> None:
    client = Client("ABCD-ABCD-ABCD-ABCD", transport=FakeTransport())

    model = client.info("renault-dacia").radio_model

    assert model.name == "renault-dacia"
    assert model.validate("Z999") is ErrorCode.SUCCESS


def test_public_client_without_key() -> None:
    transport = FakeTransport()
    client = Client(transport=transport)

    with pytest.raises(ApiError) as exc:
        client.login()

    assert exc.value.error is ErrorCode.INVALID_LICENSE
    assert transport.calls == []


def test_async_client_runs_calls_concurrently() -> None:
    transport = FakeTransport()
    client = AsyncClient("ABCD-ABCD-ABCD-ABCD", transport=transport)

    async def _run():
        return await asyncio.gather(
            client.calc(RadioModels.FORD_M_SERIES, "123456"),
            client.calc("renault-dacia", "Z999"),
        )

    first, second = asyncio.run(_run())

    assert (first.code, second.code) == ("2487", "0060")
    assert len(transport.calls) == 2


def test_async_client_propagates_api_errors() -> None:
    client = AsyncClient("ABCD-ABCD-ABCD-ABCD", transport=FakeTransport())

    with pytest.raises(ApiError) as exc:
        asyncio.run(client.list())

    assert exc.value.error is ErrorCode.INVALID_COMMAND
