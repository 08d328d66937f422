"""Service layer used by the public client and the CLI."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import ValidationError, validators

from radiocode.config import DEFAULT_API_URL
from radiocode.core.errors import (
    ApiConnectionError,
    ApiError,
    ErrorCode,
    ModelDefinitionError,
    TransportError,
)
from radiocode.core.model import (
    CalcResult,
    Command,
    InfoResult,
    LicenseInfo,
    ListResult,
    LoginResult,
    ModelRule,
    PatternDialect,
    RequestParameters,
)
from radiocode.transports.base import Transport
from radiocode.transports.http import HTTPTransport

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _response_validator(command: Command) -> Any:
    schema_text = resources.files("radiocode.schemas").joinpath("responses.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    schema["$ref"] = f"#/$defs/{command.value}"
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _check_payload(command: Command, response: dict[str, Any]) -> None:
    try:
        _response_validator(command).validate(response)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ApiConnectionError(f"Malformed '{command.value}' response{where}: {exc.message}") from exc


def _model_name(radio_model: ModelRule | str) -> str:
    return radio_model.name if isinstance(radio_model, ModelRule) else radio_model


class CalculatorService:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float | None = None,
        transport: Transport | None = None,
        dialect: PatternDialect = PatternDialect.PYTHON,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.timeout_s = timeout_s
        self.transport = transport or HTTPTransport()
        self.dialect = dialect

    def login(self) -> LoginResult:
        response = self.post_request(RequestParameters(Command.LOGIN))
        _check_payload(Command.LOGIN, response)
        try:
            license_info = LicenseInfo.from_payload(response["license"])
        except ValueError as exc:
            raise ApiConnectionError(f"Invalid license in 'login' response: {exc}") from exc
        return LoginResult(license=license_info, response=response)

    def calc(self, radio_model: ModelRule | str, serial: str, extra: str = "") -> CalcResult:
        params = (
            RequestParameters(Command.CALC)
            .add("radio_model", _model_name(radio_model))
            .add("serial", serial)
            .add("extra", extra)
        )
        response = self.post_request(params)
        _check_payload(Command.CALC, response)
        return CalcResult(code=response["code"], response=response)

    def info(self, radio_model: ModelRule | str) -> InfoResult:
        name = _model_name(radio_model)
        response = self.post_request(RequestParameters(Command.INFO).add("radio_model", name))
        _check_payload(Command.INFO, response)
        return InfoResult(radio_model=self._build_model(name, response), response=response)

    def list(self) -> ListResult:
        response = self.post_request(RequestParameters(Command.LIST))
        _check_payload(Command.LIST, response)
        models = tuple(
            self._build_model(name, payload)
            for name, payload in response["supportedRadioModels"].items()
        )
        return ListResult(radio_models=models, response=response)

    def post_request(self, params: RequestParameters) -> dict[str, Any]:
        """Send one command and return the payload of a successful response.

        Raises `ApiError` carrying the server's error code and payload when the
        command fails, and `ApiConnectionError` when the server cannot be
        reached or its answer cannot be understood.
        """
        if not self.api_key:
            raise ApiError(ErrorCode.INVALID_LICENSE)

        fields = [("key", self.api_key), *params.items()]
        LOGGER.debug("Sending '%s' command to %s", params.command_name, self.api_url)
        try:
            response = self.transport.post_form(self.api_url, fields, timeout_s=self.timeout_s)
        except TransportError as exc:
            LOGGER.warning("Web API request '%s' failed: %s", params.command_name, exc)
            raise ApiConnectionError(str(exc)) from exc

        if not isinstance(response, dict):
            raise ApiConnectionError(f"Expected a JSON object, got {type(response).__name__}")
        error = response.get("error")
        if isinstance(error, bool) or not isinstance(error, int):
            raise ApiConnectionError(f"Response has no integer 'error' field: {error!r}")

        code = ErrorCode.coerce(error)
        if code != ErrorCode.SUCCESS:
            LOGGER.info("Web API command '%s' returned error %s", params.command_name, code)
            raise ApiError(code, response)
        return response

    def _build_model(self, name: str, payload: dict[str, Any]) -> ModelRule:
        try:
            return ModelRule.from_payload(name, payload, dialect=self.dialect)
        except ModelDefinitionError as exc:
            raise ApiConnectionError(f"Invalid radio model '{name}' in response: {exc}") from exc
