"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from radiocode.api import Client
from radiocode.config import load_settings
from radiocode.core.catalog import RadioModels, load_models
from radiocode.core.errors import ApiError, ErrorCode, RadioCodeError, describe_error
from radiocode.core.model import ModelRule

app = typer.Typer(help="Radio Code Calculator web API client")

_KEY_HELP = "Activation key (default: RADIOCODE_API_KEY)"


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Python logging level"),
) -> None:
    try:
        level = log_level or load_settings().log_level
    except RadioCodeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    logging.basicConfig(level=level.upper(), format="%(levelname)s %(name)s: %(message)s")


def _build_client(key: str | None) -> Client:
    settings = load_settings()
    return Client(
        key or settings.api_key,
        api_url=settings.api_url,
        timeout_s=settings.timeout_s,
    )


def _find_model(name: str, models_file: Path | None) -> ModelRule:
    candidates: dict[str, ModelRule] = {}
    if models_file is not None:
        candidates.update(load_models(models_file))
    for key, model in RadioModels.table().items():
        candidates.setdefault(key, model)

    for key, model in candidates.items():
        if name in (key, model.name):
            return model
    raise typer.BadParameter(f"Unknown radio model '{name}'. Use 'radiocode models' to list them.")


def _describe_model(model: ModelRule) -> str:
    line = f"{model.name}: serial {model.serial_max_len} chars {model.serial_pattern or '<no pattern>'}"
    if model.extra_max_len > 0:
        line += f", extra {model.extra_max_len} chars {model.extra_pattern or '<no pattern>'}"
    return line


def _validation_detail(model: ModelRule, error: ErrorCode) -> str:
    detail = describe_error(error)
    if error is ErrorCode.INVALID_SERIAL_LENGTH:
        detail += f" (expected {model.serial_max_len} characters)"
    elif error is ErrorCode.INVALID_SERIAL_PATTERN:
        detail += f" (expected {model.serial_pattern} regex pattern)"
    elif error is ErrorCode.INVALID_EXTRA_LENGTH:
        detail += f" (expected {model.extra_max_len} characters)"
    elif error is ErrorCode.INVALID_EXTRA_PATTERN:
        detail += f" (expected {model.extra_pattern} regex pattern)"
    return detail


_SERVER_HINTS = {
    ErrorCode.INVALID_SERIAL_LENGTH: ("serialMaxLen", "characters"),
    ErrorCode.INVALID_SERIAL_PATTERN: ("serialRegexPattern", "regex pattern"),
    ErrorCode.INVALID_EXTRA_LENGTH: ("extraMaxLen", "characters"),
    ErrorCode.INVALID_EXTRA_PATTERN: ("extraRegexPattern", "regex pattern"),
}


def _api_error_detail(exc: RadioCodeError) -> str:
    detail = str(exc)
    if not isinstance(exc, ApiError) or exc.error not in _SERVER_HINTS:
        return detail
    field, unit = _SERVER_HINTS[exc.error]
    expected = exc.response.get(field)
    if isinstance(expected, dict):
        # Patterns come back keyed by language.
        expected = expected.get("python") or next(iter(expected.values()), None)
    if expected in (None, ""):
        return detail
    return f"{detail} (expected {expected} {unit})"


@app.command("models")
def list_builtin_models() -> None:
    """List the built-in radio models and their validation rules."""
    for model in RadioModels.all():
        typer.echo(_describe_model(model))


@app.command("validate")
def validate(
    model: str,
    serial: str,
    extra: str = typer.Argument(""),
    models_file: Path | None = typer.Option(None, "--models-file", help="YAML file with extra radio models"),
) -> None:
    """Validate a serial number (and extra data) offline, without contacting the web API."""
    try:
        radio_model = _find_model(model, models_file)
    except RadioCodeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    error = radio_model.validate(serial, extra)
    if error is not ErrorCode.SUCCESS:
        typer.echo(f"Error: {_validation_detail(radio_model, error)}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{radio_model.name}: '{serial}' is valid")


@app.command("login")
def login(
    key: str | None = typer.Option(None, "--key", help=_KEY_HELP),
) -> None:
    """Show the license bound to the activation key."""
    try:
        license_info = _build_client(key).login().license
        typer.echo(f"License activation status - {license_info.activation_status}")
        typer.echo(f"License owner - {license_info.user_name}")
        typer.echo(f"License type - {license_info.license_type.name.capitalize()}")
        typer.echo(f"Expiration date - {license_info.expiration_date.isoformat()}")
    except RadioCodeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("calc")
def calc(
    model: str,
    serial: str,
    extra: str = typer.Argument(""),
    key: str | None = typer.Option(None, "--key", help=_KEY_HELP),
) -> None:
    """Calculate the radio code for a serial number.

    No offline validation is done; use 'validate' first to save a request.
    """
    try:
        result = _build_client(key).calc(model, serial, extra)
        typer.echo(f"Radio code is {result.code}")
    except RadioCodeError as exc:
        typer.echo(f"Error: {_api_error_detail(exc)}", err=True)
        raise typer.Exit(code=1) from None


@app.command("info")
def info(
    model: str,
    key: str | None = typer.Option(None, "--key", help=_KEY_HELP),
) -> None:
    """Show the server-side validation rules of a radio model."""
    try:
        result = _build_client(key).info(model)
        typer.echo(_describe_model(result.radio_model))
    except RadioCodeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("list")
def list_supported(
    key: str | None = typer.Option(None, "--key", help=_KEY_HELP),
) -> None:
    """List the radio models supported by the web API."""
    try:
        result = _build_client(key).list()
        if not result.radio_models:
            typer.echo("No radio models reported")
            return
        for radio_model in result.radio_models:
            typer.echo(_describe_model(radio_model))
    except RadioCodeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
