"""Core data models used across catalog, service, and CLI."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from radiocode.core.errors import ErrorCode, ModelDefinitionError

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}
# JS/PCRE modifiers with no effect on a single full match in Python.
_IGNORED_FLAGS = frozenset("guyDU")


class PatternDialect(str, Enum):
    """Language tag under which the server publishes a regex pattern."""

    PYTHON = "python"
    JS = "js"
    PHP = "php"


class PatternKind(str, Enum):
    SERIAL = "serial"
    EXTRA = "extra"


@dataclass(frozen=True)
class RegexPattern:
    """A portable regex: literal body plus single-letter flags."""

    body: str
    flags: str = ""

    @classmethod
    def parse(cls, value: str) -> RegexPattern:
        """Parse the ``/<body>/<flags>`` wire format."""
        last = value.rfind("/")
        if not value.startswith("/") or last <= 0:
            raise ModelDefinitionError(f"Regex pattern {value!r} must have the form /<body>/<flags>")
        return cls(body=value[1:last], flags=value[last + 1 :])

    def compile(self) -> re.Pattern[str]:
        flags = 0
        for letter in self.flags:
            if letter in _REGEX_FLAGS:
                flags |= _REGEX_FLAGS[letter]
            elif letter not in _IGNORED_FLAGS:
                raise ModelDefinitionError(f"Unsupported regex flag {letter!r} in {self}")
        try:
            return re.compile(self.body, flags)
        except re.error as exc:
            raise ModelDefinitionError(f"Invalid regex pattern {self}: {exc}") from exc

    def __str__(self) -> str:
        return f"/{self.body}/{self.flags}"


def _freeze_patterns(
    value: str | Mapping[str, str] | None,
    dialect: PatternDialect,
    *,
    context: str,
) -> Mapping[str, str]:
    if value is None:
        return MappingProxyType({})
    if isinstance(value, str):
        return MappingProxyType({dialect.value: value})
    if isinstance(value, Mapping):
        patterns: dict[str, str] = {}
        for tag, pattern in value.items():
            if not isinstance(pattern, str):
                raise ModelDefinitionError(f"{context} pattern for {tag!r} must be a string")
            patterns[str(tag)] = pattern
        return MappingProxyType(patterns)
    raise ModelDefinitionError(f"{context} patterns must be a string or a mapping, got {type(value).__name__}")


def _resolve(
    patterns: Mapping[str, str] | None,
    dialect: PatternDialect,
) -> tuple[RegexPattern | None, re.Pattern[str] | None]:
    if not patterns or dialect.value not in patterns:
        return None, None
    pattern = RegexPattern.parse(patterns[dialect.value])
    return pattern, pattern.compile()


@dataclass(frozen=True)
class ModelRule:
    """Validation constraints of a single radio model.

    `serial_patterns` and `extra_patterns` accept either a single
    ``/<body>/<flags>`` string, stored under `dialect`, or a mapping of
    language tag to pattern string as published by the web API. The entry for
    `dialect` is compiled once, at construction. When `extra_max_len` is 0 the
    model takes no extra data and `extra_patterns` is always ``None``.
    """

    name: str
    serial_max_len: int
    serial_patterns: Mapping[str, str] = field(hash=False)
    extra_max_len: int = 0
    extra_patterns: Mapping[str, str] | None = field(default=None, hash=False)
    dialect: PatternDialect = PatternDialect.PYTHON

    _serial_regex: RegexPattern | None = field(init=False, repr=False, compare=False)
    _serial_compiled: re.Pattern[str] | None = field(init=False, repr=False, compare=False)
    _extra_regex: RegexPattern | None = field(init=False, repr=False, compare=False)
    _extra_compiled: re.Pattern[str] | None = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.serial_max_len < 0 or self.extra_max_len < 0:
            raise ModelDefinitionError(f"Radio model {self.name!r} has a negative max length")

        dialect = PatternDialect(self.dialect)
        serial_patterns = _freeze_patterns(self.serial_patterns, dialect, context=f"{self.name}.serial")
        extra_patterns = None
        if self.extra_max_len != 0 and self.extra_patterns is not None:
            extra_patterns = _freeze_patterns(self.extra_patterns, dialect, context=f"{self.name}.extra")

        object.__setattr__(self, "dialect", dialect)
        object.__setattr__(self, "serial_patterns", serial_patterns)
        object.__setattr__(self, "extra_patterns", extra_patterns)

        serial_regex, serial_compiled = _resolve(serial_patterns, dialect)
        extra_regex, extra_compiled = _resolve(extra_patterns, dialect)
        object.__setattr__(self, "_serial_regex", serial_regex)
        object.__setattr__(self, "_serial_compiled", serial_compiled)
        object.__setattr__(self, "_extra_regex", extra_regex)
        object.__setattr__(self, "_extra_compiled", extra_compiled)

    @classmethod
    def from_payload(
        cls,
        name: str,
        payload: Mapping[str, Any],
        *,
        dialect: PatternDialect = PatternDialect.PYTHON,
    ) -> ModelRule:
        """Build a rule from an `info` response or a `list` response entry."""
        return cls(
            name=name,
            serial_max_len=int(payload["serialMaxLen"]),
            serial_patterns=payload["serialRegexPattern"],
            extra_max_len=int(payload.get("extraMaxLen") or 0),
            extra_patterns=payload.get("extraRegexPattern"),
            dialect=dialect,
        )

    @property
    def serial_pattern(self) -> RegexPattern | None:
        return self._serial_regex

    @property
    def extra_pattern(self) -> RegexPattern | None:
        return self._extra_regex

    def pattern_for(self, kind: PatternKind) -> RegexPattern | None:
        if PatternKind(kind) is PatternKind.SERIAL:
            return self._serial_regex
        return self._extra_regex

    def validate(self, serial: str, extra: str | None = None) -> ErrorCode:
        """Check serial (and extra data, if given) offline.

        Lengths are checked before patterns. Extra data is only checked when a
        non-empty value is passed; whether a model requires it is left to the
        server.
        """
        if len(serial) != self.serial_max_len:
            return ErrorCode.INVALID_SERIAL_LENGTH

        if self._serial_compiled is None or self._serial_compiled.fullmatch(serial) is None:
            return ErrorCode.INVALID_SERIAL_PATTERN

        if extra:
            if len(extra) != self.extra_max_len:
                return ErrorCode.INVALID_EXTRA_LENGTH
            if self._extra_compiled is None or self._extra_compiled.fullmatch(extra) is None:
                return ErrorCode.INVALID_EXTRA_PATTERN

        return ErrorCode.SUCCESS


class LicenseType(IntEnum):
    PERSONAL = 0
    COMPANY = 1


@dataclass(frozen=True)
class LicenseInfo:
    user_name: str
    license_type: LicenseType
    expiration_date: date
    activation_status: bool

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> LicenseInfo:
        return cls(
            user_name=payload["userName"],
            license_type=LicenseType(payload["type"]),
            expiration_date=date.fromisoformat(payload["expirationDate"]),
            activation_status=bool(payload["activationStatus"]),
        )


@dataclass(frozen=True)
class LoginResult:
    license: LicenseInfo
    response: dict[str, Any]


@dataclass(frozen=True)
class CalcResult:
    code: str
    response: dict[str, Any]


@dataclass(frozen=True)
class InfoResult:
    radio_model: ModelRule
    response: dict[str, Any]


@dataclass(frozen=True)
class ListResult:
    radio_models: tuple[ModelRule, ...]
    response: dict[str, Any]


class Command(str, Enum):
    LOGIN = "login"
    CALC = "calc"
    INFO = "info"
    LIST = "list"


_COMMAND_KEYS: dict[Command, tuple[str, ...]] = {
    Command.LOGIN: (),
    Command.CALC: ("radio_model", "serial", "extra"),
    Command.INFO: ("radio_model",),
    Command.LIST: (),
}


class RequestParameters:
    """Ordered form fields of a single web API command.

    Only the keys defined for the command can be added. A command string the
    client does not know is still sent as-is (the server answers with
    `ErrorCode.INVALID_COMMAND`), but it cannot carry extra keys.
    """

    def __init__(self, command: Command | str) -> None:
        try:
            self.command: Command | str = Command(command)
        except ValueError:
            self.command = command
        self._fields: dict[str, str] = {}

    @property
    def allowed_keys(self) -> tuple[str, ...]:
        if isinstance(self.command, Command):
            return _COMMAND_KEYS[self.command]
        return ()

    def add(self, key: str, value: str) -> RequestParameters:
        if key not in self.allowed_keys:
            raise ValueError(f"Parameter '{key}' is not accepted by command '{self.command_name}'")
        if key in self._fields:
            raise ValueError(f"Parameter '{key}' is already set")
        self._fields[key] = value
        return self

    @property
    def command_name(self) -> str:
        return self.command.value if isinstance(self.command, Command) else str(self.command)

    def items(self) -> Iterator[tuple[str, str]]:
        yield "command", self.command_name
        yield from self._fields.items()

    def __repr__(self) -> str:
        return f"RequestParameters({dict(self.items())!r})"
