"""Loading and validation of YAML radio model tables, and the built-in catalog."""

from __future__ import annotations

import json
import logging
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml
from jsonschema import ValidationError, validators

from radiocode.core.errors import ModelDefinitionError
from radiocode.core.model import ModelRule, PatternDialect

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ModelDefinitionError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("radiocode.schemas").joinpath("radio_models.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ModelDefinitionError(f"Could not read radio model file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ModelDefinitionError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ModelDefinitionError(f"Radio model file {path} must contain a mapping at root")
    return loaded


def _build_models(
    doc: dict[str, Any],
    source: Path | Traversable,
    dialect: PatternDialect,
) -> dict[str, ModelRule]:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ModelDefinitionError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    models: dict[str, ModelRule] = {}
    names: set[str] = set()
    for key, entry in doc.items():
        if entry["name"] in names:
            raise ModelDefinitionError(f"Radio model name '{entry['name']}' is defined twice in {source}")
        names.add(entry["name"])
        models[key] = ModelRule(
            name=entry["name"],
            serial_max_len=entry["serial_max_len"],
            serial_patterns=entry["serial_pattern"],
            extra_max_len=entry.get("extra_max_len", 0),
            extra_patterns=entry.get("extra_pattern"),
            dialect=dialect,
        )
    return models


def load_models(
    path: Path | Traversable,
    *,
    dialect: PatternDialect = PatternDialect.PYTHON,
) -> dict[str, ModelRule]:
    """Load a YAML radio model table, keyed by its upper-case constant names."""
    models = _build_models(_read_yaml(path), path, dialect)
    LOGGER.debug("Loaded %d radio models from %s", len(models), path)
    return models


def _load_builtin_models() -> Mapping[str, ModelRule]:
    path = resources.files("radiocode.data").joinpath("radio_models.yaml")
    return MappingProxyType(load_models(path))


_BUILTIN = _load_builtin_models()


class RadioModels:
    """Built-in radio models, for offline validation before calling the web API.

    Usage::

        model = RadioModels.FORD_M_SERIES
        if model.validate("123456") is ErrorCode.SUCCESS:
            ...
    """

    RENAULT_DACIA = _BUILTIN["RENAULT_DACIA"]
    CHRYSLER_PANASONIC_TM9 = _BUILTIN["CHRYSLER_PANASONIC_TM9"]
    FORD_M_SERIES = _BUILTIN["FORD_M_SERIES"]
    FORD_V_SERIES = _BUILTIN["FORD_V_SERIES"]
    FORD_TRAVELPILOT = _BUILTIN["FORD_TRAVELPILOT"]
    FIAT_STILO_BRAVO_VISTEON = _BUILTIN["FIAT_STILO_BRAVO_VISTEON"]
    FIAT_DAIICHI = _BUILTIN["FIAT_DAIICHI"]
    FIAT_VP = _BUILTIN["FIAT_VP"]
    TOYOTA_ERC = _BUILTIN["TOYOTA_ERC"]
    JEEP_CHEROKEE = _BUILTIN["JEEP_CHEROKEE"]
    NISSAN_GLOVE_BOX = _BUILTIN["NISSAN_GLOVE_BOX"]
    ECLIPSE_ESN = _BUILTIN["ECLIPSE_ESN"]
    JAGUAR_ALPINE = _BUILTIN["JAGUAR_ALPINE"]

    @staticmethod
    def all() -> tuple[ModelRule, ...]:
        return tuple(_BUILTIN.values())

    @staticmethod
    def table() -> Mapping[str, ModelRule]:
        """Read-only view of the built-in models keyed by constant name."""
        return _BUILTIN

    @staticmethod
    def get(name: str) -> ModelRule | None:
        for model in _BUILTIN.values():
            if model.name == name:
                return model
        return None
