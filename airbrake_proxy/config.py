# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Schema-driven configuration for the proxy.

Values are resolved per field from, in order of precedence:

1. the field's environment variable,
2. an optional JSON config file (``AIRBRAKE_PROXY_CONFIG``), laid out by
   section, e.g. ``{"listen": {"port": 8080}, "sentry": {"projects": {...}}}``,
3. the schema default.

Example:
    >>> config = load_typed_config()
    >>> config.airbrake_host
    'api.airbrake.io'
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from proxy_error_reporting import REPORTER_TYPES
from proxy_logging import LEVELS

from .models import SentryProject, parse_sentry_projects

SCHEMA_PATH = Path(__file__).parent / "schemas" / "airbrake-proxy.json"
CONFIG_PATH_ENV = "AIRBRAKE_PROXY_CONFIG"

PORT_FIELDS = ("listen_port", "airbrake_port", "sentry_port", "redis_port", "statsd_port")
TIMEOUT_FIELDS = ("airbrake_timeout", "sentry_timeout")
CHOICES = {
    "airbrake_protocol": ("http", "https"),
    "sentry_protocol": ("http", "https"),
    "store_type": ("redis", "inmemory"),
    "metrics_backend": ("statsd", "noop"),
    "log_type": ("stdout", "silent"),
    "error_reporter_type": REPORTER_TYPES,
}

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


class ConfigValidationError(Exception):
    """Configuration values are missing, malformed or inconsistent."""


class ConfigSchemaError(Exception):
    """The bundled schema could not be read."""


def _validation_failed(errors: List[str]) -> ConfigValidationError:
    lines = "\n".join(f"  - {err}" for err in errors)
    return ConfigValidationError(f"Invalid airbrake-proxy configuration:\n{lines}")


class ConfigProvider:
    """Read-only key lookup over a mapping."""

    def __init__(self, values: Mapping[str, Any]):
        self._values = values

    def has(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)


class EnvConfigProvider(ConfigProvider):
    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        super().__init__(os.environ if environ is None else environ)


class StaticConfigProvider(ConfigProvider):
    """Fixed values, from a config file or a test."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        super().__init__(values or {})

    @classmethod
    def from_json_file(cls, filepath: str) -> "StaticConfigProvider":
        """Read a sectioned config file.

        Each top-level object is a section whose members become
        ``<section>_<name>`` keys: ``{"airbrake": {"host": x}}`` yields
        ``airbrake_host``. Nested objects below that (``sentry.projects``)
        are values in their own right and stay whole.

        Raises:
            ConfigValidationError: If the file is missing or not a JSON object
        """
        try:
            data = json.loads(Path(filepath).read_text())
        except FileNotFoundError:
            raise ConfigValidationError(f"Config file not found: {filepath}") from None
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON in config file {filepath}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError(f"Config file {filepath} must contain a JSON object")

        values: Dict[str, Any] = {}
        for section, members in data.items():
            if not isinstance(members, dict):
                values[section] = members
                continue
            values.update({f"{section}_{name}": value for name, value in members.items()})
        return cls(values)


def _to_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError
    return int(raw)


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError


def _to_object(raw: Any) -> dict:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Expected a JSON object, {e}") from e
    if not isinstance(raw, dict):
        raise ConfigValidationError(f"Expected an object, got {type(raw).__name__}")
    return raw


# type name -> (converter, description used in errors)
CONVERTERS: Dict[str, tuple] = {
    "string": (str, "a string"),
    "int": (_to_int, "an integer"),
    "bool": (_to_bool, "a boolean"),
    "object": (_to_object, "an object"),
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    field_type: str = "string"
    required: bool = False
    default: Any = None
    env_var: Optional[str] = None
    description: Optional[str] = None

    @property
    def env_key(self) -> str:
        return self.env_var or self.name.upper()

    def convert(self, raw: Any, source: str) -> Any:
        converter, expected = CONVERTERS.get(self.field_type, CONVERTERS["string"])
        try:
            return converter(raw)
        except ConfigValidationError as e:
            raise ConfigValidationError(f"{e} (from {source})") from None
        except (TypeError, ValueError):
            raise ConfigValidationError(f"Expected {expected} from {source}, got {raw!r}") from None


@dataclass
class ConfigSchema:
    service_name: str
    fields: Dict[str, FieldSpec] = field(default_factory=dict)
    schema_version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigSchema":
        specs = {
            name: FieldSpec(
                name=name,
                field_type=spec.get("type", "string"),
                required=spec.get("required", False),
                default=spec.get("default"),
                env_var=spec.get("env_var"),
                description=spec.get("description"),
            )
            for name, spec in data.get("fields", {}).items()
        }
        return cls(data.get("service_name", "airbrake-proxy"), specs, data.get("schema_version"))

    @classmethod
    def from_json_file(cls, filepath: str) -> "ConfigSchema":
        try:
            return cls.from_dict(json.loads(Path(filepath).read_text()))
        except FileNotFoundError:
            raise ConfigSchemaError(f"Schema file not found: {filepath}") from None
        except json.JSONDecodeError as e:
            raise ConfigSchemaError(f"Schema file {filepath} is not valid JSON: {e}") from e


class SchemaConfigLoader:
    """Resolves every schema field against the environment and config file."""

    def __init__(
        self,
        schema: ConfigSchema,
        env_provider: Optional[ConfigProvider] = None,
        file_provider: Optional[ConfigProvider] = None,
    ):
        self.schema = schema
        self.env_provider = env_provider or EnvConfigProvider()
        self.file_provider = file_provider or StaticConfigProvider()

    def load(self) -> Dict[str, Any]:
        """Resolve all fields.

        Raises:
            ConfigValidationError: Naming every field that failed, not just the first
        """
        values: Dict[str, Any] = {}
        errors = []
        for spec in self.schema.fields.values():
            try:
                values[spec.name] = self.resolve(spec)
            except ConfigValidationError as e:
                errors.append(f"{spec.name}: {e}")
        if errors:
            raise _validation_failed(errors)
        return values

    def resolve(self, spec: FieldSpec) -> Any:
        if self.env_provider.has(spec.env_key):
            raw, source = self.env_provider.get(spec.env_key), f"env {spec.env_key}"
        elif self.file_provider.has(spec.name):
            raw, source = self.file_provider.get(spec.name), "config file"
        else:
            raw, source = spec.default, "default"

        # An empty env var means unset for every type except string
        if raw is None or (raw == "" and spec.field_type != "string"):
            if spec.required:
                raise ConfigValidationError(f"Required field is missing ({source})")
            return spec.default

        value = spec.convert(raw, source)
        if spec.required and value == "":
            raise ConfigValidationError(f"Required field is empty ({source})")
        return value


class TypedConfig:
    """Loaded configuration, read by attribute only and never modified.

    Example:
        >>> config.listen_port
        8080
        >>> config["listen_port"]
        TypeError: use attribute-style access
    """

    __slots__ = ("_values", "_schema_version", "_projects")

    def __init__(self, values: Dict[str, Any], schema_version: Optional[str] = None):
        object.__setattr__(self, "_values", MappingProxyType(dict(values)))
        object.__setattr__(self, "_schema_version", schema_version)
        object.__setattr__(self, "_projects", parse_sentry_projects(values.get("sentry_projects") or {}))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(
                f"Configuration key {name!r} not found; known keys: {', '.join(sorted(self._values))}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Configuration is read-only, cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Configuration is read-only, cannot delete {name!r}")

    def __getitem__(self, key: str) -> Any:
        raise TypeError(f"Use attribute-style access (config.{key}) instead of config[{key!r}]")

    def __dir__(self) -> list:
        return sorted(self._values)

    def __repr__(self) -> str:
        shown = dict(self._values)
        if shown.get("sentry_projects"):
            # api keys only, never the per-project credentials
            shown["sentry_projects"] = sorted(shown["sentry_projects"])
        return f"TypedConfig({shown!r})"

    def get_schema_version(self) -> Optional[str]:
        return self._schema_version

    def to_dict(self) -> Dict[str, Any]:
        """Plain copy of the values, picklable for a spawned worker."""
        return dict(self._values)

    @property
    def sentry_enabled(self) -> bool:
        """An empty sentry_host disables the Sentry relay."""
        return bool(self._values.get("sentry_host"))

    @property
    def sentry_project_map(self) -> Dict[str, SentryProject]:
        return self._projects


def validate_config(config: Dict[str, Any]) -> None:
    """Check the constraints a field type alone cannot express.

    Raises:
        ConfigValidationError: Listing every violated constraint
    """
    errors = [
        f"{name} must be between 1 and 65535, got {config[name]}"
        for name in PORT_FIELDS
        if not 0 < config[name] < 65536
    ]
    if config["listen_workers"] < 1:
        errors.append(f"listen_workers must be at least 1, got {config['listen_workers']}")
    errors.extend(
        f"{name} must be a positive number of milliseconds, got {config[name]}"
        for name in TIMEOUT_FIELDS
        if config[name] <= 0
    )
    errors.extend(
        f"{name} must be one of {', '.join(allowed)}, got {config[name]!r}"
        for name, allowed in CHOICES.items()
        if config[name] not in allowed
    )
    if str(config["log_level"]).upper() not in LEVELS:
        errors.append(f"log_level must be one of {', '.join(LEVELS)}, got {config['log_level']!r}")
    if config["error_reporter_type"] == "sentry" and not config["error_reporter_dsn"]:
        errors.append("error_reporter_dsn is required when error_reporter_type is sentry")
    try:
        parse_sentry_projects(config["sentry_projects"] or {})
    except ValueError as e:
        errors.append(f"sentry_projects: {e}")

    if errors:
        raise _validation_failed(errors)


def load_typed_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    schema_path: Optional[str] = None,
) -> TypedConfig:
    """Load, validate and wrap the proxy configuration.

    Args:
        config_path: JSON config file; defaults to $AIRBRAKE_PROXY_CONFIG when set
        environ: Environment to read instead of os.environ
        schema_path: Schema to use instead of the bundled one

    Raises:
        ConfigSchemaError: If the schema cannot be read
        ConfigValidationError: If any value is missing, malformed or inconsistent
    """
    env = EnvConfigProvider(environ)
    schema = ConfigSchema.from_json_file(schema_path or str(SCHEMA_PATH))

    config_path = config_path or env.get(CONFIG_PATH_ENV)
    file_values = StaticConfigProvider.from_json_file(config_path) if config_path else None

    values = SchemaConfigLoader(schema, env_provider=env, file_provider=file_values).load()
    validate_config(values)
    return TypedConfig(values, schema_version=schema.schema_version)
