# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Tests for schema-driven configuration loading."""

import json

import pytest

from airbrake_proxy.config import (
    ConfigSchema,
    ConfigSchemaError,
    ConfigValidationError,
    EnvConfigProvider,
    SchemaConfigLoader,
    StaticConfigProvider,
    TypedConfig,
    load_typed_config,
)
from airbrake_proxy.models import SentryProject

PROJECTS = {"abc": {"id": "2", "key": "pub", "secret": "sec"}}


@pytest.fixture
def config_file(tmp_path):
    def write(data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data))
        return str(path)

    return write


class TestLoadTypedConfig:
    """Tests for load_typed_config."""

    def test_defaults(self):
        config = load_typed_config(environ={})

        assert config.listen_host == "0.0.0.0"
        assert config.listen_port == 8080
        assert config.listen_workers == 2
        assert config.airbrake_host == "api.airbrake.io"
        assert config.airbrake_timeout == 10000
        assert config.sentry_host == ""
        assert not config.sentry_enabled
        assert config.sentry_project_map == {}
        assert config.store_type == "redis"
        assert config.redis_key == "airbrake-proxy"
        assert config.metrics_backend == "statsd"
        assert config.statsd_prefix == "airbrake-proxy"
        assert config.get_schema_version() is not None

    def test_env_overrides(self):
        config = load_typed_config(environ={
            "LISTEN_PORT": "9090",
            "LISTEN_WORKERS": "4",
            "AIRBRAKE_PROTOCOL": "http",
            "SENTRY_HOST": "sentry.example.com",
            "SENTRY_PROJECTS": json.dumps(PROJECTS),
        })

        assert config.listen_port == 9090
        assert config.listen_workers == 4
        assert config.airbrake_protocol == "http"
        assert config.sentry_enabled
        assert config.sentry_project_map == {
            "abc": SentryProject(id="2", key="pub", secret="sec", platform="node"),
        }

    def test_sectioned_config_file(self, config_file):
        path = config_file({
            "listen": {"port": 8081, "hostname": "errors.example.com"},
            "airbrake": {"host": "airbrake.internal", "timeout": 2500},
            "sentry": {"host": "sentry.internal", "projects": PROJECTS},
            "redis": {"key": "proxy-ids"},
        })

        config = load_typed_config(config_path=path, environ={})

        assert config.listen_port == 8081
        assert config.listen_hostname == "errors.example.com"
        assert config.airbrake_host == "airbrake.internal"
        assert config.airbrake_timeout == 2500
        assert config.sentry_host == "sentry.internal"
        assert set(config.sentry_project_map) == {"abc"}
        assert config.redis_key == "proxy-ids"

    def test_config_path_from_env(self, config_file):
        path = config_file({"listen": {"port": 8082}})

        config = load_typed_config(environ={"AIRBRAKE_PROXY_CONFIG": path})

        assert config.listen_port == 8082

    def test_env_beats_file(self, config_file):
        path = config_file({"listen": {"port": 8081}})

        config = load_typed_config(config_path=path, environ={"LISTEN_PORT": "8083"})

        assert config.listen_port == 8083

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigValidationError, match="Config file not found"):
            load_typed_config(config_path=str(tmp_path / "missing.json"), environ={})

    def test_invalid_json_config_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigValidationError, match="Invalid JSON"):
            load_typed_config(config_path=str(path), environ={})

    def test_errors_are_aggregated(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            load_typed_config(environ={"LISTEN_PORT": "http", "REDIS_PORT": "x"})

        message = str(exc_info.value)
        assert "listen_port" in message
        assert "redis_port" in message

    @pytest.mark.parametrize("environ, expected", [
        ({"LISTEN_PORT": "0"}, "listen_port must be between 1 and 65535"),
        ({"AIRBRAKE_PORT": "70000"}, "airbrake_port must be between 1 and 65535"),
        ({"LISTEN_WORKERS": "0"}, "listen_workers must be at least 1"),
        ({"SENTRY_TIMEOUT": "0"}, "sentry_timeout must be a positive number"),
        ({"AIRBRAKE_PROTOCOL": "ftp"}, "airbrake_protocol must be one of http, https"),
        ({"STORE_TYPE": "mongo"}, "store_type must be one of"),
        ({"METRICS_BACKEND": "graphite"}, "metrics_backend must be one of"),
        ({"SENTRY_PROJECTS": '{"abc": {"id": "2"}}'}, "missing key, secret"),
        ({"SENTRY_PROJECTS": "[1, 2]"}, "Expected an object"),
        ({"SENTRY_PROJECTS": "{oops"}, "Expected a JSON object"),
        ({"ERROR_REPORTER_TYPE": "bogus"}, "error_reporter_type must be one of console, silent, sentry"),
        ({"LOG_TYPE": "syslog"}, "log_type must be one of stdout, silent"),
        ({"LOG_LEVEL": "LOUD"}, "log_level must be one of DEBUG, INFO, WARNING, ERROR"),
        ({"ERROR_REPORTER_TYPE": "sentry"}, "error_reporter_dsn is required"),
    ])
    def test_validation(self, environ, expected):
        with pytest.raises(ConfigValidationError, match=expected):
            load_typed_config(environ=environ)

    def test_log_level_is_case_insensitive(self):
        assert load_typed_config(environ={"LOG_LEVEL": "debug"}).log_level == "debug"

    def test_sentry_reporter_with_dsn(self):
        config = load_typed_config(environ={
            "ERROR_REPORTER_TYPE": "sentry",
            "ERROR_REPORTER_DSN": "https://public@sentry.example.com/1",
        })

        assert config.error_reporter_type == "sentry"

    def test_required_field_cannot_be_empty(self):
        with pytest.raises(ConfigValidationError, match="airbrake_host: Required field is empty"):
            load_typed_config(environ={"AIRBRAKE_HOST": ""})

    def test_missing_schema(self, tmp_path):
        with pytest.raises(ConfigSchemaError, match="Schema file not found"):
            load_typed_config(environ={}, schema_path=str(tmp_path / "nope.json"))


class TestTypedConfig:
    """Tests for TypedConfig."""

    def test_is_immutable(self):
        config = TypedConfig({"listen_port": 8080})

        with pytest.raises(AttributeError, match="read-only"):
            config.listen_port = 1

    def test_rejects_dict_access(self):
        config = TypedConfig({"listen_port": 8080})

        with pytest.raises(TypeError, match="attribute-style"):
            config["listen_port"]

    def test_unknown_key(self):
        config = TypedConfig({"listen_port": 8080})

        with pytest.raises(AttributeError, match="not found"):
            config.listen_prot

    def test_repr_hides_project_secrets(self):
        config = TypedConfig({"sentry_projects": PROJECTS})

        assert "pub" not in repr(config)
        assert "abc" in repr(config)

    def test_to_dict_round_trips(self):
        config = load_typed_config(environ={"SENTRY_PROJECTS": json.dumps(PROJECTS)})

        rebuilt = TypedConfig(config.to_dict())

        assert rebuilt.to_dict() == config.to_dict()
        assert rebuilt.sentry_project_map == config.sentry_project_map


class TestSchemaConfigLoader:
    """Tests for SchemaConfigLoader with an inline schema."""

    def test_types(self):
        schema = ConfigSchema.from_dict({
            "service_name": "test",
            "fields": {
                "flag": {"type": "bool", "env_var": "FLAG"},
                "count": {"type": "int", "default": 3},
                "name": {"type": "string", "default": "x"},
            },
        })
        loader = SchemaConfigLoader(
            schema,
            env_provider=EnvConfigProvider({"FLAG": "yes"}),
            file_provider=StaticConfigProvider({"count": "7"}),
        )

        assert loader.load() == {"flag": True, "count": 7, "name": "x"}

    def test_bad_bool(self):
        schema = ConfigSchema.from_dict({"fields": {"flag": {"type": "bool", "env_var": "FLAG"}}})
        loader = SchemaConfigLoader(schema, env_provider=EnvConfigProvider({"FLAG": "maybe"}))

        with pytest.raises(ConfigValidationError, match="Expected a boolean"):
            loader.load()

    def test_required_missing(self):
        schema = ConfigSchema.from_dict({"fields": {"host": {"type": "string", "required": True}}})
        loader = SchemaConfigLoader(schema, env_provider=EnvConfigProvider({}))

        with pytest.raises(ConfigValidationError, match="Required field is missing"):
            loader.load()
