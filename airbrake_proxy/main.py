# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""airbrake-proxy entry point: bind the listening socket and supervise the workers."""

import multiprocessing
import socket
import sys
from typing import Any, Dict, Optional

import httpx
import uvicorn

from proxy_error_reporting import create_error_reporter
from proxy_logging import Logger, create_logger, create_uvicorn_log_config
from proxy_metrics import create_metrics_collector
from proxy_store import create_correlation_store

from . import __version__
from .airbrake import AirbrakeForwarder
from .api import create_app
from .config import ConfigSchemaError, ConfigValidationError, TypedConfig, load_typed_config
from .sentry import SentryForwarder
from .service import ProxyService, build_response_template
from .supervisor import WorkerSupervisor
from .translator import SentryTranslator

SERVICE_NAME = "airbrake-proxy"


def build_service(config: TypedConfig, logger: Logger) -> ProxyService:
    """Create the adapters of one worker and wire them into a ProxyService."""
    store = create_correlation_store(
        store_type=config.store_type,
        host=config.redis_host,
        port=config.redis_port,
        db=config.redis_db,
        key=config.redis_key,
    )
    metrics_collector = create_metrics_collector(
        backend=config.metrics_backend,
        host=config.statsd_host,
        port=config.statsd_port,
        prefix=config.statsd_prefix,
    )
    error_reporter = create_error_reporter(
        reporter_type=config.error_reporter_type,
        logger=logger,
        dsn=config.error_reporter_dsn or None,
        environment=config.error_reporter_environment,
    )
    http_client = httpx.AsyncClient()

    airbrake = AirbrakeForwarder(
        client=http_client,
        host=config.airbrake_host,
        port=config.airbrake_port,
        protocol=config.airbrake_protocol,
        timeout_ms=config.airbrake_timeout,
        store=store,
        metrics=metrics_collector,
        logger=logger,
    )

    sentry = None
    translator = None
    if config.sentry_enabled:
        projects = config.sentry_project_map
        translator = SentryTranslator(projects)
        sentry = SentryForwarder(
            client=http_client,
            host=config.sentry_host,
            port=config.sentry_port,
            protocol=config.sentry_protocol,
            timeout_ms=config.sentry_timeout,
            projects=projects,
            metrics=metrics_collector,
            logger=logger,
        )

    return ProxyService(
        store=store,
        airbrake=airbrake,
        metrics_collector=metrics_collector,
        logger=logger,
        error_reporter=error_reporter,
        response_template=build_response_template(config.listen_hostname, config.listen_port),
        locate_url=config.airbrake_locate_url,
        sentry=sentry,
        translator=translator,
        http_client=http_client,
    )


def run_worker(config_values: Dict[str, Any], sock: socket.socket) -> None:
    """Worker process body: serve the intake app on the shared socket."""
    config = TypedConfig(config_values)
    logger = create_logger(logger_type=config.log_type, level=config.log_level, name=SERVICE_NAME)

    app = create_app(build_service(config, logger))
    server = uvicorn.Server(uvicorn.Config(
        app,
        log_config=create_uvicorn_log_config(SERVICE_NAME, config.log_level),
        lifespan="on",
    ))
    server.run(sockets=[sock])


def bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind((host, port))
    sock.set_inheritable(True)
    return sock


def main(argv: Optional[list] = None) -> int:
    """Main entry point for airbrake-proxy.

    Usage: airbrake-proxy [CONFIG_PATH]
    """
    argv = sys.argv[1:] if argv is None else argv
    # LOG_LEVEL is not validated yet
    bootstrap_logger = create_logger(level="INFO", name=SERVICE_NAME)
    bootstrap_logger.info(f"Starting airbrake-proxy (version {__version__})")

    try:
        config = load_typed_config(config_path=argv[0] if argv else None)
    except (ConfigSchemaError, ConfigValidationError) as e:
        bootstrap_logger.error(f"Failed to load configuration: {e}")
        return 1

    logger = create_logger(logger_type=config.log_type, level=config.log_level, name=SERVICE_NAME)

    try:
        sock = bind_socket(config.listen_host, config.listen_port)
    except OSError as e:
        logger.error(f"Could not listen on {config.listen_host}:{config.listen_port}: {e}")
        return 1

    logger.info(
        f"Listening on {config.listen_host}:{config.listen_port} with {config.listen_workers} workers",
        sentry_enabled=config.sentry_enabled,
        store_type=config.store_type,
    )

    context = multiprocessing.get_context("spawn")
    config_values = config.to_dict()

    def spawn(index: int):
        process = context.Process(
            target=run_worker,
            args=(config_values, sock),
            name=f"{SERVICE_NAME}-worker-{index}",
        )
        process.start()
        return process

    supervisor = WorkerSupervisor(config.listen_workers, spawn, logger)
    supervisor.install_signal_handlers()
    try:
        supervisor.run()
    finally:
        sock.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
