# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""HTTP intake: accepts Airbrake notices and answers lookups."""

import time
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import RedirectResponse, Response

from . import __version__
from .models import Submission
from .service import ProxyService


def request_target(request: Request) -> str:
    """Raw request target as sent by the client, path and query."""
    raw_path = request.scope.get("raw_path")
    target = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"")
    if query:
        target = f"{target}?{query.decode('latin-1')}"
    return target


def create_app(service: ProxyService) -> FastAPI:
    """Create the intake application for one worker.

    Every GET is a lookup and every POST is a notice submission, whatever
    the path, so the generated docs routes are disabled.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        try:
            yield
        finally:
            await service.close()

    app = FastAPI(
        title="airbrake-proxy",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/{path:path}")
    async def locate(path: str, request: Request):
        """Redirect to the Airbrake notice recorded for an identifier."""
        notice_id = await service.lookup(request_target(request))
        if notice_id is None:
            return Response(status_code=404)
        return RedirectResponse(url=service.locate_location(notice_id), status_code=303)

    @app.post("/{path:path}")
    async def submit(path: str, request: Request, background_tasks: BackgroundTasks):
        """Accept a notice, acknowledge it and relay it once the response is sent."""
        received_at = time.monotonic()
        body = await request.body()
        submission = Submission(
            identifier=service.new_identifier(),
            path=request_target(request),
            body=body,
            received_at=received_at,
        )
        background_tasks.add_task(service.dispatch, submission)
        return Response(
            content=service.render_response(submission.identifier),
            media_type="application/xml",
            headers={"Connection": "close"},
        )

    return app
