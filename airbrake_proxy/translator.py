# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Translation of Airbrake XML notices into Sentry store API events.

The translation is pure: it reads the notice and the project mapping and
returns a new event. The only impurity is the clock, which is injectable.

Every backtrace line becomes a frame tagged with module ``node`` except the
last one, which is tagged ``exception``.
"""

import hashlib
import json
import time
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .models import AirbrakeNotice, SentryEvent, SentryFrame, SentryProject

PROJECT_ROOT_TOKEN = "[PROJECT_ROOT]"
FRAME_MODULE = "node"
FINAL_FRAME_MODULE = "exception"


class NoticeParseError(Exception):
    """Raised when a request body is not a usable Airbrake notice."""
    pass


def parse_notice(body: Union[bytes, str]) -> AirbrakeNotice:
    """Parse an Airbrake v2 XML notice.

    Args:
        body: Raw request body as submitted by the Airbrake client

    Returns:
        AirbrakeNotice with the fields needed for translation

    Raises:
        NoticeParseError: If the body is not XML, is not a notice, or carries
            no error element
    """
    try:
        root = ET.fromstring(body)
    except (ET.ParseError, ValueError) as e:
        raise NoticeParseError(f"Notice is not well-formed XML: {e}") from e

    if root.tag != "notice":
        raise NoticeParseError(f"Expected a <notice> document, got <{root.tag}>")

    error = root.find("error")
    if error is None:
        raise NoticeParseError("Notice has no <error> element")

    environment = root.find("server-environment")
    project_root = None
    hostname = None
    if environment is not None:
        project_root = environment.findtext("project-root")
        hostname = environment.findtext("hostname")

    return AirbrakeNotice(
        api_key=(root.findtext("api-key") or "").strip(),
        error_class=error.findtext("class") or "",
        message=error.findtext("message") or "",
        backtrace=[dict(line.attrib) for line in error.findall("backtrace/line")],
        project_root=project_root,
        hostname=hostname,
    )


def canonical_json(data: Mapping[str, Any]) -> str:
    """Compact JSON encoding used both for hashing and for the wire."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def compute_event_id(event_body: Mapping[str, Any]) -> str:
    """MD5 hex digest of the event's canonical serialization."""
    return hashlib.md5(canonical_json(event_body).encode("utf-8")).hexdigest()


def _resolve_project_root(filename: str, project_root: Optional[str]) -> str:
    if project_root is None:
        return filename
    return filename.replace(PROJECT_ROOT_TOKEN, project_root, 1)


def _line_number(raw: str) -> Union[int, str]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return raw


def build_frames(backtrace: List[Dict[str, str]], project_root: Optional[str]) -> List[SentryFrame]:
    """Map backtrace lines onto Sentry frames, keeping their order."""
    frames = []
    last = len(backtrace) - 1
    for index, line in enumerate(backtrace):
        frames.append(SentryFrame(
            filename=_resolve_project_root(line.get("file", ""), project_root),
            lineno=_line_number(line.get("number", "")),
            function=line.get("method", ""),
            module=FINAL_FRAME_MODULE if index == last else FRAME_MODULE,
        ))
    return frames


class SentryTranslator:
    """Builds Sentry events for notices whose api key maps to a Sentry project."""

    def __init__(self, projects: Mapping[str, SentryProject], clock: Callable[[], float] = time.time):
        """Initialize translator.

        Args:
            projects: Sentry projects keyed by Airbrake api key
            clock: Returns the current time in seconds since the epoch
        """
        self.projects = projects
        self._clock = clock

    def translate(self, body: Union[bytes, str]) -> Optional[SentryEvent]:
        """Translate a raw notice body.

        Returns:
            The Sentry event, or None when the api key has no Sentry project

        Raises:
            NoticeParseError: If the body is not a usable notice
        """
        return self.translate_notice(parse_notice(body))

    def translate_notice(self, notice: AirbrakeNotice) -> Optional[SentryEvent]:
        project = self.projects.get(notice.api_key)
        if project is None:
            return None

        event = SentryEvent(
            api_key=notice.api_key,
            message=notice.message,
            exception_type=notice.error_class,
            frames=build_frames(notice.backtrace, notice.project_root),
            server_name=notice.hostname,
            timestamp=int(self._clock() * 1000),
            project=project.id,
            platform=project.platform,
        )
        # The timestamp is part of the hashed body, so two translations of
        # the same notice at different instants get different ids.
        event.event_id = compute_event_id(event.body())
        return event
