# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""Data models shared by the intake, translator and forwarders."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


class Classification(str, Enum):
    """Outcome of one relay attempt to a backend."""

    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SentryProject:
    """Sentry project a given Airbrake api key is mirrored into."""

    id: Union[str, int]  # as configured; part of the hashed event body
    key: str
    secret: str
    platform: str = "node"

    @classmethod
    def from_dict(cls, api_key: str, data: Mapping[str, Any]) -> "SentryProject":
        if not isinstance(data, Mapping):
            raise ValueError(f"project for api key '{api_key}' must be an object")
        missing = [name for name in ("id", "key", "secret") if data.get(name) in (None, "")]
        if missing:
            raise ValueError(f"project for api key '{api_key}' is missing {', '.join(missing)}")
        return cls(
            id=data["id"],
            key=str(data["key"]),
            secret=str(data["secret"]),
            platform=str(data.get("platform") or "node"),
        )


def parse_sentry_projects(raw: Mapping[str, Any]) -> Dict[str, SentryProject]:
    """Build the api-key to Sentry project mapping from configuration.

    Raises:
        ValueError: If any project entry is incomplete
    """
    return {api_key: SentryProject.from_dict(api_key, data) for api_key, data in raw.items()}


@dataclass(frozen=True)
class Submission:
    """A notice accepted from a client, held only while it is being relayed."""

    identifier: str
    path: str
    body: bytes
    received_at: float


@dataclass
class AirbrakeNotice:
    """The parts of an Airbrake XML notice that are mirrored into Sentry."""

    api_key: str
    error_class: str
    message: str
    backtrace: List[Dict[str, str]] = field(default_factory=list)
    project_root: Optional[str] = None
    hostname: Optional[str] = None


@dataclass
class SentryFrame:
    filename: str
    lineno: Union[int, str]
    function: str
    module: str
    in_app: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "lineno": self.lineno,
            "function": self.function,
            "in_app": self.in_app,
            "module": self.module,
        }


@dataclass
class SentryEvent:
    """A notice translated into Sentry's store API schema.

    ``api_key`` is the originating Airbrake api key; it selects the Sentry
    credentials and is not part of the serialized event.
    """

    api_key: str
    message: str
    exception_type: str
    frames: List[SentryFrame]
    server_name: Optional[str]
    timestamp: int
    project: Union[str, int]
    platform: str
    event_id: str = ""

    def body(self) -> Dict[str, Any]:
        """Serializable event without ``event_id``, in wire key order."""
        return {
            "message": self.message,
            "sentry.interfaces.Exception": {
                "type": self.exception_type,
                "value": self.message,
            },
            "sentry.interfaces.Stacktrace": {
                "frames": [frame.to_dict() for frame in self.frames],
            },
            "culprit": self.message,
            "server_name": self.server_name,
            "extra": {},
            "logger": "",
            "timestamp": self.timestamp,
            "project": self.project,
            "platform": self.platform,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.body()
        data["event_id"] = self.event_id
        return data
