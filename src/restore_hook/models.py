"""Request-scoped value types for the webhook pipeline."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"
SIGNATURE_HEADER = "X-Hub-Signature-256"


class PayloadError(ValueError):
    """The request body could not be parsed as JSON."""


@dataclass(frozen=True, slots=True)
class IncomingWebhook:
    event_type: str | None
    delivery_id: str | None
    body: bytes = b""

    @classmethod
    def from_request(cls, headers: Mapping[str, str], body: bytes) -> IncomingWebhook:
        # aiohttp headers are case-insensitive; plain dicts in tests may not be.
        lower = {k.lower(): v for k, v in headers.items()}
        return cls(
            event_type=lower.get(EVENT_HEADER.lower()),
            delivery_id=lower.get(DELIVERY_HEADER.lower()),
            body=body,
        )


@dataclass(frozen=True, slots=True)
class PushPayload:
    """The part of a push event body the receiver cares about."""

    ref: str | None = None

    @classmethod
    def parse(cls, body: bytes) -> PushPayload:
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise PayloadError(f"Invalid JSON payload: {exc}") from exc
        if not isinstance(data, dict):
            return cls()
        ref = data.get("ref")
        return cls(ref=ref if isinstance(ref, str) else None)


@dataclass(frozen=True, slots=True)
class MissingHeaders:
    pass


@dataclass(frozen=True, slots=True)
class IgnoredEvent:
    event_type: str


@dataclass(frozen=True, slots=True)
class IgnoredRef:
    ref: str | None


@dataclass(frozen=True, slots=True)
class Accepted:
    delivery_id: str
    ref: str


ValidationOutcome = MissingHeaders | IgnoredEvent | IgnoredRef | Accepted


@dataclass(frozen=True, slots=True)
class TriggerResult:
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    failure: str | None = None
    truncated: bool = False
    duration_s: float = 0.0

    @property
    def started(self) -> bool:
        return self.failure is None

    @classmethod
    def launch_failed(cls, failure: str) -> TriggerResult:
        return cls(failure=failure)
