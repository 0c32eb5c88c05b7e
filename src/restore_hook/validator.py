"""Classify inbound webhook requests before anything is triggered."""

from __future__ import annotations

from .models import (
    Accepted,
    IgnoredEvent,
    IgnoredRef,
    IncomingWebhook,
    MissingHeaders,
    PushPayload,
    ValidationOutcome,
)

PUSH_EVENT = "push"


def _present(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def check_headers(webhook: IncomingWebhook) -> bool:
    return _present(webhook.event_type) and _present(webhook.delivery_id)


def screen_headers(webhook: IncomingWebhook) -> MissingHeaders | IgnoredEvent | None:
    """Run the checks that need only the headers.

    Returns ``None`` when the request is a push with both headers present and
    the body still has to be looked at.
    """
    if not check_headers(webhook):
        return MissingHeaders()
    event_type = webhook.event_type or ""
    if event_type != PUSH_EVENT:
        return IgnoredEvent(event_type=event_type)
    return None


def classify(webhook: IncomingWebhook, *, target_ref: str) -> ValidationOutcome:
    """Decide what to do with a ``POST /webhook`` request.

    The checks run cheapest first: headers, then event type, and only then
    the JSON body. A body that is not valid JSON raises
    :class:`~restore_hook.models.PayloadError` instead of producing an
    outcome. The ref must equal *target_ref* exactly.
    """
    screened = screen_headers(webhook)
    if screened is not None:
        return screened

    payload = PushPayload.parse(webhook.body)
    if payload.ref != target_ref:
        return IgnoredRef(ref=payload.ref)

    return Accepted(delivery_id=webhook.delivery_id or "", ref=target_ref)
