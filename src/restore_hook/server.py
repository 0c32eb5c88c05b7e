"""Webhook HTTP server (aiohttp-based, runs as an anyio task)."""

from __future__ import annotations

import datetime
import json
import math
from typing import Any

import anyio
from aiohttp import web

from .auth import verify_signature
from .invoker import TriggerInvoker
from .logging import get_logger
from .models import (
    IgnoredEvent,
    IgnoredRef,
    IncomingWebhook,
    MissingHeaders,
    PayloadError,
)
from .rate_limit import FixedWindowLimiter
from .settings import ReceiverSettings
from .validator import classify, screen_headers

logger = get_logger(__name__)

ENDPOINTS = (
    ("POST", "/webhook", "Trigger configuration restore"),
    ("GET", "/health", "Health check"),
)


def _json(
    body: dict[str, Any],
    *,
    status: int = 200,
    headers: dict[str, str] | None = None,
) -> web.Response:
    return web.Response(
        status=status,
        text=json.dumps(body),
        content_type="application/json",
        headers=headers,
    )


def _error(message: str) -> web.Response:
    return _json({"status": "error", "message": message}, status=500)


def build_webhook_app(
    settings: ReceiverSettings,
    *,
    limiter: FixedWindowLimiter | None = None,
    invoker: TriggerInvoker | None = None,
) -> web.Application:
    """Build the aiohttp application for webhook handling."""
    if limiter is None:
        limiter = FixedWindowLimiter(
            max_per_window=settings.max_triggers_per_window,
            window=settings.window_seconds,
        )
    if invoker is None:
        invoker = TriggerInvoker(
            settings.trigger_command(),
            script=settings.script,
        )
    target_ref = settings.target_ref
    secret = settings.webhook_secret
    max_body = settings.max_body_bytes

    async def handle_health(request: web.Request) -> web.Response:
        now = datetime.datetime.now(datetime.timezone.utc)
        return _json({"status": "healthy", "timestamp": now.isoformat()})

    async def handle_not_found(request: web.Request) -> web.Response:
        return web.Response(status=404, text="Not Found")

    async def handle_webhook(request: web.Request) -> web.Response:
        logger.info("webhook.received", remote=request.remote)
        try:
            return await _process_webhook(request)
        except Exception as exc:
            logger.exception("webhook.internal_error", error=str(exc))
            return _error(str(exc))

    def _ignored_event(delivery_id: str | None, event_type: str) -> web.Response:
        logger.info(
            "webhook.ignored",
            delivery_id=delivery_id,
            event_type=event_type,
        )
        return _json(
            {"status": "ignored", "reason": f"Not a push event: {event_type}"}
        )

    async def _process_webhook(request: web.Request) -> web.Response:
        headers_only = IncomingWebhook.from_request(request.headers, b"")
        screened = screen_headers(headers_only)
        if isinstance(screened, MissingHeaders):
            logger.info("webhook.rejected", reason="missing_headers")
            return web.Response(status=400, text="Invalid request")
        # Without a secret there is nothing to verify, so non-push events are
        # answered before the body is read or size-checked. With a secret the
        # signature over the body is checked first.
        if isinstance(screened, IgnoredEvent) and secret is None:
            return _ignored_event(headers_only.delivery_id, screened.event_type)

        # Size check
        if request.content_length and request.content_length > max_body:
            return web.Response(status=413, text="Payload too large")
        try:
            raw_body = await request.read()
        except web.HTTPRequestEntityTooLarge:
            return web.Response(status=413, text="Payload too large")
        if len(raw_body) > max_body:
            return web.Response(status=413, text="Payload too large")

        if not verify_signature(secret, request.headers, raw_body):
            logger.warning(
                "webhook.signature_invalid",
                delivery_id=headers_only.delivery_id,
            )
            return web.Response(status=401, text="Invalid signature")

        webhook = IncomingWebhook.from_request(request.headers, raw_body)
        try:
            outcome = classify(webhook, target_ref=target_ref)
        except PayloadError as exc:
            logger.error(
                "webhook.payload_invalid",
                delivery_id=webhook.delivery_id,
                error=str(exc),
            )
            return _error(str(exc))

        match outcome:
            case MissingHeaders():
                return web.Response(status=400, text="Invalid request")
            case IgnoredEvent(event_type=event_type):
                return _ignored_event(webhook.delivery_id, event_type)
            case IgnoredRef(ref=ref):
                logger.info(
                    "webhook.ignored",
                    delivery_id=webhook.delivery_id,
                    ref=ref,
                )
                return _json(
                    {"status": "ignored", "reason": f"Not target branch: {ref}"}
                )

        if not limiter.try_acquire():
            retry_after = limiter.retry_after()
            logger.info(
                "webhook.rate_limited",
                delivery_id=webhook.delivery_id,
                retry_after=round(retry_after, 3),
            )
            return _json(
                {
                    "status": "rate_limited",
                    "message": "Too many triggers",
                    "retryAfter": round(retry_after, 3),
                },
                status=429,
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )

        logger.info(
            "webhook.triggering",
            delivery_id=webhook.delivery_id,
            ref=target_ref,
        )
        result = await invoker.run()
        if not result.started:
            return _error(result.failure or "Trigger script failed to start")

        return _json(
            {
                "status": "triggered",
                "exitCode": result.exit_code,
                "message": "Configuration update process initiated",
                "deliveryId": webhook.delivery_id,
                "stdout": result.stdout,
                "stderr": result.stderr,
                "outputTruncated": result.truncated,
            }
        )

    app = web.Application(client_max_size=max_body)
    app.router.add_post("/webhook", handle_webhook)
    app.router.add_get("/health", handle_health, allow_head=False)
    app.router.add_route("*", "/{tail:.*}", handle_not_found)
    return app


async def run_webhook_server(settings: ReceiverSettings) -> None:
    """Run the webhook HTTP server until cancelled."""
    app = build_webhook_app(settings)

    if settings.webhook_secret is None:
        logger.warning(
            "server.no_signature_check",
            hint="set RESTORE_HOOK_WEBHOOK_SECRET to verify X-Hub-Signature-256",
        )

    runner = web.AppRunner(app, access_log=None)
    await runner.setup()
    try:
        site = web.TCPSite(runner, settings.host, settings.port)
        await site.start()
        logger.info(
            "server.started",
            host=settings.host,
            port=settings.port,
            script=settings.script_path,
            target_ref=settings.target_ref,
            endpoints=[f"{method} {path} - {label}" for method, path, label in ENDPOINTS],
        )
        # Block until cancelled by structured concurrency.
        await anyio.sleep_forever()
    finally:
        await runner.cleanup()
        logger.info("server.stopped")
