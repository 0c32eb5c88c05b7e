"""Process entry point: load settings, configure logging, serve."""

from __future__ import annotations

import signal
import sys

import anyio

from .config import ConfigError
from .logging import get_logger, setup_logging
from .settings import ReceiverSettings, load_settings
from .server import run_webhook_server

logger = get_logger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def _watch_signals(scope: anyio.CancelScope) -> None:
    with anyio.open_signal_receiver(*_SHUTDOWN_SIGNALS) as signals:
        async for signum in signals:
            logger.info("shutdown.requested", signal=signal.Signals(signum).name)
            scope.cancel()
            return


async def serve(settings: ReceiverSettings) -> None:
    async with anyio.create_task_group() as tg:
        tg.start_soon(_watch_signals, tg.cancel_scope)
        tg.start_soon(run_webhook_server, settings)


def main() -> int:
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    setup_logging(settings.log_level, settings.log_format)
    anyio.run(serve, settings)
    return 0
