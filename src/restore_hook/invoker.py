"""Run the restore script and capture what it did."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

import anyio

from .logging import get_logger
from .models import TriggerResult
from .utils.streams import StreamCapture, drain_stream

logger = get_logger(__name__)


class TriggerInvoker:
    """Launch a fixed command and wait for it to finish.

    The argv is fixed at construction and nothing from the webhook request
    reaches the child: no arguments, no stdin, no shell. ``script`` is the
    file that must exist for a launch to be attempted; it is normally the
    last element of ``command``.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        script: str | Path | None = None,
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        if not command:
            raise ValueError("command must not be empty")
        self._command = list(command)
        self._script = Path(script) if script is not None else None
        self._cwd = cwd
        self._env = dict(env) if env is not None else None

    @property
    def command(self) -> list[str]:
        return list(self._command)

    async def run(self) -> TriggerResult:
        if self._script is not None and not self._script.is_file():
            failure = f"Trigger script not found: {self._script}"
            logger.error("trigger.launch_failed", cmd=self._command, error=failure)
            return TriggerResult.launch_failed(failure)

        started = time.monotonic()
        stdout = StreamCapture()
        stderr = StreamCapture()
        try:
            proc = await anyio.open_process(
                self._command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self._cwd,
                env=self._env,
            )
        except OSError as exc:
            failure = f"Failed to start trigger script: {exc}"
            logger.error("trigger.launch_failed", cmd=self._command, error=str(exc))
            return TriggerResult.launch_failed(failure)

        async with proc:
            logger.info("trigger.spawn", cmd=self._command, pid=proc.pid)
            async with anyio.create_task_group() as tg:
                if proc.stdout is not None:
                    tg.start_soon(
                        drain_stream, proc.stdout, stdout, logger, "stdout"
                    )
                if proc.stderr is not None:
                    tg.start_soon(
                        drain_stream, proc.stderr, stderr, logger, "stderr"
                    )
            rc = await proc.wait()

        result = TriggerResult(
            exit_code=rc,
            stdout=stdout.text(),
            stderr=stderr.text(),
            truncated=stdout.truncated or stderr.truncated,
            duration_s=time.monotonic() - started,
        )
        log = logger.info if rc == 0 else logger.warning
        log(
            "trigger.exit",
            pid=proc.pid,
            rc=rc,
            duration_s=round(result.duration_s, 3),
        )
        if result.stdout:
            logger.info("trigger.stdout", output=result.stdout)
        if result.stderr:
            logger.warning("trigger.stderr", output=result.stderr)
        return result
