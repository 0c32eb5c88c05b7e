from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from anyio.abc import ByteReceiveStream


@dataclass(slots=True)
class StreamCapture:
    chunks: list[bytes] = field(default_factory=list)
    error: str | None = None

    @property
    def truncated(self) -> bool:
        return self.error is not None

    def text(self) -> str:
        return b"".join(self.chunks).decode("utf-8", errors="replace")


async def drain_stream(
    stream: ByteReceiveStream,
    capture: StreamCapture,
    logger: Any,
    tag: str,
) -> None:
    """Read *stream* to EOF, appending every chunk to *capture*.

    A read error stops the drain; what was read so far is kept and the
    capture is marked truncated.
    """
    try:
        async for chunk in stream:
            capture.chunks.append(chunk)
    except Exception as exc:  # noqa: BLE001
        capture.error = str(exc) or type(exc).__name__
        logger.warning(
            "subprocess.stream.error",
            tag=tag,
            error=capture.error,
            captured_bytes=sum(len(c) for c in capture.chunks),
        )
