from __future__ import annotations

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in list(os.environ):
        if key.startswith("RESTORE_HOOK_"):
            monkeypatch.delenv(key)
    # Keep a stray .env in the repo root out of the settings under test.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str], Path]:
    def _make(body: str, name: str = "trigger.sh") -> Path:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make
