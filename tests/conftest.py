"""Shared test fixtures — reduces boilerplate across test modules.

Provides:
- ``isolated_env`` — autouse fixture clearing ``PHPMD_*`` vars and any ``.env``
- ``FakeSpawner`` / ``fake_spawner`` — scripted stand-in for ``spawn_and_stream``
- ``make_document`` — builds ``TextDocument`` instances
- ``fake_phpmd`` — writes an executable shell script that mimics PHPMD
"""

from __future__ import annotations

import asyncio
import os
import stat
import sys
from dataclasses import dataclass, field

import pytest

from phpmd_ide.contracts import TextDocument
from phpmd_ide.runner import RunResult


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep host ``PHPMD_*`` variables and ``.env`` files out of tests."""
    for key in list(os.environ):
        if key.startswith("PHPMD_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: tests that spawn real subprocesses",
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def _make_document(name: str = "src/Foo.php", language_id: str = "php", *, uri: str | None = None) -> TextDocument:
    return TextDocument(
        uri=uri or f"file:///project/{name}",
        file_name=f"/project/{name}",
        language_id=language_id,
    )


@pytest.fixture
def make_document():
    return _make_document


# ---------------------------------------------------------------------------
# Fake spawner
# ---------------------------------------------------------------------------


@dataclass
class Response:
    chunks: list[str] = field(default_factory=list)
    exit_code: int = 2
    delay: float = 0.0
    error: Exception | None = None
    stderr: str = ""


class FakeSpawner:
    """Records invocations and replays queued responses in order.

    When the queue is empty every call exits 0 with no output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []
        self._responses: list[Response] = []

    def respond(self, *chunks: str, exit_code: int = 2, delay: float = 0.0,
                error: Exception | None = None, stderr: str = "") -> None:
        self._responses.append(Response(list(chunks), exit_code, delay, error, stderr))

    async def __call__(self, executable, args, *, on_stdout):
        self.calls.append((executable, list(args)))
        response = self._responses.pop(0) if self._responses else Response(exit_code=0)
        if response.delay:
            await asyncio.sleep(response.delay)
        if response.error is not None:
            raise response.error
        for chunk in response.chunks:
            on_stdout(chunk)
        return RunResult(
            exit_code=response.exit_code,
            stderr=response.stderr,
            command=" ".join([executable, *args]),
        )


@pytest.fixture
def fake_spawner() -> FakeSpawner:
    return FakeSpawner()


# ---------------------------------------------------------------------------
# Fake PHPMD executable
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_phpmd(tmp_path):
    """Factory writing a ``/bin/sh`` script that prints *output* and exits.

    The script echoes its arguments to stderr so tests can inspect them.
    """
    if sys.platform == "win32":
        pytest.skip("fake PHPMD script requires a POSIX shell")

    def _make(output: str, exit_code: int = 2, name: str = "phpmd") -> str:
        script = tmp_path / name
        script.write_text(
            "#!/bin/sh\n"
            'echo "$@" >&2\n'
            "cat <<'PHPMD_EOF'\n"
            f"{output}"
            "PHPMD_EOF\n"
            f"exit {exit_code}\n",
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make
