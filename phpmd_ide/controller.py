"""Analyzer controller — save-triggered PHPMD validation for one workspace.

Flow per document::

    save → debounce (per-document timer, reset on repeat saves)
         → spawn PHPMD <file> text <rulesets>
         → stream stdout through a LineBuffer
         → exit > 0: publish diagnostics / exit 0: delete entry

Each run is tagged with a per-document sequence number when it starts.
A run that finishes after a newer run for the same document has started
drops its result, so the latest save always wins.  Superseded
processes are left to finish; only the newest run per document moves
the status to ERROR.

Everything runs on the asyncio event loop; there is no locking.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol

from phpmd_ide.config import PHPMDSettings, load_settings
from phpmd_ide.contracts import (
    DIAGNOSTIC_SOURCE,
    PHP_LANGUAGE_ID,
    Diagnostic,
    RunMode,
    TextDocument,
)
from phpmd_ide.diagnostics import DiagnosticCollection
from phpmd_ide.errors import PHPMDError
from phpmd_ide.events import Disposable, ExtensionContext, Workspace
from phpmd_ide.parser import LineBuffer
from phpmd_ide.runner import ChunkHandler, RunResult, build_args, spawn_and_stream

logger = logging.getLogger(__name__)


class Spawner(Protocol):
    def __call__(
        self,
        executable: str,
        args: Sequence[str],
        *,
        on_stdout: ChunkHandler,
    ) -> Awaitable[RunResult]: ...


class ControllerStatus(str, enum.Enum):
    """Coarse state shown in the host's status indicator."""

    IDLE = "idle"
    RUNNING = "running"
    ERROR = "error"
    DISABLED = "disabled"


StatusCallback = Callable[[ControllerStatus, PHPMDError | None], None]


class PHPMDController:
    """Owns configuration, debounce timers, runs and the diagnostic collection."""

    def __init__(
        self,
        config: PHPMDSettings | Mapping[str, Any] | None = None,
        *,
        collection: DiagnosticCollection | None = None,
        spawner: Spawner = spawn_and_stream,
        on_status: StatusCallback | None = None,
    ) -> None:
        self.collection = collection or DiagnosticCollection(DIAGNOSTIC_SOURCE)
        self.status = ControllerStatus.IDLE
        self.last_error: PHPMDError | None = None
        self._spawner = spawner
        self._on_status = on_status
        self._listener: Disposable | None = None
        self._close_listener: Disposable | None = None
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._sequence: dict[str, int] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._active = 0
        self._disposed = False
        self.initialize(config)

    # ── configuration ─────────────────────────────────────────

    def initialize(self, config: PHPMDSettings | Mapping[str, Any] | None = None) -> None:
        """Read enabled flag, executable and rulesets from *config*."""
        if isinstance(config, PHPMDSettings):
            settings = config
        else:
            settings = load_settings(config)

        self.settings = settings
        self.enabled = settings.enabled
        self.executable = settings.executable
        self.rulesets = settings.selected_rulesets
        self.report_format = settings.report_format
        self.run_mode = settings.run_mode
        self.debounce_s = settings.debounce_ms / 1000

        if not self.enabled:
            self._set_status(ControllerStatus.DISABLED)
        logger.debug(
            "PHPMD configured: enabled=%s executable=%s rulesets=%s",
            self.enabled, self.executable, ",".join(self.rulesets),
        )

    # ── lifecycle ─────────────────────────────────────────────

    def activate(self, workspace: Workspace, context: ExtensionContext | None = None) -> None:
        """Subscribe to *workspace* document events.

        Only the on-save listener validates; on-type is accepted in
        configuration but its listener does nothing.
        """
        if not self.enabled:
            logger.info("PHPMD disabled; not listening for document events")
            return

        if self._listener is not None:
            self._listener.dispose()
        if self._close_listener is not None:
            self._close_listener.dispose()

        if self.run_mode is RunMode.ON_TYPE:
            self._listener = workspace.on_did_change_text_document.subscribe(self._on_change)
        else:
            self._listener = workspace.on_did_save_text_document.subscribe(self.validate)

        self._close_listener = workspace.on_did_close_text_document.subscribe(self._on_close)

        if context is not None:
            context.subscriptions.append(self)

    def dispose(self) -> None:
        """Cancel pending timers, unsubscribe and tear down the collection."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        for listener in (self._listener, self._close_listener):
            if listener is not None:
                listener.dispose()
        self._listener = None
        self._close_listener = None
        self.collection.clear()
        self.collection.dispose()
        self._disposed = True

    async def drain(self) -> None:
        """Wait until every in-flight run has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── events ────────────────────────────────────────────────

    def validate(self, document: TextDocument) -> None:
        """Schedule a debounced run for *document* (PHP documents only)."""
        if not self.enabled or self._disposed:
            return
        if document.language_id != PHP_LANGUAGE_ID:
            logger.debug("Skipping non-PHP document %s (%s)", document.uri, document.language_id)
            return

        self._cancel_timer(document.uri)
        loop = asyncio.get_running_loop()
        self._timers[document.uri] = loop.call_later(self.debounce_s, self._fire, document)

    async def run_now(self, document: TextDocument) -> None:
        """Skip the debounce and validate *document* immediately."""
        self._cancel_timer(document.uri)
        await self._run(document, self._next_sequence(document.uri))

    def has_pending(self, uri: str) -> bool:
        return uri in self._timers

    def _on_change(self, document: TextDocument) -> None:
        logger.debug("Change event for %s ignored (validation runs on save)", document.uri)

    def _on_close(self, document: TextDocument) -> None:
        self._cancel_timer(document.uri)
        # Invalidate any in-flight run so it cannot republish.
        self._next_sequence(document.uri)
        self.collection.delete(document.uri)

    # ── runs ──────────────────────────────────────────────────

    def _fire(self, document: TextDocument) -> None:
        self._timers.pop(document.uri, None)
        task = asyncio.get_running_loop().create_task(
            self._run(document, self._next_sequence(document.uri)),
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, document: TextDocument, sequence: int) -> None:
        self._active += 1
        self._set_status(ControllerStatus.RUNNING)
        try:
            await self._execute(document, sequence)
        finally:
            self._active -= 1
            self._settle_status()

    async def _execute(self, document: TextDocument, sequence: int) -> None:
        uri = document.uri
        buffer = LineBuffer()
        diagnostics: list[Diagnostic] = []

        def _on_stdout(chunk: str) -> None:
            diagnostics.extend(buffer.feed(chunk))

        args = build_args(document.file_name, self.report_format, self.rulesets)

        try:
            result = await self._spawner(self.executable, args, on_stdout=_on_stdout)
        except PHPMDError as exc:
            if self._is_current(uri, sequence):
                logger.error("PHPMD run for %s failed: %s", uri, exc)
                self.last_error = exc
            else:
                logger.debug("Ignoring failure of superseded PHPMD run #%d for %s: %s", sequence, uri, exc)
            return
        except Exception as exc:
            logger.exception("PHPMD run for %s crashed", uri)
            if self._is_current(uri, sequence):
                self.last_error = PHPMDError(
                    f"PHPMD run for {uri} crashed: {exc}",
                    detail={"uri": uri, "cause": type(exc).__name__},
                )
            return

        tail = buffer.flush()
        if tail.strip():
            logger.debug("Discarding unterminated PHPMD output: %r", tail)

        if not self._is_current(uri, sequence):
            logger.debug("Dropping superseded PHPMD run #%d for %s", sequence, uri)
            return

        if result.has_violations:
            if result.exit_code == 1:
                logger.warning(
                    "PHPMD exited with an execution error for %s: %s",
                    uri, result.stderr.strip() or "(no stderr)",
                )
            logger.info("PHPMD: %d violation(s) in %s (%dms)", len(diagnostics), uri, result.duration_ms)
            self.collection.set(uri, diagnostics)
        else:
            logger.info("PHPMD: %s clean (%dms)", uri, result.duration_ms)
            self.collection.delete(uri)

        self.last_error = None

    # ── helpers ───────────────────────────────────────────────

    def _is_current(self, uri: str, sequence: int) -> bool:
        return not self._disposed and sequence == self._sequence.get(uri)

    def _settle_status(self) -> None:
        """Derive the status once a run ends: error wins, then running, then idle."""
        if self.last_error is not None:
            self._set_status(ControllerStatus.ERROR, self.last_error)
        elif self._active:
            self._set_status(ControllerStatus.RUNNING)
        else:
            self._set_status(ControllerStatus.IDLE)

    def _cancel_timer(self, uri: str) -> None:
        handle = self._timers.pop(uri, None)
        if handle is not None:
            handle.cancel()

    def _next_sequence(self, uri: str) -> int:
        sequence = self._sequence.get(uri, 0) + 1
        self._sequence[uri] = sequence
        return sequence

    def _set_status(self, status: ControllerStatus, error: PHPMDError | None = None) -> None:
        self.status = status
        if self._on_status is not None:
            try:
                self._on_status(status, error)
            except Exception:
                logger.exception("Status callback failed")


__all__ = [
    "ControllerStatus",
    "PHPMDController",
    "Spawner",
    "StatusCallback",
]
