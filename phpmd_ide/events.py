"""Host event plumbing — emitters, disposables and the extension context.

A minimal stand-in for the editor host: ``Workspace`` exposes the
document events the controller subscribes to, and ``ExtensionContext``
collects everything that must be disposed on deactivation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, Protocol, TypeVar

from phpmd_ide.contracts import TextDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SupportsDispose(Protocol):
    def dispose(self) -> None: ...


class Disposable:
    """Runs *callback* once when disposed."""

    __slots__ = ("_callback",)

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback: Callable[[], None] | None = callback

    def dispose(self) -> None:
        if self._callback is not None:
            callback, self._callback = self._callback, None
            callback()


class EventEmitter(Generic[T]):
    """Ordered list of listeners for one event type.

    Listener errors are logged and never propagate to the firing side.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Disposable:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Disposable(_remove)

    def fire(self, event: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener for %s failed", self.name)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class Workspace:
    """Document events raised by the host editor."""

    def __init__(self) -> None:
        self.on_did_save_text_document: EventEmitter[TextDocument] = EventEmitter("save")
        self.on_did_change_text_document: EventEmitter[TextDocument] = EventEmitter("change")
        self.on_did_close_text_document: EventEmitter[TextDocument] = EventEmitter("close")

    def save(self, document: TextDocument) -> None:
        self.on_did_save_text_document.fire(document)

    def change(self, document: TextDocument) -> None:
        self.on_did_change_text_document.fire(document)

    def close(self, document: TextDocument) -> None:
        self.on_did_close_text_document.fire(document)


class ExtensionContext:
    """Holds subscriptions disposed together on deactivation."""

    def __init__(self) -> None:
        self.subscriptions: list[SupportsDispose] = []

    def dispose(self) -> None:
        """Dispose subscriptions in reverse registration order."""
        while self.subscriptions:
            item = self.subscriptions.pop()
            try:
                item.dispose()
            except Exception:
                logger.exception("Failed to dispose %r", item)


__all__ = [
    "Disposable",
    "EventEmitter",
    "ExtensionContext",
    "SupportsDispose",
    "Workspace",
]
