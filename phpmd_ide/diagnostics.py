"""Diagnostic collection — the per-document surface the host renders.

``DiagnosticCollection`` maps a document URI to its current list of
diagnostics.  Each ``set`` fully replaces the previous list; ``delete``
removes the entry whether or not one exists.  Also provides a language
detection helper for callers that only have a file path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from phpmd_ide.contracts import Diagnostic

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Language detection
# ---------------------------------------------------------------------------

_EXTENSION_LANGUAGE: dict[str, str] = {
    ".php": "php",
    ".phtml": "php",
    ".php3": "php",
    ".php4": "php",
    ".php5": "php",
    ".phps": "php",
    ".inc": "php",
}


def detect_language(path: str) -> str:
    """Detect the host language id from a file extension.

    Returns ``"unknown"`` for unrecognised extensions.
    """
    dot_idx = path.rfind(".")
    if dot_idx == -1 or dot_idx < max(path.rfind("/"), path.rfind("\\")):
        return "unknown"

    ext = path[dot_idx:].lower()
    return _EXTENSION_LANGUAGE.get(ext, "unknown")


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


class DiagnosticCollection:
    """Named mapping of document URI → diagnostics."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[str, tuple[Diagnostic, ...]] = {}
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def set(self, uri: str, diagnostics: Iterable[Diagnostic]) -> None:
        """Replace the diagnostics for *uri*."""
        if self._disposed:
            logger.debug("Ignoring set(%s) on disposed collection %r", uri, self.name)
            return
        self._entries[uri] = tuple(diagnostics)

    def delete(self, uri: str) -> None:
        """Remove the entry for *uri*; a missing entry is not an error."""
        self._entries.pop(uri, None)

    def get(self, uri: str) -> list[Diagnostic]:
        return list(self._entries.get(uri, ()))

    def has(self, uri: str) -> bool:
        return uri in self._entries

    def clear(self) -> None:
        self._entries.clear()

    def dispose(self) -> None:
        self._entries.clear()
        self._disposed = True

    def __contains__(self, uri: object) -> bool:
        return uri in self._entries

    def __iter__(self) -> Iterator[tuple[str, list[Diagnostic]]]:
        for uri, diagnostics in list(self._entries.items()):
            yield uri, list(diagnostics)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DiagnosticCollection(name={self.name!r}, documents={len(self)})"


__all__ = [
    "DiagnosticCollection",
    "detect_language",
]
