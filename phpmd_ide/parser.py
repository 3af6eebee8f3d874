"""PHPMD text-report parsing — single lines and streamed chunks.

``parse_line`` is **pure** (string in → model out).  ``LineBuffer``
reassembles stdout chunks that may split a report line at any point and
feeds every completed line through ``parse_line``.

Expected report line::

    /path/to/File.php:12<TAB>The method foo() has 120 lines of code.
"""

from __future__ import annotations

import logging
import re

from phpmd_ide.contracts import MAX_COLUMN, MESSAGE_PREFIX, Diagnostic, Range

logger = logging.getLogger(__name__)

MATCH_EXPRESSION: re.Pattern[str] = re.compile(r"([a-zA-Z_/.]+):(\d+)\t(.*)")


def parse_line(line: str) -> Diagnostic | None:
    """Parse one report line into a ``Diagnostic``.

    PHPMD reports 1-based line numbers; the diagnostic is 0-based and
    spans the whole line.  Returns ``None`` when the line does not
    match ``MATCH_EXPRESSION`` or its line number is out of range.
    """
    match = MATCH_EXPRESSION.search(line)
    if match is None:
        return None

    digits = match.group(2)
    if len(digits) > len(str(MAX_COLUMN)):
        return None
    line_no = max(int(digits) - 1, 0)
    if line_no > MAX_COLUMN:
        return None
    return Diagnostic(
        range=Range.full_line(line_no),
        message=MESSAGE_PREFIX + match.group(3),
    )


class LineBuffer:
    """Pending-output buffer for one validation run.

    Between calls to ``feed`` the buffer only ever holds data after the
    last consumed newline.
    """

    __slots__ = ("_pending",)

    def __init__(self) -> None:
        self._pending = ""

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: str) -> list[Diagnostic]:
        """Append *chunk* and return diagnostics for the lines it completes.

        Empty lines are skipped.  The first non-empty line that does not
        parse stops extraction for this chunk; lines after it stay
        buffered and are examined when the next chunk arrives.
        """
        self._pending += chunk
        found: list[Diagnostic] = []

        while True:
            line, newline, rest = self._pending.partition("\n")
            if not newline:
                break
            self._pending = rest

            line = line.rstrip("\r")
            if not line:
                continue

            diagnostic = parse_line(line)
            if diagnostic is None:
                logger.debug("Unparseable PHPMD output, pausing: %r", line)
                break
            found.append(diagnostic)

        return found

    def flush(self) -> str:
        """Return and discard whatever incomplete tail is still buffered."""
        tail, self._pending = self._pending, ""
        return tail


__all__ = [
    "LineBuffer",
    "MATCH_EXPRESSION",
    "parse_line",
]
