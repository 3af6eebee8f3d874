"""PHPMD integration contracts — enums, constants and Pydantic models.

Diagnostics flow from the line parser into the diagnostic collection
through these models.  All models are frozen (immutable after creation).
"""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class RunMode(str, enum.Enum):
    """When validation is triggered."""

    ON_SAVE = "onSave"
    ON_TYPE = "onType"  # declared only; not wired to any event


class ReportFormat(str, enum.Enum):
    """PHPMD report renderers."""

    XML = "xml"
    TEXT = "text"
    HTML = "html"


class Ruleset(str, enum.Enum):
    """Built-in PHPMD rule categories."""

    CLEANCODE = "cleancode"
    CODESIZE = "codesize"
    CONTROVERSIAL = "controversial"
    DESIGN = "design"
    NAMING = "naming"
    UNUSEDCODE = "unusedcode"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RULESETS: tuple[str, ...] = tuple(r.value for r in Ruleset)
CANONICAL_RULESETS: str = ",".join(RULESETS)

DEFAULT_EXECUTABLE: str = "phpmd"
DIAGNOSTIC_SOURCE: str = "phpmd"
MESSAGE_PREFIX: str = "PHPMD: "

# Column sentinel meaning "through the end of the line".
MAX_COLUMN: int = 2**31 - 1

PHP_LANGUAGE_ID: str = "php"


# ---------------------------------------------------------------------------
# Diagnostic models
# ---------------------------------------------------------------------------


class Position(BaseModel):
    """Zero-based line/column position inside a document."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(..., ge=0, description="Line (0-based)")
    character: int = Field(default=0, ge=0, description="Column (0-based)")


class Range(BaseModel):
    """Half-open range between two positions."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @classmethod
    def full_line(cls, line: int) -> Range:
        """Range highlighting the whole of *line*."""
        return cls(
            start=Position(line=line, character=0),
            end=Position(line=line, character=MAX_COLUMN),
        )


class Diagnostic(BaseModel):
    """A single PHPMD violation mapped onto a document line."""

    model_config = ConfigDict(frozen=True)

    range: Range
    message: str
    severity: Literal["error", "warning", "info", "hint"] = "warning"
    source: str = DIAGNOSTIC_SOURCE

    @property
    def line(self) -> int:
        return self.range.start.line


class TextDocument(BaseModel):
    """Host document as seen by the controller."""

    model_config = ConfigDict(frozen=True)

    uri: str = Field(..., description="Document identity, e.g. 'file:///src/a.php'")
    file_name: str = Field(..., description="Filesystem path passed to PHPMD")
    language_id: str = Field(default=PHP_LANGUAGE_ID)


__all__ = [
    "CANONICAL_RULESETS",
    "DEFAULT_EXECUTABLE",
    "DIAGNOSTIC_SOURCE",
    "Diagnostic",
    "MAX_COLUMN",
    "MESSAGE_PREFIX",
    "PHP_LANGUAGE_ID",
    "Position",
    "RULESETS",
    "Range",
    "ReportFormat",
    "RunMode",
    "Ruleset",
    "TextDocument",
]
