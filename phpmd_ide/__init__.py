"""PHPMD editor integration — save-triggered analysis and inline diagnostics.

Public API
----------
Entry points::

    activate, deactivate

Controller::

    PHPMDController, ControllerStatus

Contracts (Pydantic models)::

    Diagnostic, Position, Range, TextDocument,
    RunMode, ReportFormat, Ruleset, RULESETS, CANONICAL_RULESETS

Configuration::

    PHPMDSettings, load_settings, parse_rulesets

Parsing::

    parse_line, LineBuffer

Runner::

    spawn_and_stream, build_args, RunResult

Host surface::

    DiagnosticCollection, Workspace, ExtensionContext, Disposable

Errors::

    PHPMDError, SpawnFailure, ExecutableNotFound
"""

from phpmd_ide.config import PHPMDSettings, load_settings, parse_rulesets
from phpmd_ide.contracts import (
    CANONICAL_RULESETS,
    RULESETS,
    Diagnostic,
    Position,
    Range,
    ReportFormat,
    RunMode,
    Ruleset,
    TextDocument,
)
from phpmd_ide.controller import ControllerStatus, PHPMDController
from phpmd_ide.diagnostics import DiagnosticCollection, detect_language
from phpmd_ide.errors import ExecutableNotFound, PHPMDError, SpawnFailure
from phpmd_ide.events import Disposable, EventEmitter, ExtensionContext, Workspace
from phpmd_ide.extension import activate, deactivate
from phpmd_ide.parser import LineBuffer, parse_line
from phpmd_ide.runner import RunResult, build_args, spawn_and_stream

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "activate",
    "deactivate",
    # Controller
    "ControllerStatus",
    "PHPMDController",
    # Contracts
    "CANONICAL_RULESETS",
    "Diagnostic",
    "Position",
    "RULESETS",
    "Range",
    "ReportFormat",
    "RunMode",
    "Ruleset",
    "TextDocument",
    # Configuration
    "PHPMDSettings",
    "load_settings",
    "parse_rulesets",
    # Parsing
    "LineBuffer",
    "parse_line",
    # Runner
    "RunResult",
    "build_args",
    "spawn_and_stream",
    # Host surface
    "DiagnosticCollection",
    "Disposable",
    "EventEmitter",
    "ExtensionContext",
    "Workspace",
    "detect_language",
    # Errors
    "ExecutableNotFound",
    "PHPMDError",
    "SpawnFailure",
]
