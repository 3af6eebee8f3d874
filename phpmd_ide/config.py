"""PHPMD integration configuration.

Uses ``pydantic-settings`` for env-var loading (``PHPMD_*``), type
coercion and ``.env`` file support.  Values from the host editor's
configuration section (``phpmd.*``) are layered on top by
``load_settings()`` and take precedence over the environment.

Configuration is read once at initialisation and never hot-reloaded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from phpmd_ide.contracts import (
    CANONICAL_RULESETS,
    DEFAULT_EXECUTABLE,
    ReportFormat,
    RunMode,
)

logger = logging.getLogger(__name__)

# Host configuration keys (section ``phpmd``) → settings field names.
HOST_KEYS: dict[str, str] = {
    "enabled": "enabled",
    "validate.executablePath": "executable_path",
    "validate.rulesets": "rulesets",
    "validate.runMode": "run_mode",
}

DEFAULT_DEBOUNCE_MS: int = 1000


def parse_rulesets(raw: str | None) -> list[str]:
    """Split a comma-separated ruleset selection into an ordered list.

    Each trimmed token is kept when it occurs anywhere inside
    ``CANONICAL_RULESETS`` — a substring test, so fragments such as
    ``"code"`` pass while ``"bogus"`` is dropped.  Order and duplicates
    are preserved.  An empty or missing selection means every ruleset.
    """
    if not raw or not raw.strip():
        raw = CANONICAL_RULESETS

    selected: list[str] = []
    for token in raw.split(","):
        name = token.strip()
        if name in CANONICAL_RULESETS:
            selected.append(name)
        else:
            logger.debug("Dropping unknown ruleset %r", name)
    return selected


class PHPMDSettings(BaseSettings):
    """Integration settings — sourced from environment / ``.env`` / host config."""

    model_config = SettingsConfigDict(
        env_prefix="PHPMD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = True
    executable_path: str | None = None
    rulesets: str = CANONICAL_RULESETS
    report_format: ReportFormat = ReportFormat.TEXT
    run_mode: RunMode = RunMode.ON_SAVE
    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0)
    log_level: str = "INFO"

    @field_validator("executable_path", mode="before")
    @classmethod
    def _blank_is_default(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("rulesets", mode="before")
    @classmethod
    def _missing_rulesets(cls, value: Any) -> Any:
        if value is None:
            return CANONICAL_RULESETS
        return value

    @property
    def executable(self) -> str:
        """Executable to spawn — the configured path or ``phpmd``."""
        return self.executable_path or DEFAULT_EXECUTABLE

    @property
    def selected_rulesets(self) -> list[str]:
        return parse_rulesets(self.rulesets)


def load_settings(section: Mapping[str, Any] | None = None, **overrides: Any) -> PHPMDSettings:
    """Build settings from a host configuration *section* plus *overrides*.

    Unknown host keys are ignored.  Keyword *overrides* use field names
    and win over both the host section and the environment.
    """
    values: dict[str, Any] = {}
    for key, value in (section or {}).items():
        field = HOST_KEYS.get(key)
        if field is None:
            logger.debug("Ignoring unknown configuration key %r", key)
            continue
        values[field] = value
    values.update(overrides)
    return PHPMDSettings(**values)


__all__ = [
    "DEFAULT_DEBOUNCE_MS",
    "HOST_KEYS",
    "PHPMDSettings",
    "load_settings",
    "parse_rulesets",
]
