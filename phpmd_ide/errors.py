"""PHPMD integration error hierarchy.

Every error carries typed fields (not just a message string),
supports ``to_dict()`` for serialisation into status payloads,
and has a readable ``__str__`` for logging.
"""

from __future__ import annotations


class PHPMDError(Exception):
    """Base error for all PHPMD integration failures."""

    def __init__(self, message: str, *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message, **self.detail}

    def __str__(self) -> str:
        return self.message


class SpawnFailure(PHPMDError):
    """The analysis process could not be started."""

    def __init__(
        self,
        executable: str,
        args: list[str] | None = None,
        *,
        reason: str | None = None,
    ) -> None:
        self.executable = executable
        self.args_list = list(args or [])
        self.reason = reason or ""

        msg = f"Failed to start '{executable}'"
        if reason:
            msg += f": {reason}"

        detail: dict = {"executable": executable, "args": self.args_list}
        if reason:
            detail["reason"] = reason

        super().__init__(msg, detail=detail)


class ExecutableNotFound(SpawnFailure):
    """The configured executable does not exist or is not on PATH."""

    def __init__(self, executable: str, args: list[str] | None = None) -> None:
        super().__init__(
            executable,
            args,
            reason="executable not found; set phpmd.validate.executablePath",
        )
