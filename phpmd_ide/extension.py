"""Extension entry points called by the host editor."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from phpmd_ide.controller import PHPMDController, StatusCallback
from phpmd_ide.events import ExtensionContext, Workspace

logger = logging.getLogger(__name__)


def activate(
    context: ExtensionContext,
    workspace: Workspace,
    configuration: Mapping[str, Any] | None = None,
    *,
    on_status: StatusCallback | None = None,
) -> PHPMDController:
    """Create the controller from the ``phpmd`` configuration section and start listening."""
    controller = PHPMDController(configuration, on_status=on_status)
    controller.activate(workspace, context)
    logger.info("PHPMD extension activated (enabled=%s)", controller.enabled)
    return controller


def deactivate(context: ExtensionContext) -> None:
    """Dispose everything registered during activation."""
    context.dispose()
    logger.info("PHPMD extension deactivated")
