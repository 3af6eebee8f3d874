"""Command-line entry point — ``python -m phpmd_ide FILE [FILE ...]``.

Validates each PHP file once (no debounce) and prints the resulting
diagnostics.  Exit status: 0 clean, 2 violations found, 1 when PHPMD
could not be started or exited with an error but no violations.
"""

import asyncio
import json
import logging
import sys
from argparse import ArgumentParser
from pathlib import Path

from phpmd_ide.config import load_settings
from phpmd_ide.contracts import PHP_LANGUAGE_ID, TextDocument
from phpmd_ide.controller import ControllerStatus, PHPMDController
from phpmd_ide.diagnostics import detect_language

logger = logging.getLogger("phpmd_ide")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="phpmd_ide", description="Run PHPMD and report diagnostics")
    parser.add_argument("files", nargs="+", help="PHP files to validate")
    parser.add_argument("--executable", help="PHPMD executable (default: phpmd)")
    parser.add_argument("--rulesets", help="Comma-separated rulesets (default: all)")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.executable:
        overrides["executable_path"] = args.executable
    if args.rulesets:
        overrides["rulesets"] = args.rulesets
    settings = load_settings(enabled=True, **overrides)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    controller = PHPMDController(settings)
    names: dict[str, str] = {}
    errors = []
    for name in args.files:
        path = Path(name)
        document = TextDocument(
            uri=path.resolve().as_uri(),
            file_name=str(path),
            language_id=detect_language(name),
        )
        if document.language_id != PHP_LANGUAGE_ID:
            logger.warning("Skipping %s: not a PHP file", name)
            continue
        names[document.uri] = name
        await controller.run_now(document)
        if controller.status is ControllerStatus.ERROR and controller.last_error is not None:
            errors.append(controller.last_error)

    # PHPMD exited non-zero yet reported nothing parseable: an execution error.
    failed = [names[uri] for uri, diagnostics in controller.collection if not diagnostics]

    if args.json:
        payload = {
            names[uri]: [d.model_dump() for d in diagnostics]
            for uri, diagnostics in controller.collection
            if diagnostics
        }
        if errors:
            payload["errors"] = [exc.to_dict() for exc in errors]
        print(json.dumps(payload, indent=2))
    else:
        for uri, diagnostics in controller.collection:
            for diag in diagnostics:
                print(f"{names[uri]}:{diag.line + 1}: {diag.message}")
        for exc in errors:
            print(f"Error: {exc}", file=sys.stderr)
    for name in failed:
        print(f"Error: PHPMD failed on {name} without reporting violations", file=sys.stderr)

    if errors or failed:
        return 1
    return 2 if len(controller.collection) else 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
