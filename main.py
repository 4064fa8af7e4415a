"""
QR Image Scanner

Main entry point for the QR Image Scanner command-line application.
Uses PipelineOrchestrator to initialize all services following SOLID principles.

Architecture:
- PipelineOrchestrator: Reads config and creates all services with parameters
- Services: Receive parameters, create core components internally
- main: Acquires the picked image and waits for the single scan outcome

Usage:
    python main.py scan path/to/image.png [--timeout 10] [--format png]
    python main.py history [--clear]
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from core.codec.container_format import ContainerFormat
from core.errors import PermissionDeniedError
from core.scan.scan_outcome import ScanStatus
from services.pipeline_orchestrator import PipelineOrchestrator


EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_FAILED = 2
EXIT_TIMED_OUT = 3
EXIT_CANCELLED = 4
EXIT_PERMISSION_DENIED = 5

_STATUS_EXIT_CODES = {
    ScanStatus.SUCCEEDED: EXIT_OK,
    ScanStatus.NOT_FOUND: EXIT_NOT_FOUND,
    ScanStatus.FAILED: EXIT_FAILED,
    ScanStatus.TIMED_OUT: EXIT_TIMED_OUT,
    ScanStatus.CANCELLED: EXIT_CANCELLED,
}


def setupLogging(debugMode: bool = False) -> None:
    """
    Setup application logging.

    Args:
        debugMode: If True, set log level to DEBUG.
    """
    level = logging.DEBUG if debugMode else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qr-image-scanner",
        description="Decode a QR code from a still image."
    )
    parser.add_argument(
        "--config",
        default="config/application_config.json",
        help="Path to the application configuration file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable DEBUG logging and debug artefacts"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    scanParser = subparsers.add_parser("scan", help="Scan one image")
    scanParser.add_argument("image", help="Image file path or file:// URI")
    scanParser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Scan timeout in seconds (config default when omitted)"
    )
    scanParser.add_argument(
        "--format",
        dest="declaredFormat",
        type=ContainerFormat.parse,
        default=None,
        help="Declared container format of the image (png, jpeg)"
    )
    scanParser.add_argument(
        "--json",
        action="store_true",
        help="Print the outcome as JSON"
    )

    historyParser = subparsers.add_parser("history", help="Print scan history")
    historyParser.add_argument(
        "--clear",
        action="store_true",
        help="Remove all history entries"
    )

    return parser


def runScan(orchestrator: PipelineOrchestrator, args: argparse.Namespace) -> int:
    logger = logging.getLogger(__name__)

    try:
        source = orchestrator.acquire(args.image, args.declaredFormat)
    except PermissionDeniedError as e:
        logger.error(f"Cannot open image: {e.reason}")
        return EXIT_PERMISSION_DENIED

    try:
        handle = orchestrator.run(source, timeoutSeconds=args.timeout)
    except ValueError as e:
        logger.error(f"Invalid scan request: {e}")
        return EXIT_FAILED

    try:
        outcome = handle.wait()
    except KeyboardInterrupt:
        handle.cancel()
        outcome = handle.wait()

    if args.json:
        print(json.dumps(outcome.toDict(), ensure_ascii=False))
    elif outcome.status == ScanStatus.SUCCEEDED:
        print(outcome.payload)

    return _STATUS_EXIT_CODES[outcome.status]


def runHistory(orchestrator: PipelineOrchestrator, args: argparse.Namespace) -> int:
    store = orchestrator.historyStore
    if args.clear:
        store.clear()
        return EXIT_OK

    for entry in store.list():
        print(f"{entry.timestamp}\t{entry.type}\t{entry.data}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = buildParser().parse_args(argv)

    debugMode = args.debug or os.environ.get("DEBUG", "").lower() == "true"
    setupLogging(debugMode=debugMode)

    logger = logging.getLogger(__name__)

    try:
        orchestrator = PipelineOrchestrator(args.config)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Application failed to start: {e}")
        return EXIT_FAILED

    if args.debug:
        orchestrator.setDebugEnabled(True)

    try:
        if args.command == "history":
            return runHistory(orchestrator, args)
        return runScan(orchestrator, args)
    finally:
        orchestrator.shutdown()
        logger.debug("Application terminated")


if __name__ == "__main__":
    sys.exit(main())
