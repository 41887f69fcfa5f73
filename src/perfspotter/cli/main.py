"""
Command-line interface for the perfspotter diagnosis engine.

This module starts one diagnosis job for a configuration file, waits for it
while logging progress, prints the resulting report and exits non-zero if
the job was cancelled.
"""

import argparse
import logging
import signal
import sys

from ..config import get_config_path
from ..engine import DiagnosisEngine, JobService
from ..extensions import EXTENSION_KINDS, create_default_registry
from ..models import NO_JOB, JobState
from ..validation import ValidationError, handle_cli_error, validate_path_exists

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Diagnose performance problems by walking a hierarchy of detection experiments."
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=str(get_config_path()),
        help="Path to the spotter configuration file (default: %(default)s).",
    )
    parser.add_argument(
        "--list-extensions",
        action="store_true",
        help="List the registered controller and satellite extensions and exit.",
    )
    return parser


def main_cli() -> None:
    """
    Main command-line entry point.

    Raises:
        SystemExit: On invalid arguments, or with code 1 when the diagnosis is cancelled.
    """
    args = build_parser().parse_args()
    registry = create_default_registry()

    if args.list_extensions:
        for kind in EXTENSION_KINDS:
            print(f"{kind}: {', '.join(registry.names(kind)) or '-'}")
        return

    try:
        config_path = validate_path_exists(
            args.config, field_name="--config argument"
        )
    except ValidationError as e:
        handle_cli_error(
            error=e,
            context="configuration path validation",
            exit_code=2,
            include_traceback=False,
            logger=logger,
        )

    service = JobService(DiagnosisEngine(registry=registry))
    shutdown_requested = False

    def global_signal_handler(signum, frame):
        """Handle signals globally to ensure a clean shutdown."""
        nonlocal shutdown_requested
        if shutdown_requested:
            logger.warning("Shutdown already in progress. Please be patient.")
            return
        logger.info(f"Signal {signal.strsignal(signum)} received. Stopping the diagnosis...")
        shutdown_requested = True
        service.request_shutdown()

    signal.signal(signal.SIGINT, global_signal_handler)
    signal.signal(signal.SIGTERM, global_signal_handler)

    try:
        job_id = service.start(config_path)
        if job_id == NO_JOB:
            logger.error("Could not start the diagnosis job")
            sys.exit(1)

        # Polling keeps the main thread responsive to signals.
        while service.is_running():
            try:
                service.wait(job_id, timeout=0.5)
            except TimeoutError:
                continue

        outcome = service.get_last_outcome()
        state = service.get_state(job_id)
    finally:
        service.shutdown(wait=True)

    if outcome is not None:
        print(outcome.results.report)
        if outcome.run_dir is not None:
            logger.info(f"Results saved in: {outcome.run_dir}")

    if state is not JobState.FINISHED:
        error = service.get_last_run_exception()
        logger.error(f"Diagnosis job {job_id} was cancelled: {error}")
        sys.exit(1)
    logger.info(f"Diagnosis job {job_id} finished")


if __name__ == "__main__":
    main_cli()
