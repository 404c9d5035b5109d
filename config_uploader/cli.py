#!/usr/bin/env python3
"""
config-upload - push a local .env file to an Azure Web App

Resolves the target app and environment (production or a deployment slot),
shows the masked settings, and uploads them after confirmation. The last
successful selection is remembered in .azure-config.json.

Usage:
    config-upload [--project-dir DIR] [--preferences PATH] [--settings PATH] [--debug]

Environment files:
    .env                  production
    .env.<environment>    any deployment slot

Exit codes:
    0   uploaded, or cancelled by the operator
    1   failure
    130 interrupted
"""

import sys
import asyncio
import argparse
from typing import Optional, Sequence

from . import __version__
from .classifier import SlotSettingClassifier
from .config import Config
from .exceptions import ConfigUploaderError
from .gateway import AzureCliGateway
from .local_source import LocalConfigSource
from .log_manager import configure_logging, get_logger
from .operator import ConsoleOperator, Operator
from .orchestrator import UploadOrchestrator
from .preferences import PreferenceStore
from .resolver import EnvironmentResolver
from .settings import SettingsManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="config-upload",
        description="Upload a local .env file to Azure Web App settings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  config-upload\n"
            "  config-upload --project-dir ./services/api\n"
            "  config-upload --settings ./deploy/uploader.yaml --debug"
        )
    )
    parser.add_argument("--project-dir", help="Directory containing the .env files (default: current directory)")
    parser.add_argument("--preferences", help="Stored selection file (default: <project-dir>/.azure-config.json)")
    parser.add_argument("--settings", help="YAML settings file (default: <project-dir>/.config-uploader.yaml)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging to the log directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_orchestrator(config: Config, operator: Operator) -> UploadOrchestrator:
    """Wire the production collaborators together"""
    settings = SettingsManager(config.settings_path)
    gateway = AzureCliGateway(az_path=config.az_path, timeout=config.az_timeout)
    resolver = EnvironmentResolver(
        gateway, operator, suggested_environments=settings.get_suggested_environments()
    )
    classifier = SlotSettingClassifier(operator, settings.get_default_slot_settings())
    return UploadOrchestrator(
        gateway=gateway,
        operator=operator,
        preferences=PreferenceStore(config.preferences_path),
        source=LocalConfigSource(config.project_dir),
        resolver=resolver,
        classifier=classifier,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    operator = ConsoleOperator()

    try:
        config = Config.from_env().with_overrides(
            project_dir=args.project_dir,
            preferences_path=args.preferences,
            settings_path=args.settings,
            debug=args.debug,
        )
    except ConfigUploaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(log_dir=config.log_dir, debug=config.debug)
    logger = get_logger('cli')
    logger.info(f"config-upload {__version__} started in {config.project_dir}")

    valid, errors = SettingsManager(config.settings_path).validate_settings()
    if not valid:
        for error in errors:
            operator.console.print(f"[yellow]Settings: {error} (using defaults)[/yellow]")

    orchestrator = build_orchestrator(config, operator)
    try:
        outcome = asyncio.run(orchestrator.run())
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception:
        logger.exception("Unexpected error")
        raise

    logger.info(f"Finished: {outcome.value}")
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
