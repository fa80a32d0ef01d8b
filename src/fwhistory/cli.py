# src/fwhistory/cli.py

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from fwhistory import config as config_module
from fwhistory import log_utils
from fwhistory.constants import HISTORY_SOURCE_LINK, LOG_LEVEL_ENV_VAR
from fwhistory.exceptions import ConfigurationError
from fwhistory.history import HistorySnapshot, normalize_firmware
from fwhistory.utils import get_package_version

console = Console()


async def fetch_history(
    model: str, region: str, config: Dict[str, Any]
) -> HistorySnapshot:
    """
    Run one history job to completion with a client built from the configuration.

    Returns:
        HistorySnapshot: The job state after the fetch ended.
    """
    async with config_module.create_client(config) as client:
        job = config_module.create_history_job(config, client)
        return await job.run(model, region)


def snapshot_to_dict(snapshot: HistorySnapshot) -> Dict[str, Any]:
    entries: List[Dict[str, Any]] = []
    for info in snapshot.history_items:
        changelog = snapshot.changelog_for(info)
        entries.append(
            {
                "firmware": info.firmware_string,
                "android_version": info.android_version,
                "date": info.date.isoformat() if info.date else None,
                "changelog": asdict(changelog) if changelog else None,
            }
        )
    return {
        "model": snapshot.model,
        "region": snapshot.region,
        "history": entries,
    }


def render_history_table(snapshot: HistorySnapshot) -> Table:
    table = Table(
        title=f"Firmware history for {snapshot.model}/{snapshot.region}",
        caption=f"Source: {HISTORY_SOURCE_LINK}",
    )
    table.add_column("#", justify="right")
    table.add_column("Firmware")
    table.add_column("Android")
    table.add_column("Date")
    table.add_column("Security patch")

    for index, info in enumerate(snapshot.history_items, start=1):
        changelog = snapshot.changelog_for(info)
        android_version = info.android_version or (
            changelog.android_version if changelog else None
        )
        if info.date:
            date_text = info.date.isoformat()
        else:
            date_text = changelog.release_date if changelog else None
        table.add_row(
            str(index),
            info.firmware_string,
            android_version or "-",
            date_text or "-",
            (changelog.security_patch if changelog else None) or "-",
        )
    return table


def _configure_logging(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    level_name: Optional[str] = args.log_level
    if level_name is None and LOG_LEVEL_ENV_VAR not in os.environ:
        level_name = config.get("LOG_LEVEL")
    if level_name:
        current = logging.getLevelName(log_utils.logger.level)
        if str(level_name).upper() != current:
            log_utils.set_log_level(str(level_name))

    if config_module.get_bool(config, "LOG_TO_FILE", False):
        log_utils.add_file_logging(
            Path(config_module.get_log_dir()), str(config.get("LOG_LEVEL", "INFO"))
        )


def run_history(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    if args.no_changelogs:
        config = dict(config, FETCH_CHANGELOGS=False)

    snapshot = asyncio.run(fetch_history(args.model, args.region, config))

    if snapshot.status_text:
        log_utils.logger.error(snapshot.status_text)
        return 1

    if args.json:
        print(json.dumps(snapshot_to_dict(snapshot), indent=2))
    else:
        console.print(render_history_table(snapshot))
    return 0


def run_normalize(args: argparse.Namespace) -> int:
    for firmware in args.firmware:
        print(normalize_firmware(firmware))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="fwhistory - Samsung firmware history lookup"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Override the log level",
    )
    parser.add_argument(
        "--config",
        help="Path to a configuration file (defaults to the platform config directory)",
    )
    subparsers = parser.add_subparsers(dest="command")

    history_parser = subparsers.add_parser(
        "history", help="Show the firmware history of a model and region"
    )
    history_parser.add_argument("model", help="Device model, e.g. SM-G998B")
    history_parser.add_argument("region", help="Region/CSC code, e.g. EUX")
    history_parser.add_argument(
        "--no-changelogs",
        action="store_true",
        help="Skip fetching changelogs",
    )
    history_parser.add_argument(
        "--json", action="store_true", help="Print the history as JSON"
    )

    normalize_parser = subparsers.add_parser(
        "normalize", help="Normalize firmware strings to their 4-part form"
    )
    normalize_parser.add_argument("firmware", nargs="+", help="Firmware string(s)")

    subparsers.add_parser("version", help="Display fwhistory version")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the fwhistory command-line interface.

    Parses arguments, loads the configuration and dispatches the `history`,
    `normalize` and `version` subcommands.

    Returns:
        int: Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "version":
        print(f"fwhistory {get_package_version()}")
        return 0

    if args.command == "normalize":
        return run_normalize(args)

    if not args.model.strip() or not args.region.strip():
        parser.error("model and region must not be blank")

    try:
        config = config_module.load_config(args.config)
    except ConfigurationError as error:
        log_utils.logger.error(f"Failed to load configuration: {error}")
        return 1

    _configure_logging(args, config)
    return run_history(args, config)


if __name__ == "__main__":
    sys.exit(main())
