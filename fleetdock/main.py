"""Точка входа fleetdock."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from fleetdock import __version__
from fleetdock.cli import build_parser, log_level_from_args, parse_args, timeout_overrides
from fleetdock.fleet.models import HostContents, HostStatus
from fleetdock.fleet.operations import Fleet
from fleetdock.fleet.streams import ResultStream
from fleetdock.settings.exceptions import SettingsError
from fleetdock.settings.registry import SettingsRegistry
from fleetdock.utils.helpers import short_id
from fleetdock.utils.logger import configure_logging

LOGGER = logging.getLogger(__name__)


def default_config_path() -> Path:
    """$FLEETDOCK_HOME/.fleetdock/config.json, по умолчанию в домашнем каталоге."""

    home_dir = Path(os.environ.get("FLEETDOCK_HOME", Path.home()))
    return home_dir / ".fleetdock" / "config.json"


def initialize_settings(args: argparse.Namespace) -> SettingsRegistry:
    """Загружает config.json и накладывает поверх него флаги командной строки."""

    config_path = Path(args.config) if args.config else default_config_path()
    registry = SettingsRegistry(config_path=config_path)
    registry.load_from_disk()

    for key, value in timeout_overrides(args):
        registry.set_value("timeouts", key, value)
    level = log_level_from_args(args)
    if level:
        registry.set_value("logging", "level", level)
    return registry


def setup_logging_from_settings(settings: SettingsRegistry, stream: Optional[TextIO] = None) -> None:
    """Настраивает логирование в соответствии с группой logging."""

    logging_settings = settings.get_group("logging")
    log_dir: Optional[Path] = None
    if logging_settings.get("file_enabled"):
        directory = logging_settings.get("directory")
        log_dir = Path(directory).expanduser() if directory else default_config_path().parent / "logs"
    configure_logging(
        logging_settings.get("level"),
        colorize=logging_settings.get("colorize"),
        stream=stream,
        log_dir=log_dir,
        max_bytes=logging_settings.get("max_file_size_mb") * 1024 * 1024,
        backup_count=logging_settings.get("max_archived_files"),
    )


def print_statuses(statuses: ResultStream[HostStatus], out: TextIO) -> None:
    for status in statuses:
        out.write(f"{status.host}\n")
        if not status.containers:
            out.write("  (no matching containers)\n")
        for record in status.containers:
            state = "running" if record.running else "stopped"
            out.write(
                f"  {short_id(record.identifier)}  {record.image}  {state}  {record.started_at or '-'}\n"
            )


def print_contents(contents: ResultStream[HostContents], out: TextIO) -> None:
    for item in contents:
        out.write(f"==> {item.host} ({short_id(item.container_id)}) <==\n")
        out.write(item.contents)
        if item.contents and not item.contents.endswith("\n"):
            out.write("\n")


def run_command(
    fleet: Fleet,
    command: str,
    *,
    path: Optional[str] = None,
    out: TextIO = sys.stdout,
) -> List[BaseException]:
    """Выполняет команду и печатает результаты list/cat в out."""

    if command == "pull":
        return fleet.pull()
    if command == "restart":
        return fleet.restart()
    if command == "stop":
        return fleet.stop()
    if command == "deploy":
        return fleet.deploy()
    if command == "list":
        statuses: ResultStream[HostStatus] = ResultStream()
        errors = fleet.list(statuses)
        print_statuses(statuses, out)
        return errors
    if command == "cat":
        if not path:
            raise ValueError("cat requires a path")
        contents: ResultStream[HostContents] = ResultStream()
        errors = fleet.cat(path, contents)
        print_contents(contents, out)
        return errors
    raise ValueError(f"Unknown command: {command}")


def report_errors(command: str, errors: Sequence[BaseException], err: TextIO = sys.stderr) -> None:
    err.write(f"fleetdock {command} failed with {len(errors)} error(s):\n")
    for error in errors:
        err.write(f"  - {error}\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Основная точка входа: готовит настройки, логирование и запускает команду."""

    args = parse_args(argv)
    try:
        settings = initialize_settings(args)
    except SettingsError as exc:
        parser = build_parser()
        parser.error(exc.message)
    setup_logging_from_settings(settings)

    LOGGER.debug("fleetdock %s: %s %s on %s", __version__, args.command, args.target, ", ".join(args.hosts))
    fleet = Fleet(args.hosts, args.target, timeouts=settings.timeouts())
    errors = run_command(fleet, args.command, path=args.path)
    if errors:
        report_errors(args.command, errors)
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
