"""Разбор аргументов командной строки."""

from __future__ import annotations

import argparse
import sys
from typing import List, NoReturn, Optional, Sequence

from fleetdock import __version__
from fleetdock.fleet.models import TargetImage
from fleetdock.utils.helpers import parse_hosts

COMMANDS = ("pull", "restart", "stop", "deploy", "list", "cat")
DEFAULT_COMMAND = "deploy"


class FleetArgumentParser(argparse.ArgumentParser):
    """ArgumentParser, печатающий ошибки в формате ERROR: ... и usage."""

    def error(self, message: str) -> NoReturn:
        sys.stderr.write(f"ERROR: {message}\n\n")
        self.print_usage(sys.stderr)
        self.exit(2)


def build_parser() -> FleetArgumentParser:
    parser = FleetArgumentParser(
        prog="fleetdock",
        description="Pull, restart, stop, list or inspect one image's containers across Docker hosts.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=DEFAULT_COMMAND,
        choices=COMMANDS,
        help="operation to run (default: %(default)s); deploy = pull + restart",
    )
    parser.add_argument("--image", required=True, help="image name to manage, optionally NAME:TAG")
    parser.add_argument("--tag", default=None, help="image tag (default: latest)")
    parser.add_argument(
        "--hosts",
        required=True,
        help="comma separated list of IP:PORT pairs of Docker daemons",
    )
    parser.add_argument("--path", default=None, help="file to read from containers (cat only)")
    parser.add_argument("--pull-timeout", type=int, default=None, help="seconds to wait for parallel pull/list")
    parser.add_argument(
        "--restart-timeout",
        type=int,
        default=None,
        help="seconds to wait for container restart before sending kill",
    )
    parser.add_argument(
        "--stop-timeout",
        type=int,
        default=None,
        help="seconds to wait for container stop before sending kill",
    )
    parser.add_argument("--config", default=None, help="path to config.json")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="log errors only")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Разбирает и проверяет аргументы; при ошибке завершает процесс с кодом 2."""

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        args.hosts = parse_hosts(args.hosts)
    except ValueError as exc:
        parser.error(str(exc))

    if not args.image.strip():
        parser.error("Missing required --image argument")
    target = TargetImage.parse(args.image.strip())
    if args.tag is not None:
        target = TargetImage(name=target.name, tag=args.tag.strip())
    args.target = target

    if args.command == "cat" and not args.path:
        parser.error("The cat command requires --path")
    if args.command != "cat" and args.path:
        parser.error(f"--path is only allowed with the cat command, not {args.command}")
    return args


def log_level_from_args(args: argparse.Namespace) -> Optional[str]:
    """Уровень логирования, выбранный флагами -v/-q, или None."""

    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "ERROR"
    return None


def timeout_overrides(args: argparse.Namespace) -> List[tuple[str, int]]:
    """Пары (ключ группы timeouts, значение) для переданных флагов."""

    overrides = []
    for key, value in (
        ("pull_timeout_sec", args.pull_timeout),
        ("restart_timeout_sec", args.restart_timeout),
        ("stop_timeout_sec", args.stop_timeout),
    ):
        if value is not None:
            overrides.append((key, value))
    return overrides
