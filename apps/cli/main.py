import argparse
import signal
import sys
from typing import Any

from esdata.logging import LogLevel, setup_logging

from .commands import count, delete, get, ingest, search, setup

COMMANDS = [
    count,
    delete,
    get,
    ingest,
    search,
    setup,
]

COMMON_ARGUMENTS = [
    {
        "name": "log-level",
        "type": str,
        "required": False,
        "choices": [level.value for level in LogLevel],
        "default": LogLevel.WARNING.value,
        "help": "Set the logging level (default: WARNING)",
    },
    {
        "name": "no-timestamp",
        "action": "store_true",
        "required": False,
        "help": "Disable timestamps in log output",
    },
]


def signal_handler(sig: int, _: Any) -> None:
    """
    Handle Ctrl+C gracefully.

    Args:
        sig: Signal number
    """
    print("\n\nAborting...\n")
    sys.exit(0)


def validate_command_import(command: Any) -> bool:
    if not hasattr(command, "DEFINITION"):
        raise ValueError(f"Command {command} does not have DEFINITION")
    if not isinstance(command.DEFINITION, dict):
        raise ValueError(f"Command {command} DEFINITION is not a dictionary")

    if not hasattr(command, "main"):
        raise ValueError(f"Command {command} DEFINITION does not have main function")
    if not callable(command.main):
        raise ValueError(f"Command {command} DEFINITION main function is not callable")

    for position, argument in enumerate(command.DEFINITION["arguments"]):
        if "name" not in argument:
            raise ValueError(f"Command {command} DEFINITION.arguments[{position}] does not have a 'name' attribute")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="esdata CLI tool: manage indexes and documents of mapped entities")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for command in COMMANDS:
        validate_command_import(command)

        command_parser = subparsers.add_parser(
            command.DEFINITION["name"],
            help=command.DEFINITION["description"],
        )

        # Add common arguments and command arguments and sort them alphabetically
        arguments = sorted(
            [*COMMON_ARGUMENTS, *command.DEFINITION["arguments"]],
            key=lambda x: x["name"],
        )
        for argument in arguments:
            kwargs = {k: v for k, v in argument.items() if k != "name"}
            command_parser.add_argument(f"--{argument['name']}", **kwargs)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse argv and dispatch to the selected command; returns the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(level=args.log_level, include_timestamp=not args.no_timestamp)

    for command in COMMANDS:
        if args.command == command.DEFINITION["name"]:
            valid_argument_names = [arg["name"].replace("-", "_") for arg in command.DEFINITION["arguments"]]
            command.main(**{key: value for key, value in vars(args).items() if key in valid_argument_names})
            break
    return 0


if __name__ == "__main__":
    # Set up signal handler for graceful interruption
    signal.signal(signal.SIGINT, signal_handler)
    sys.exit(run())
