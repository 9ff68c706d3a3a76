"""Command-line argument parsing for copilot-play.

Defines CLI flags and applies precedence: CLI flag > env var > .env > default.
Called by main.py before Config instantiation; sets os.environ for any
explicitly provided flags so Config reads the overridden values.

The first "--" separates wrapper flags from the arguments forwarded
verbatim to the driven process:

    copilot-play --prompt-regex '^\\$ $' -- --model gpt-5
"""

import argparse
import os
import re
import sys
from pathlib import Path

from . import __version__

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

ARGS_SEPARATOR = "--"


def _positive_float(value: str) -> float:
    """Argparse type for positive floats."""
    result = float(value)
    if result <= 0:
        msg = f"must be positive, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return result


def _regex(value: str) -> re.Pattern[str]:
    """Argparse type compiling a prompt regex; a broken pattern is fatal."""
    try:
        return re.compile(value)
    except re.error as e:
        msg = f"invalid regex {value!r}: {e}"
        raise argparse.ArgumentTypeError(msg) from e


def split_driven_args(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first "--" into (wrapper args, driven args)."""
    if ARGS_SEPARATOR in argv:
        idx = argv.index(ARGS_SEPARATOR)
        return argv[:idx], argv[idx + 1 :]
    return argv, []


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="copilot-play",
        description=(
            "Run an interactive CLI in a pty and play a tiny game while it is busy. "
            "Focus switches to the CLI when it waits for input."
        ),
        usage="%(prog)s [wrapper options] -- [driven process args]",
        epilog="Subcommand: copilot-play hook busy|idle  (write the hook state file)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="show version and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="enable debug logging (env: COPILOT_PLAY_LOG_LEVEL=DEBUG)",
    )
    parser.add_argument(
        "--log-level",
        choices=_LOG_LEVELS,
        metavar="LEVEL",
        help="logging level: DEBUG, INFO, WARNING, ERROR (env: COPILOT_PLAY_LOG_LEVEL)",
    )
    parser.add_argument(
        "--driven-binary-path",
        "--copilot",
        dest="driven_binary_path",
        metavar="PATH",
        help="binary to run in the pty (default: copilot, env: COPILOT_PLAY_BINARY)",
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        metavar="PATH",
        help=(
            "hook state file (default: ~/.copilot/hooks-state.json, "
            "env: COPILOT_HOOKS_STATE)"
        ),
    )
    parser.add_argument(
        "--prompt-regex",
        type=_regex,
        action="append",
        default=[],
        metavar="RE",
        help="extra regex marking a waiting prompt (repeatable)",
    )
    parser.add_argument(
        "--poll-interval",
        type=_positive_float,
        metavar="SEC",
        help="hook state poll interval in seconds (default: 0.2, env: COPILOT_PLAY_POLL_INTERVAL)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments and return namespace.

    Args:
        argv: Argument list (defaults to sys.argv[1:]). Pass explicitly for testing.

    The namespace carries ``driven_args``: everything after the first "--".
    """
    if argv is None:
        argv = sys.argv[1:]
    wrapper_args, driven_args = split_driven_args(list(argv))
    args = build_parser().parse_args(wrapper_args)
    args.driven_args = driven_args
    return args


# Mapping: argparse dest → environment variable name
_FLAG_TO_ENV: list[tuple[str, str]] = [
    ("driven_binary_path", "COPILOT_PLAY_BINARY"),
    ("state_file", "COPILOT_HOOKS_STATE"),
    ("poll_interval", "COPILOT_PLAY_POLL_INTERVAL"),
]


def apply_args_to_env(args: argparse.Namespace) -> None:
    """Set environment variables from explicitly provided CLI flags.

    Call BEFORE Config instantiation to ensure CLI flags take precedence.
    Only sets env vars for flags that were explicitly provided (not None).
    """
    # --verbose always wins over --log-level
    if args.verbose:
        os.environ["COPILOT_PLAY_LOG_LEVEL"] = "DEBUG"
    elif args.log_level is not None:
        os.environ["COPILOT_PLAY_LOG_LEVEL"] = args.log_level.upper()

    for attr, env_var in _FLAG_TO_ENV:
        value = getattr(args, attr)
        if value is None:
            continue
        if isinstance(value, Path):
            os.environ[env_var] = str(value.expanduser().resolve())
        else:
            os.environ[env_var] = str(value)


def version_string() -> str:
    return f"copilot-play {__version__}"
