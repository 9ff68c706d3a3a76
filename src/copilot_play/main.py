"""Application entry point — argument dispatch, logging, startup.

``main()`` dispatches `copilot-play hook ...` to hook.py and everything
else to ``run_play()``, which applies CLI flags to the environment,
configures logging, spawns the driven process and runs the Textual app.

Exit codes: 0 on quit / --help / --version, 1 if the driven binary
cannot be spawned or configuration is invalid, 2 on usage errors.
"""

import logging
import os
import sys
from argparse import Namespace
from pathlib import Path

import structlog


def _short_name_processor(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Strip the 'copilot_play.' prefix, cap at 20 chars."""
    name = event_dict.get("logger", "")
    if name.startswith("copilot_play."):
        name = name[len("copilot_play.") :]
    event_dict["short_name"] = name[:20]
    return event_dict


def setup_logging(log_level: str, log_file: Path) -> None:
    """Configure structured logging into a file.

    The TUI owns the terminal, so records go to ``log_file`` instead of
    stdout. Third-party stdlib logging shares the same handler.
    """
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
    ]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _short_name_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_file.parent.mkdir(parents=True, exist_ok=True)
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False, pad_event=40),
            foreign_pre_chain=shared_processors,
        )
    )
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("copilot_play").setLevel(numeric_level)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def run_play(args: Namespace) -> int:
    """Start the wrapper. Returns the process exit code."""
    from .cli import apply_args_to_env
    from .config import LOG_FILE_NAME
    from .utils import copilot_play_dir

    apply_args_to_env(args)
    log_level = os.environ.get("COPILOT_PLAY_LOG_LEVEL", "INFO").upper()
    setup_logging(log_level, copilot_play_dir() / LOG_FILE_NAME)
    logger = structlog.get_logger()

    from .config import Config

    try:
        config = Config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    from .play_state import PlayState
    from .prompt_detector import compile_prompt_patterns
    from .pty_process import DrivenProcess, SpawnError

    patterns = compile_prompt_patterns(args.prompt_regex)
    argv = [config.driven_binary, *args.driven_args]

    try:
        process = DrivenProcess.spawn(argv, cols=120, rows=30)
    except SpawnError as e:
        logger.error("Spawn failed: %s", e)
        print(f"Failed to spawn '{config.driven_binary}'.", file=sys.stderr)
        print(e, file=sys.stderr)
        return 1

    state = PlayState.create(
        patterns, config.state_file, driven_name=Path(config.driven_binary).name
    )
    logger.info(
        "Watching %s with %d prompt patterns", config.state_file, len(patterns)
    )

    from .app import CopilotPlayApp

    app = CopilotPlayApp(state, process, poll_interval=config.poll_interval)
    try:
        code = app.run()
    finally:
        # Best effort: never wait for the child
        process.terminate()
        process.close()
    return code or 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point — dispatches the hook subcommand or the wrapper."""
    argv = sys.argv[1:] if argv is None else argv

    if argv and argv[0] == "hook":
        from .hook import hook_main

        sys.exit(hook_main(argv[1:]))

    from .cli import parse_args, version_string

    args = parse_args(argv)
    if args.version:
        print(version_string())
        sys.exit(0)

    sys.exit(run_play(args))


if __name__ == "__main__":
    main()
