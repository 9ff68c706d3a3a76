"""Application configuration — reads env vars (with .env support).

Loads the driven binary, hook state file path, poll interval and log level
from environment variables. CLI flags are applied to the environment
first (see cli.apply_args_to_env), so precedence is:
CLI flag > env var > .env > default.
.env loading priority: local .env (cwd) > $COPILOT_PLAY_DIR/.env
(default ~/.copilot-play).

Key class: Config — built once in main.run_play() and passed down.
"""

import os
from pathlib import Path

import structlog
from dotenv import load_dotenv

from .utils import copilot_play_dir, default_state_file

logger = structlog.get_logger()

DEFAULT_BINARY = "copilot"
DEFAULT_POLL_INTERVAL = 0.2
LOG_FILE_NAME = "copilot-play.log"


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.config_dir = copilot_play_dir()

        # Load .env: local (cwd) takes priority over config_dir
        # load_dotenv default override=False means first-loaded wins
        local_env = Path(".env")
        global_env = self.config_dir / ".env"
        if local_env.is_file():
            load_dotenv(local_env)
            logger.debug("Loaded env from %s", local_env.resolve())
        if global_env.is_file():
            load_dotenv(global_env)
            logger.debug("Loaded env from %s", global_env)

        self.driven_binary: str = os.getenv("COPILOT_PLAY_BINARY") or DEFAULT_BINARY

        # Re-resolve after .env loading, COPILOT_HOOKS_STATE may come from there
        self.state_file: Path = default_state_file().expanduser()

        poll_str = os.getenv("COPILOT_PLAY_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL))
        try:
            self.poll_interval = float(poll_str)
        except ValueError as e:
            raise ValueError(
                f"COPILOT_PLAY_POLL_INTERVAL must be a number: {e}"
            ) from e
        if self.poll_interval <= 0:
            raise ValueError(
                f"COPILOT_PLAY_POLL_INTERVAL must be positive, got {poll_str}"
            )

        self.log_level: str = os.getenv("COPILOT_PLAY_LOG_LEVEL", "INFO").upper()
        self.log_file: Path = self.config_dir / LOG_FILE_NAME

        logger.debug(
            "Config initialized: dir=%s, binary=%s, state_file=%s, poll=%.2fs",
            self.config_dir,
            self.driven_binary,
            self.state_file,
            self.poll_interval,
        )
