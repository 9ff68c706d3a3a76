"""Shared fixtures: keep logging configuration from leaking between tests."""

import logging

import pytest
import structlog


def _quiet_structlog() -> None:
    # Unconfigured structlog prints every level to stdout, which would
    # pollute capsys assertions on command output
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    level = root.level
    _quiet_structlog()
    yield
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.getLogger("copilot_play").setLevel(logging.NOTSET)
    structlog.reset_defaults()
