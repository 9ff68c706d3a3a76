"""copilot-play — play a tiny game while an interactive CLI is busy."""

__version__ = "0.3.0"
