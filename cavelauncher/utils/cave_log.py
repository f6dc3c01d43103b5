"""
Per-cave launch logs.

Each launch writes to its own file (logs/caves/<cave_id>.log) as well as to
stdout, so a failed launch can be diagnosed after the fact.
"""
import os
import sys
import logging

from .paths import cave_log_path


class ChildNoiseFilter(logging.Filter):
    """Filter out debug spam that games and runtimes print on every start"""
    IGNORED_PATTERNS = [
        "fixme:",
        "err:hid:",
        "using server-side synchronization",
        "ALSA lib ",
        "Gtk-Message:",
    ]

    def filter(self, record):
        msg = record.getMessage()
        return not any(p in msg for p in self.IGNORED_PATTERNS)


def open_cave_logger(cave_id: str, log_path: str = None, console: bool = True) -> logging.Logger:
    """Create the logger for one launch of a cave.

    Args:
        cave_id: Cave being launched
        log_path: Override for the log file location
        console: Also log to stdout

    Returns:
        A logger with its own handlers; release it with close_cave_logger()
    """
    log_path = log_path or cave_log_path(cave_id)
    os.makedirs(os.path.dirname(log_path), exist_ok=True)

    game_logger = logging.getLogger(f"cavelauncher.caves.{cave_id}")
    game_logger.setLevel(logging.INFO)
    game_logger.propagate = False

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    handlers = [logging.FileHandler(log_path)]
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(ChildNoiseFilter())
        game_logger.addHandler(handler)

    return game_logger


def close_cave_logger(game_logger: logging.Logger) -> None:
    """Detach and close every handler of a per-cave logger"""
    for handler in list(game_logger.handlers):
        game_logger.removeHandler(handler)
        handler.close()
