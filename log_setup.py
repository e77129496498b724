"""Centralized logging setup helper used by analysis runs and tests.

Call it before running an analysis so library loggers (`warp_reliability.*`) have a
handler to write to.
"""
import datetime
import logging
import os
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(filename)s:%(lineno)d %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"


def ensure_logging(level: int = logging.INFO, *, force: bool = False) -> None:
    """Ensure the root logger is configured with a StreamHandler to stdout.

    - If the root logger has no handlers, configure one via basicConfig.
    - If handlers exist and `force` is True, reconfigure.
    - Otherwise, set the root logger level to `level` without replacing handlers.

    This is safe to call multiple times.
    """
    root = logging.getLogger()
    if force or not root.handlers:
        logging.basicConfig(level=level, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT, stream=sys.stdout, force=force)
    else:
        root.setLevel(level)


def configure_run_logging(graph_name: str, scheduler_name: str, *, log_dir: str = "results/logs",
                          console_level: int = logging.INFO, file_level: int = logging.DEBUG,
                          force: bool = False) -> str:
    """Configure logging for one analysis run.

    - Ensures a console StreamHandler exists (INFO by default).
    - Adds a per-run file handler at DEBUG level that captures all messages.
    - The graph and scheduler names go into the logfile name only, not into each line.
    - Returns the absolute path to the logfile created.

    If `force` is True the root handlers will be replaced.
    """
    ensure_logging(level=console_level, force=force)

    graph = (graph_name or "unknown").lower()
    scheduler = (scheduler_name or "priority").lower()
    file_tag = f"{graph}.{scheduler}"

    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    safe_tag = "".join(c if c.isalnum() or c in '._-' else '_' for c in file_tag)
    logfile = os.path.join(log_dir, f"{safe_tag}_{timestamp}.log")

    root = logging.getLogger()

    # If not forcing, reuse a file handler already writing this run's log.
    if not force:
        for h in root.handlers:
            if isinstance(h, logging.FileHandler) and safe_tag in os.path.basename(h.baseFilename):
                return os.path.abspath(h.baseFilename)

    # Fixed width level column so messages align.
    # Example: "17:22:40 [INFO   ] runner.py:65 Reliability table built."
    fmt = "%(asctime)s [%(levelname)-7s] %(filename)s:%(lineno)d %(message)s"

    console_exists = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        and getattr(h, 'stream', None) in (sys.stdout, None)
        for h in root.handlers
    )
    if not console_exists:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(console_level)
        ch.setFormatter(logging.Formatter(fmt, datefmt=DEFAULT_DATEFMT))
        root.addHandler(ch)

    fh = logging.FileHandler(logfile, mode='a', encoding='utf-8')
    fh.setLevel(file_level)
    fh.setFormatter(logging.Formatter(fmt, datefmt=DEFAULT_DATEFMT))
    root.addHandler(fh)

    # Keep root level at the lower of console/file so file captures debug
    root.setLevel(min(console_level, file_level))

    return os.path.abspath(logfile)
