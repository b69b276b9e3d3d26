"""
Log routing for session runs: detail goes to a file, the console only sees errors.
"""
import os
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.DEBUG


def setup_logging(log_file_path: str, level: str = "DEBUG") -> str:
    """
    Route every session logger to log_file_path, appending across replays.

    Calling it again replaces the handlers from the previous call, closing
    the old log file.

    Args:
        log_file_path: Log file; missing parent directories are created
        level: Level name for the file; unknown names fall back to DEBUG

    Returns:
        Path to the log file
    """
    parent = os.path.dirname(log_file_path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    session_log = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
    session_log.setLevel(_level(level))
    session_log.setFormatter(logging.Formatter(LOG_FORMAT))

    errors_only = logging.StreamHandler()
    errors_only.setLevel(logging.ERROR)
    errors_only.setFormatter(logging.Formatter("%(message)s"))

    root.setLevel(logging.DEBUG)
    root.addHandler(session_log)
    root.addHandler(errors_only)
    return log_file_path
