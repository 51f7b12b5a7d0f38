from __future__ import annotations

import logging
from pathlib import Path

LOG_FILENAME = "longport.log"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # keep httpx quiet unless asked
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.DEBUG if verbose else logging.WARNING)


def setup_log_file(log_path: str | None) -> Path | None:
    """Mirror SDK log records into a file under ``log_path``; no-op when unset.

    A path without a suffix is treated as a directory and gets ``longport.log``.
    """
    if not log_path:
        return None
    path = Path(log_path).expanduser()
    if path.is_dir() or not path.suffix:
        path.mkdir(parents=True, exist_ok=True)
        path = path / LOG_FILENAME
    else:
        path.parent.mkdir(parents=True, exist_ok=True)

    sdk_logger = logging.getLogger("longport_config")
    for handler in sdk_logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path.resolve():
            return path
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s " + LOG_FORMAT))
    sdk_logger.addHandler(handler)
    return path
