"""Optional file logging for the ``arbac`` logger tree.

The engine only ever logs through module-level loggers below ``arbac``.
Embedding applications normally route those themselves; this helper is
for hosts that just want the engine's decisions in a file.  It touches
the ``arbac`` logger only and never the root logger.
"""

import logging
import os
from datetime import datetime
from typing import Tuple  # noqa: UP035

from arbac.constants import DEFAULT_LOG_LEVEL, LOG_DIR, PACKAGE_NAME

logger = logging.getLogger(__name__)

_FILE_FORMAT = "%(asctime)s - %(name)25s:%(lineno)-4d - %(levelname)-7s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _ArbacFileHandler(logging.FileHandler):
    """Marker type so repeated setup replaces its own handler only."""


def setup_logging(log_lvl_str: str = DEFAULT_LOG_LEVEL, log_dir: str = LOG_DIR) -> Tuple[str, str]:
    """Attach a timestamped file handler to the ``arbac`` logger.

    An unknown level falls back to ``INFO`` with a warning.  Calling this
    again swaps the previous file handler for a new one.

    Returns:
        A tuple of (log_file_path, validated_log_level).
    """
    app_logger = logging.getLogger(PACKAGE_NAME)

    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in _VALID_LEVELS:
        logger.warning("Invalid log level '%s'. Using 'INFO'.", log_lvl_str)
        log_lvl_valid = "INFO"

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(log_dir, exist_ok=True)
    log_fpath = os.path.join(log_dir, f"arbac_{ts}_{log_lvl_valid}.log")

    for old in [h for h in app_logger.handlers if isinstance(h, _ArbacFileHandler)]:
        app_logger.removeHandler(old)
        old.close()

    handler = _ArbacFileHandler(log_fpath, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    app_logger.addHandler(handler)
    app_logger.setLevel(log_lvl_valid)

    logger.debug("File logging initialized at %s (level %s)", log_fpath, log_lvl_valid)
    return log_fpath, log_lvl_valid
