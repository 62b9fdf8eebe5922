# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Logging bootstrap for the user-management service.

Handlers, formats and rotation are declared in etc/logging.conf.  The file
location and the ``usermgr`` level can be overridden from settings
(LOG_DIR, LOG_LEVEL) without editing the conf file.

    from core.logger import logger
"""

import configparser
import logging
import logging.config
from pathlib import Path

from core.config import settings

# backend/core/logger.py  →  ../../  →  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"

LOGGER_NAME = "usermgr"


def log_file_path() -> Path:
    """app.log under LOG_DIR, or under <project>/log when unset."""
    log_dir = Path(settings.log_dir) if settings.log_dir else _PROJECT_ROOT / "log"
    return log_dir / "app.log"


def load_logging_config(conf_path: Path, log_file: Path) -> configparser.RawConfigParser:
    """
    Read *conf_path* with its ``%(log_file)s`` placeholder bound to *log_file*.

    RawConfigParser, because the formatter strings (%(asctime)s …) must reach
    fileConfig uninterpolated.
    """
    raw = conf_path.read_text(encoding="utf-8").replace("%(log_file)s", str(log_file))
    parser = configparser.RawConfigParser()
    parser.read_string(raw)
    return parser


def _configure() -> logging.Logger:
    log_file = log_file_path()
    # RotatingFileHandler opens the file when fileConfig builds it
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.config.fileConfig(
        load_logging_config(_LOGGING_CONF, log_file),
        disable_existing_loggers=False,
    )

    log = logging.getLogger(LOGGER_NAME)
    if settings.log_level:
        log.setLevel(settings.log_level.upper())
    return log


logger = _configure()
