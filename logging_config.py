"""
Logging setup for the API process and the maintenance scripts.

Modules log through logging.getLogger(__name__); this only attaches a
handler and sets the level, once per process.

Environment:
     LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR
"""
import logging
import os
import sys
import threading
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Loggers that belong to this application
APP_LOGGERS = ("ledger", "services", "routers", "scripts", "database", "main")

_configured = False
_lock = threading.Lock()


def configure_logging(level: Optional[str] = None, stream=None) -> None:
     """Attach one stream handler to the application loggers (idempotent)."""
     global _configured
     with _lock:
          if _configured:
               return
          _configured = True

     level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
     numeric_level = logging.getLevelName(level_name)
     if not isinstance(numeric_level, int):
          numeric_level = logging.INFO

     handler = logging.StreamHandler(stream or sys.stderr)
     handler.setFormatter(logging.Formatter(LOG_FORMAT))

     for name in APP_LOGGERS:
          app_logger = logging.getLogger(name)
          app_logger.setLevel(numeric_level)
          app_logger.addHandler(handler)
          app_logger.propagate = False

