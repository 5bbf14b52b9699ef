# utils/logging_config.py

import logging
import logging.handlers
from pathlib import Path
import json
from datetime import datetime
from typing import Optional

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


def setup_logging(level: str = "WARNING",
                  log_dir: Optional[str] = None,
                  structured: bool = False,
                  name: str = "dupe_finder") -> logging.Logger:
    """
    Setup application logging

    Console output goes to stderr so it never mixes with result listings.
    With ``log_dir`` a rotating text log is written, plus a JSON log when
    ``structured`` is set.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for handler in list(root.handlers):
        if getattr(handler, '_dupe_finder', False):
            root.removeHandler(handler)
            handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    _install(root, console_handler)

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)

        # File handler (rotating)
        file_handler = logging.handlers.RotatingFileHandler(
            directory / f"{name}.log",
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        _install(root, file_handler)

        if structured:
            json_handler = logging.handlers.RotatingFileHandler(
                directory / f"{name}_structured.json",
                maxBytes=10*1024*1024,
                backupCount=5
            )
            json_handler.setLevel(logging.INFO)
            json_handler.setFormatter(JSONFormatter())
            _install(root, json_handler)

    return logging.getLogger(name)


def _install(logger: logging.Logger, handler: logging.Handler):
    handler._dupe_finder = True
    logger.addHandler(handler)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON"""

    def format(self, record):
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'thread': record.threadName
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)
