#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Logging setup for IPS Patcher.

Features:
- Level-specific text formats with optional colours on a TTY
- Structured JSON lines (IPS_PATCHER_LOG_JSON=1 or --log-json)
- Handlers are attached to the package logger, never to the root logger
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Optional, Union

PACKAGE_LOGGER = "ipspatch"

# Marks handlers installed by setup_logging so a second call replaces them.
_HANDLER_TAG = "_ipspatch_handler"

# =====================================================================================================
# Formatters
# =====================================================================================================

class FastFormatter(logging.Formatter):
    """Text formatter with one pre-built format per level."""

    def __init__(self, enable_colors: bool = False):
        super().__init__()
        self.enable_colors = enable_colors

        self._formatters = {
            level: logging.Formatter(fmt, style='{', datefmt='%H:%M:%S')
            for level, fmt in {
                logging.ERROR: "[{asctime}] ERROR   [{name}] {message}",
                logging.WARNING: "[{asctime}] WARNING [{name}] {message}",
                logging.INFO: "[{asctime}] INFO    {message}",
                logging.DEBUG: "[{asctime}] DEBUG   {name}:{lineno} - {message}",
            }.items()
        }

        self.colors = {
            logging.ERROR: '\033[91m',     # Red
            logging.WARNING: '\033[93m',   # Yellow
            logging.INFO: '\033[92m',      # Green
            logging.DEBUG: '\033[94m',     # Blue
        } if enable_colors else {}

    def format(self, record):
        level = record.levelno
        if level >= logging.ERROR:
            key = logging.ERROR
        elif level >= logging.WARNING:
            key = logging.WARNING
        elif level >= logging.INFO:
            key = logging.INFO
        else:
            key = logging.DEBUG

        text = self._formatters[key].format(record)
        if self.enable_colors:
            return f"{self.colors[key]}{text}\033[0m"
        return text


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter (one object per line)."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "thread": record.threadName,
            "process": record.process,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

# =====================================================================================================
# Setup
# =====================================================================================================

def _stream_supports_color(stream: IO[str]) -> bool:
    return (hasattr(stream, 'isatty') and
            stream.isatty() and
            os.environ.get('TERM') != 'dumb' and
            'NO_COLOR' not in os.environ)


def setup_logging(
    log_level: str = "INFO",
    *,
    json_output: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR)
        json_output: Emit JSON lines instead of text
        log_file: Optional file that receives the same records
        stream: Console stream (default: stderr)

    Returns:
        The configured package logger
    """
    numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)

    for handler in logger.handlers[:]:
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    console_stream = stream if stream is not None else sys.stderr
    console_handler = logging.StreamHandler(console_stream)
    console_handler.setLevel(numeric_level)
    if json_output:
        console_handler.setFormatter(JsonFormatter())
    else:
        console_handler.setFormatter(FastFormatter(enable_colors=_stream_supports_color(console_stream)))
    setattr(console_handler, _HANDLER_TAG, True)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_path), mode='a', encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JsonFormatter() if json_output else FastFormatter())
        setattr(file_handler, _HANDLER_TAG, True)
        logger.addHandler(file_handler)

    logger.debug("Logging initialised (level=%s, json=%s, file=%s)", log_level, json_output, log_file)
    return logger
