"""
Logging setup for parley.

Levels come from `PARLEY_LOG_LEVELS`, a comma separated list where a bare
level sets the default and `name=level` entries override single loggers:

    PARLEY_LOG_LEVELS="INFO,rate_limiter=debug,transport=warning"

`PARLEY_LOGGING=0` leaves logging configuration to the host application.
"""

import logging
import logging.config
import os
from contextlib import contextmanager
from typing import Optional, Protocol

DEFAULT_LEVEL = "INFO"

DEFAULT_LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-5s%(reset)s %(name)-14s %(message)s"
SOURCE_SUFFIX = " [%(pathname)s:%(lineno)d]"

# loggers owned by this package, each falls back to the default level
MODULES = ["communicator", "rate_limiter", "transport", "transcripts", "events", "config"]

# third-party loggers that stay quiet unless asked for by name
LIBRARY_LOGGERS = ["asyncio", "httpcore", "httpx", "openai"]

LOG_LEVELS: dict[str, str] = {}


def log_format() -> str:
  log_format = os.getenv("PARLEY_LOG_FORMAT", DEFAULT_LOG_FORMAT)
  if os.getenv("PARLEY_LOG_SHOW_SOURCE"):
    log_format += SOURCE_SUFFIX
  return log_format


def create_log_levels(log_levels: Optional[str]) -> dict[str, str]:
  """
  Parse a level string such as "DEBUG,communicator=info" into per-logger levels.

  The result always holds a "default" entry.
  """
  levels = {"default": DEFAULT_LEVEL}
  for entry in (log_levels or "").split(","):
    entry = entry.strip()
    if not entry:
      continue
    name, separator, level = entry.partition("=")
    if separator:
      levels[name.strip()] = level.strip().upper()
    else:
      levels["default"] = name.upper()
  return levels


def set_log_levels(log_levels: Optional[str]) -> None:
  global LOG_LEVELS
  LOG_LEVELS = create_log_levels(log_levels)


def set_log_level(logger_name: str, level: str) -> None:
  """Override the level of one logger, keeping every other level."""
  if not LOG_LEVELS:
    set_log_levels(os.environ.get("PARLEY_LOG_LEVELS"))
  LOG_LEVELS[logger_name] = level.upper()


def get_log_levels() -> dict[str, str]:
  return dict(LOG_LEVELS)


def get_logging_config() -> dict:
  if os.environ.get("PARLEY_LOGGING", "1") == "0":
    return {"version": 1, "disable_existing_loggers": False}

  if not LOG_LEVELS:
    set_log_levels(os.environ.get("PARLEY_LOG_LEVELS"))
  return create_logging_config(LOG_LEVELS, log_format())


def create_logging_config(levels: dict[str, str], log_format: str) -> dict:
  default = levels.get("default", DEFAULT_LEVEL)

  def logger_config(level: str) -> dict:
    return {"handlers": ["default"], "level": level, "propagate": False}

  loggers = {name: logger_config(levels.get(name, "WARNING")) for name in LIBRARY_LOGGERS}
  loggers.update({name: logger_config(levels.get(name, default)) for name in MODULES})

  return {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
      "default": {
        "()": "parley.logs.formatter.Formatter",
        "format": log_format,
      },
    },
    # no handler level, the logger levels decide
    "handlers": {
      "default": {
        "class": "logging.StreamHandler",
        "formatter": "default",
      },
    },
    "loggers": loggers,
    "root": {"level": default, "handlers": ["default"]},
  }


def get_logger(logger_name: str) -> logging.Logger:
  logging.config.dictConfig(get_logging_config())
  return logging.getLogger(logger_name)


class LoggerAware(Protocol):
  logger: logging.Logger


class DebugContext(LoggerAware):
  """Mixin that brackets a block with debug messages on `self.logger`."""

  @contextmanager
  def debug(self, before_msg: str, after_msg: str):
    self.logger.debug(before_msg)
    yield
    self.logger.debug(after_msg)
