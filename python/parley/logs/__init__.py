from .logs import (
  set_log_level,
  set_log_levels,
  get_log_levels,
  create_log_levels,
  get_logger,
  DebugContext,
)
from .formatter import Formatter
from logging import Logger

__all__ = [
  "Formatter",
  "Logger",
  "get_logger",
  "set_log_level",
  "set_log_levels",
  "get_log_levels",
  "create_log_levels",
  "DebugContext",
]
