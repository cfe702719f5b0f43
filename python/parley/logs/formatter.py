from datetime import datetime, UTC

from colorlog import ColoredFormatter

LOG_COLORS = {
  "DEBUG": "blue",
  "INFO": "green",
  "WARNING": "yellow",
  "ERROR": "red",
  "CRITICAL": "bold_red",
  "WARN": "yellow",
  "CRIT": "bold_red",
}

# shorter labels keep the level column aligned
LEVEL_LABELS = {"WARNING": "WARN", "CRITICAL": "CRIT"}


class Formatter(ColoredFormatter):
  """
  Colourised single-line formatter.

  Timestamps are UTC in ISO 8601 with millisecond precision; the timestamp and
  logger name are dimmed so the level and message stand out.
  """

  DIM = "\033[2m"
  RESET = "\033[0m"

  def __init__(self, *args, **kwargs):
    kwargs.setdefault("log_colors", LOG_COLORS)
    super().__init__(*args, **kwargs)

  def formatTime(self, record, datefmt=None) -> str:
    timestamp = datetime.fromtimestamp(record.created, UTC)
    if datefmt:
      return timestamp.strftime(datefmt)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")

  def formatMessage(self, record) -> str:
    if self.usesTime():
      record.asctime = f"{self.DIM}{record.asctime}{self.RESET}"
    record.name = f"{self.DIM}{record.name}{self.RESET}"
    record.levelname = LEVEL_LABELS.get(record.levelname, record.levelname)
    return super().formatMessage(record)
