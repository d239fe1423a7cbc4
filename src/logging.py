"""logging.py
Holds configured loggers for the intake pipeline, the storage engine and tests.
"""
from typing import Literal, Optional
import logging
import os
import sys
from datetime import datetime
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()  # load .env

ENV = os.getenv("ENV", "development")  # e.g., development, staging, production
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL")  # overrides the per-type level when set

LoggerType = Literal["default", "pytest", "pipeline", "storage"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_LOGGING_ENVS = ("development", "local", "test")
CLOUD_LOGGING_ENVS = ("staging", "production")

# Sub-folder of LOG_DIR and CloudWatch log group per logger type
LOG_DESTINATIONS = {
    "default": ("", "default_logs"),
    "pytest": ("tests", "default_logs"),
    "pipeline": ("pipeline", "pipeline_logs"),
    "storage": ("storage", "storage_logs"),
}


class LoggerFactory:
    """
    Factory to create configured loggers for different purposes.

    Logging behavior depends on environment (ENV):
      - Console logging is optional.
      - Timestamped file logging in development/local/test, one folder per
        logger type under ``base_log_folder``.
      - Cloud logging (optional) in staging/production using watchtower.
      - Loggers are configured once; later calls return the same logger.

    Pipeline failures additionally go to a per-stage failure log (see
    ``get_stage_failure_logger``).
    """

    def __init__(self, env: str = ENV, base_log_folder: str = LOG_DIR, level: Optional[str] = LOG_LEVEL):
        self.env = env
        self.base_log_folder = base_log_folder
        self.level = level

    def get_logger(
        self,
        name: str,
        logger_type: LoggerType = "default",
        console: bool = True
    ) -> logging.Logger:
        """
        Create and return a configured logger based on type.
        """
        logger = logging.getLogger(name)

        # Prevent duplicate handlers
        if logger.hasHandlers():
            return logger

        logger.propagate = False
        logger.setLevel(self._level_for_type(logger_type))

        if console:
            self._add_stream_handler(logger)

        if self.env in FILE_LOGGING_ENVS:
            self._add_file_handler(logger, self._get_log_folder_for_type(logger_type), name)
        elif self.env in CLOUD_LOGGING_ENVS:
            self._add_cloudwatch_handler(logger, LOG_DESTINATIONS.get(logger_type, LOG_DESTINATIONS["default"])[1])

        # Always keep at least one handler
        if not logger.handlers:
            self._add_stream_handler(logger)

        return logger

    @lru_cache(maxsize=None)
    def get_stage_failure_logger(self, stage: str) -> logging.Logger:
        """
        Return the failure logger of one pipeline stage. It never prints to the
        console and writes to its own folder, e.g.:
            logs/pipeline_failures/parse/parse_20251028_103022.log
            logs/pipeline_failures/segment/segment_20251028_103022.log
        In staging/production the records go to the ``pipeline_failures``
        CloudWatch log group instead.
        """
        safe_stage = stage or "other"
        logger = logging.getLogger(f"pipeline_failures_{safe_stage}")

        if logger.hasHandlers():
            return logger

        logger.setLevel(logging.INFO)
        logger.propagate = False

        if self.env in CLOUD_LOGGING_ENVS:
            self._add_cloudwatch_handler(logger, "pipeline_failures")
        else:
            folder = os.path.join(self.base_log_folder, "pipeline_failures", safe_stage)
            self._add_file_handler(logger, folder, safe_stage)

        return logger

    def _level_for_type(self, logger_type: LoggerType) -> int:
        if self.level:
            return logging.getLevelName(self.level.upper())
        return logging.DEBUG if logger_type in ("default", "pytest") else logging.INFO

    def _get_log_folder_for_type(self, logger_type: LoggerType) -> str:
        """Return folder path based on logger type. Everything goes to tests/ under pytest."""
        if any("pytest" in arg for arg in sys.argv):
            logger_type = "pytest"
        sub_folder = LOG_DESTINATIONS.get(logger_type, LOG_DESTINATIONS["default"])[0]
        return os.path.join(self.base_log_folder, sub_folder) if sub_folder else self.base_log_folder

    @staticmethod
    def _add_stream_handler(logger: logging.Logger):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    @staticmethod
    def _add_file_handler(logger: logging.Logger, folder: str, prefix: str):
        """Attach a handler writing to ``<folder>/<prefix>_<timestamp>.log``."""
        os.makedirs(folder, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        handler = logging.FileHandler(
            os.path.join(folder, f"{prefix}_{timestamp}.log"), mode="a", encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    @staticmethod
    def _add_cloudwatch_handler(logger: logging.Logger, log_group: str):
        """Optional AWS CloudWatch logging for staging/production."""
        try:
            import watchtower
        except ImportError:
            logger.warning("watchtower not installed, skipping cloud logging.")
            return

        handler = watchtower.CloudWatchLogHandler(log_group=log_group)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
