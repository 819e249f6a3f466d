# cath/core/logging_config.py
import logging
import os
from datetime import datetime
from typing import Optional, Dict, Any

# Loggers of third-party libraries that are chatty at INFO/DEBUG
NOISY_LOGGERS = ('urllib3', 'requests')


class LoggingManager:
    """Configures the root logger once per process for the cath.* loggers"""

    DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

    @staticmethod
    def resolve_level(verbose: bool, logging_config: Dict[str, Any]) -> int:
        """DEBUG when verbose, else the configured level name (INFO if unknown)"""
        if verbose:
            return logging.DEBUG
        level = logging.getLevelName(str(logging_config.get('level', 'INFO')).upper())
        return level if isinstance(level, int) else logging.INFO

    @staticmethod
    def log_file_path(component: str, log_dir: str) -> str:
        """<log_dir>/<component>_<timestamp>.log, creating log_dir"""
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return os.path.join(log_dir, f"{component}_{timestamp}.log")

    @staticmethod
    def configure(
        verbose: bool = False,
        log_file: Optional[str] = None,
        component: str = "cath",
        log_dir: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None
    ) -> logging.Logger:
        """Configure logging for a cath command

        Args:
            verbose: Enable debug logging if True
            log_file: Explicit log file; wins over log_dir
            component: Logger name and log file prefix
            log_dir: Directory for an automatically named log file
            config: Full configuration; its 'logging' section supplies
                level, format and log_dir

        Returns:
            The component's logger
        """
        logging_config = (config or {}).get('logging', {})
        log_format = logging_config.get('format', LoggingManager.DEFAULT_FORMAT)
        log_level = LoggingManager.resolve_level(verbose, logging_config)

        log_dir = log_dir or logging_config.get('log_dir')
        if not log_file and log_dir:
            log_file = LoggingManager.log_file_path(component, log_dir)

        handlers = [logging.StreamHandler()]
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(logging.Formatter(log_format, LoggingManager.DEFAULT_DATE_FORMAT))
            handlers.append(file_handler)

        logging.basicConfig(
            level=log_level,
            format=log_format,
            datefmt=LoggingManager.DEFAULT_DATE_FORMAT,
            handlers=handlers,
            force=True
        )

        if log_level > logging.DEBUG:
            for name in NOISY_LOGGERS:
                logging.getLogger(name).setLevel(logging.WARNING)

        logger = logging.getLogger(component)
        logger.debug(f"Logging at {logging.getLevelName(log_level)}"
                     + (f", writing to {log_file}" if log_file else ""))
        return logger

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        """Logger under the cath namespace, e.g. get_logger("extractor")"""
        return logging.getLogger(name if name.startswith("cath") else f"cath.{name}")
