import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.config_loader import ConfigLoader

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/webharness.log'


def _level(name: Any, fallback: int) -> int:
    return getattr(logging, str(name).upper(), fallback)


def _file_handler(block: Dict[str, Any], path: Path) -> logging.Handler:
    """Plain, size-rotating or time-rotating file handler, per `rotation_type`."""
    rotation_type = block.get('rotation_type')
    backup_count = int(block.get('backup_count', 5))
    if rotation_type == 'size':
        return logging.handlers.RotatingFileHandler(
            path, maxBytes=int(block.get('max_bytes', 5 * 1024 * 1024)),
            backupCount=backup_count, encoding='utf-8',
        )
    if rotation_type == 'time':
        return logging.handlers.TimedRotatingFileHandler(
            path, when=block.get('when', 'midnight'), interval=int(block.get('interval', 1)),
            backupCount=backup_count, encoding='utf-8',
        )
    return logging.FileHandler(path, encoding='utf-8')


def setup_logger(config_loader: Optional[ConfigLoader] = None, logger_name: Optional[str] = None) -> logging.Logger:
    """
    Sets up a logger (root logger by default) from the 'logging' settings block.

    Recognised keys: `level`, `format`, `propagate` (named loggers only),
    `console_handler.{enabled,level,format}` and
    `file_handler.{enabled,path,level,format,rotation_type,max_bytes,backup_count,when,interval}`.
    Calling it again replaces the handlers installed by the previous call.
    """
    if config_loader is None:
        config_loader = ConfigLoader()

    base_level_name = config_loader.get_logging_setting('level', 'INFO')
    base_level = _level(base_level_name, logging.INFO)
    base_format = config_loader.get_logging_setting('format', DEFAULT_LOG_FORMAT)

    logger = logging.getLogger(logger_name)
    logger.setLevel(base_level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if logger_name is not None:
        logger.propagate = config_loader.get_bool('logging.propagate', False)

    def _attach(handler: logging.Handler, block: Dict[str, Any]) -> None:
        handler.setLevel(_level(block.get('level', base_level_name), base_level))
        handler.setFormatter(logging.Formatter(block.get('format', base_format)))
        logger.addHandler(handler)

    console_block = config_loader.get_logging_setting('console_handler', {}) or {}
    if console_block.get('enabled', True):
        _attach(logging.StreamHandler(sys.stdout), console_block)

    file_block = config_loader.get_logging_setting('file_handler', {}) or {}
    if file_block.get('enabled', False):
        log_path = Path(file_block.get('path', DEFAULT_LOG_FILE))
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # No handler is attached yet, so stderr is the only channel
            print(f"Could not create log directory {log_path.parent}; file logging disabled: {e}", file=sys.stderr)
        else:
            _attach(_file_handler(file_block, log_path), file_block)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger
