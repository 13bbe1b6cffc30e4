# julius_client/LoggingSetup.py
import sys
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOG_FILE_NAME = "julius_client.log"


def setup_logging(logs_dir: Path, verbose: bool = False, is_frozen: bool = False):
    """
    Configure logging to a rotating file and, from a terminal, the console.

    Args:
        logs_dir: Directory to store log files
        verbose: If True, set DEBUG level; otherwise WARNING
        is_frozen: If True, skip console handler (frozen app has no console)
    """
    logs_dir.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    root_logger.handlers.clear()

    formatter = logging.Formatter('[%(asctime)s] [%(levelname)s] %(name)s: %(message)s')

    # 10MB per file, keep 5
    file_handler = RotatingFileHandler(
        logs_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if not is_frozen:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    logging.info(f"Logging initialized: level={logging.getLevelName(level)}, frozen={is_frozen}")
