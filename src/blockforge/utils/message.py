import logging
import os
import sys
from datetime import datetime
from logging import Logger
from colorama import init, Fore, Style
init(autoreset=True)


def create_log_directory(log_folder: str = None):
    """
    Ensures that the log directory exists. If not, it creates it.

    Args:
        log_folder: Optional path to log folder. If None, uses platform-specific location.
    """
    if log_folder is None:
        from blockforge.utils.paths import get_logs_dir
        log_folder = str(get_logs_dir())

    if not os.path.exists(log_folder):
        os.makedirs(log_folder)
    return log_folder

def get_log_file_path(log_folder: str = None) -> str:
    """
    Returns a log file path with a timestamp in the name.
    Format: logs/blockforge_YYYY-mm-dd_HHMMSS.log

    Args:
        log_folder: Optional path to log folder. If None, uses platform-specific location.
    """
    if log_folder is None:
        from blockforge.utils.paths import get_logs_dir
        log_folder = str(get_logs_dir())

    timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    return os.path.join(log_folder, f"blockforge_{timestamp}.log")

def purge_old_logs(log_folder: str = None, keep: int = 10):
    """
    Removes older log files, keeping only the most recent 'keep' files.
    Logs are named blockforge_YYYY-mm-dd_HHMMSS.log, so lexicographical
    sort matches chronological order.

    Args:
        log_folder: Optional path to log folder. If None, uses platform-specific location.
        keep: Number of most recent log files to keep.
    """
    if log_folder is None:
        from blockforge.utils.paths import get_logs_dir
        log_folder = str(get_logs_dir())

    all_logs = [f for f in os.listdir(log_folder)
                if f.startswith("blockforge_") and f.endswith(".log")]
    all_logs.sort()

    logs_to_remove = all_logs[:-keep]  # all but the last 'keep' logs
    for old_file in logs_to_remove:
        os.remove(os.path.join(log_folder, old_file))


def file_logging_enabled() -> bool:
    """File logging can be switched off with BLOCKFORGE_FILE_LOGGING=0."""
    return os.getenv("BLOCKFORGE_FILE_LOGGING", "1").strip().lower() not in ("0", "false", "no", "off")


class ColorFormatter(logging.Formatter):
    """
    A formatter that colorizes log level names using colorama.
    """
    color_map = {
        logging.DEBUG: Fore.BLUE,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.LIGHTRED_EX,
    }

    def format(self, record):
        color = self.color_map.get(record.levelno, Fore.WHITE)
        # Copy so file handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)

def init_logger(
    name: str = "primary logger",
    log_folder: str = None,
    console_logging: bool = True,
    file_logging: bool = True,
    level: int = logging.DEBUG
) -> Logger:
    """
    Initializes and configures the logger with the specified settings.
    :param name: The logger's name.
    :param log_folder: The folder where log files should go. If None, uses platform-specific location.
    :param console_logging: Whether to log to the console.
    :param file_logging: Whether to log to a file.
    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    :return: A configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False  # Prevent duplicate logs if root logger also logs

    # Ensure logger doesn't get duplicate handlers if init_logger is called multiple times:
    if not logger.handlers:
        # File Handler
        if file_logging:
            try:
                log_folder = create_log_directory(log_folder)
                purge_old_logs(log_folder, keep=10)
                file_handler = logging.FileHandler(get_log_file_path(log_folder), encoding="utf-8")
            except OSError as e:
                # Read-only home directories (CI, containers) still get console output
                print(f"BlockForge: file logging disabled ({e})", file=sys.stderr)
            else:
                file_handler.setLevel(level)
                file_formatter = logging.Formatter(
                    fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S"
                )
                file_handler.setFormatter(file_formatter)
                logger.addHandler(file_handler)

        # Console Handler
        if console_logging:
            # stderr keeps stdout clean for generated code and JSON output
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_formatter = ColorFormatter(
                fmt="%(asctime)s | %(levelname)s | %(message)s",
                datefmt="%H:%M:%S"
            )
            console_handler.setFormatter(console_formatter)
            logger.addHandler(console_handler)

    return logger


class Log:
    """
    Wrapper class to keep the Log.info(...) interface,
    but behind the scenes we use Python's logging.
    """
    _logger: Logger = init_logger(
        name="BlockForgeLogger",
        console_logging=True,
        file_logging=file_logging_enabled(),
        level=logging.DEBUG,
    )

    @classmethod
    def set_logger(cls, logger: Logger):
        """
        Replace the logger at runtime or reinitialize with different settings.
        """
        cls._logger = logger

    @classmethod
    def set_level(cls, level: str | int):
        """
        Set the logging level dynamically.

        Args:
            level: Log level as string ("DEBUG", "INFO", "WARNING", "ERROR") or int
        """
        if isinstance(level, str):
            level_map = {
                "DEBUG": logging.DEBUG,
                "INFO": logging.INFO,
                "WARNING": logging.WARNING,
                "ERROR": logging.ERROR,
                "CRITICAL": logging.CRITICAL,
            }
            level = level_map.get(level.upper(), logging.INFO)

        cls._logger.setLevel(level)
        for handler in cls._logger.handlers:
            handler.setLevel(level)

    @classmethod
    def command(cls, text: str):
        cls._logger.info(f"[COMMAND] {text}")

    @classmethod
    def debug(cls, text: str):
        cls._logger.debug(text)

    @classmethod
    def info(cls, text: str):
        cls._logger.info(text)

    @classmethod
    def warning(cls, text: str, exc_info: bool = False):
        if exc_info:
            cls._logger.warning(text, exc_info=True)
        else:
            cls._logger.warning(text)

    @classmethod
    def error(cls, text: str):
        cls._logger.error(text)

