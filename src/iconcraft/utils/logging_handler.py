import logging
import os
from pathlib import Path
from datetime import datetime

# Module-level logger
logger = logging.getLogger(__name__)

# Constants
MAX_LOG_FILES = 7
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class SessionLogHandler(logging.Handler):
    """
    Proxy handler that sends every record of a build session to that session's log file.
    """
    def __init__(self):
        super().__init__()
        self.file_handler = None
        self.current_log_path = None

    def _open_file_handler(self):
        self.file_handler = logging.FileHandler(self.current_log_path, encoding='utf-8')
        self.file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self.file_handler.setLevel(self.level or logging.DEBUG)

    def setup_file_logging(self, log_dir):
        """Sets up the file handler for the current session."""
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        self._cleanup_old_logs(log_dir)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.current_log_path = log_dir / f"IconCraft_Session_{timestamp}.log"

        if self.file_handler:
            self.file_handler.close()

        self._open_file_handler()
        self.file_handler.stream.write(f"# IconCraft Build Session Started: {datetime.now().isoformat()}\n")
        self.file_handler.stream.flush()

    def _cleanup_old_logs(self, log_dir):
        """Keeps only the latest MAX_LOG_FILES, counting the one about to be created."""
        files = sorted(log_dir.glob("IconCraft_Session_*.log"), key=os.path.getmtime, reverse=True)
        existing_to_keep = MAX_LOG_FILES - 1
        for f in files[existing_to_keep:]:
            try:
                f.unlink()
            except OSError as e:
                logger.debug(f"Could not remove old log {f}: {e}")

    def _rotate_if_needed(self):
        if self.current_log_path.stat().st_size <= MAX_LOG_SIZE_BYTES:
            return
        self.file_handler.close()
        bak = self.current_log_path.with_suffix(".log.bak")
        if bak.exists():
            bak.unlink()
        self.current_log_path.rename(bak)
        self._open_file_handler()

    def emit(self, record):
        if not self.file_handler:
            return
        try:
            self._rotate_if_needed()
            self.file_handler.emit(record)
        except Exception:
            self.handleError(record)

    def close(self):
        if self.file_handler:
            self.file_handler.close()
            self.file_handler = None
        super().close()

    def set_debug_mode(self, enabled: bool):
        level = logging.DEBUG if enabled else logging.INFO
        self.setLevel(level)
        if self.file_handler:
            self.file_handler.setLevel(level)


_session_handler = None


def get_session_handler():
    global _session_handler
    if _session_handler is None:
        _session_handler = SessionLogHandler()
        _session_handler.setLevel(logging.INFO)
    return _session_handler


def default_log_dir() -> Path:
    override = os.getenv('ICONCRAFT_LOG_DIR')
    if override:
        return Path(override)
    return Path.home() / ".iconcraft" / "logs"


def setup_session_logging(root_logger=None, debug: bool = False, log_dir=None):
    """Attaches the session file handler to the root logger. Returns the log file path."""
    if root_logger is None:
        root_logger = logging.getLogger()

    handler = get_session_handler()
    handler.setup_file_logging(log_dir or default_log_dir())
    handler.set_debug_mode(debug)

    if handler not in root_logger.handlers:
        root_logger.addHandler(handler)

    # The root level gates what reaches the file, independent of console verbosity
    if root_logger.level == logging.NOTSET or root_logger.level > handler.level:
        root_logger.setLevel(handler.level)

    return handler.current_log_path
