# projectdocs/utils/logging.py
import logging
import sys
from logging.handlers import RotatingFileHandler

from ..config import settings

LOG_DIR = settings.STORAGE_PATH / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# Console lines are colored by component, the log files stay plain text
console_formatter = logging.Formatter(
    '\033[2m%(asctime)s\033[0m \033[1;32m%(name)-22s\033[0m %(levelname)-8s %(message)s'
)
file_formatter = logging.Formatter(
    '%(asctime)s %(levelname)-8s %(name)s %(funcName)s:%(lineno)d %(message)s'
)

# LogRecord attributes that an `extra` key must not overwrite
RESERVED_RECORD_ATTRS = frozenset({
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'msg', 'name', 'pathname', 'process', 'processName',
    'relativeCreated', 'stack_info', 'thread', 'threadName', 'taskName'
})


class ProjectDocsLogger:
    """Component logger for projectdocs.

    Every component writes to its own rotating file under the storage
    directory and to stdout. Context goes in `extra`; keys that clash with
    LogRecord attributes (a document `filename`, say) are kept under an
    `extra_` prefix instead of raising.
    """

    def __init__(self, component: str):
        self.component = component
        self.logger = logging.getLogger(f"projectdocs.{component}")
        self.logger.setLevel(logging.INFO)
        if not self.logger.handlers:
            self._add_handlers()

    def _add_handlers(self):
        file_handler = RotatingFileHandler(
            LOG_DIR / f"{self.component}.log",
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        self.logger.addHandler(console_handler)

    @staticmethod
    def _context(extra):
        if not extra:
            return None
        return {
            (f"extra_{key}" if key in RESERVED_RECORD_ATTRS else key): value
            for key, value in extra.items()
        }

    def _log(self, level, msg, extra=None, exc_info=None):
        self.logger.log(level, msg, extra=self._context(extra), exc_info=exc_info, stacklevel=3)

    def debug(self, msg, extra=None, exc_info=None):
        self._log(logging.DEBUG, msg, extra, exc_info)

    def info(self, msg, extra=None, exc_info=None):
        self._log(logging.INFO, msg, extra, exc_info)

    def warning(self, msg, extra=None, exc_info=None):
        self._log(logging.WARNING, msg, extra, exc_info)

    def error(self, msg, extra=None, exc_info=None):
        self._log(logging.ERROR, msg, extra, exc_info)

    def critical(self, msg, extra=None, exc_info=None):
        self._log(logging.CRITICAL, msg, extra, exc_info)


api_logger = ProjectDocsLogger("api")
db_logger = ProjectDocsLogger("database")
service_logger = ProjectDocsLogger("service")
mail_logger = ProjectDocsLogger("mail")

__all__ = ["ProjectDocsLogger", "api_logger", "db_logger", "service_logger", "mail_logger"]
