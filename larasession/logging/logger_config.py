"""
Logging Configuration
JSON log output with session id and secret redaction
"""
import json
import logging
import logging.handlers
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

REDACTED = '[REDACTED]'

# Characters of a session id that may appear in logs
VISIBLE_ID_CHARS = 6


class SensitiveDataFilter(logging.Filter):
    """
    Redact session ids and secrets before a record reaches any handler

    Session ids are cut to their first characters, so log lines from one
    session can still be correlated without the id being replayable.
    Secret values are replaced entirely.
    """

    # name -> (pattern, replacement)
    SENSITIVE_PATTERNS: Dict[str, Tuple[str, str]] = {
        'json_secret': (
            r'("(?:password|token|secret|secret_key)"\s*:\s*)"[^"]*"',
            rf'\1"{REDACTED}"',
        ),
        'bearer': (
            r'(Authorization:\s+Bearer\s+)\S+',
            rf'\1{REDACTED}',
        ),
        'session_header': (
            rf'((?:Session-ID|Cookie):\s*(?:[\w-]+=)?)([A-Za-z0-9_-]{{{VISIBLE_ID_CHARS}}})[A-Za-z0-9_.-]*',
            r'\1\2...',
        ),
    }

    # extra={...} fields that hold a session id
    SESSION_ID_FIELDS = ('sid', 'old_sid', 'new_sid')

    def __init__(self, additional_patterns: Optional[Dict[str, str]] = None):
        """
        Args:
            additional_patterns: Extra regexes (name: pattern) whose matches are fully redacted
        """
        super().__init__()
        patterns = dict(self.SENSITIVE_PATTERNS)
        for name, pattern in (additional_patterns or {}).items():
            patterns[name] = (pattern, REDACTED)

        self._rules = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in patterns.values()
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redact(record.msg)

        if isinstance(record.args, dict):
            record.args = {k: self._redact_value(v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._redact_value(arg) for arg in record.args)

        for field in self.SESSION_ID_FIELDS:
            value = getattr(record, field, None)
            if isinstance(value, str):
                setattr(record, field, self.mask_session_id(value))

        # Records are never dropped, only rewritten
        return True

    @staticmethod
    def mask_session_id(session_id: str) -> str:
        if len(session_id) <= VISIBLE_ID_CHARS:
            return session_id
        return f"{session_id[:VISIBLE_ID_CHARS]}..."

    def redact(self, text: str) -> str:
        for pattern, replacement in self._rules:
            text = pattern.sub(replacement, text)
        return text

    def _redact_value(self, value):
        return self.redact(value) if isinstance(value, str) else value


class JSONFormatter(logging.Formatter):
    """One JSON object per record, including extra={...} fields"""

    # LogRecord attributes that are not user extras
    RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {'message', 'asctime'}

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            entry['stack'] = self.formatStack(record.stack_info)

        for key, value in vars(record).items():
            if key not in self.RESERVED_ATTRS and key not in entry:
                entry[key] = value

        return json.dumps(entry, default=str)


class LoggerConfig:
    """Attach handlers to the session loggers"""

    LEVELS = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.DEBUG,
        'testing': logging.ERROR,
    }

    @staticmethod
    def setup_logger(
        name: Optional[str],
        format_type: str = 'json',
        max_bytes: int = None,
        backup_count: int = None,
        filter_sensitive: bool = True,
        additional_sensitive_patterns: Optional[Dict[str, str]] = None,
        log_directory: Optional[Path] = None,
        console: Optional[bool] = None,
        file_name: Optional[str] = None
    ) -> logging.Logger:
        """
        Configure a logger with a rotating file and/or console handler

        Args:
            name: Logger name ('session', 'security' or a module name)
            format_type: 'json' or 'text'
            max_bytes: Size at which the log file rotates (default: 10MB)
            backup_count: Rotated files kept
            filter_sensitive: Redact session ids and secrets
            additional_sensitive_patterns: Extra regexes to redact
            log_directory: Directory of the log file (default: session.LOG_DIRECTORY,
                           no file handler when unset)
            console: Also log to stderr (default: session.LOG_CONSOLE)
            file_name: Log file name without extension (default: logger name)

        Returns:
            The configured logger

        Example:
            LoggerConfig.setup_logger('session', log_directory=Path('storage/logs'))
        """
        from larasession.defaults import DEFAULT_LOG_MAX_BYTES, DEFAULT_LOG_BACKUP_COUNT
        from larasession.support import Config

        if log_directory is None:
            configured = Config.get('session.LOG_DIRECTORY')
            log_directory = Path(configured) if configured else None
        if console is None:
            console = Config.get('session.LOG_CONSOLE', False)

        logger = logging.getLogger(name)
        logger.setLevel(LoggerConfig.get_level_by_environment(Config.get('app.APP_ENV', 'local')))
        logger.handlers.clear()

        handlers: List[logging.Handler] = []
        if log_directory is not None:
            log_directory.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                log_directory / f"{file_name or name or 'root'}.log",
                maxBytes=DEFAULT_LOG_MAX_BYTES if max_bytes is None else max_bytes,
                backupCount=DEFAULT_LOG_BACKUP_COUNT if backup_count is None else backup_count,
                encoding='utf-8'
            ))
        if console:
            handlers.append(logging.StreamHandler())

        if format_type == 'json':
            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        redactor = SensitiveDataFilter(additional_sensitive_patterns) if filter_sensitive else None

        for handler in handlers:
            handler.setFormatter(formatter)
            if redactor is not None:
                handler.addFilter(redactor)
            logger.addHandler(handler)

        # Own handlers: don't log the same record twice through the root logger
        if handlers:
            logger.propagate = False

        return logger

    @staticmethod
    def get_level_by_environment(environment: str) -> int:
        """Log level for an app.APP_ENV value (INFO when unknown)"""
        return LoggerConfig.LEVELS.get(str(environment).lower(), logging.INFO)
