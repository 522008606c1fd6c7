"""
Session Logging
getLogger() plus the JSON formatter and redaction filter used by LoggerConfig
"""
import logging
from typing import Optional
from larasession.logging.logger_config import LoggerConfig, JSONFormatter, SensitiveDataFilter

__all__ = [
    'LoggerConfig',
    'JSONFormatter',
    'SensitiveDataFilter',
    'getLogger',
    'CHANNELS',
]

# Bare names accepted as loggers; everything else bare goes to the root logger
CHANNELS = ('session', 'security')


def getLogger(name: Optional[str] = None) -> logging.Logger:
    """
    Drop-in for logging.getLogger

    Accepts module names ('larasession.session.session_manager'), the
    CHANNELS, Sanic's own 'sanic.*' loggers and None. Any other bare
    name maps to the root logger, so stray names don't each need their
    own handler setup.

    Example:
        logger = getLogger(__name__)
        logger.debug("Session created", extra={'sid': session_id})
    """
    if name is None or '.' in name or name in CHANNELS:
        return logging.getLogger(name)
    return logging.getLogger()
